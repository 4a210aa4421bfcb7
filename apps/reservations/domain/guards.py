"""Participant checks. The caller's role is read off the reservation row."""

from __future__ import annotations

from apps.reservations.choices import ParticipantRole
from shared.domain.exceptions import Forbidden


def role_for(reservation, user_id) -> str:
    """``owner`` or ``renter`` for a participant, Forbidden for anyone else."""
    if user_id is None:
        raise Forbidden()
    if str(reservation.owner_id) == str(user_id):
        return ParticipantRole.OWNER
    if str(reservation.renter_id) == str(user_id):
        return ParticipantRole.RENTER
    raise Forbidden()


def assert_role(role: str, allowed) -> None:
    if role not in allowed:
        raise Forbidden(f"Only the {' or '.join(sorted(allowed))} can do this.")


def counterparty_id(reservation, role: str):
    return reservation.renter_id if role == ParticipantRole.OWNER else reservation.owner_id
