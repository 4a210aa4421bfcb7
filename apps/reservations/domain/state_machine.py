"""
Reservation Status Finite State Machine

State transitions:
- requested -> accepted_pending_payment (owner accepts)
- requested -> rejected (owner declines)
- requested / accepted_pending_payment / pickup_pending -> cancelled
- accepted_pending_payment -> pickup_pending (payment captured)
- pickup_pending -> in_progress (both check-in reports submitted)
- in_progress -> dropoff_pending (return declared or end date passed)
- dropoff_pending -> completed (both checkout reports submitted)
- dropoff_pending / completed -> disputed (completed only within the dispute window)
- disputed -> completed (admin resolution)

Terminal: completed, rejected, cancelled.
"""

from __future__ import annotations

from apps.reservations.choices import ReservationStatus as S
from shared.domain.exceptions import InvalidStatus, InvalidTransition, UnknownStatus

ALLOWED: dict[str, frozenset[str]] = {
    S.REQUESTED: frozenset({S.ACCEPTED_PENDING_PAYMENT, S.REJECTED, S.CANCELLED}),
    S.ACCEPTED_PENDING_PAYMENT: frozenset({S.PICKUP_PENDING, S.CANCELLED}),
    S.PICKUP_PENDING: frozenset({S.IN_PROGRESS, S.CANCELLED}),
    S.IN_PROGRESS: frozenset({S.DROPOFF_PENDING}),
    S.DROPOFF_PENDING: frozenset({S.COMPLETED, S.DISPUTED}),
    S.COMPLETED: frozenset({S.DISPUTED}),
    S.REJECTED: frozenset(),
    S.CANCELLED: frozenset(),
    S.DISPUTED: frozenset({S.COMPLETED}),
}

TERMINAL = frozenset({S.COMPLETED, S.REJECTED, S.CANCELLED})

# Statuses holding the vehicle: a renter may not request the same vehicle again.
BLOCKING = frozenset({
    S.REQUESTED,
    S.ACCEPTED_PENDING_PAYMENT,
    S.PICKUP_PENDING,
    S.IN_PROGRESS,
    S.DROPOFF_PENDING,
    S.DISPUTED,
})

CANCELLABLE = frozenset({S.REQUESTED, S.ACCEPTED_PENDING_PAYMENT, S.PICKUP_PENDING})


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED.get(current, frozenset())


def assert_transition(current: str, target: str) -> None:
    """Raise unless ``current -> target`` is an edge of the table."""
    if current not in ALLOWED:
        raise UnknownStatus(f"Unknown reservation status: {current!r}")
    if target not in ALLOWED:
        raise UnknownStatus(f"Unknown reservation status: {target!r}")
    if not can_transition(current, target):
        raise InvalidTransition(f"Cannot move a reservation from {current} to {target}.")


def assert_status(current: str, allowed) -> None:
    if current not in allowed:
        raise InvalidStatus(
            f"Reservation is {current}; expected one of: {', '.join(sorted(allowed))}."
        )
