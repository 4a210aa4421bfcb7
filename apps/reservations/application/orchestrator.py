"""
Transition orchestrator

The only code allowed to write ``Reservation.status``. A transition:

1. reloads the reservation under a row lock,
2. returns early when the reservation already is in the target status with
   the patch applied (retries are free),
3. validates the edge against the state machine (same-status patches skip
   this step),
4. writes status + patch + ``version + 1`` with a compare-and-set on the
   version read in step 1,
5. emits the event through the event store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from django.db import transaction  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.reservations.domain.state_machine import assert_transition
from apps.reservations.models import Reservation, ReservationEvent
from shared.domain.exceptions import ConcurrentModification, ReservationNotFound

from . import event_store

logger = logging.getLogger(__name__)


@dataclass
class TransitionResult:
    reservation: Reservation
    changed: bool
    event: ReservationEvent | None = None


def lock_reservation(reservation_id) -> Reservation:
    """Load a reservation with a row lock. Must run inside ``transaction.atomic``."""
    queryset = Reservation.objects.select_related("vehicle", "renter", "owner").filter(pk=reservation_id)
    if transaction.get_connection().in_atomic_block:
        try:
            queryset = queryset.select_for_update(of=("self",))
        except NotSupportedError:
            pass
    try:
        return queryset.get()
    except Reservation.DoesNotExist:
        raise ReservationNotFound(f"Reservation {reservation_id} not found.")


def patch_applied(reservation: Reservation, patch: dict[str, Any]) -> bool:
    return all(getattr(reservation, field) == value for field, value in patch.items())


def transition(
    reservation_id,
    *,
    to_status: str,
    event_type: str,
    actor_user_id,
    patch: dict[str, Any] | None = None,
    payload: dict | None = None,
    idempotency_key: str | None = None,
    expected_version: int | None = None,
) -> TransitionResult:
    patch = dict(patch or {})

    with transaction.atomic():
        reservation = lock_reservation(reservation_id)

        if reservation.status == to_status and patch_applied(reservation, patch):
            logger.info(
                f"Reservation {reservation.pk} already {to_status} with patch applied, skipping {event_type}"
            )
            return TransitionResult(reservation, changed=False)

        if expected_version is not None and expected_version != reservation.version:
            raise ConcurrentModification(
                f"Reservation {reservation.pk} is at version {reservation.version}, not {expected_version}."
            )

        if reservation.status != to_status:
            assert_transition(reservation.status, to_status)

        from_status = reservation.status
        current_version = reservation.version
        values = {**patch, "status": to_status, "version": current_version + 1, "updated_at": timezone.now()}
        updated = Reservation.objects.filter(pk=reservation.pk, version=current_version).update(**values)
        if updated != 1:
            raise ConcurrentModification(f"Reservation {reservation.pk} changed during {event_type}.")

        for field, value in values.items():
            setattr(reservation, field, value)

        result = event_store.emit(
            reservation,
            event_type,
            actor_user_id,
            payload=payload,
            idempotency_key=idempotency_key,
        )

    logger.info(
        f"Reservation {reservation.pk}: {from_status} -> {to_status} "
        f"(v{reservation.version}, event {event_type})"
    )
    return TransitionResult(reservation, changed=True, event=result.event)
