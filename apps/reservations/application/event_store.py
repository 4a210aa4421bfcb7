"""
Reservation event store

Append-only, one row per idempotency key. Re-emitting a key returns the
stored event and has no other effect; only new events reach the chat
projector.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction  # type: ignore

from apps.chat.projector import project_event
from apps.reservations.models import ReservationEvent

logger = logging.getLogger(__name__)


@dataclass
class EmitResult:
    event: ReservationEvent
    created: bool


def default_idempotency_key(reservation_id, event_type: str) -> str:
    return f"res:{reservation_id}:{event_type}"


def emit(
    reservation,
    event_type: str,
    actor_user_id,
    payload: dict | None = None,
    idempotency_key: str | None = None,
) -> EmitResult:
    key = idempotency_key or default_idempotency_key(reservation.pk, event_type)

    existing = ReservationEvent.objects.filter(idempotency_key=key).first()
    if existing is not None:
        logger.warning(f"Event {key} already stored (ID: {existing.pk}), skipping")
        return EmitResult(existing, created=False)

    try:
        with transaction.atomic():
            event = ReservationEvent.objects.create(
                reservation=reservation,
                type=event_type,
                actor_user_id=str(actor_user_id),
                payload=payload or {},
                idempotency_key=key,
            )
    except IntegrityError:
        # Lost the insert race for the same key.
        return EmitResult(ReservationEvent.objects.get(idempotency_key=key), created=False)

    project_event(event)
    logger.info(f"Event {event_type} stored for reservation {reservation.pk} (key {key})")
    return EmitResult(event, created=True)


def last_event(reservation, event_type: str) -> ReservationEvent | None:
    return (
        ReservationEvent.objects.filter(reservation=reservation, type=event_type)
        .order_by("-created_at", "-id")
        .first()
    )
