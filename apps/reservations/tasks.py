"""Celery tasks for the reservation domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from apps.reservations.application.command_handlers import PAYMENT_TIMEOUT, notify, release_locks
from apps.reservations.application.orchestrator import lock_reservation, transition
from apps.reservations.choices import SYSTEM_ACTOR, CancelledBy, EventType, ReservationStatus
from apps.reservations.domain.cancellation import compute_owner_cancellation_refund
from apps.reservations.models import Reservation
from shared.application.uow import DjangoUnitOfWork
from shared.infrastructure.config import marketplace_setting

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="reservations.expire_unpaid_reservations")
def expire_unpaid_reservations() -> dict[str, int]:
    """
    Cancel accepted reservations whose payment window has elapsed.

    Each reservation is cancelled in its own transaction together with the
    release of its days; a failing item is logged and the sweep moves on.

    Returns:
        dict: {"expired": number of reservations cancelled}
    """
    now = timezone.now()
    deadline = now - timedelta(minutes=marketplace_setting("PAYMENT_TIMEOUT_MINUTES"))
    expired_count = 0

    candidates = Reservation.objects.filter(
        status=ReservationStatus.ACCEPTED_PENDING_PAYMENT,
        accepted_at__lte=deadline,
    ).values_list("pk", flat=True)

    for reservation_id in list(candidates):
        try:
            with DjangoUnitOfWork() as uow:
                reservation = lock_reservation(reservation_id)
                # Paid or cancelled since the candidate query ran.
                if reservation.status != ReservationStatus.ACCEPTED_PENDING_PAYMENT or reservation.is_paid:
                    continue

                quote = compute_owner_cancellation_refund(reservation.total_amount, is_paid=False)
                result = transition(
                    reservation.pk,
                    to_status=ReservationStatus.CANCELLED,
                    event_type=EventType.RESERVATION_CANCELLED,
                    actor_user_id=SYSTEM_ACTOR,
                    patch={
                        "cancelled_by": CancelledBy.SYSTEM,
                        "cancellation_reason": PAYMENT_TIMEOUT,
                        "refund_percent": quote.refund_percent,
                        "refund_amount": quote.refund_amount,
                        "penalty_amount": quote.penalty_amount,
                        "cancelled_at": now,
                    },
                    payload={"reason": PAYMENT_TIMEOUT, "cancelled_by": CancelledBy.SYSTEM},
                    idempotency_key=f"expire:{reservation.pk}",
                )
                release_locks(reservation)
                if result.changed:
                    notify(uow, reservation.renter_id, "reservation_cancelled", reservation)
                    notify(uow, reservation.owner_id, "reservation_cancelled", reservation)

            expired_count += 1
            logger.info(f"Reservation {reservation_id} cancelled: payment not completed in time")
        except Exception as e:
            logger.error(f"Error expiring reservation {reservation_id}: {e}", exc_info=True)

    if expired_count > 0:
        logger.info(f"Expired {expired_count} unpaid reservations")

    return {"expired": expired_count}


@shared_task(name="reservations.advance_finished_rentals")
def advance_finished_rentals() -> dict[str, int]:
    """
    Move rentals whose end date has come to ``dropoff_pending``.

    Returns:
        dict: {"advanced": number of rentals moved}
    """
    today = timezone.localdate()
    advanced_count = 0

    candidates = Reservation.objects.filter(
        status=ReservationStatus.IN_PROGRESS,
        end_date__lte=today,
    ).values_list("pk", flat=True)

    for reservation_id in list(candidates):
        try:
            with DjangoUnitOfWork() as uow:
                reservation = lock_reservation(reservation_id)
                if reservation.status != ReservationStatus.IN_PROGRESS:
                    continue
                result = transition(
                    reservation.pk,
                    to_status=ReservationStatus.DROPOFF_PENDING,
                    event_type=EventType.DROPOFF_PENDING,
                    actor_user_id=SYSTEM_ACTOR,
                    payload={"automatic": True},
                    idempotency_key=f"auto_return:{reservation.pk}",
                )
                if result.changed:
                    notify(uow, reservation.renter_id, "return_declared", reservation)
                    notify(uow, reservation.owner_id, "return_declared", reservation)

            advanced_count += 1
            logger.info(f"Reservation {reservation_id} moved to dropoff_pending after its end date")
        except Exception as e:
            logger.error(f"Error advancing reservation {reservation_id}: {e}", exc_info=True)

    if advanced_count > 0:
        logger.info(f"Advanced {advanced_count} finished rentals")

    return {"advanced": advanced_count}
