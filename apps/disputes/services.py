"""
Dispute resolution workflow

open:    dropoff_pending | completed (within the dispute window) -> disputed
resolve: disputed -> completed, with the matching deposit action

    no_penalty -> deposit released
    partial    -> part of the deposit captured
    full       -> whole deposit captured
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import Count, Q  # type: ignore
from django.utils import timezone  # type: ignore

from apps.condition_reports.models import ConditionReport
from apps.finances.ledger import DepositLedger, LedgerResult
from apps.reservations.application.command_handlers import get_reservation_for, notify
from apps.reservations.application.event_store import last_event
from apps.reservations.application.orchestrator import lock_reservation, transition
from apps.reservations.choices import EventType, ReservationStatus
from apps.reservations.domain.guards import counterparty_id, role_for
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AlreadyResolved,
    DescriptionTooShort,
    DisputeAlreadyOpen,
    DisputeNotFound,
    DisputeWindowExpired,
    InvalidRetainedAmount,
    InvalidStatus,
    NoCheckoutReport,
)
from shared.domain.value_objects import round_amount
from shared.infrastructure.config import marketplace_setting

from .models import Dispute

logger = logging.getLogger(__name__)

DISPUTABLE = (ReservationStatus.DROPOFF_PENDING, ReservationStatus.COMPLETED)
MIN_DESCRIPTION_LENGTH = 10

RESOLUTION_STATUS = {
    Dispute.Resolution.NO_PENALTY: Dispute.Status.RESOLVED_NO_PENALTY,
    Dispute.Resolution.PARTIAL: Dispute.Status.RESOLVED_PARTIAL,
    Dispute.Resolution.FULL: Dispute.Status.RESOLVED_FULL,
}


@dataclass
class ResolveResult:
    dispute: Dispute
    ledger: LedgerResult


def _window_closed(reservation, now: datetime) -> bool:
    checkout = last_event(reservation, EventType.CHECKOUT_COMPLETED)
    if checkout is None:
        return True
    window = timedelta(hours=marketplace_setting("DISPUTE_WINDOW_HOURS"))
    return now - checkout.created_at > window


def _blocker(reservation, now: datetime) -> str | None:
    """First reason a dispute cannot be opened, checked in a fixed order."""
    if reservation.status not in DISPUTABLE:
        return "status"
    if not ConditionReport.objects.filter(
        reservation=reservation, phase=ConditionReport.Phase.CHECKOUT
    ).exists():
        return "no_checkout"
    if reservation.status == ReservationStatus.COMPLETED and _window_closed(reservation, now):
        return "expired"
    if Dispute.objects.filter(reservation=reservation, status=Dispute.Status.OPEN).exists():
        return "already_open"
    return None


def can_open(reservation_id, user, now: datetime | None = None) -> dict:
    reservation, role = get_reservation_for(reservation_id, user)
    reason = _blocker(reservation, now or timezone.now())
    return {"can_open": reason is None, "reason": reason or "", "role": role}


BLOCKER_ERRORS = {
    "status": InvalidStatus,
    "no_checkout": NoCheckoutReport,
    "expired": DisputeWindowExpired,
    "already_open": DisputeAlreadyOpen,
}


def open_dispute(
    reservation_id,
    user,
    reason: str,
    description: str,
    photo_refs: list | None = None,
    now: datetime | None = None,
) -> Dispute:
    now = now or timezone.now()
    with DjangoUnitOfWork() as uow:
        reservation = lock_reservation(reservation_id)
        role = role_for(reservation, user.pk)

        blocker = _blocker(reservation, now)
        if blocker:
            raise BLOCKER_ERRORS[blocker]()
        description = (description or "").strip()
        if len(description) < MIN_DESCRIPTION_LENGTH:
            raise DescriptionTooShort()

        try:
            with transaction.atomic():
                dispute = Dispute.objects.create(
                    reservation=reservation,
                    vehicle_id=reservation.vehicle_id,
                    opened_by=user,
                    opened_by_role=role,
                    reason=reason,
                    description=description,
                    photo_refs=list(photo_refs or []),
                    created_at=now,
                )
        except IntegrityError:
            raise DisputeAlreadyOpen()

        transition(
            reservation.pk,
            to_status=ReservationStatus.DISPUTED,
            event_type=EventType.DISPUTE_OPENED,
            actor_user_id=user.pk,
            payload={"dispute_id": dispute.pk, "reason": reason, "opened_by_role": role},
            idempotency_key=f"dispute:{dispute.pk}",
        )
        notify(uow, counterparty_id(reservation, role), "dispute_opened", reservation, reason=reason)
        admin_id = marketplace_setting("ADMIN_USER_ID")
        if admin_id:
            notify(uow, admin_id, "dispute_opened_admin", reservation, dispute_id=dispute.pk, reason=reason)

    logger.info(f"Dispute {dispute.pk} opened by {role} on reservation {reservation.pk} ({reason})")
    return dispute


def resolve_dispute(
    dispute_id,
    admin_user,
    resolution: str,
    retained_amount=None,
    admin_note: str = "",
    ledger: DepositLedger | None = None,
) -> ResolveResult:
    """Operator decision. Callers check the operator allow-list."""
    if resolution not in RESOLUTION_STATUS:
        raise InvalidStatus(f"Unknown resolution {resolution!r}.")
    ledger = ledger or DepositLedger()

    with DjangoUnitOfWork() as uow:
        try:
            dispute = Dispute.objects.select_for_update().get(pk=dispute_id)
        except Dispute.DoesNotExist:
            raise DisputeNotFound()
        if not dispute.is_open:
            raise AlreadyResolved()

        reservation = lock_reservation(dispute.reservation_id)
        deposit = reservation.deposit_amount

        if resolution == Dispute.Resolution.NO_PENALTY:
            retained = round_amount(0)
            outcome = ledger.release(reservation.pk, actor_user_id=admin_user.pk)
        elif resolution == Dispute.Resolution.PARTIAL:
            if retained_amount is None:
                raise InvalidRetainedAmount()
            retained = round_amount(retained_amount)
            if retained <= 0 or retained > deposit:
                raise InvalidRetainedAmount(f"Retained amount must be between 1 and {deposit}.")
            outcome = ledger.retain(reservation.pk, retained, actor_user_id=admin_user.pk)
        else:
            retained = deposit
            outcome = ledger.retain(reservation.pk, actor_user_id=admin_user.pk)

        dispute.status = RESOLUTION_STATUS[resolution]
        dispute.retained_amount = retained
        dispute.admin_note = (admin_note or "").strip()
        dispute.resolved_at = timezone.now()
        dispute.save(update_fields=["status", "retained_amount", "admin_note", "resolved_at"])

        transition(
            reservation.pk,
            to_status=ReservationStatus.COMPLETED,
            event_type=EventType.DISPUTE_RESOLVED,
            actor_user_id=admin_user.pk,
            payload={"dispute_id": dispute.pk, "resolution": resolution, "retained_amount": str(retained)},
            idempotency_key=f"dispute:{dispute.pk}:resolved",
        )
        for user_id in (reservation.renter_id, reservation.owner_id):
            notify(
                uow,
                user_id,
                "dispute_resolved",
                reservation,
                resolution=resolution,
                retained_amount=str(retained),
            )

    logger.info(f"Dispute {dispute.pk} resolved as {dispute.status}, retained {retained}")
    return ResolveResult(dispute=dispute, ledger=outcome)


def dispute_for_reservation(reservation_id, user) -> Dispute | None:
    reservation, _ = get_reservation_for(reservation_id, user)
    return Dispute.objects.filter(reservation=reservation).order_by("-created_at", "-id").first()


def admin_disputes(status: str | None = None):
    qs = Dispute.objects.select_related("reservation", "vehicle", "opened_by")
    if status:
        qs = qs.filter(status=status)
    return qs[:100]


def dispute_stats() -> dict:
    totals = Dispute.objects.aggregate(
        total=Count("id"),
        open=Count("id", filter=Q(status=Dispute.Status.OPEN)),
    )
    return {
        "open": totals["open"],
        "resolved": totals["total"] - totals["open"],
        "total": totals["total"],
    }
