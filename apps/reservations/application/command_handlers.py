"""
Reservation Command Handlers

Use cases of the reservation context. Each handler runs in one unit of
work: domain checks, the orchestrated transition, lock changes and the
notification requests either all commit or all roll back. Notifications
are delivered only after commit.

Commands:
- CreateReservationCommand: renter asks for a vehicle over a date range
- AcceptReservationCommand / RejectReservationCommand: owner answers
- InitPaymentCommand / ConfirmPaymentCommand: renter pays
- CancelReservationCommand: renter or owner cancels
- TriggerReturnCommand: either participant declares the vehicle returned
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from datetime import timezone as dt_timezone
from decimal import Decimal
from typing import Any

from django.db import transaction  # type: ignore
from django.utils import timezone  # type: ignore

from apps.finances.gateways import PaymentGateway, customer_for, get_gateway
from apps.finances.pricing import compute_pricing
from apps.notifications.events import NotificationRequested
from apps.reservations.choices import (
    CancelledBy,
    EventType,
    ParticipantRole,
    PaymentStatus,
    ReservationStatus,
)
from apps.reservations.domain.cancellation import (
    RefundQuote,
    compute_owner_cancellation_refund,
    compute_refund,
)
from apps.reservations.domain.guards import assert_role, counterparty_id, role_for
from apps.reservations.domain.state_machine import BLOCKING, CANCELLABLE, assert_status
from apps.reservations.models import Reservation
from apps.vehicles import locks
from apps.vehicles.models import Vehicle
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AlreadyRequested,
    CannotRentOwnVehicle,
    CooldownActive,
    DateInPast,
    DurationTooLong,
    InvalidDateRange,
    KycRequired,
    OwnerBlockedDates,
    PaymentNotCompleted,
    PaymentNotInitialized,
    ReservationNotFound,
    VehicleNotFound,
)
from shared.infrastructure.config import marketplace_setting

from . import event_store
from .orchestrator import lock_reservation, transition

logger = logging.getLogger(__name__)

RENTER_CANCELLED = "renter_cancelled"
OWNER_CANCELLED = "owner_cancelled"
PAYMENT_TIMEOUT = "payment_timeout"


def parse_date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise InvalidDateRange(f"Invalid date {value!r}, expected YYYY-MM-DD.")


def notify(uow: DjangoUnitOfWork, user_id, template_type: str, reservation: Reservation, **context) -> None:
    """Queue a push for ``user_id``; sent only if the unit of work commits."""
    uow.add_event(
        NotificationRequested(
            aggregate_id=reservation.pk,
            user_id=user_id,
            template_type=template_type,
            context={
                "reservation_id": reservation.pk,
                "vehicle_title": reservation.vehicle.title,
                **context,
            },
        )
    )


def release_locks(reservation: Reservation) -> list[str]:
    return locks.release(reservation.vehicle_id, reservation.pk, reservation.start_date, reservation.end_date)


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    vehicle_id: int
    renter: Any
    start_date: Any
    end_date: Any


@dataclass
class AcceptReservationCommand:
    reservation_id: int
    actor: Any


@dataclass
class RejectReservationCommand:
    reservation_id: int
    actor: Any


@dataclass
class InitPaymentCommand:
    reservation_id: int
    actor: Any


@dataclass
class ConfirmPaymentCommand:
    reservation_id: int
    actor: Any


@dataclass
class CancelReservationCommand:
    reservation_id: int
    actor: Any
    note: str = ''


@dataclass
class TriggerReturnCommand:
    reservation_id: int
    actor: Any


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation

    Eligibility is checked first, in a fixed order, so the renter always
    hears about the most fundamental problem. The insert, the day locks and
    the creation event then commit together: if another reservation holds
    any of the days the insert is rolled back and ``VehicleUnavailable``
    propagates.
    """

    def handle(self, command: CreateReservationCommand, now: datetime | None = None) -> Reservation:
        now = now or timezone.now()
        renter = command.renter
        start = parse_date(command.start_date)
        end = parse_date(command.end_date)

        if end <= start:
            raise InvalidDateRange()
        if start < now.astimezone(dt_timezone.utc).date():
            raise DateInPast()
        max_days = marketplace_setting("MAX_RENTAL_DAYS")
        if (end - start).days > max_days:
            raise DurationTooLong(f"Rentals are limited to {max_days} days.")

        vehicle = Vehicle.objects.select_related("owner").filter(pk=command.vehicle_id, is_active=True).first()
        if vehicle is None:
            raise VehicleNotFound()
        if vehicle.owner_id == renter.pk:
            raise CannotRentOwnVehicle()
        if marketplace_setting("REQUIRE_KYC") and not renter.is_kyc_verified:
            raise KycRequired()

        days = locks.iter_days(start, end)
        blocked = sorted(set(days) & set(vehicle.owner_blocked_dates or []))
        if blocked:
            raise OwnerBlockedDates(blocked_days=blocked)

        self._check_previous_request(vehicle, renter, now)

        pricing = compute_pricing(len(days), vehicle.price_per_day)
        deposit = Decimal(str(vehicle.deposit_amount(marketplace_setting("DEFAULT_DEPOSIT_AMOUNT"))))

        with DjangoUnitOfWork() as uow:
            reservation = Reservation.objects.create(
                vehicle=vehicle,
                renter=renter,
                owner=vehicle.owner,
                start_date=start,
                end_date=end,
                total_amount=pricing.total_amount,
                commission_amount=pricing.commission_amount,
                owner_payout=pricing.owner_payout,
                deposit_amount=deposit,
                currency=vehicle.currency,
                cancellation_policy=vehicle.cancellation_policy,
                created_at=now,
            )
            locks.acquire(vehicle.pk, reservation.pk, start, end)
            event_store.emit(
                reservation,
                EventType.RESERVATION_CREATED,
                renter.pk,
                payload={
                    "start_date": start.isoformat(),
                    "end_date": end.isoformat(),
                    "total_amount": str(reservation.total_amount),
                },
            )
            notify(uow, vehicle.owner_id, "reservation_requested", reservation, renter_name=renter.display_name)

        logger.info(
            f"Reservation {reservation.pk} requested by user {renter.pk} for vehicle {vehicle.pk} "
            f"({start} - {end}, {reservation.total_amount} {reservation.currency})"
        )
        return reservation

    @staticmethod
    def _check_previous_request(vehicle: Vehicle, renter, now: datetime) -> None:
        last = (
            Reservation.objects.filter(vehicle=vehicle, renter=renter)
            .order_by("-created_at", "-id")
            .first()
        )
        if last is None:
            return
        if last.status in BLOCKING:
            raise AlreadyRequested()
        if last.status in {ReservationStatus.CANCELLED, ReservationStatus.REJECTED}:
            cooldown = timedelta(minutes=marketplace_setting("REQUEST_COOLDOWN_MINUTES"))
            ends_at = last.updated_at + cooldown
            if now < ends_at:
                raise CooldownActive(retry_after_seconds=int((ends_at - now).total_seconds()))


class AcceptReservationHandler:
    def handle(self, command: AcceptReservationCommand):
        with DjangoUnitOfWork() as uow:
            reservation = lock_reservation(command.reservation_id)
            assert_role(role_for(reservation, command.actor.pk), {ParticipantRole.OWNER})
            # A repeated accept keeps the first accepted_at, the payment window runs from it.
            patch = {}
            if reservation.status != ReservationStatus.ACCEPTED_PENDING_PAYMENT:
                patch["accepted_at"] = timezone.now()
            result = transition(
                reservation.pk,
                to_status=ReservationStatus.ACCEPTED_PENDING_PAYMENT,
                event_type=EventType.RESERVATION_ACCEPTED,
                actor_user_id=command.actor.pk,
                patch=patch,
            )
            if result.changed:
                notify(uow, reservation.renter_id, "reservation_accepted", reservation)
        return result


class RejectReservationHandler:
    """Owner declines a request; the days are freed in the same transaction."""

    def handle(self, command: RejectReservationCommand):
        with DjangoUnitOfWork() as uow:
            reservation = lock_reservation(command.reservation_id)
            assert_role(role_for(reservation, command.actor.pk), {ParticipantRole.OWNER})
            result = transition(
                reservation.pk,
                to_status=ReservationStatus.REJECTED,
                event_type=EventType.RESERVATION_REJECTED,
                actor_user_id=command.actor.pk,
            )
            release_locks(reservation)
            if result.changed:
                notify(uow, reservation.renter_id, "reservation_rejected", reservation)
        return result


class InitPaymentHandler:
    """Starts the rental payment. Calling it twice reuses the first payment."""

    def __init__(self, gateway: PaymentGateway | None = None):
        self.gateway = gateway or get_gateway()

    def handle(self, command: InitPaymentCommand):
        with transaction.atomic():
            reservation = lock_reservation(command.reservation_id)
            assert_role(role_for(reservation, command.actor.pk), {ParticipantRole.RENTER})
            assert_status(reservation.status, {ReservationStatus.ACCEPTED_PENDING_PAYMENT})

            if reservation.payment_status == PaymentStatus.REQUIRES_ACTION and reservation.payment_ref:
                return transition(
                    reservation.pk,
                    to_status=reservation.status,
                    event_type=EventType.PAYMENT_INITIALIZED,
                    actor_user_id=command.actor.pk,
                    patch={"payment_status": PaymentStatus.REQUIRES_ACTION},
                )

            payment_ref = self.gateway.create_payment(
                customer_for(self.gateway, reservation.renter),
                reservation.total_amount,
                reservation.currency,
                reference=f"reservation-{reservation.pk}",
            )
            return transition(
                reservation.pk,
                to_status=reservation.status,
                event_type=EventType.PAYMENT_INITIALIZED,
                actor_user_id=command.actor.pk,
                patch={"payment_status": PaymentStatus.REQUIRES_ACTION, "payment_ref": payment_ref},
                payload={"amount": str(reservation.total_amount), "currency": reservation.currency},
            )


class ConfirmPaymentHandler:
    def __init__(self, gateway: PaymentGateway | None = None):
        self.gateway = gateway or get_gateway()

    def handle(self, command: ConfirmPaymentCommand):
        with DjangoUnitOfWork() as uow:
            reservation = lock_reservation(command.reservation_id)
            assert_role(role_for(reservation, command.actor.pk), {ParticipantRole.RENTER})

            if reservation.status == ReservationStatus.PICKUP_PENDING and reservation.is_paid:
                # Already confirmed: the orchestrator turns this into a no-op.
                return transition(
                    reservation.pk,
                    to_status=ReservationStatus.PICKUP_PENDING,
                    event_type=EventType.PAYMENT_CAPTURED,
                    actor_user_id=command.actor.pk,
                    patch={"payment_status": PaymentStatus.CAPTURED},
                )

            assert_status(reservation.status, {ReservationStatus.ACCEPTED_PENDING_PAYMENT})
            if reservation.payment_status != PaymentStatus.REQUIRES_ACTION or not reservation.payment_ref:
                raise PaymentNotInitialized()
            if not self.gateway.payment_succeeded(reservation.payment_ref):
                raise PaymentNotCompleted()

            result = transition(
                reservation.pk,
                to_status=ReservationStatus.PICKUP_PENDING,
                event_type=EventType.PAYMENT_CAPTURED,
                actor_user_id=command.actor.pk,
                patch={"payment_status": PaymentStatus.CAPTURED},
                payload={"amount": str(reservation.total_amount)},
            )
            notify(uow, reservation.owner_id, "payment_captured", reservation)
            notify(uow, reservation.renter_id, "payment_captured", reservation)
        return result


class CancelReservationHandler:
    """
    Cancellation by either participant

    The renter gets the refund of the policy tier snapshotted at request
    time; an owner cancellation always refunds everything paid. Locks are
    released inside the same transaction as the status change.
    """

    def __init__(self, gateway: PaymentGateway | None = None):
        self.gateway = gateway or get_gateway()

    def handle(self, command: CancelReservationCommand, now: datetime | None = None):
        now = now or timezone.now()
        with DjangoUnitOfWork() as uow:
            reservation = lock_reservation(command.reservation_id)
            role = role_for(reservation, command.actor.pk)
            assert_status(reservation.status, CANCELLABLE)

            if role == ParticipantRole.OWNER:
                quote = compute_owner_cancellation_refund(reservation.total_amount, reservation.is_paid)
                cancelled_by, reason = CancelledBy.OWNER, OWNER_CANCELLED
            else:
                quote = quote_renter_cancellation(reservation, now)
                cancelled_by, reason = CancelledBy.RENTER, RENTER_CANCELLED

            patch = {
                "cancelled_by": cancelled_by,
                "cancellation_reason": reason,
                "refund_percent": quote.refund_percent,
                "refund_amount": quote.refund_amount,
                "penalty_amount": quote.penalty_amount,
                "cancelled_at": now,
            }
            if reservation.is_paid and quote.refund_amount > 0:
                self.gateway.refund_payment(reservation.payment_ref, quote.refund_amount)
                patch["payment_status"] = PaymentStatus.REFUNDED

            result = transition(
                reservation.pk,
                to_status=ReservationStatus.CANCELLED,
                event_type=EventType.RESERVATION_CANCELLED,
                actor_user_id=command.actor.pk,
                patch=patch,
                payload={"reason": reason, "cancelled_by": cancelled_by, "note": command.note, **quote.as_dict()},
            )
            release_locks(reservation)
            notify(uow, counterparty_id(reservation, role), "reservation_cancelled", reservation)
        return result


class TriggerReturnHandler:
    def handle(self, command: TriggerReturnCommand):
        with DjangoUnitOfWork() as uow:
            reservation = lock_reservation(command.reservation_id)
            role = role_for(reservation, command.actor.pk)
            result = transition(
                reservation.pk,
                to_status=ReservationStatus.DROPOFF_PENDING,
                event_type=EventType.DROPOFF_PENDING,
                actor_user_id=command.actor.pk,
                idempotency_key=f"phase:{reservation.pk}:dropoff_pending",
            )
            if result.changed:
                notify(uow, counterparty_id(reservation, role), "return_declared", reservation)
        return result


# ===== Queries =====

def quote_renter_cancellation(reservation: Reservation, now: datetime | None = None) -> RefundQuote:
    """What the renter would get back by cancelling at ``now``."""
    policy = reservation.cancellation_policy or marketplace_setting("DEFAULT_CANCELLATION_POLICY")
    return compute_refund(
        policy,
        reservation.start_date,
        reservation.total_amount,
        reservation.is_paid,
        now or timezone.now(),
        pickup_hour=marketplace_setting("PICKUP_HOUR"),
        tz=timezone.get_default_timezone(),
    )


def get_reservation_for(reservation_id, user) -> tuple[Reservation, str]:
    """The reservation and the caller's role in it."""
    reservation = Reservation.objects.select_related("vehicle", "renter", "owner").filter(pk=reservation_id).first()
    if reservation is None:
        raise ReservationNotFound()
    return reservation, role_for(reservation, user.pk)


def reservations_for_user(user, role: str | None = None):
    qs = Reservation.objects.select_related("vehicle", "renter", "owner")
    if role == ParticipantRole.RENTER:
        return qs.filter(renter=user)
    if role == ParticipantRole.OWNER:
        return qs.filter(owner=user)
    return qs.filter(renter=user) | qs.filter(owner=user)


def blocking_ranges(vehicle_id) -> list[dict]:
    """Date ranges of the vehicle's reservations that still hold it."""
    return [
        {"reservation_id": pk, "start_date": start.isoformat(), "end_date": end.isoformat(), "status": status}
        for pk, start, end, status in Reservation.objects.filter(vehicle_id=vehicle_id, status__in=BLOCKING)
        .order_by("start_date")
        .values_list("pk", "start_date", "end_date", "status")
    ]
