"""Reservation aggregate and its append-only event log."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.infrastructure.fields import EncryptedCharField

from .choices import (
    CancelledBy,
    DepositStatus,
    EventType,
    PaymentStatus,
    ReservationStatus,
)


class Reservation(models.Model):
    """A renter's request to rent a vehicle for ``[start_date, end_date)``.

    ``status`` and the fields patched alongside it are written only by the
    transition orchestrator; ``version`` grows by one on every patch.
    """

    Status = ReservationStatus
    PaymentStatus = PaymentStatus
    DepositStatus = DepositStatus
    CancelledBy = CancelledBy

    vehicle = models.ForeignKey(
        "vehicles.Vehicle",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    renter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reservations_as_renter",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reservations_as_owner",
    )
    status = models.CharField(
        max_length=32,
        choices=ReservationStatus.choices,
        default=ReservationStatus.REQUESTED,
    )
    start_date = models.DateField()
    end_date = models.DateField(help_text=_("Exclusive: the vehicle is free again on this day."))
    version = models.PositiveIntegerField(default=1)

    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    commission_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    owner_payout = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    deposit_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    currency = models.CharField(max_length=3, default="MAD")

    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.UNPAID,
    )
    payment_ref = models.CharField(max_length=255, blank=True)
    deposit_status = models.CharField(
        max_length=20,
        choices=DepositStatus.choices,
        default=DepositStatus.NONE,
    )
    deposit_hold_ref = EncryptedCharField(blank=True, default="")

    cancellation_policy = models.CharField(
        max_length=20,
        blank=True,
        help_text=_("Vehicle tier at request time, used for refunds."),
    )
    cancelled_by = models.CharField(max_length=10, choices=CancelledBy.choices, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    refund_percent = models.DecimalField(max_digits=4, decimal_places=2, null=True, blank=True)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    penalty_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    accepted_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="reservation_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["vehicle", "renter", "created_at"], name="reservation_pair_idx"),
            models.Index(fields=["status", "accepted_at"], name="reservation_unpaid_idx"),
            models.Index(fields=["status", "end_date"], name="reservation_ending_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation #{self.pk} ({self.status})"

    @property
    def days(self) -> int:
        return (self.end_date - self.start_date).days

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.CAPTURED


class ReservationEvent(models.Model):
    """Immutable domain event. One row per idempotency key."""

    Type = EventType

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.CASCADE,
        related_name="events",
    )
    type = models.CharField(max_length=40, choices=EventType.choices)
    actor_user_id = models.CharField(
        max_length=64,
        help_text=_("Primary key of the acting user, or 'system'."),
    )
    payload = models.JSONField(default=dict, blank=True)
    idempotency_key = models.CharField(max_length=255, unique=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Reservation event")
        verbose_name_plural = _("Reservation events")
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["reservation", "type"], name="reservation_event_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} for reservation {self.reservation_id}"
