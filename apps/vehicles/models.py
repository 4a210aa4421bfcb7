"""Vehicle listing snapshot and per-vehicle day locks."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Vehicle(models.Model):
    """A vehicle offered for rent by its owner.

    Only the attributes the reservation core reads are modelled here:
    pricing, deposit, cancellation tier and the days the owner blocked.
    """

    class CancellationPolicy(models.TextChoices):
        FLEXIBLE = "flexible", _("Flexible (full refund 24h+ before)")
        MODERATE = "moderate", _("Moderate (full refund 72h+ before)")
        STRICT = "strict", _("Strict (full refund 7 days+ before)")

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="vehicles",
    )
    title = models.CharField(max_length=255)
    city = models.CharField(max_length=100, blank=True)
    price_per_day = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="MAD")
    deposit_min = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Lowest deposit the owner accepts."),
    )
    deposit_selected = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Deposit the owner asks for; falls back to the minimum."),
    )
    cancellation_policy = models.CharField(
        max_length=20,
        choices=CancellationPolicy.choices,
        blank=True,
        help_text=_("Empty means the product-wide default tier."),
    )
    owner_blocked_dates = models.JSONField(
        default=list,
        blank=True,
        help_text=_("ISO dates on which the owner does not rent the vehicle."),
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Vehicle")
        verbose_name_plural = _("Vehicles")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.title

    def deposit_amount(self, default: Decimal) -> Decimal:
        return self.deposit_selected or self.deposit_min or default


class VehicleLockBucket(models.Model):
    """One row per vehicle mapping ISO day -> owning reservation id.

    A key being present means the vehicle is unavailable that day. The row
    is the serialization point for concurrent bookings of the vehicle and is
    never deleted.
    """

    vehicle = models.OneToOneField(
        Vehicle,
        on_delete=models.CASCADE,
        related_name="lock_bucket",
    )
    dates = models.JSONField(default=dict, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Vehicle lock bucket")
        verbose_name_plural = _("Vehicle lock buckets")

    def __str__(self) -> str:
        return f"Locks for vehicle {self.vehicle_id} ({len(self.dates)} days)"
