"""Deposit audit trail."""

from __future__ import annotations

from decimal import Decimal

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class DepositTransaction(models.Model):
    """One row per deposit ledger call, including the ones that did nothing."""

    class Action(models.TextChoices):
        HOLD = "hold", _("Hold")
        RELEASE = "release", _("Release")
        RETAIN = "retain", _("Retain")

    class Outcome(models.TextChoices):
        APPLIED = "applied", _("Applied")
        SKIPPED = "skipped", _("Skipped")

    reservation = models.ForeignKey(
        "reservations.Reservation",
        on_delete=models.CASCADE,
        related_name="deposit_transactions",
    )
    action = models.CharField(max_length=10, choices=Action.choices)
    outcome = models.CharField(max_length=10, choices=Outcome.choices, default=Outcome.APPLIED)
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0"))
    currency = models.CharField(max_length=3, default="MAD")
    deposit_status = models.CharField(
        max_length=20,
        help_text=_("Deposit status after the call."),
    )
    actor_user_id = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Deposit transaction")
        verbose_name_plural = _("Deposit transactions")
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.action} {self.amount} for reservation {self.reservation_id} ({self.outcome})"
