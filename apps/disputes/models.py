"""Post-rental disputes."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Dispute(models.Model):
    """A participant's complaint about a finished rental, decided by the operator."""

    class Reason(models.TextChoices):
        DAMAGE = "damage", _("Damage")
        DIRTY = "dirty", _("Dirty vehicle")
        MISSING_PART = "missing_part", _("Missing part")
        KM_EXCEEDED = "km_exceeded", _("Mileage exceeded")
        MECHANICAL = "mechanical", _("Mechanical problem")
        OTHER = "other", _("Other")

    class Status(models.TextChoices):
        OPEN = "open", _("Open")
        RESOLVED_NO_PENALTY = "resolved_no_penalty", _("Resolved, deposit released")
        RESOLVED_PARTIAL = "resolved_partial", _("Resolved, deposit partially retained")
        RESOLVED_FULL = "resolved_full", _("Resolved, deposit retained")

    class Resolution(models.TextChoices):
        NO_PENALTY = "no_penalty", _("No penalty")
        PARTIAL = "partial", _("Partial retention")
        FULL = "full", _("Full retention")

    reservation = models.ForeignKey(
        "reservations.Reservation",
        on_delete=models.CASCADE,
        related_name="disputes",
    )
    vehicle = models.ForeignKey(
        "vehicles.Vehicle",
        on_delete=models.PROTECT,
        related_name="disputes",
    )
    opened_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="disputes_opened",
    )
    opened_by_role = models.CharField(max_length=10)
    reason = models.CharField(max_length=20, choices=Reason.choices)
    description = models.TextField()
    photo_refs = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=24, choices=Status.choices, default=Status.OPEN)
    retained_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    admin_note = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        verbose_name = _("Dispute")
        verbose_name_plural = _("Disputes")
        ordering = ["-created_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["reservation"],
                condition=models.Q(status="open"),
                name="one_open_dispute_per_reservation",
            ),
        ]
        indexes = [
            models.Index(fields=["status"], name="dispute_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Dispute #{self.pk} on reservation {self.reservation_id} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.status == self.Status.OPEN
