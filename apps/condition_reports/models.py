"""Condition reports: the two-party photo handshake at pickup and return."""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

REQUIRED_SLOTS = (
    "front",
    "front_left",
    "front_right",
    "back",
    "back_left",
    "back_right",
    "interior_front",
    "interior_back",
    "dashboard",
)
MAX_DETAIL_PHOTOS = 6


class ConditionReport(models.Model):
    """One participant's photos of the vehicle for one phase.

    Photos are storage references (names in the default storage), never
    file contents. A report is written once and never edited.
    """

    class Phase(models.TextChoices):
        CHECKIN = "checkin", _("Pickup")
        CHECKOUT = "checkout", _("Return")

    class Role(models.TextChoices):
        OWNER = "owner", _("Owner")
        RENTER = "renter", _("Renter")

    reservation = models.ForeignKey(
        "reservations.Reservation",
        on_delete=models.CASCADE,
        related_name="condition_reports",
    )
    phase = models.CharField(max_length=10, choices=Phase.choices)
    role = models.CharField(max_length=10, choices=Role.choices)
    required_photos = models.JSONField(default=dict, help_text=_("Slot name -> storage reference."))
    detail_photos = models.JSONField(default=list, blank=True, help_text=_("List of {ref, note}."))
    video_360_ref = models.CharField(max_length=255, blank=True)
    submitted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="condition_reports",
    )
    completed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Condition report")
        verbose_name_plural = _("Condition reports")
        ordering = ["-completed_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["reservation", "phase", "role"],
                name="one_report_per_phase_and_role",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.phase} report by {self.role} for reservation {self.reservation_id}"
