"""Reservation conversation models.

One thread per reservation. ``Message`` rows are insert-once: system
messages projected from reservation events, welcome messages and text
written by the participants. The legal next moves for the current status
live in ``CurrentActions``, a separate row overwritten in place.
"""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Audience(models.TextChoices):
    ALL = "all", _("Both participants")
    OWNER = "owner", _("Owner only")
    RENTER = "renter", _("Renter only")


class Thread(models.Model):
    reservation = models.OneToOneField(
        "reservations.Reservation",
        on_delete=models.CASCADE,
        related_name="thread",
    )
    renter = models.ForeignKey(
        "users.CustomUser",
        on_delete=models.CASCADE,
        related_name="threads_as_renter",
    )
    owner = models.ForeignKey(
        "users.CustomUser",
        on_delete=models.CASCADE,
        related_name="threads_as_owner",
    )
    created_at = models.DateTimeField(default=timezone.now)
    last_message_at = models.DateTimeField(default=timezone.now)
    last_message_text = models.CharField(max_length=200, blank=True)

    class Meta:
        verbose_name = _("Thread")
        verbose_name_plural = _("Threads")
        ordering = ["-last_message_at"]

    def __str__(self) -> str:
        return f"Thread for reservation {self.reservation_id}"


class Message(models.Model):
    class Type(models.TextChoices):
        WELCOME = "welcome", _("Welcome")
        SYSTEM = "system", _("System")
        USER = "user", _("User")

    thread = models.ForeignKey(Thread, on_delete=models.CASCADE, related_name="messages")
    type = models.CharField(max_length=10, choices=Type.choices)
    audience = models.CharField(max_length=10, choices=Audience.choices, default=Audience.ALL)
    text = models.TextField()
    actions = models.JSONField(default=list, blank=True)
    event_key = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
        help_text=_("Deduplication key for projected messages."),
    )
    author = models.ForeignKey(
        "users.CustomUser",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="chat_messages",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = _("Message")
        verbose_name_plural = _("Messages")
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return f"{self.type} message in thread {self.thread_id}"


class CurrentActions(models.Model):
    """Read model: the status-appropriate next moves, one row per reservation."""

    key = models.CharField(max_length=64, unique=True, help_text=_("actions:<reservation id>"))
    thread = models.OneToOneField(Thread, on_delete=models.CASCADE, related_name="current_actions")
    status = models.CharField(max_length=32)
    actions = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Current actions")
        verbose_name_plural = _("Current actions")

    def __str__(self) -> str:
        return self.key
