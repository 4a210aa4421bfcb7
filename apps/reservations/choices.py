"""Enumerations shared by the reservation models and the domain layer."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class ReservationStatus(models.TextChoices):
    REQUESTED = "requested", _("Requested")
    ACCEPTED_PENDING_PAYMENT = "accepted_pending_payment", _("Accepted, awaiting payment")
    PICKUP_PENDING = "pickup_pending", _("Awaiting pickup")
    IN_PROGRESS = "in_progress", _("In progress")
    DROPOFF_PENDING = "dropoff_pending", _("Awaiting return inspection")
    COMPLETED = "completed", _("Completed")
    REJECTED = "rejected", _("Rejected")
    CANCELLED = "cancelled", _("Cancelled")
    DISPUTED = "disputed", _("Disputed")


class PaymentStatus(models.TextChoices):
    UNPAID = "unpaid", _("Unpaid")
    REQUIRES_ACTION = "requires_action", _("Awaiting payment confirmation")
    CAPTURED = "captured", _("Captured")
    REFUNDED = "refunded", _("Refunded")


class DepositStatus(models.TextChoices):
    NONE = "none", _("Not held")
    HELD = "held", _("Held")
    RELEASED = "released", _("Released")
    RETAINED = "retained", _("Retained")
    PARTIALLY_RETAINED = "partially_retained", _("Partially retained")


class CancelledBy(models.TextChoices):
    RENTER = "renter", _("Renter")
    OWNER = "owner", _("Owner")
    SYSTEM = "system", _("System")


class ParticipantRole(models.TextChoices):
    OWNER = "owner", _("Owner")
    RENTER = "renter", _("Renter")


class EventType(models.TextChoices):
    RESERVATION_CREATED = "reservation_created", _("Reservation created")
    RESERVATION_ACCEPTED = "reservation_accepted", _("Reservation accepted")
    RESERVATION_REJECTED = "reservation_rejected", _("Reservation rejected")
    RESERVATION_CANCELLED = "reservation_cancelled", _("Reservation cancelled")
    PAYMENT_INITIALIZED = "payment_initialized", _("Payment initialized")
    PAYMENT_CAPTURED = "payment_captured", _("Payment captured")
    CONDITION_REPORT_SUBMITTED = "condition_report_submitted", _("Condition report submitted")
    CHECKIN_COMPLETED = "checkin_completed", _("Check-in completed")
    DROPOFF_PENDING = "dropoff_pending", _("Return declared")
    CHECKOUT_COMPLETED = "checkout_completed", _("Checkout completed")
    DEPOSIT_HELD = "deposit_held", _("Deposit held")
    DEPOSIT_RELEASED = "deposit_released", _("Deposit released")
    DEPOSIT_RETAINED = "deposit_retained", _("Deposit retained")
    DISPUTE_OPENED = "dispute_opened", _("Dispute opened")
    DISPUTE_RESOLVED = "dispute_resolved", _("Dispute resolved")


SYSTEM_ACTOR = "system"
