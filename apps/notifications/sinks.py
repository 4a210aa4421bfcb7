"""Push-delivery sinks: ``notify(user_id, template_type, context)``."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from shared.infrastructure.config import load_component

logger = logging.getLogger(__name__)


TEMPLATES: dict[str, tuple[str, str]] = {
    "reservation_requested": ("New rental request", "{renter_name} wants to rent {vehicle_title}."),
    "reservation_accepted": ("Request accepted", "Pay now to confirm {vehicle_title}."),
    "reservation_rejected": ("Request declined", "Your request for {vehicle_title} was declined."),
    "reservation_cancelled": ("Reservation cancelled", "Reservation #{reservation_id} was cancelled."),
    "payment_captured": ("Reservation confirmed", "Payment received for reservation #{reservation_id}."),
    "condition_report_submitted": (
        "Condition report submitted",
        "The other party submitted the {phase} report for reservation #{reservation_id}.",
    ),
    "return_declared": ("Return declared", "Complete the return report for reservation #{reservation_id}."),
    "dispute_opened": ("Dispute opened", "A dispute was opened on reservation #{reservation_id}."),
    "dispute_opened_admin": ("New dispute to review", "Dispute #{dispute_id} needs a decision."),
    "dispute_resolved": ("Dispute resolved", "The dispute on reservation #{reservation_id} was resolved."),
}


def render(template_type: str, context: dict) -> tuple[str, str]:
    title, body = TEMPLATES.get(template_type, (template_type.replace("_", " ").capitalize(), ""))
    try:
        return title, body.format(**context)
    except (KeyError, IndexError):
        return title, body


class NotificationSink(ABC):
    @abstractmethod
    def notify(self, user_id: int, template_type: str, context: dict) -> None:
        """Deliver one notification. May raise; callers log and continue."""


class InAppNotificationSink(NotificationSink):
    """Stores the notification for the in-app inbox."""

    def notify(self, user_id: int, template_type: str, context: dict) -> None:
        from .models import Notification

        title, message = render(template_type, context)
        Notification.objects.create(
            user_id=user_id,
            template_type=template_type,
            context=context,
            title=title,
            message=message,
        )
        logger.info(f"Notification {template_type} stored for user {user_id}")


def get_sink() -> NotificationSink:
    return load_component("NOTIFICATION_SINK")
