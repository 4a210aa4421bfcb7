"""Message bus handlers for notification events."""

from __future__ import annotations

import logging

from shared.application.message_bus import message_bus

from .events import NotificationRequested
from .tasks import deliver_notification

logger = logging.getLogger(__name__)


@message_bus.subscribe(NotificationRequested)
def schedule_delivery(event: NotificationRequested) -> None:
    deliver_notification.delay(event.user_id, event.template_type, event.context)
    logger.debug(f"Scheduled {event.template_type} notification for user {event.user_id}")
