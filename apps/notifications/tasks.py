"""Celery tasks for notification delivery."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

from .sinks import get_sink

logger = logging.getLogger(__name__)


@shared_task(name="notifications.deliver_notification")
def deliver_notification(user_id: int, template_type: str, context: dict | None = None) -> bool:
    """Hand one notification to the configured sink; failures are logged only."""
    try:
        get_sink().notify(user_id, template_type, context or {})
        return True
    except Exception as e:
        logger.error(
            f"Failed to deliver {template_type} notification to user {user_id}: {e}",
            exc_info=True,
        )
        return False
