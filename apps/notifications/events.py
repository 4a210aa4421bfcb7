"""Domain event asking for a push to one user."""

from dataclasses import dataclass, field

from shared.domain.base import DomainEvent


@dataclass
class NotificationRequested(DomainEvent):
    """
    Event: the core decided a user must be told about something

    Published after commit; delivery is scheduled on Celery so a failing
    sink never affects the reservation write.
    """
    user_id: int = None
    template_type: str = ''
    context: dict = field(default_factory=dict)
