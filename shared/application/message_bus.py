"""
Message Bus

Routes domain events to the handlers subscribed to their type. Handlers
run after the transaction that raised the event has committed, so a
failing handler is logged and never propagates to the caller.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], None]


class MessageBus:
    """Events only: each event type may have several handlers."""

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[Handler]] = {}

    def subscribe(self, event_type: Type[DomainEvent]):
        """Decorator form of :meth:`register`."""
        def decorator(handler: Handler) -> Handler:
            self.register(event_type, handler)
            return handler
        return decorator

    def register(self, event_type: Type[DomainEvent], handler: Handler):
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Registered {handler.__name__} for {event_type.__name__}")

    def publish_events(self, events: List[DomainEvent]):
        for event in events:
            event_type = type(event)
            handlers = self._handlers.get(event_type, [])
            if not handlers:
                logger.warning(f"No handlers registered for event {event_type.__name__}")
                continue

            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Handler {handler.__name__} failed for {event_type.__name__} "
                        f"(ID: {event.event_id}): {e}",
                        exc_info=True,
                    )


message_bus = MessageBus()
