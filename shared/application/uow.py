"""
Unit of Work Pattern

Wraps a reservation command in one database transaction and hands the
domain events raised inside it to the message bus only after commit.
Listeners therefore never observe state that was rolled back, and a
failing listener can never undo the primary write.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Django implementation of Unit of Work

    Usage:
        with DjangoUnitOfWork() as uow:
            reservation = lock_reservation(reservation_id)
            transition(reservation, ...)
            uow.add_event(NotificationRequested(...))
        # events are published after the outermost transaction commits

    Nested units of work become savepoints; their events still wait for
    the outermost commit.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._atomic = None

    def __enter__(self):
        self._atomic = transaction.atomic()
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent):
        self._events.append(event)

    def commit(self):
        events = self._events.copy()
        self._events.clear()
        if events:
            logger.debug(f"Scheduling {len(events)} events for publication after commit")
            transaction.on_commit(lambda: self._publish_events(events))

    def rollback(self):
        if self._events:
            logger.warning(f"Rolling back unit of work, discarding {len(self._events)} events")
        self._events.clear()

    @staticmethod
    def _publish_events(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        try:
            message_bus.publish_events(events)
        except Exception as e:
            logger.error(f"Error publishing events after commit: {e}", exc_info=True)
