"""
Unit of Work Pattern

Wraps a database transaction and makes sure that domain events
are published only after the transaction commits.
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
            booking = Booking.objects.select_for_update().get(pk=booking_id)
            booking.status = Booking.Status.CANCELLED
            booking.save()
            uow.add_event(BookingCancelled(...))
        # Events are published after commit

    When nested inside an outer atomic block, publishing waits for
    the outermost commit (``transaction.on_commit`` semantics).
    """

    def __init__(self, using: str | None = None):
        self._events: List[DomainEvent] = []
        self._using = using
        self._transaction = None

    def __enter__(self):
        self._transaction = transaction.atomic(using=self._using)
        self._transaction.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            if self._transaction:
                self._transaction.__exit__(exc_type, exc_val, exc_tb)

    def add_event(self, event: DomainEvent) -> None:
        self._events.append(event)

    def commit(self):
        """Schedule collected events for publishing once the data is durable."""
        events = self._events.copy()
        self._events.clear()
        if events:
            logger.debug(f"Scheduling {len(events)} events for publishing after commit")
            transaction.on_commit(lambda: self._publish_events(events), using=self._using)

    def rollback(self):
        """Discard events of a failed transaction."""
        if self._events:
            logger.warning(f"Rolling back transaction, discarding {len(self._events)} events")
        self._events.clear()

    @staticmethod
    def _publish_events(events: List[DomainEvent]):
        from shared.application.message_bus import message_bus

        logger.info(f"Publishing {len(events)} domain events after commit")
        message_bus.publish_events(events)
