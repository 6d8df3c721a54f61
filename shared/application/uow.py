"""
Unit of Work

One database transaction plus the domain events raised inside it. The
events reach the message bus only after the outermost transaction commits,
so a rolled back reservation never triggers payment or notifications.
"""

from typing import List
import logging

from django.db import transaction

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class DjangoUnitOfWork:
    """
    Transaction scope for ledger writes

    Usage:
        with DjangoUnitOfWork() as uow:
            booking = ...  # lock the court day, insert the row
            uow.collect_events(booking)
        # BookingConfirmed is published after commit
    """

    def __init__(self, using: str | None = None):
        self._using = using
        self._atomic = None
        self._events: List[DomainEvent] = []

    def __enter__(self):
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self._schedule_publish()
            elif self._events:
                logger.warning("Rolling back unit of work, discarding %d events", len(self._events))
        finally:
            self._events = []
            self._atomic.__exit__(exc_type, exc_val, exc_tb)

    def collect_events(self, aggregate):
        """Take the aggregate's pending events into this unit of work."""
        pending = aggregate.events
        if pending:
            self._events.extend(pending)
            aggregate.clear_events()
            logger.debug("Collected %d events from %s %s", len(pending), type(aggregate).__name__, aggregate.id)

    def _schedule_publish(self):
        # on_commit runs at once outside a transaction and is dropped on rollback
        events = list(self._events)
        if events:
            transaction.on_commit(lambda: _publish(events), using=self._using)


def _publish(events: List[DomainEvent]):
    from shared.application.message_bus import message_bus

    logger.info("Publishing %d domain events after commit", len(events))
    try:
        message_bus.publish_events(events)
    except Exception:
        # The booking is already committed
        logger.error("Error publishing events", exc_info=True)
