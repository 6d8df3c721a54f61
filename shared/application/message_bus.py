"""
Message Bus

Routes committed domain events to their handlers. Booking side effects
(payment requests, notifications) subscribe here instead of being called
from the ledger.
"""

from typing import Callable, Dict, List, Type
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[DomainEvent], None]


class MessageBus:
    """
    Event type -> handlers, in registration order

    A handler that raises is logged and skipped. The remaining handlers
    still run and the publisher never sees the error.
    """

    def __init__(self):
        self._handlers: Dict[Type[DomainEvent], List[EventHandler]] = {}

    def register_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        """Subscribe ``handler``; registering the same handler twice is a no-op."""
        handlers = self._handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Registered %s for %s", _name(handler), event_type.__name__)

    def unregister_event_handler(self, event_type: Type[DomainEvent], handler: EventHandler):
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: Type[DomainEvent]) -> List[EventHandler]:
        return list(self._handlers.get(event_type, []))

    def publish_events(self, events: List[DomainEvent]):
        for event in events:
            handlers = self.handlers_for(type(event))
            if not handlers:
                logger.debug("No handlers for %s", type(event).__name__)
                continue

            logger.info("Publishing %s for aggregate %s", type(event).__name__, event.aggregate_id)
            for handler in handlers:
                try:
                    handler(event)
                except Exception:
                    logger.error(
                        "Handler %s failed for %s %s",
                        _name(handler), type(event).__name__, event.event_id,
                        exc_info=True,
                    )


def _name(handler) -> str:
    return getattr(handler, "__name__", type(handler).__name__)


message_bus = MessageBus()
