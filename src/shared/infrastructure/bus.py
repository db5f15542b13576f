"""In-memory event bus implementation."""

from __future__ import annotations

from typing import Dict, List, Optional, Type

import structlog

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus.

    Subscribing an event class also registers it by name, which is what
    the outbox publisher uses to turn stored rows back into events.
    """

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}
        self._registry: Dict[str, Type[DomainEvent]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        self._registry[event_class.__name__] = event_class
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def resolve(self, event_name: str) -> Optional[Type[DomainEvent]]:
        return self._registry.get(event_name)

    def publish(self, event: DomainEvent) -> int:
        """Dispatch *event* to its handlers and return how many ran."""
        handlers = self._handlers.get(type(event), [])
        for handler in handlers:
            handler.handle(event)
        logger.debug(
            "event_bus.published",
            event_name=event.event_name,
            handler_count=len(handlers),
        )
        return len(handlers)


# Process-wide bus; subscriptions happen in AppConfig.ready()

event_bus = InMemoryEventBus()
