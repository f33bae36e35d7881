"""Typed publish/subscribe channel for change notifications."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar
from uuid import UUID

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NutritionChanged:
    """Logged food changed, optionally for a single date.

    ``user_id`` of None reaches every subscriber.
    """

    date: str | None = None
    user_id: UUID | None = None


@dataclass(frozen=True)
class MeasurementsChanged:
    """Body measurements changed, optionally for a single goal."""

    goal_id: UUID | None = None
    user_id: UUID | None = None


EventT = TypeVar("EventT")
Handler = Callable[[EventT], None]


@dataclass
class Subscription(Generic[EventT]):
    """Handle returned by ``EventBus.subscribe``."""

    bus: "EventBus"
    topic: type[EventT]
    handler: Handler[EventT]

    def unsubscribe(self) -> None:
        """Stop delivering events to the handler."""
        self.bus.unsubscribe(self)


@dataclass
class EventBus:
    """Delivers events to handlers registered for the event's type."""

    _handlers: dict[type, list[Callable[[object], None]]] = field(default_factory=dict)

    def subscribe(
        self, topic: type[EventT], handler: Handler[EventT]
    ) -> Subscription[EventT]:
        """Register a handler for a topic and return its handle."""
        self._handlers.setdefault(topic, []).append(handler)  # type: ignore[arg-type]
        return Subscription(bus=self, topic=topic, handler=handler)

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a handler; unknown handles are ignored."""
        handlers = self._handlers.get(subscription.topic, [])
        if subscription.handler in handlers:
            handlers.remove(subscription.handler)

    def publish(self, event: object) -> None:
        """Call every handler of the event's type in registration order.

        A failing handler is logged and does not stop the others.
        """
        for handler in list(self._handlers.get(type(event), [])):
            try:
                handler(event)
            except Exception:
                _logger.exception(
                    "Event handler failed: topic=%s", type(event).__name__
                )

    def handler_count(self, topic: type) -> int:
        """Return the number of handlers registered for a topic."""
        return len(self._handlers.get(topic, []))
