"""
Base Domain Event Classes for Domain-Driven Design

Domain Events represent significant business occurrences that domain experts
care about. They are used to communicate between aggregates and the
notification side of the application.
"""

import logging
from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time
from typing import Any, Callable, Coroutine
from uuid import UUID, uuid4

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent(ABC):
    """
    Base class for all domain events.

    Domain events are immutable records of something that happened
    in the domain. They capture the fact that something occurred.

    Example:
        ```python
        @dataclass(frozen=True)
        class AppointmentConfirmed(DomainEvent):
            appointment_id: int = 0
            patient_email: str = ""
        ```
    """

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    version: int = field(default=1)

    @property
    def event_type(self) -> str:
        """Get the event type name (class name)."""
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for serialization."""
        result = {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "occurred_at": self.occurred_at.isoformat(),
            "version": self.version,
        }
        # Add all other fields
        for key, value in self.__dict__.items():
            if key not in result:
                if isinstance(value, (datetime, date, time)):
                    result[key] = value.isoformat()
                elif isinstance(value, UUID):
                    result[key] = str(value)
                else:
                    result[key] = value
        return result


# Type aliases for event handlers
EventHandler = Callable[[DomainEvent], Coroutine[Any, Any, None]]


class DomainEventPublisher:
    """
    In-memory domain event publisher.

    Each instance keeps its own handler registry, so the application
    and individual tests can wire independent publishers.
    Handler failures are logged and never reach the publisher's caller.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """
        Subscribe to an event type.

        Args:
            event_type: Type of event to subscribe to
            handler: Async handler function
        """
        event_name = event_type.__name__
        if event_name not in self._handlers:
            self._handlers[event_name] = []
        self._handlers[event_name].append(handler)

    async def publish(self, event: DomainEvent) -> None:
        """
        Publish a domain event to all subscribers.

        Args:
            event: Event to publish
        """
        event_name = event.event_type
        handlers = self._handlers.get(event_name, [])

        for handler in handlers:
            try:
                await handler(event)
            except Exception as e:
                # Log error but don't fail other handlers
                logger.error(f"Error in event handler for {event_name}: {e}")

    async def publish_all(self, events: list[DomainEvent]) -> None:
        """
        Publish multiple events.

        Args:
            events: List of events to publish
        """
        for event in events:
            await self.publish(event)

