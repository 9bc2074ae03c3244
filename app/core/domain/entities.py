"""
Base Entity Classes for Domain-Driven Design

Entities are domain objects with identity and lifecycle.
They maintain their identity regardless of their attributes.
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

# Type variable for entity ID (int, str, UUID, etc.)
TId = TypeVar("TId")


@dataclass
class Entity(ABC, Generic[TId]):
    """
    Base class for all domain entities.

    An entity is a domain object that has a distinct identity
    that runs through time and different states.

    Type Parameters:
        TId: Type of entity identifier (int, str, UUID)

    Example:
        ```python
        @dataclass
        class TimeSlot(Entity[int]):
            practitioner_id: int = 0
            claimed: bool = False
        ```
    """

    id: TId | None = field(default=None)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __eq__(self, other: object) -> bool:
        """Entities are equal if they have the same ID."""
        if not isinstance(other, Entity):
            return False
        if self.id is None or other.id is None:
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id) if self.id is not None else id(self)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = datetime.now(UTC)


@dataclass
class AggregateRoot(Entity[TId], Generic[TId]):
    """
    Base class for aggregate roots.

    An aggregate root is the entry point to an aggregate.
    It controls access to all members of the aggregate
    and ensures invariants are maintained.

    Events recorded through ``_record_event`` are collected by the
    application service and published once the unit of work commits.

    Example:
        ```python
        @dataclass
        class Appointment(AggregateRoot[int]):
            status: AppointmentStatus = AppointmentStatus.SCHEDULED

            def confirm(self) -> None:
                self._transition(AppointmentStatus.CONFIRMED)
                self._record_event(AppointmentConfirmed(appointment_id=self.id))
        ```
    """

    _domain_events: list[Any] = field(default_factory=list, repr=False, compare=False)

    def _record_event(self, event: Any) -> None:
        """Record a domain event to be published later."""
        self._domain_events.append(event)

    def get_domain_events(self) -> list[Any]:
        """Get all recorded domain events."""
        return list(self._domain_events)

    def clear_domain_events(self) -> None:
        """Clear all recorded domain events (after publishing)."""
        self._domain_events.clear()

    def pull_domain_events(self) -> list[Any]:
        """Return recorded events and clear them, so each is handed out once."""
        events = self.get_domain_events()
        self.clear_domain_events()
        return events

