"""
Domain Layer - Core DDD building blocks

This module provides base classes for Domain-Driven Design:
- Entities: Objects with identity and lifecycle
- Value Objects: Immutable objects compared by value
- Events: Domain events for communication
- Exceptions: Domain-specific error handling
"""

from app.core.domain.entities import (
    AggregateRoot,
    Entity,
)
from app.core.domain.events import (
    DomainEvent,
    DomainEventPublisher,
    EventHandler,
)
from app.core.domain.exceptions import (
    AttachmentNotFoundException,
    AuthorizationException,
    DomainException,
    EntityNotFoundException,
    InvalidRangeException,
    InvalidTransitionException,
    SlotLockedException,
    SlotOverlapException,
    SlotUnavailableException,
    ValidationException,
)
from app.core.domain.value_objects import (
    Email,
    StatusEnum,
    ValueObject,
)

__all__ = [
    # Entities
    "Entity",
    "AggregateRoot",
    # Value Objects
    "ValueObject",
    "Email",
    "StatusEnum",
    # Events
    "DomainEvent",
    "DomainEventPublisher",
    "EventHandler",
    # Exceptions
    "DomainException",
    "ValidationException",
    "EntityNotFoundException",
    "AuthorizationException",
    "InvalidRangeException",
    "SlotOverlapException",
    "SlotLockedException",
    "SlotUnavailableException",
    "InvalidTransitionException",
    "AttachmentNotFoundException",
]
