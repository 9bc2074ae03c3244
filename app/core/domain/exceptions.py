"""
Domain Exceptions for Domain-Driven Design

These exceptions represent business rule violations and domain-specific errors.
They are caught and translated to HTTP responses in the API layer
(see app/api/exception_handlers.py).
"""

from datetime import date, time
from typing import Any


class DomainException(Exception):
    """
    Base exception for all domain-related errors.

    Provides a standardized way to communicate business rule violations.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "SLOT_UNAVAILABLE")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}


class ValidationException(DomainException):
    """
    Raised when domain validation fails.

    Use for invalid entity states, value object creation failures, etc.
    """

    def __init__(self, message: str, field: str | None = None, details: dict[str, Any] | None = None):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class EntityNotFoundException(DomainException):
    """
    Raised when an entity is not found.
    """

    def __init__(
        self,
        entity_type: str,
        entity_id: Any,
        message: str | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        msg = message or f"{entity_type} with ID {entity_id} not found"
        super().__init__(
            msg,
            "ENTITY_NOT_FOUND",
            {"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class AuthorizationException(DomainException):
    """Raised when a user is not authorized to perform an operation."""

    def __init__(self, operation: str, resource: str | None = None, user_id: str | None = None):
        self.operation = operation
        self.resource = resource
        self.user_id = user_id
        msg = f"Not authorized to perform '{operation}'"
        if resource:
            msg += f" on '{resource}'"
        super().__init__(
            msg,
            "AUTHORIZATION_ERROR",
            {
                "operation": operation,
                "resource": resource,
            },
        )


class InvalidRangeException(DomainException):
    """Raised when a time window does not start strictly before it ends."""

    def __init__(self, start: time, end: time):
        self.start = start
        self.end = end
        super().__init__(
            f"Invalid time range: start {start.strftime('%H:%M')} must be before end {end.strftime('%H:%M')}",
            "INVALID_RANGE",
            {"start": start.strftime("%H:%M"), "end": end.strftime("%H:%M")},
        )


class SlotOverlapException(DomainException):
    """Raised when a new slot overlaps an existing slot of the same practitioner."""

    def __init__(self, practitioner_id: int, slot_date: date, conflicting_slot_id: int | None = None):
        self.practitioner_id = practitioner_id
        self.slot_date = slot_date
        self.conflicting_slot_id = conflicting_slot_id
        details: dict[str, Any] = {
            "practitioner_id": practitioner_id,
            "date": slot_date.isoformat(),
        }
        if conflicting_slot_id is not None:
            details["conflicting_slot_id"] = conflicting_slot_id
        super().__init__(
            f"Slot overlaps an existing slot for practitioner {practitioner_id} on {slot_date.isoformat()}",
            "SLOT_OVERLAP",
            details,
        )


class SlotLockedException(DomainException):
    """Raised when a claimed slot is deleted or modified."""

    def __init__(self, slot_id: int):
        self.slot_id = slot_id
        super().__init__(
            f"Slot {slot_id} is booked and cannot be changed",
            "SLOT_LOCKED",
            {"slot_id": slot_id},
        )


class SlotUnavailableException(DomainException):
    """Raised when a slot cannot be claimed because it is taken or missing."""

    def __init__(self, slot_id: int):
        self.slot_id = slot_id
        super().__init__(
            f"Slot {slot_id} is no longer available",
            "SLOT_UNAVAILABLE",
            {"slot_id": slot_id},
        )


class InvalidTransitionException(DomainException):
    """Raised when an appointment status change is not in the lifecycle graph."""

    def __init__(self, appointment_id: int | None, current_status: str, target_status: str):
        self.appointment_id = appointment_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Cannot move appointment {appointment_id} from '{current_status}' to '{target_status}'",
            "INVALID_TRANSITION",
            {
                "appointment_id": appointment_id,
                "current_status": current_status,
                "target_status": target_status,
            },
        )


class AttachmentNotFoundException(DomainException):
    """Raised when a removal references a lab report that is not on the record."""

    def __init__(self, record_id: int | None, urls: list[str]):
        self.record_id = record_id
        self.urls = urls
        super().__init__(
            f"Attachments not found on record {record_id}: {', '.join(urls)}",
            "ATTACHMENT_NOT_FOUND",
            {"record_id": record_id, "urls": urls},
        )
