"""
Base Value Object Classes for Domain-Driven Design

Value Objects are immutable domain primitives that have no identity.
They are compared by their values, not by reference.
"""

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Self

from app.core.domain.exceptions import ValidationException


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for all value objects.

    Value objects are:
    - Immutable (frozen=True)
    - Compared by value (dataclass equality)
    - Have no identity

    Example:
        ```python
        @dataclass(frozen=True)
        class LabReport(ValueObject):
            url: str
            original_name: str

            def _validate(self) -> None:
                if not self.url:
                    raise ValidationException("Lab report URL is required", field="url")
        ```
    """

    def __post_init__(self):
        """Override to add validation logic."""
        self._validate()

    def _validate(self) -> None:
        """Validate the value object. Override in subclasses."""
        pass


@dataclass(frozen=True)
class Email(ValueObject):
    """
    Email address value object.

    Validates and normalizes email addresses.
    """

    address: str

    def _validate(self) -> None:
        if not self.address or "@" not in self.address:
            raise ValidationException(f"Invalid email address: {self.address}", field="email")
        # Normalize to lowercase
        object.__setattr__(self, "address", self.address.lower().strip())

    def __str__(self) -> str:
        return self.address


class StatusEnum(str, Enum):
    """
    Base class for status enums.

    Provides common functionality for all status value objects.
    """

    @classmethod
    def from_string(cls, value: str) -> Self:
        """Create from string value (case-insensitive)."""
        for member in cls:
            if member.value.lower() == value.lower():
                return member
        raise ValueError(f"Invalid {cls.__name__}: {value}")
