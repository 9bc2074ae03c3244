"""
Patient Contact Value Object

Contact details supplied at booking time. Appointments and visit records
keep a snapshot of them.
"""

from dataclasses import dataclass
from typing import Any

from app.core.domain import Email, ValidationException, ValueObject


@dataclass(frozen=True)
class PatientContact(ValueObject):
    """Name, e-mail and phone of a patient."""

    first_name: str
    last_name: str
    email: str
    phone: str = ""

    def _validate(self) -> None:
        if not self.first_name or not self.first_name.strip():
            raise ValidationException("First name is required", field="first_name")
        if not self.last_name or not self.last_name.strip():
            raise ValidationException("Last name is required", field="last_name")
        object.__setattr__(self, "first_name", self.first_name.strip())
        object.__setattr__(self, "last_name", self.last_name.strip())
        object.__setattr__(self, "email", Email(self.email).address)
        object.__setattr__(self, "phone", (self.phone or "").strip())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self) -> dict[str, str]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PatientContact":
        return cls(
            first_name=data["first_name"],
            last_name=data["last_name"],
            email=data["email"],
            phone=data.get("phone") or "",
        )
