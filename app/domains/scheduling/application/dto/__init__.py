"""
Scheduling Application DTOs

Data Transfer Objects for the scheduling domain.
"""

from dataclasses import dataclass
from enum import Enum

from app.domains.scheduling.domain.entities import Appointment, Patient
from app.domains.scheduling.domain.value_objects import PatientContact

# ==================== Request context ====================


class Role(str, Enum):
    PATIENT = "patient"
    PRACTITIONER = "practitioner"
    ADMIN = "admin"


@dataclass(frozen=True)
class RequestContext:
    """
    Identity of the caller of one request.

    Built by the API layer from the bearer token and passed explicitly
    into the application services.
    """

    user_id: int
    role: Role
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_practitioner(self) -> bool:
        return self.role == Role.PRACTITIONER

    @property
    def is_patient(self) -> bool:
        return self.role == Role.PATIENT

    def acts_for_practitioner(self, practitioner_id: int) -> bool:
        """Admins, or the practitioner themselves."""
        return self.is_admin or (self.is_practitioner and self.user_id == practitioner_id)

    def acts_for_patient(self, patient_id: int) -> bool:
        """Admins, or the patient themselves."""
        return self.is_admin or (self.is_patient and self.user_id == patient_id)


# ==================== Booking DTOs ====================


@dataclass(frozen=True)
class PatientIdentity:
    """
    Who the appointment is for: an existing patient id or contact details.

    Exactly one of patient_id and contact is set.
    """

    patient_id: int | None = None
    contact: PatientContact | None = None

    @classmethod
    def existing(cls, patient_id: int) -> "PatientIdentity":
        return cls(patient_id=patient_id)

    @classmethod
    def from_contact(cls, contact: PatientContact) -> "PatientIdentity":
        return cls(contact=contact)


@dataclass
class BookingResult:
    """Outcome of a successful booking."""

    appointment: Appointment
    patient: Patient
    new_account_created: bool = False
    generated_password: str | None = None


# ==================== Visit record DTOs ====================


@dataclass(frozen=True)
class NewAttachment:
    """An uploaded file not yet stored."""

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


__all__ = [
    "BookingResult",
    "NewAttachment",
    "PatientIdentity",
    "RequestContext",
    "Role",
]
