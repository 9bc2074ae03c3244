"""
Scheduling Domain Events

Lifecycle events recorded by the Appointment aggregate and consumed by the
notification dispatcher once the surrounding transaction has committed.
"""

from dataclasses import dataclass
from datetime import date

from app.core.domain import DomainEvent


@dataclass(frozen=True)
class AppointmentEvent(DomainEvent):
    """Fields shared by every appointment lifecycle event."""

    appointment_id: int = 0
    slot_id: int | None = None
    practitioner_id: int = 0
    patient_id: int = 0
    patient_name: str = ""
    patient_email: str = ""
    appointment_date: date | None = None
    time_range: str = ""


@dataclass(frozen=True)
class AppointmentBooked(AppointmentEvent):
    reason: str = ""
    new_account_created: bool = False


@dataclass(frozen=True)
class AppointmentConfirmed(AppointmentEvent):
    pass


@dataclass(frozen=True)
class AppointmentCancelled(AppointmentEvent):
    reason: str | None = None


@dataclass(frozen=True)
class AppointmentCompleted(AppointmentEvent):
    record_id: int | None = None


@dataclass(frozen=True)
class PatientAccountCreated(DomainEvent):
    """
    A patient account was created during booking.

    Carries the generated password so the dispatcher can deliver it;
    it is never persisted in clear text.
    """

    patient_id: int = 0
    patient_name: str = ""
    email: str = ""
    generated_password: str = ""
