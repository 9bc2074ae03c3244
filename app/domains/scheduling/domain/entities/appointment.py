"""
Appointment Entity for Scheduling Domain

A consultation booked on a time slot, with its status lifecycle.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Any

from app.core.domain import AggregateRoot, InvalidTransitionException

from ..events import (
    AppointmentBooked,
    AppointmentCancelled,
    AppointmentCompleted,
    AppointmentConfirmed,
)
from ..value_objects.appointment_status import AppointmentStatus
from ..value_objects.patient_contact import PatientContact
from ..value_objects.time_window import TIME_FORMAT
from .patient import Patient
from .time_slot import TimeSlot


@dataclass
class Appointment(AggregateRoot[int]):
    """
    Appointment aggregate root.

    Status changes go through confirm/cancel/complete, each of which
    validates the move against the lifecycle graph and records an event.

    Example:
        ```python
        appointment = Appointment.book(slot, patient, reason="Headache", symptoms="")
        appointment.confirm()
        appointment.cancel(reason="Patient request")
        ```
    """

    # References
    slot_id: int | None = None
    practitioner_id: int = 0
    patient_id: int = 0

    # Scheduling (copied from the slot at booking time)
    appointment_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    time_range: str = ""

    # Request
    reason: str = ""
    symptoms: str = ""
    patient_contact: PatientContact | None = None

    # Status
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    cancellation_reason: str | None = None

    @classmethod
    def book(cls, slot: TimeSlot, patient: Patient, reason: str = "", symptoms: str = "") -> "Appointment":
        """Create a Scheduled appointment for a freshly claimed slot."""
        return cls(
            slot_id=slot.id,
            practitioner_id=slot.practitioner_id,
            patient_id=patient.id or 0,
            appointment_date=slot.slot_date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            time_range=slot.time_range,
            reason=reason or "",
            symptoms=symptoms or "",
            patient_contact=patient.contact,
            status=AppointmentStatus.SCHEDULED,
        )

    # ==================== Lifecycle ====================

    def record_booking(self, new_account_created: bool = False) -> None:
        """Record the Booked event once the appointment has an identity."""
        self._record_event(
            AppointmentBooked(
                **self._event_fields(),
                reason=self.reason,
                new_account_created=new_account_created,
            )
        )

    def confirm(self) -> None:
        """Scheduled -> Confirmed."""
        self._transition(AppointmentStatus.CONFIRMED)
        self._record_event(AppointmentConfirmed(**self._event_fields()))

    def cancel(self, reason: str | None = None) -> None:
        """Scheduled/Confirmed -> Cancelled. The caller releases the slot."""
        self._transition(AppointmentStatus.CANCELLED)
        self.cancellation_reason = reason
        self._record_event(AppointmentCancelled(**self._event_fields(), reason=reason))

    def complete(self, record_id: int | None = None) -> None:
        """Scheduled/Confirmed -> Completed. Only reached through visit record creation."""
        self._transition(AppointmentStatus.COMPLETED)
        self._record_event(AppointmentCompleted(**self._event_fields(), record_id=record_id))

    def ensure_can_transition_to(self, target: AppointmentStatus) -> None:
        if not self.status.can_transition_to(target):
            raise InvalidTransitionException(self.id, self.status.value, target.value)

    def _transition(self, target: AppointmentStatus) -> None:
        self.ensure_can_transition_to(target)
        self.status = target
        self.touch()

    # ==================== Queries ====================

    def is_active(self) -> bool:
        return self.status.is_active()

    def is_completed(self) -> bool:
        return self.status == AppointmentStatus.COMPLETED

    def is_managed_by(self, practitioner_id: int) -> bool:
        return self.practitioner_id == practitioner_id

    def belongs_to(self, patient_id: int) -> bool:
        return self.patient_id == patient_id

    @property
    def patient_name(self) -> str:
        return self.patient_contact.full_name if self.patient_contact else ""

    @property
    def patient_email(self) -> str:
        return self.patient_contact.email if self.patient_contact else ""

    def _event_fields(self) -> dict[str, Any]:
        return {
            "appointment_id": self.id or 0,
            "slot_id": self.slot_id,
            "practitioner_id": self.practitioner_id,
            "patient_id": self.patient_id,
            "patient_name": self.patient_name,
            "patient_email": self.patient_email,
            "appointment_date": self.appointment_date,
            "time_range": self.time_range,
        }

    def to_summary_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slot_id": self.slot_id,
            "practitioner_id": self.practitioner_id,
            "patient_id": self.patient_id,
            "date": self.appointment_date.isoformat() if self.appointment_date else None,
            "start_time": self.start_time.strftime(TIME_FORMAT) if self.start_time else None,
            "time_range": self.time_range,
            "status": self.status.value,
        }
