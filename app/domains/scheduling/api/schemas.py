"""
Scheduling API Schemas

Request and response models. JSON field names are camelCase.
"""

from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.domains.scheduling.application.dto import BookingResult
from app.domains.scheduling.domain.entities import Appointment, TimeSlot, VisitRecord
from app.domains.scheduling.domain.value_objects import AppointmentStatus, PatientContact


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ============================================================================
# Slots
# ============================================================================


class SlotCreateRequest(CamelModel):
    """New availability window. practitionerId is honoured for admins only."""

    slot_date: date = Field(..., alias="date")
    start: time
    end: time
    practitioner_id: int | None = None


class SlotResponse(CamelModel):
    id: int
    practitioner_id: int
    slot_date: date = Field(..., alias="date")
    start_time: time
    end_time: time
    time_range: str
    claimed: bool

    @classmethod
    def from_entity(cls, slot: TimeSlot) -> "SlotResponse":
        return cls(
            id=slot.id,
            practitioner_id=slot.practitioner_id,
            slot_date=slot.slot_date,
            start_time=slot.start_time,
            end_time=slot.end_time,
            time_range=slot.time_range,
            claimed=slot.claimed,
        )


# ============================================================================
# Appointments
# ============================================================================


class PatientContactSchema(CamelModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    phone: str = Field("", max_length=30)

    def to_value_object(self) -> PatientContact:
        return PatientContact(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
        )

    @classmethod
    def from_value_object(cls, contact: PatientContact) -> "PatientContactSchema":
        return cls(**contact.to_dict())


class BookingRequest(CamelModel):
    slot_id: int
    patient_id: int | None = None
    patient: PatientContactSchema | None = None
    reason: str = Field("", max_length=1000)
    symptoms: str = Field("", max_length=2000)

    @model_validator(mode="after")
    def check_single_identity(self) -> "BookingRequest":
        if self.patient_id is not None and self.patient is not None:
            raise ValueError("Provide either patientId or patient, not both")
        return self


class StatusUpdateRequest(CamelModel):
    status: AppointmentStatus
    reason: str | None = Field(None, max_length=1000)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        if isinstance(value, str):
            return AppointmentStatus.from_string(value)
        return value


class AppointmentResponse(CamelModel):
    id: int
    slot_id: int | None
    practitioner_id: int
    patient_id: int
    appointment_date: date | None = Field(..., alias="date")
    start_time: time | None
    end_time: time | None
    time_range: str
    reason: str
    symptoms: str
    status: AppointmentStatus
    cancellation_reason: str | None = None
    patient: PatientContactSchema | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, appointment: Appointment) -> "AppointmentResponse":
        return cls(**_appointment_fields(appointment))


class BookingResponse(AppointmentResponse):
    """Booked appointment. generatedPassword is only set for new accounts."""

    new_account_created: bool = False
    generated_password: str | None = None

    @classmethod
    def from_result(cls, result: BookingResult) -> "BookingResponse":
        return cls(
            **_appointment_fields(result.appointment),
            new_account_created=result.new_account_created,
            generated_password=result.generated_password,
        )


def _appointment_fields(appointment: Appointment) -> dict:
    contact = appointment.patient_contact
    return {
        "id": appointment.id,
        "slot_id": appointment.slot_id,
        "practitioner_id": appointment.practitioner_id,
        "patient_id": appointment.patient_id,
        "appointment_date": appointment.appointment_date,
        "start_time": appointment.start_time,
        "end_time": appointment.end_time,
        "time_range": appointment.time_range,
        "reason": appointment.reason,
        "symptoms": appointment.symptoms,
        "status": appointment.status,
        "cancellation_reason": appointment.cancellation_reason,
        "patient": PatientContactSchema.from_value_object(contact) if contact else None,
        "created_at": appointment.created_at,
        "updated_at": appointment.updated_at,
    }


# ============================================================================
# Visit records
# ============================================================================


class VitalSignsSchema(CamelModel):
    bp: str | None = Field(None, max_length=32)
    weight: str | None = Field(None, max_length=32)
    temperature: str | None = Field(None, max_length=32)
    spo2: str | None = Field(None, max_length=32)
    heart_rate: str | None = Field(None, max_length=32)


class PrescriptionLineSchema(CamelModel):
    medicine_name: str = ""
    dosage: str = ""
    frequency: str = ""
    duration: str = ""
    instructions: str = ""


class LabReportSchema(CamelModel):
    url: str
    original_name: str = ""


class VisitRecordResponse(CamelModel):
    id: int
    appointment_id: int
    practitioner_id: int
    patient_id: int
    patient_name: str
    patient_email: str
    patient_phone: str
    diagnosis: str
    symptoms: str
    vital_signs: VitalSignsSchema
    prescription: list[PrescriptionLineSchema]
    doctor_notes: str
    patient_advice: str
    lab_reports: list[LabReportSchema]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, record: VisitRecord) -> "VisitRecordResponse":
        return cls(
            id=record.id,
            appointment_id=record.appointment_id,
            practitioner_id=record.practitioner_id,
            patient_id=record.patient_id,
            patient_name=record.patient_name,
            patient_email=record.patient_email,
            patient_phone=record.patient_phone,
            diagnosis=record.diagnosis,
            symptoms=record.symptoms,
            vital_signs=VitalSignsSchema(**record.vital_signs.to_dict()),
            prescription=[PrescriptionLineSchema(**line.to_dict()) for line in record.prescription],
            doctor_notes=record.doctor_notes,
            patient_advice=record.patient_advice,
            lab_reports=[LabReportSchema(**report.to_dict()) for report in record.lab_reports],
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
