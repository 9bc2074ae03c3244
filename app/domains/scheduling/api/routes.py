"""
Scheduling API Endpoints

Slots, bookings, appointment status changes and visit records.

Controllers stay thin: they translate HTTP payloads into service calls and
entities into response schemas. Domain errors are rendered by the global
exception handlers.
"""

import json
import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, File, Form, Query, Response, UploadFile, status
from pydantic import ValidationError as PydanticValidationError

from app.core.domain.exceptions import ValidationException
from app.domains.scheduling.api.dependencies import (
    BookingEngineDep,
    CurrentContext,
    LifecycleDep,
    SlotStoreDep,
    VisitRecordManagerDep,
)
from app.domains.scheduling.api.schemas import (
    AppointmentResponse,
    BookingRequest,
    BookingResponse,
    PrescriptionLineSchema,
    SlotCreateRequest,
    SlotResponse,
    StatusUpdateRequest,
    VisitRecordResponse,
)
from app.domains.scheduling.application.dto import NewAttachment, PatientIdentity
from app.domains.scheduling.domain.value_objects import (
    AppointmentStatus,
    ClinicalData,
    PrescriptionLine,
    VitalSigns,
)

logger = logging.getLogger(__name__)

router = APIRouter()

CLEARABLE_FIELDS = {"symptoms", "doctorNotes", "patientAdvice"}


# ============================================================================
# Slots
# ============================================================================


@router.get("/slots", response_model=list[SlotResponse], tags=["slots"])
async def list_slots(
    context: CurrentContext,
    slot_store: SlotStoreDep,
    practitioner_id: Annotated[int | None, Query(alias="practitionerId")] = None,
    slot_date: Annotated[date | None, Query(alias="date")] = None,
    available_only: Annotated[bool, Query(alias="availableOnly")] = False,
):
    """Slots of a practitioner, optionally for one day and only unclaimed ones."""
    if practitioner_id is None:
        if not context.is_practitioner:
            raise ValidationException("practitionerId is required", field="practitionerId")
        practitioner_id = context.user_id

    slots = slot_store.list_slots(practitioner_id, slot_date, available_only)
    return [SlotResponse.from_entity(slot) async for slot in slots]


@router.post("/slots", response_model=SlotResponse, status_code=status.HTTP_201_CREATED, tags=["slots"])
async def create_slot(payload: SlotCreateRequest, context: CurrentContext, slot_store: SlotStoreDep):
    practitioner_id = context.user_id
    if context.is_admin and payload.practitioner_id is not None:
        practitioner_id = payload.practitioner_id

    slot = await slot_store.create_slot(practitioner_id, payload.slot_date, payload.start, payload.end, context)
    return SlotResponse.from_entity(slot)


@router.delete("/slots/{slot_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["slots"])
async def delete_slot(slot_id: int, context: CurrentContext, slot_store: SlotStoreDep) -> Response:
    await slot_store.delete_slot(slot_id, context)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Appointments
# ============================================================================


@router.post(
    "/appointments",
    response_model=BookingResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    tags=["appointments"],
)
async def book_appointment(payload: BookingRequest, context: CurrentContext, booking_engine: BookingEngineDep):
    """
    Book a slot for an existing patient or for new contact details.

    When the contact e-mail is unknown a patient account is created and its
    generated password is returned once, in generatedPassword.
    """
    identity: PatientIdentity | None = None
    if payload.patient_id is not None:
        identity = PatientIdentity.existing(payload.patient_id)
    elif payload.patient is not None:
        identity = PatientIdentity.from_contact(payload.patient.to_value_object())

    result = await booking_engine.book(payload.slot_id, identity, payload.reason, payload.symptoms, context)
    return BookingResponse.from_result(result)


@router.get("/appointments", response_model=list[AppointmentResponse], tags=["appointments"])
async def list_appointments(
    context: CurrentContext,
    lifecycle: LifecycleDep,
    practitioner_id: Annotated[int | None, Query(alias="practitionerId")] = None,
    patient_id: Annotated[int | None, Query(alias="patientId")] = None,
    appointment_status: Annotated[AppointmentStatus | None, Query(alias="status")] = None,
):
    appointments = await lifecycle.list_appointments(context, practitioner_id, patient_id, appointment_status)
    return [AppointmentResponse.from_entity(appointment) for appointment in appointments]


@router.get("/appointments/{appointment_id}", response_model=AppointmentResponse, tags=["appointments"])
async def get_appointment(appointment_id: int, context: CurrentContext, lifecycle: LifecycleDep):
    appointment = await lifecycle.get_appointment(appointment_id, context)
    return AppointmentResponse.from_entity(appointment)


@router.post("/appointments/{appointment_id}/status", response_model=AppointmentResponse, tags=["appointments"])
async def update_appointment_status(
    appointment_id: int,
    payload: StatusUpdateRequest,
    context: CurrentContext,
    lifecycle: LifecycleDep,
):
    """Confirm or cancel. Completion happens by creating the visit record."""
    appointment = await lifecycle.change_status(appointment_id, payload.status, context, payload.reason)
    return AppointmentResponse.from_entity(appointment)


# ============================================================================
# Visit records
# ============================================================================


@router.post(
    "/reports",
    response_model=VisitRecordResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["reports"],
)
async def create_visit_record(
    context: CurrentContext,
    manager: VisitRecordManagerDep,
    appointment_id: Annotated[int, Form(alias="appointmentId")],
    diagnosis: Annotated[str, Form()],
    symptoms: Annotated[str | None, Form()] = None,
    bp: Annotated[str | None, Form()] = None,
    weight: Annotated[str | None, Form()] = None,
    temperature: Annotated[str | None, Form()] = None,
    spo2: Annotated[str | None, Form()] = None,
    heart_rate: Annotated[str | None, Form(alias="heartRate")] = None,
    doctor_notes: Annotated[str | None, Form(alias="doctorNotes")] = None,
    patient_advice: Annotated[str | None, Form(alias="patientAdvice")] = None,
    prescription: Annotated[str | None, Form()] = None,
    lab_reports: Annotated[list[UploadFile] | None, File(alias="labReports")] = None,
):
    """
    Write the visit record and complete the appointment in one transaction.

    prescription is a JSON-encoded array; labReports carries the files.
    """
    clinical = ClinicalData(
        diagnosis=diagnosis,
        symptoms=symptoms,
        vital_signs=_vital_signs(bp, weight, temperature, spo2, heart_rate),
        prescription=_parse_prescription(prescription),
        doctor_notes=doctor_notes,
        patient_advice=patient_advice,
    )
    attachments = await _read_attachments(lab_reports)

    record = await manager.create_record(appointment_id, clinical, attachments, context)
    return VisitRecordResponse.from_entity(record)


@router.put("/reports", response_model=VisitRecordResponse, tags=["reports"])
async def update_visit_record(
    context: CurrentContext,
    manager: VisitRecordManagerDep,
    record_id: Annotated[int, Form(alias="recordId")],
    diagnosis: Annotated[str | None, Form()] = None,
    symptoms: Annotated[str | None, Form()] = None,
    bp: Annotated[str | None, Form()] = None,
    weight: Annotated[str | None, Form()] = None,
    temperature: Annotated[str | None, Form()] = None,
    spo2: Annotated[str | None, Form()] = None,
    heart_rate: Annotated[str | None, Form(alias="heartRate")] = None,
    doctor_notes: Annotated[str | None, Form(alias="doctorNotes")] = None,
    patient_advice: Annotated[str | None, Form(alias="patientAdvice")] = None,
    prescription: Annotated[str | None, Form()] = None,
    deleted_lab_reports: Annotated[list[str] | None, Form(alias="deletedLabReports")] = None,
    clear_fields: Annotated[list[str] | None, Form(alias="clearFields")] = None,
    lab_reports: Annotated[list[UploadFile] | None, File(alias="labReports")] = None,
):
    """
    Revise a record. Omitted fields keep their stored values.

    Lab reports become (existing minus deletedLabReports) plus the new files.
    clearFields lists optional text fields to set to empty.
    """
    cleared = _parse_cleared_fields(clear_fields)
    vitals_given = any(value is not None for value in (bp, weight, temperature, spo2, heart_rate))
    clinical = ClinicalData(
        diagnosis=diagnosis,
        symptoms=_unless_cleared(symptoms, "symptoms" in cleared),
        vital_signs=_vital_signs(bp, weight, temperature, spo2, heart_rate) if vitals_given else None,
        prescription=_parse_prescription(prescription) if prescription is not None else None,
        doctor_notes=_unless_cleared(doctor_notes, "doctorNotes" in cleared),
        patient_advice=_unless_cleared(patient_advice, "patientAdvice" in cleared),
    )
    attachments = await _read_attachments(lab_reports)
    removed_urls = _parse_string_list(deleted_lab_reports, "deletedLabReports")

    record = await manager.update_record(record_id, clinical, attachments, removed_urls, context)
    return VisitRecordResponse.from_entity(record)


@router.get("/reports", response_model=list[VisitRecordResponse], tags=["reports"])
async def list_visit_records(
    context: CurrentContext,
    manager: VisitRecordManagerDep,
    patient_id: Annotated[int | None, Query(alias="patientId")] = None,
    practitioner_id: Annotated[int | None, Query(alias="practitionerId")] = None,
):
    """Visit records of a patient or a practitioner, newest first."""
    records = await manager.list_records(context, patient_id=patient_id, practitioner_id=practitioner_id)
    return [VisitRecordResponse.from_entity(record) for record in records]


@router.get("/reports/{appointment_id}", response_model=VisitRecordResponse, tags=["reports"])
async def get_visit_record(appointment_id: int, context: CurrentContext, manager: VisitRecordManagerDep):
    record = await manager.get_record(appointment_id, context)
    return VisitRecordResponse.from_entity(record)


# ============================================================================
# Form parsing helpers
# ============================================================================


def _vital_signs(
    bp: str | None,
    weight: str | None,
    temperature: str | None,
    spo2: str | None,
    heart_rate: str | None,
) -> VitalSigns:
    return VitalSigns(bp=bp, weight=weight, temperature=temperature, spo2=spo2, heart_rate=heart_rate)


def _parse_prescription(raw: str | None) -> list[PrescriptionLine]:
    """Decode the JSON-encoded prescription array (camelCase or snake_case keys)."""
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationException("prescription must be a JSON array", field="prescription") from e
    if not isinstance(items, list):
        raise ValidationException("prescription must be a JSON array", field="prescription")

    lines = []
    for item in items:
        try:
            schema = PrescriptionLineSchema.model_validate(item)
        except PydanticValidationError as e:
            raise ValidationException(f"Invalid prescription entry: {item!r}", field="prescription") from e
        lines.append(PrescriptionLine(**schema.model_dump()))
    return lines


def _parse_string_list(values: list[str] | None, field: str) -> list[str]:
    """List form fields arrive as repeated fields or as one JSON-encoded array."""
    if not values:
        return []
    if len(values) == 1 and values[0].lstrip().startswith("["):
        try:
            decoded = json.loads(values[0])
        except json.JSONDecodeError as e:
            raise ValidationException(f"{field} must be a JSON array", field=field) from e
        if not isinstance(decoded, list):
            raise ValidationException(f"{field} must be a JSON array", field=field)
        return [str(value) for value in decoded if value]
    return [value for value in values if value]


def _parse_cleared_fields(values: list[str] | None) -> set[str]:
    cleared = set(_parse_string_list(values, "clearFields"))
    unknown = cleared - CLEARABLE_FIELDS
    if unknown:
        raise ValidationException(
            f"Cannot clear {', '.join(sorted(unknown))}",
            field="clearFields",
            details={"clearable": sorted(CLEARABLE_FIELDS)},
        )
    return cleared


def _unless_cleared(value: str | None, cleared: bool) -> str | None:
    """An empty form string arrives as None; a cleared field is revised to ''."""
    if cleared and value is None:
        return ""
    return value


async def _read_attachments(files: list[UploadFile] | None) -> list[NewAttachment]:
    attachments = []
    for upload in files or []:
        content = await upload.read()
        attachments.append(
            NewAttachment(filename=upload.filename or "", content=content, content_type=upload.content_type)
        )
    return attachments
