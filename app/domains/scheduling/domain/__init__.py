"""
Scheduling Domain Layer

Core business logic for consultation scheduling, following Domain-Driven
Design (DDD) principles.

Components:
- Entities: TimeSlot, Patient, Appointment (aggregate root), VisitRecord
- Value Objects: AppointmentStatus, TimeWindow, PatientContact, VitalSigns,
  PrescriptionLine, LabReport, ClinicalData
- Events: AppointmentBooked, AppointmentConfirmed, AppointmentCancelled,
  AppointmentCompleted, PatientAccountCreated
"""

from app.domains.scheduling.domain.entities import (
    Appointment,
    Patient,
    TimeSlot,
    VisitRecord,
)
from app.domains.scheduling.domain.events import (
    AppointmentBooked,
    AppointmentCancelled,
    AppointmentCompleted,
    AppointmentConfirmed,
    AppointmentEvent,
    PatientAccountCreated,
)
from app.domains.scheduling.domain.value_objects import (
    AppointmentStatus,
    ClinicalData,
    LabReport,
    PatientContact,
    PrescriptionLine,
    TimeWindow,
    VitalSigns,
    filter_prescription,
)

__all__ = [
    # Entities
    "Appointment",
    "Patient",
    "TimeSlot",
    "VisitRecord",
    # Events
    "AppointmentEvent",
    "AppointmentBooked",
    "AppointmentConfirmed",
    "AppointmentCancelled",
    "AppointmentCompleted",
    "PatientAccountCreated",
    # Value Objects
    "AppointmentStatus",
    "ClinicalData",
    "LabReport",
    "PatientContact",
    "PrescriptionLine",
    "TimeWindow",
    "VitalSigns",
    "filter_prescription",
]
