"""
Scheduling Domain Value Objects
"""

from app.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus
from app.domains.scheduling.domain.value_objects.clinical import (
    ClinicalData,
    LabReport,
    PrescriptionLine,
    VitalSigns,
    filter_prescription,
)
from app.domains.scheduling.domain.value_objects.patient_contact import PatientContact
from app.domains.scheduling.domain.value_objects.time_window import TimeWindow

__all__ = [
    "AppointmentStatus",
    "ClinicalData",
    "LabReport",
    "PatientContact",
    "PrescriptionLine",
    "TimeWindow",
    "VitalSigns",
    "filter_prescription",
]
