"""
Scheduling Domain Entities

Business entities with identity and lifecycle for the scheduling domain.
"""

from app.domains.scheduling.domain.entities.appointment import Appointment
from app.domains.scheduling.domain.entities.patient import Patient
from app.domains.scheduling.domain.entities.time_slot import TimeSlot
from app.domains.scheduling.domain.entities.visit_record import VisitRecord

__all__ = [
    "Appointment",
    "Patient",
    "TimeSlot",
    "VisitRecord",
]
