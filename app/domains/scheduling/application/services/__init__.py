"""
Scheduling Application Services
"""

from app.domains.scheduling.application.services.appointment_lifecycle import AppointmentLifecycle
from app.domains.scheduling.application.services.booking_engine import BookingEngine
from app.domains.scheduling.application.services.slot_store import SlotSequence, SlotStore
from app.domains.scheduling.application.services.visit_record_manager import VisitRecordManager

__all__ = [
    "AppointmentLifecycle",
    "BookingEngine",
    "SlotSequence",
    "SlotStore",
    "VisitRecordManager",
]
