"""
Scheduling Domain Ports

Interfaces (ports) for the scheduling domain following Clean Architecture.
"""

from app.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from app.domains.scheduling.application.ports.patient_repository import IPatientRepository
from app.domains.scheduling.application.ports.services import (
    IAttachmentStorage,
    IEventPublisher,
    ILockRegistry,
    IPasswordHasher,
    IUnitOfWork,
)
from app.domains.scheduling.application.ports.slot_repository import ISlotRepository
from app.domains.scheduling.application.ports.visit_record_repository import IVisitRecordRepository

__all__ = [
    "IAppointmentRepository",
    "IAttachmentStorage",
    "IEventPublisher",
    "ILockRegistry",
    "IPasswordHasher",
    "IPatientRepository",
    "ISlotRepository",
    "IUnitOfWork",
    "IVisitRecordRepository",
]
