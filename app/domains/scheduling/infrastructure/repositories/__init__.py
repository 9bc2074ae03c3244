"""
Scheduling Infrastructure Repositories

Repository implementations for the scheduling domain.
"""

from app.domains.scheduling.infrastructure.repositories.appointment_repository import (
    SQLAlchemyAppointmentRepository,
)
from app.domains.scheduling.infrastructure.repositories.patient_repository import (
    SQLAlchemyPatientRepository,
)
from app.domains.scheduling.infrastructure.repositories.slot_repository import (
    SQLAlchemySlotRepository,
)
from app.domains.scheduling.infrastructure.repositories.unit_of_work import (
    SQLAlchemyUnitOfWork,
)
from app.domains.scheduling.infrastructure.repositories.visit_record_repository import (
    SQLAlchemyVisitRecordRepository,
)

__all__ = [
    "SQLAlchemyAppointmentRepository",
    "SQLAlchemyPatientRepository",
    "SQLAlchemySlotRepository",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyVisitRecordRepository",
]
