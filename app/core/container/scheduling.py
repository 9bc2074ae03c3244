# ============================================================================
# SCOPE: DOMAIN
# Description: Container for the scheduling domain. Builds repositories and
#              application services around a request-scoped session.
# ============================================================================
"""
Scheduling Domain Container.

Single Responsibility: Wire scheduling dependencies.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.container.base import BaseContainer
from app.domains.scheduling.application.services import (
    AppointmentLifecycle,
    BookingEngine,
    SlotStore,
    VisitRecordManager,
)
from app.domains.scheduling.infrastructure.repositories import (
    SQLAlchemyAppointmentRepository,
    SQLAlchemyPatientRepository,
    SQLAlchemySlotRepository,
    SQLAlchemyUnitOfWork,
    SQLAlchemyVisitRecordRepository,
)

logger = logging.getLogger(__name__)


class SchedulingContainer:
    """
    Container for scheduling domain dependencies.

    Every create_* method takes the request's session; services built from
    the same session share one transaction.
    """

    def __init__(self, base: BaseContainer):
        self._base = base

    # ==================== REPOSITORIES ====================

    def create_slot_repository(self, db: AsyncSession) -> SQLAlchemySlotRepository:
        return SQLAlchemySlotRepository(db)

    def create_appointment_repository(self, db: AsyncSession) -> SQLAlchemyAppointmentRepository:
        return SQLAlchemyAppointmentRepository(db)

    def create_patient_repository(self, db: AsyncSession) -> SQLAlchemyPatientRepository:
        return SQLAlchemyPatientRepository(db)

    def create_visit_record_repository(self, db: AsyncSession) -> SQLAlchemyVisitRecordRepository:
        return SQLAlchemyVisitRecordRepository(db)

    def create_unit_of_work(self, db: AsyncSession) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(db)

    # ==================== SERVICES ====================

    def create_slot_store(self, db: AsyncSession) -> SlotStore:
        return SlotStore(
            slot_repository=self.create_slot_repository(db),
            unit_of_work=self.create_unit_of_work(db),
            locks=self._base.get_lock_registry(),
        )

    def create_booking_engine(self, db: AsyncSession) -> BookingEngine:
        return BookingEngine(
            slot_store=self.create_slot_store(db),
            patient_repository=self.create_patient_repository(db),
            appointment_repository=self.create_appointment_repository(db),
            unit_of_work=self.create_unit_of_work(db),
            password_hasher=self._base.get_password_hasher(),
            event_publisher=self._base.get_event_publisher(),
            locks=self._base.get_lock_registry(),
            password_prefix=self._base.settings.BOOKING_PASSWORD_PREFIX,
        )

    def create_appointment_lifecycle(self, db: AsyncSession) -> AppointmentLifecycle:
        return AppointmentLifecycle(
            appointment_repository=self.create_appointment_repository(db),
            slot_store=self.create_slot_store(db),
            unit_of_work=self.create_unit_of_work(db),
            event_publisher=self._base.get_event_publisher(),
        )

    def create_visit_record_manager(self, db: AsyncSession) -> VisitRecordManager:
        settings = self._base.settings
        return VisitRecordManager(
            appointment_repository=self.create_appointment_repository(db),
            record_repository=self.create_visit_record_repository(db),
            lifecycle=self.create_appointment_lifecycle(db),
            storage=self._base.get_attachment_storage(),
            unit_of_work=self.create_unit_of_work(db),
            event_publisher=self._base.get_event_publisher(),
            max_file_size=settings.MAX_FILE_SIZE,
            allowed_extensions=settings.ALLOWED_EXTENSIONS,
        )
