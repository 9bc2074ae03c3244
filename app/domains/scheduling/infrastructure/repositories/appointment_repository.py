"""
Appointment Repository Implementation

SQLAlchemy implementation of IAppointmentRepository.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.scheduling.application.ports.appointment_repository import IAppointmentRepository
from app.domains.scheduling.domain.entities.appointment import Appointment
from app.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus
from app.domains.scheduling.domain.value_objects.patient_contact import PatientContact
from app.domains.scheduling.infrastructure.persistence.sqlalchemy.models import AppointmentModel

logger = logging.getLogger(__name__)


class SQLAlchemyAppointmentRepository(IAppointmentRepository):
    """
    SQLAlchemy implementation of appointment repository.

    Handles all appointment data persistence operations.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        """Find appointment by ID."""
        result = await self.session.execute(select(AppointmentModel).where(AppointmentModel.id == appointment_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_practitioner(
        self,
        practitioner_id: int,
        status: AppointmentStatus | None = None,
    ) -> list[Appointment]:
        """Find appointments of a practitioner."""
        query = select(AppointmentModel).where(AppointmentModel.practitioner_id == practitioner_id)
        if status is not None:
            query = query.where(AppointmentModel.status == status)
        query = query.order_by(AppointmentModel.date, AppointmentModel.start_time)

        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def find_by_patient(
        self,
        patient_id: int,
        status: AppointmentStatus | None = None,
    ) -> list[Appointment]:
        """Find appointments of a patient."""
        query = select(AppointmentModel).where(AppointmentModel.patient_id == patient_id)
        if status is not None:
            query = query.where(AppointmentModel.status == status)
        query = query.order_by(AppointmentModel.date, AppointmentModel.start_time)

        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def add(self, appointment: Appointment) -> Appointment:
        """Insert appointment and assign its ID."""
        model = self._to_model(appointment)
        self.session.add(model)
        await self.session.flush()
        appointment.id = model.id  # type: ignore[assignment]
        return appointment

    async def update_status(self, appointment: Appointment, expected_status: AppointmentStatus) -> bool:
        """UPDATE appointments SET status = :new WHERE id = :id AND status = :expected."""
        result = await self.session.execute(
            update(AppointmentModel)
            .where(
                AppointmentModel.id == appointment.id,
                AppointmentModel.status == expected_status,
            )
            .values(
                status=appointment.status,
                cancellation_reason=appointment.cancellation_reason,
                updated_at=appointment.updated_at,
            )
        )
        updated = result.rowcount == 1
        if not updated:
            logger.warning(
                f"Status update of appointment {appointment.id} skipped: "
                f"stored status is no longer {expected_status.value}"
            )
        return updated

    def _to_entity(self, model: AppointmentModel) -> Appointment:
        """Convert model to entity."""
        details = model.patient_details or None
        return Appointment(
            id=model.id,  # type: ignore[arg-type]
            slot_id=model.slot_id,  # type: ignore[arg-type]
            practitioner_id=model.practitioner_id,  # type: ignore[arg-type]
            patient_id=model.patient_id,  # type: ignore[arg-type]
            appointment_date=model.date,  # type: ignore[arg-type]
            start_time=model.start_time,  # type: ignore[arg-type]
            end_time=model.end_time,  # type: ignore[arg-type]
            time_range=model.time_range or "",  # type: ignore[arg-type]
            reason=model.reason or "",  # type: ignore[arg-type]
            symptoms=model.symptoms or "",  # type: ignore[arg-type]
            patient_contact=PatientContact.from_dict(details) if details else None,  # type: ignore[arg-type]
            status=model.status or AppointmentStatus.SCHEDULED,  # type: ignore[arg-type]
            cancellation_reason=model.cancellation_reason,  # type: ignore[arg-type]
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )

    def _to_model(self, entity: Appointment) -> AppointmentModel:
        """Convert entity to model."""
        return AppointmentModel(
            slot_id=entity.slot_id,
            practitioner_id=entity.practitioner_id,
            patient_id=entity.patient_id,
            date=entity.appointment_date,
            start_time=entity.start_time,
            end_time=entity.end_time,
            time_range=entity.time_range,
            reason=entity.reason,
            symptoms=entity.symptoms,
            patient_details=entity.patient_contact.to_dict() if entity.patient_contact else None,
            status=entity.status,
            cancellation_reason=entity.cancellation_reason,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
