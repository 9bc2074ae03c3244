"""
Visit Record Repository Implementation

SQLAlchemy implementation of IVisitRecordRepository.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import InvalidTransitionException
from app.domains.scheduling.application.ports.visit_record_repository import IVisitRecordRepository
from app.domains.scheduling.domain.entities.visit_record import VisitRecord
from app.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus
from app.domains.scheduling.domain.value_objects.clinical import LabReport, PrescriptionLine, VitalSigns
from app.domains.scheduling.infrastructure.persistence.sqlalchemy.models import VisitRecordModel

logger = logging.getLogger(__name__)


class SQLAlchemyVisitRecordRepository(IVisitRecordRepository):
    """
    SQLAlchemy implementation of visit record repository.

    Prescription and lab reports are stored as ordered JSON arrays.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, record_id: int) -> VisitRecord | None:
        """Find record by ID."""
        model = await self._get_model(record_id)
        return self._to_entity(model) if model else None

    async def find_by_appointment(self, appointment_id: int) -> VisitRecord | None:
        """Find the record of an appointment."""
        result = await self.session.execute(
            select(VisitRecordModel).where(VisitRecordModel.appointment_id == appointment_id)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_patient(self, patient_id: int) -> list[VisitRecord]:
        """Find records of a patient, newest first."""
        return await self._find_newest_first(VisitRecordModel.patient_id == patient_id)

    async def find_by_practitioner(self, practitioner_id: int) -> list[VisitRecord]:
        """Find records written by a practitioner, newest first."""
        return await self._find_newest_first(VisitRecordModel.practitioner_id == practitioner_id)

    async def add(self, record: VisitRecord) -> VisitRecord:
        """Insert record; a unique-appointment violation means it was completed concurrently."""
        model = VisitRecordModel(
            appointment_id=record.appointment_id,
            practitioner_id=record.practitioner_id,
            patient_id=record.patient_id,
            created_at=record.created_at,
        )
        self._update_model(model, record)
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning(f"Visit record insert rejected by constraint: {e.orig}")
            raise InvalidTransitionException(
                record.appointment_id, AppointmentStatus.COMPLETED.value, AppointmentStatus.COMPLETED.value
            ) from e
        record.id = model.id  # type: ignore[assignment]
        return record

    async def update(self, record: VisitRecord) -> VisitRecord:
        """Persist clinical content and lab reports."""
        model = await self._get_model(record.id)  # type: ignore[arg-type]
        if model is None:
            raise ValueError(f"VisitRecord {record.id} not found")

        self._update_model(model, record)
        await self.session.flush()
        return record

    async def _find_newest_first(self, condition) -> list[VisitRecord]:
        query = (
            select(VisitRecordModel)
            .where(condition)
            .order_by(VisitRecordModel.created_at.desc(), VisitRecordModel.id.desc())
        )
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def _get_model(self, record_id: int) -> VisitRecordModel | None:
        result = await self.session.execute(select(VisitRecordModel).where(VisitRecordModel.id == record_id))
        return result.scalar_one_or_none()

    def _to_entity(self, model: VisitRecordModel) -> VisitRecord:
        """Convert model to entity."""
        details = model.patient_details or {}
        return VisitRecord(
            id=model.id,  # type: ignore[arg-type]
            appointment_id=model.appointment_id,  # type: ignore[arg-type]
            practitioner_id=model.practitioner_id,  # type: ignore[arg-type]
            patient_id=model.patient_id,  # type: ignore[arg-type]
            patient_name=details.get("name", ""),
            patient_email=details.get("email", ""),
            patient_phone=details.get("phone", ""),
            diagnosis=model.diagnosis or "",  # type: ignore[arg-type]
            symptoms=model.symptoms or "",  # type: ignore[arg-type]
            vital_signs=VitalSigns.from_dict(model.vital_signs),  # type: ignore[arg-type]
            prescription=[PrescriptionLine.from_dict(item) for item in model.prescription or []],
            doctor_notes=model.doctor_notes or "",  # type: ignore[arg-type]
            patient_advice=model.patient_advice or "",  # type: ignore[arg-type]
            lab_reports=[LabReport.from_dict(item) for item in model.lab_reports or []],
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )

    def _update_model(self, model: VisitRecordModel, entity: VisitRecord) -> None:
        """Copy entity content onto the model."""
        model.patient_details = {  # type: ignore[assignment]
            "name": entity.patient_name,
            "email": entity.patient_email,
            "phone": entity.patient_phone,
        }
        model.diagnosis = entity.diagnosis  # type: ignore[assignment]
        model.symptoms = entity.symptoms  # type: ignore[assignment]
        model.vital_signs = entity.vital_signs.to_dict()  # type: ignore[assignment]
        model.prescription = [line.to_dict() for line in entity.prescription]  # type: ignore[assignment]
        model.doctor_notes = entity.doctor_notes  # type: ignore[assignment]
        model.patient_advice = entity.patient_advice  # type: ignore[assignment]
        model.lab_reports = [report.to_dict() for report in entity.lab_reports]  # type: ignore[assignment]
        model.updated_at = entity.updated_at  # type: ignore[assignment]
