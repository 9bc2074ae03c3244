"""
Patient Repository Implementation

SQLAlchemy implementation of IPatientRepository.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.scheduling.application.ports.patient_repository import IPatientRepository
from app.domains.scheduling.domain.entities.patient import Patient
from app.domains.scheduling.infrastructure.persistence.sqlalchemy.models import PatientModel

logger = logging.getLogger(__name__)


class SQLAlchemyPatientRepository(IPatientRepository):
    """SQLAlchemy implementation of patient repository."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_id(self, patient_id: int) -> Patient | None:
        """Find patient by ID."""
        result = await self.session.execute(select(PatientModel).where(PatientModel.id == patient_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_by_email(self, email: str) -> Patient | None:
        """Find patient by e-mail (case-insensitive)."""
        result = await self.session.execute(
            select(PatientModel).where(func.lower(PatientModel.email) == email.lower())
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def add_unless_email_taken(self, patient: Patient) -> Patient | None:
        """
        Insert patient inside a savepoint and assign its ID.

        Returns None when the unique e-mail index rejects the row, which
        happens when a concurrent transaction registered the same address.
        The outer transaction stays usable.
        """
        model = PatientModel(
            first_name=patient.first_name,
            last_name=patient.last_name,
            email=patient.email,
            phone=patient.phone,
            password_hash=patient.password_hash,
            created_at=patient.created_at,
            updated_at=patient.updated_at,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(model)
                await self.session.flush()
        except IntegrityError as e:
            logger.info(f"Patient e-mail {patient.email} registered concurrently: {e.orig}")
            return None
        patient.id = model.id  # type: ignore[assignment]
        return patient

    async def update(self, patient: Patient) -> Patient:
        """Persist contact details of an existing patient."""
        result = await self.session.execute(select(PatientModel).where(PatientModel.id == patient.id))
        model = result.scalar_one_or_none()
        if model is None:
            raise ValueError(f"Patient {patient.id} not found")

        model.first_name = patient.first_name  # type: ignore[assignment]
        model.last_name = patient.last_name  # type: ignore[assignment]
        model.phone = patient.phone  # type: ignore[assignment]
        model.updated_at = patient.updated_at  # type: ignore[assignment]
        await self.session.flush()
        return patient

    def _to_entity(self, model: PatientModel) -> Patient:
        """Convert model to entity."""
        return Patient(
            id=model.id,  # type: ignore[arg-type]
            first_name=model.first_name or "",  # type: ignore[arg-type]
            last_name=model.last_name or "",  # type: ignore[arg-type]
            email=model.email or "",  # type: ignore[arg-type]
            phone=model.phone or "",  # type: ignore[arg-type]
            password_hash=model.password_hash or "",  # type: ignore[arg-type]
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )
