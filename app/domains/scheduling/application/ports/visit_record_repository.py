"""
Visit Record Repository Port
"""

from typing import Protocol, runtime_checkable

from app.domains.scheduling.domain.entities.visit_record import VisitRecord


@runtime_checkable
class IVisitRecordRepository(Protocol):
    """Visit record repository interface."""

    async def find_by_id(self, record_id: int) -> VisitRecord | None:
        """Find record by ID."""
        ...

    async def find_by_appointment(self, appointment_id: int) -> VisitRecord | None:
        """
        Find the record of an appointment.

        Args:
            appointment_id: Owning appointment

        Returns:
            VisitRecord if one exists, None otherwise
        """
        ...

    async def find_by_patient(self, patient_id: int) -> list[VisitRecord]:
        """Records of a patient, newest first."""
        ...

    async def find_by_practitioner(self, practitioner_id: int) -> list[VisitRecord]:
        """Records written by a practitioner, newest first."""
        ...

    async def add(self, record: VisitRecord) -> VisitRecord:
        """Insert a new record and return it with its ID assigned."""
        ...

    async def update(self, record: VisitRecord) -> VisitRecord:
        """Persist the clinical content and lab reports of a record."""
        ...
