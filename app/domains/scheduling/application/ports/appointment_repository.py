"""
Appointment Repository Port

Interface for appointment data access following Clean Architecture.
"""

from typing import Protocol, runtime_checkable

from app.domains.scheduling.domain.entities.appointment import Appointment
from app.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus


@runtime_checkable
class IAppointmentRepository(Protocol):
    """
    Appointment repository interface.

    Example:
        ```python
        class SQLAlchemyAppointmentRepository(IAppointmentRepository):
            async def find_by_id(self, appointment_id: int) -> Appointment | None:
                ...
        ```
    """

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        """
        Find appointment by ID.

        Args:
            appointment_id: Unique appointment identifier

        Returns:
            Appointment if found, None otherwise
        """
        ...

    async def find_by_practitioner(
        self,
        practitioner_id: int,
        status: AppointmentStatus | None = None,
    ) -> list[Appointment]:
        """
        Find appointments of a practitioner ordered by date and start time.

        Args:
            practitioner_id: Practitioner ID
            status: Optional status filter
        """
        ...

    async def find_by_patient(
        self,
        patient_id: int,
        status: AppointmentStatus | None = None,
    ) -> list[Appointment]:
        """Find appointments of a patient ordered by date and start time."""
        ...

    async def add(self, appointment: Appointment) -> Appointment:
        """Insert a new appointment and return it with its ID assigned."""
        ...

    async def update_status(self, appointment: Appointment, expected_status: AppointmentStatus) -> bool:
        """
        Persist the appointment's status if the stored status still equals expected_status.

        Returns:
            True if the row was updated, False if another writer moved it first
        """
        ...
