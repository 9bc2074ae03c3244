"""
Patient Repository Port
"""

from typing import Protocol, runtime_checkable

from app.domains.scheduling.domain.entities.patient import Patient


@runtime_checkable
class IPatientRepository(Protocol):
    """Patient repository interface."""

    async def find_by_id(self, patient_id: int) -> Patient | None:
        """Find patient by ID."""
        ...

    async def find_by_email(self, email: str) -> Patient | None:
        """
        Find patient by e-mail address.

        Args:
            email: Normalized (lower-case) address

        Returns:
            Patient if found, None otherwise
        """
        ...

    async def add_unless_email_taken(self, patient: Patient) -> Patient | None:
        """
        Insert a new patient and return it with its ID assigned.

        Returns None, leaving the transaction usable, if another patient
        already holds the e-mail address.
        """
        ...

    async def update(self, patient: Patient) -> Patient:
        """Persist contact changes of an existing patient."""
        ...
