"""
Patient Entity

Minimal patient account used to attach appointments to a person.
Account provisioning beyond just-in-time creation lives elsewhere.
"""

from dataclasses import dataclass

from app.core.domain import Entity

from ..value_objects.patient_contact import PatientContact


@dataclass
class Patient(Entity[int]):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    password_hash: str = ""

    @classmethod
    def register(cls, contact: PatientContact, password_hash: str) -> "Patient":
        """Create a new account from booking contact details."""
        return cls(
            first_name=contact.first_name,
            last_name=contact.last_name,
            email=contact.email,
            phone=contact.phone,
            password_hash=password_hash,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def contact(self) -> PatientContact:
        return PatientContact(
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            phone=self.phone,
        )

    def update_contact(self, contact: PatientContact) -> bool:
        """
        Refresh name and phone from a booking request.

        Returns:
            True if anything changed
        """
        changed = (
            self.first_name != contact.first_name
            or self.last_name != contact.last_name
            or (bool(contact.phone) and self.phone != contact.phone)
        )
        if not changed:
            return False

        self.first_name = contact.first_name
        self.last_name = contact.last_name
        if contact.phone:
            self.phone = contact.phone
        self.touch()
        return True
