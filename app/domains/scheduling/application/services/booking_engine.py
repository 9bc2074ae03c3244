"""
Booking Engine

Claims a slot and creates its appointment as one unit, resolving the
patient (existing account or just-in-time registration) on the way.
"""

import logging
import secrets

from app.core.domain import (
    AuthorizationException,
    DomainEvent,
    EntityNotFoundException,
    SlotUnavailableException,
    ValidationException,
)
from app.domains.scheduling.application.dto import BookingResult, PatientIdentity, RequestContext
from app.domains.scheduling.application.ports import (
    IAppointmentRepository,
    IEventPublisher,
    ILockRegistry,
    IPasswordHasher,
    IPatientRepository,
    IUnitOfWork,
)
from app.domains.scheduling.domain.entities import Appointment, Patient
from app.domains.scheduling.domain.events import PatientAccountCreated
from app.domains.scheduling.domain.value_objects import PatientContact

from .slot_store import SlotStore

logger = logging.getLogger(__name__)


class BookingEngine:
    """
    Books appointments on time slots.

    Patient resolution, the slot claim and the appointment insert share one
    transaction: either all of them commit or none does. Concurrent bookings
    of the same slot in this process are serialized on a per-slot lock; across
    processes the conditional claim update decides the winner. Losers fail
    immediately with SlotUnavailableException.

    Example:
        ```python
        result = await engine.book(
            slot_id=12,
            identity=PatientIdentity.from_contact(contact),
            reason="Back pain",
            symptoms="",
            context=context,
        )
        result.generated_password  # set when an account was created
        ```
    """

    def __init__(
        self,
        slot_store: SlotStore,
        patient_repository: IPatientRepository,
        appointment_repository: IAppointmentRepository,
        unit_of_work: IUnitOfWork,
        password_hasher: IPasswordHasher,
        event_publisher: IEventPublisher,
        locks: ILockRegistry,
        password_prefix: str = "Pass",
    ):
        self._slot_store = slot_store
        self._patients = patient_repository
        self._appointments = appointment_repository
        self._uow = unit_of_work
        self._hasher = password_hasher
        self._events = event_publisher
        self._locks = locks
        self._password_prefix = password_prefix

    async def book(
        self,
        slot_id: int,
        identity: PatientIdentity | None,
        reason: str,
        symptoms: str,
        context: RequestContext,
    ) -> BookingResult:
        """
        Book a slot.

        Args:
            slot_id: Slot to claim
            identity: Existing patient id or contact details; patients may omit it
            reason: Reason for the consultation
            symptoms: Free-text symptoms
            context: Caller identity

        Returns:
            BookingResult with the Scheduled appointment

        Raises:
            SlotUnavailableException: If the slot is claimed or does not exist
            EntityNotFoundException: If an unknown patient id is given
            AuthorizationException: If a patient books for someone else
        """
        identity = self._effective_identity(identity, context)

        async with self._locks.hold(("slot", slot_id)):
            try:
                patient, generated_password = await self._resolve_patient(identity)

                if not await self._slot_store.claim(slot_id):
                    raise SlotUnavailableException(slot_id)

                slot = await self._slot_store.get_slot(slot_id)
                appointment = await self._appointments.add(Appointment.book(slot, patient, reason, symptoms))
                appointment.record_booking(new_account_created=generated_password is not None)

                await self._uow.commit()
            except Exception:
                await self._uow.rollback()
                raise

        logger.info(
            f"Booked appointment {appointment.id} on slot {slot_id} "
            f"for patient {patient.id} (new_account={generated_password is not None})"
        )

        events: list[DomainEvent] = []
        if generated_password is not None:
            events.append(
                PatientAccountCreated(
                    patient_id=patient.id or 0,
                    patient_name=patient.full_name,
                    email=patient.email,
                    generated_password=generated_password,
                )
            )
        events.extend(appointment.pull_domain_events())
        await self._events.publish_all(events)

        return BookingResult(
            appointment=appointment,
            patient=patient,
            new_account_created=generated_password is not None,
            generated_password=generated_password,
        )

    def _effective_identity(self, identity: PatientIdentity | None, context: RequestContext) -> PatientIdentity:
        # Patients always book for their own account
        if context.is_patient:
            if identity is not None and identity.patient_id not in (None, context.user_id):
                raise AuthorizationException("book_appointment", f"patient:{identity.patient_id}", str(context.user_id))
            return PatientIdentity.existing(context.user_id)

        if identity is None or (identity.patient_id is None and identity.contact is None):
            raise ValidationException("Patient id or patient details are required", field="patient")
        return identity

    async def _resolve_patient(self, identity: PatientIdentity) -> tuple[Patient, str | None]:
        """
        Find or create the patient.

        Returns:
            The patient and, for a just-created account, its clear-text password
        """
        if identity.patient_id is not None:
            patient = await self._patients.find_by_id(identity.patient_id)
            if patient is None:
                raise EntityNotFoundException("Patient", identity.patient_id)
            return patient, None

        contact = identity.contact
        assert contact is not None

        existing = await self._patients.find_by_email(contact.email)
        if existing is not None:
            return await self._refresh_contact(existing, contact), None

        password = self._generate_password()
        password_hash = await self._hasher.hash(password)
        created = await self._patients.add_unless_email_taken(Patient.register(contact, password_hash))
        if created is None:
            # Registered by a concurrent booking since the lookup above
            existing = await self._patients.find_by_email(contact.email)
            if existing is None:
                raise EntityNotFoundException("Patient", contact.email)
            return await self._refresh_contact(existing, contact), None

        logger.info(f"Created patient account {created.id} during booking")
        return created, password

    async def _refresh_contact(self, patient: Patient, contact: PatientContact) -> Patient:
        if patient.update_contact(contact):
            patient = await self._patients.update(patient)
        return patient

    def _generate_password(self) -> str:
        return f"{self._password_prefix}{secrets.token_hex(4)}"
