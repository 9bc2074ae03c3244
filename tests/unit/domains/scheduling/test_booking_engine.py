# ============================================================================
# Tests for BookingEngine
# ============================================================================
"""Unit tests for booking, just-in-time patient accounts and claim races."""

import asyncio
import threading
from datetime import time

import bcrypt
import pytest

from app.core.domain import (
    AuthorizationException,
    EntityNotFoundException,
    SlotUnavailableException,
    ValidationException,
)
from app.domains.scheduling.application.dto import PatientIdentity, RequestContext, Role
from app.domains.scheduling.application.services import BookingEngine
from app.domains.scheduling.domain import (
    AppointmentBooked,
    AppointmentStatus,
    PatientAccountCreated,
    PatientContact,
)
from app.domains.scheduling.infrastructure.security import BcryptPasswordHasher


@pytest.mark.use_case
class TestBookExistingPatient:
    @pytest.mark.asyncio
    async def test_patient_books_for_self(self, harness, patient_context):
        # Arrange
        harness.add_patient()
        slot = harness.add_slot()

        # Act
        result = await harness.booking_engine.book(slot.id, None, "Back pain", "", patient_context)

        # Assert
        appointment = result.appointment
        assert appointment.status == AppointmentStatus.SCHEDULED
        assert appointment.patient_id == 100
        assert appointment.practitioner_id == 7
        assert appointment.time_range == "09:00 - 09:30"
        assert result.new_account_created is False
        assert result.generated_password is None
        assert harness.committed_slot(slot.id).claimed is True
        assert harness.committed_appointment(appointment.id) is not None

    @pytest.mark.asyncio
    async def test_patient_cannot_book_for_someone_else(self, harness, patient_context):
        harness.add_patient()
        slot = harness.add_slot()

        with pytest.raises(AuthorizationException):
            await harness.booking_engine.book(slot.id, PatientIdentity.existing(555), "", "", patient_context)

        assert harness.committed_slot(slot.id).claimed is False

    @pytest.mark.asyncio
    async def test_staff_books_by_patient_id(self, harness, practitioner_context):
        harness.add_patient()
        slot = harness.add_slot()

        result = await harness.booking_engine.book(
            slot.id, PatientIdentity.existing(100), "Follow-up", "", practitioner_context
        )

        assert result.patient.id == 100
        assert result.appointment.reason == "Follow-up"

    @pytest.mark.asyncio
    async def test_unknown_patient_id_rolls_back(self, harness, practitioner_context):
        slot = harness.add_slot()

        with pytest.raises(EntityNotFoundException):
            await harness.booking_engine.book(slot.id, PatientIdentity.existing(404), "", "", practitioner_context)

        assert harness.committed_slot(slot.id).claimed is False
        assert harness.db.rollbacks == 1

    @pytest.mark.asyncio
    async def test_staff_must_identify_the_patient(self, harness, admin_context):
        slot = harness.add_slot()

        with pytest.raises(ValidationException):
            await harness.booking_engine.book(slot.id, None, "", "", admin_context)

    @pytest.mark.asyncio
    async def test_publishes_booked_event_after_commit(self, harness, patient_context):
        harness.add_patient()
        slot = harness.add_slot()

        result = await harness.booking_engine.book(slot.id, None, "Back pain", "", patient_context)

        booked = harness.events.of_type(AppointmentBooked)
        assert len(booked) == 1
        assert booked[0].appointment_id == result.appointment.id
        assert booked[0].patient_email == "jane.doe@example.com"
        assert harness.events.of_type(PatientAccountCreated) == []


@pytest.mark.use_case
class TestJustInTimeAccount:
    @pytest.mark.asyncio
    async def test_creates_account_for_unknown_email(self, harness, admin_context, sample_contact):
        # Arrange
        slot = harness.add_slot()

        # Act
        result = await harness.booking_engine.book(
            slot.id, PatientIdentity.from_contact(sample_contact), "Fever", "High temperature", admin_context
        )

        # Assert
        assert result.new_account_created is True
        assert result.generated_password.startswith("Pass")
        stored = harness.patients_by_id(result.patient.id)
        assert stored.email == "john.smith@example.com"
        assert stored.password_hash == f"hashed:{result.generated_password}"
        assert result.appointment.patient_id == result.patient.id

    @pytest.mark.asyncio
    async def test_account_event_precedes_booking_event(self, harness, admin_context, sample_contact):
        slot = harness.add_slot()

        result = await harness.booking_engine.book(
            slot.id, PatientIdentity.from_contact(sample_contact), "", "", admin_context
        )

        assert [type(e) for e in harness.events.events] == [PatientAccountCreated, AppointmentBooked]
        created = harness.events.events[0]
        assert created.generated_password == result.generated_password
        assert harness.events.events[1].new_account_created is True

    @pytest.mark.asyncio
    async def test_reuses_account_with_same_email(self, harness, admin_context):
        # Arrange
        harness.add_patient(email="jane.doe@example.com")
        slot = harness.add_slot()
        contact = PatientContact(first_name="Janet", last_name="Doe", email="JANE.DOE@example.com", phone="555-0111")

        # Act
        result = await harness.booking_engine.book(
            slot.id, PatientIdentity.from_contact(contact), "", "", admin_context
        )

        # Assert
        assert result.new_account_created is False
        assert result.patient.id == 100
        stored = harness.patients_by_id(100)
        assert stored.first_name == "Janet"
        assert stored.phone == "555-0111"
        assert len(harness.db.committed["patients"]) == 1

    @pytest.mark.asyncio
    async def test_email_registered_concurrently_uses_that_account(
        self, harness, admin_context, sample_contact, monkeypatch
    ):
        # Arrange: another booking registers the address right after our lookup
        slot = harness.add_slot()
        lookup = harness.patients.find_by_email
        lookups: list[str] = []

        async def racing_lookup(email: str):
            lookups.append(email)
            if len(lookups) == 1:
                harness.add_patient(patient_id=150, email="john.smith@example.com")
                return None
            return await lookup(email)

        monkeypatch.setattr(harness.patients, "find_by_email", racing_lookup)

        # Act
        result = await harness.booking_engine.book(
            slot.id, PatientIdentity.from_contact(sample_contact), "", "", admin_context
        )

        # Assert
        assert result.patient.id == 150
        assert result.new_account_created is False
        assert result.generated_password is None
        assert len(harness.db.committed["patients"]) == 1
        assert harness.patients_by_id(150).first_name == "John"
        assert harness.committed_appointment(result.appointment.id).patient_id == 150
        assert harness.events.of_type(PatientAccountCreated) == []

    @pytest.mark.asyncio
    async def test_password_hashing_does_not_block_other_requests(
        self, harness, admin_context, sample_contact, monkeypatch
    ):
        # Arrange: hashpw only finishes once another task got scheduled
        other_request_ran = threading.Event()
        seen_while_hashing: list[bool] = []
        real_hashpw = bcrypt.hashpw

        def waiting_hashpw(password: bytes, salt: bytes) -> bytes:
            seen_while_hashing.append(other_request_ran.wait(timeout=2))
            return real_hashpw(password, salt)

        monkeypatch.setattr(bcrypt, "hashpw", waiting_hashpw)
        engine = BookingEngine(
            slot_store=harness.slot_store,
            patient_repository=harness.patients,
            appointment_repository=harness.appointments,
            unit_of_work=harness.uow,
            password_hasher=BcryptPasswordHasher(rounds=4),
            event_publisher=harness.events,
            locks=harness.locks,
        )
        slot = harness.add_slot()

        async def other_request():
            other_request_ran.set()

        # Act
        result, _ = await asyncio.gather(
            engine.book(slot.id, PatientIdentity.from_contact(sample_contact), "", "", admin_context),
            other_request(),
        )

        # Assert
        assert seen_while_hashing == [True]
        assert result.new_account_created is True
        assert bcrypt.checkpw(
            result.generated_password.encode("utf-8"),
            harness.patients_by_id(result.patient.id).password_hash.encode("utf-8"),
        )

    @pytest.mark.asyncio
    async def test_account_is_not_kept_when_slot_is_taken(self, harness, admin_context, sample_contact):
        # Arrange
        slot = harness.add_slot(claimed=True)

        # Act & Assert
        with pytest.raises(SlotUnavailableException):
            await harness.booking_engine.book(
                slot.id, PatientIdentity.from_contact(sample_contact), "", "", admin_context
            )

        assert harness.db.committed["patients"] == {}
        assert harness.events.events == []

    @pytest.mark.asyncio
    async def test_custom_password_prefix(self, harness, admin_context, sample_contact):
        harness.booking_engine._password_prefix = "Clinic"
        slot = harness.add_slot()

        result = await harness.booking_engine.book(
            slot.id, PatientIdentity.from_contact(sample_contact), "", "", admin_context
        )

        assert result.generated_password.startswith("Clinic")
        assert len(result.generated_password) == len("Clinic") + 8


@pytest.mark.use_case
class TestSlotAvailability:
    @pytest.mark.asyncio
    async def test_claimed_slot_is_unavailable(self, harness, patient_context):
        harness.add_patient()
        slot = harness.add_slot(claimed=True)

        with pytest.raises(SlotUnavailableException) as exc_info:
            await harness.booking_engine.book(slot.id, None, "", "", patient_context)

        assert exc_info.value.code == "SLOT_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_missing_slot_is_unavailable(self, harness, patient_context):
        harness.add_patient()

        with pytest.raises(SlotUnavailableException):
            await harness.booking_engine.book(999, None, "", "", patient_context)

    @pytest.mark.asyncio
    async def test_concurrent_bookings_have_one_winner(self, harness, admin_context):
        # Arrange
        slot = harness.add_slot()
        for patient_id in range(200, 210):
            harness.add_patient(patient_id=patient_id, email=f"p{patient_id}@example.com")

        async def attempt(patient_id: int):
            return await harness.booking_engine.book(
                slot.id, PatientIdentity.existing(patient_id), "", "", admin_context
            )

        # Act
        outcomes = await asyncio.gather(*(attempt(pid) for pid in range(200, 210)), return_exceptions=True)

        # Assert
        winners = [o for o in outcomes if not isinstance(o, Exception)]
        losers = [o for o in outcomes if isinstance(o, Exception)]
        assert len(winners) == 1
        assert all(isinstance(o, SlotUnavailableException) for o in losers)
        appointments = list(harness.db.committed["appointments"].values())
        assert len(appointments) == 1
        assert appointments[0].patient_id == winners[0].patient.id
        assert harness.committed_slot(slot.id).claimed is True

    @pytest.mark.asyncio
    async def test_concurrent_patients_on_different_slots_all_succeed(self, harness):
        # Arrange
        slots = [harness.add_slot(start=time(9 + i, 0), end=time(9 + i, 30)) for i in range(3)]
        contexts = []
        for i in range(3):
            harness.add_patient(patient_id=300 + i, email=f"q{i}@example.com")
            contexts.append(RequestContext(user_id=300 + i, role=Role.PATIENT))

        # Act
        results = await asyncio.gather(
            *(harness.booking_engine.book(s.id, None, "", "", c) for s, c in zip(slots, contexts))
        )

        # Assert
        assert {r.appointment.slot_id for r in results} == {s.id for s in slots}
        assert all(harness.committed_slot(s.id).claimed for s in slots)
