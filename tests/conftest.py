"""
Shared pytest fixtures for all tests.

Provides an in-memory transactional store with repository fakes, the
scheduling services wired on top of it, request contexts and sample data.
"""

import asyncio
import copy
import os
import tempfile
from collections.abc import AsyncIterator
from datetime import date, time

import pytest

# Ensure test environment before any app module reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("ATTACHMENTS_DIR", tempfile.mkdtemp(prefix="lab-reports-"))

from app.core.domain import InvalidTransitionException  # noqa: E402
from app.core.domain.events import DomainEvent  # noqa: E402
from app.domains.scheduling.application.dto import RequestContext, Role  # noqa: E402
from app.domains.scheduling.application.services import (  # noqa: E402
    AppointmentLifecycle,
    BookingEngine,
    SlotStore,
    VisitRecordManager,
)
from app.domains.scheduling.domain.entities import Appointment, Patient, TimeSlot, VisitRecord  # noqa: E402
from app.domains.scheduling.domain.value_objects import (  # noqa: E402
    AppointmentStatus,
    LabReport,
    PatientContact,
    TimeWindow,
)
from app.domains.scheduling.infrastructure.locking import KeyedLockRegistry  # noqa: E402

PRACTITIONER_ID = 7
OTHER_PRACTITIONER_ID = 8
PATIENT_ID = 100
ADMIN_ID = 1


# ============================================================================
# IN-MEMORY STORE
# ============================================================================


class InMemoryDatabase:
    """
    Tables of entity copies with commit/rollback.

    Repositories work on ``pending``; commit copies it to ``committed`` and
    rollback restores ``pending`` from it.
    """

    TABLES = ("slots", "appointments", "patients", "records")

    def __init__(self) -> None:
        self.committed: dict[str, dict[int, object]] = {name: {} for name in self.TABLES}
        self.pending = copy.deepcopy(self.committed)
        self._ids = {name: 0 for name in self.TABLES}
        self.commits = 0
        self.rollbacks = 0
        self.fail_next_commit = False

    def next_id(self, table: str) -> int:
        self._ids[table] += 1
        return self._ids[table]

    def commit(self) -> None:
        if self.fail_next_commit:
            self.fail_next_commit = False
            raise RuntimeError("commit failed")
        self.committed = copy.deepcopy(self.pending)
        self.commits += 1

    def rollback(self) -> None:
        self.pending = copy.deepcopy(self.committed)
        self.rollbacks += 1

    def seed(self, table: str, entity) -> None:
        """Insert an already committed row."""
        if entity.id is None:
            entity.id = self.next_id(table)
        else:
            self._ids[table] = max(self._ids[table], entity.id)
        self.committed[table][entity.id] = _detached(entity)
        self.pending[table][entity.id] = _detached(entity)


def _detached(entity):
    clone = copy.deepcopy(entity)
    if isinstance(clone, Appointment):
        clone.clear_domain_events()
    return clone


class FakeUnitOfWork:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    async def commit(self) -> None:
        self.db.commit()

    async def rollback(self) -> None:
        self.db.rollback()


class FakeSlotRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    @property
    def _rows(self) -> dict:
        return self.db.pending["slots"]

    async def find_by_id(self, slot_id: int) -> TimeSlot | None:
        slot = self._rows.get(slot_id)
        return _detached(slot) if slot else None

    async def find_overlapping(self, practitioner_id: int, slot_date: date, window: TimeWindow) -> list[TimeSlot]:
        return [
            _detached(slot)
            for slot in self._rows.values()
            if slot.practitioner_id == practitioner_id
            and slot.slot_date == slot_date
            and slot.window.overlaps_with(window)
        ]

    async def iter_slots(
        self,
        practitioner_id: int,
        slot_date: date | None = None,
        available_only: bool = False,
    ) -> AsyncIterator[TimeSlot]:
        rows = sorted(self._rows.values(), key=lambda s: (s.slot_date, s.start_time))
        for slot in rows:
            if slot.practitioner_id != practitioner_id:
                continue
            if slot_date is not None and slot.slot_date != slot_date:
                continue
            if available_only and slot.claimed:
                continue
            yield _detached(slot)

    async def add(self, slot: TimeSlot) -> TimeSlot:
        slot.id = self.db.next_id("slots")
        self._rows[slot.id] = _detached(slot)
        return slot

    async def try_claim(self, slot_id: int) -> bool:
        # Let concurrent callers interleave before the compare-and-set
        await asyncio.sleep(0)
        slot = self._rows.get(slot_id)
        if slot is None or slot.claimed:
            return False
        slot.claimed = True
        return True

    async def release(self, slot_id: int) -> bool:
        slot = self._rows.get(slot_id)
        if slot is None or not slot.claimed:
            return False
        slot.claimed = False
        return True

    async def delete_unclaimed(self, slot_id: int) -> bool:
        slot = self._rows.get(slot_id)
        if slot is None or slot.claimed:
            return False
        del self._rows[slot_id]
        return True


class FakeAppointmentRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    @property
    def _rows(self) -> dict:
        return self.db.pending["appointments"]

    async def find_by_id(self, appointment_id: int) -> Appointment | None:
        appointment = self._rows.get(appointment_id)
        return _detached(appointment) if appointment else None

    async def find_by_practitioner(self, practitioner_id: int, status: AppointmentStatus | None = None):
        return self._select(lambda a: a.practitioner_id == practitioner_id, status)

    async def find_by_patient(self, patient_id: int, status: AppointmentStatus | None = None):
        return self._select(lambda a: a.patient_id == patient_id, status)

    async def add(self, appointment: Appointment) -> Appointment:
        active_on_slot = [
            a for a in self._rows.values() if a.slot_id == appointment.slot_id and a.status.is_active()
        ]
        if active_on_slot:
            raise RuntimeError(f"slot {appointment.slot_id} already has an active appointment")
        appointment.id = self.db.next_id("appointments")
        self._rows[appointment.id] = _detached(appointment)
        return appointment

    async def update_status(self, appointment: Appointment, expected_status: AppointmentStatus) -> bool:
        stored = self._rows.get(appointment.id)
        if stored is None or stored.status != expected_status:
            return False
        stored.status = appointment.status
        stored.cancellation_reason = appointment.cancellation_reason
        return True

    def _select(self, predicate, status):
        rows = [a for a in self._rows.values() if predicate(a) and (status is None or a.status == status)]
        rows.sort(key=lambda a: (a.appointment_date, a.start_time))
        return [_detached(a) for a in rows]


class FakePatientRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    @property
    def _rows(self) -> dict:
        return self.db.pending["patients"]

    async def find_by_id(self, patient_id: int) -> Patient | None:
        patient = self._rows.get(patient_id)
        return _detached(patient) if patient else None

    async def find_by_email(self, email: str) -> Patient | None:
        for patient in self._rows.values():
            if patient.email.lower() == email.lower():
                return _detached(patient)
        return None

    async def add_unless_email_taken(self, patient: Patient) -> Patient | None:
        if any(p.email.lower() == patient.email.lower() for p in self._rows.values()):
            return None
        patient.id = self.db.next_id("patients")
        self._rows[patient.id] = _detached(patient)
        return patient

    async def update(self, patient: Patient) -> Patient:
        if patient.id not in self._rows:
            raise ValueError(f"Patient {patient.id} not found")
        self._rows[patient.id] = _detached(patient)
        return patient


class FakeVisitRecordRepository:
    def __init__(self, db: InMemoryDatabase):
        self.db = db

    @property
    def _rows(self) -> dict:
        return self.db.pending["records"]

    async def find_by_id(self, record_id: int) -> VisitRecord | None:
        record = self._rows.get(record_id)
        return _detached(record) if record else None

    async def find_by_appointment(self, appointment_id: int) -> VisitRecord | None:
        for record in self._rows.values():
            if record.appointment_id == appointment_id:
                return _detached(record)
        return None

    async def find_by_patient(self, patient_id: int) -> list[VisitRecord]:
        return self._newest_first(lambda r: r.patient_id == patient_id)

    async def find_by_practitioner(self, practitioner_id: int) -> list[VisitRecord]:
        return self._newest_first(lambda r: r.practitioner_id == practitioner_id)

    async def add(self, record: VisitRecord) -> VisitRecord:
        if any(r.appointment_id == record.appointment_id for r in self._rows.values()):
            raise InvalidTransitionException(record.appointment_id, "Completed", "Completed")
        record.id = self.db.next_id("records")
        self._rows[record.id] = _detached(record)
        return record

    async def update(self, record: VisitRecord) -> VisitRecord:
        self._rows[record.id] = _detached(record)
        return record

    def _newest_first(self, predicate) -> list[VisitRecord]:
        rows = [r for r in self._rows.values() if predicate(r)]
        rows.sort(key=lambda r: (r.created_at, r.id), reverse=True)
        return [_detached(r) for r in rows]


class FakeAttachmentStorage:
    """Keeps stored files in a dict keyed by URL."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_after: int | None = None
        self._counter = 0

    async def store(self, content: bytes, original_name: str) -> LabReport:
        if self.fail_after is not None and self._counter >= self.fail_after:
            raise OSError("disk full")
        self._counter += 1
        url = f"/attachments/{self._counter:04d}-{original_name}"
        self.files[url] = content
        return LabReport(url=url, original_name=original_name)

    async def delete(self, url: str) -> bool:
        self.deleted.append(url)
        return self.files.pop(url, None) is not None


class FakePasswordHasher:
    async def hash(self, password: str) -> str:
        return f"hashed:{password}"

    async def verify(self, password: str, password_hash: str) -> bool:
        return password_hash == f"hashed:{password}"


class RecordingEventPublisher:
    def __init__(self) -> None:
        self.events: list[DomainEvent] = []

    async def publish_all(self, events: list[DomainEvent]) -> None:
        self.events.extend(events)

    def of_type(self, event_type: type) -> list[DomainEvent]:
        return [event for event in self.events if isinstance(event, event_type)]


class SchedulingHarness:
    """Scheduling services wired on one in-memory store."""

    def __init__(self) -> None:
        self.db = InMemoryDatabase()
        self.uow = FakeUnitOfWork(self.db)
        self.slots = FakeSlotRepository(self.db)
        self.appointments = FakeAppointmentRepository(self.db)
        self.patients = FakePatientRepository(self.db)
        self.records = FakeVisitRecordRepository(self.db)
        self.storage = FakeAttachmentStorage()
        self.hasher = FakePasswordHasher()
        self.events = RecordingEventPublisher()
        self.locks = KeyedLockRegistry()

        self.slot_store = SlotStore(self.slots, self.uow, self.locks)
        self.booking_engine = BookingEngine(
            slot_store=self.slot_store,
            patient_repository=self.patients,
            appointment_repository=self.appointments,
            unit_of_work=self.uow,
            password_hasher=self.hasher,
            event_publisher=self.events,
            locks=self.locks,
        )
        self.lifecycle = AppointmentLifecycle(self.appointments, self.slot_store, self.uow, self.events)
        self.record_manager = VisitRecordManager(
            appointment_repository=self.appointments,
            record_repository=self.records,
            lifecycle=self.lifecycle,
            storage=self.storage,
            unit_of_work=self.uow,
            event_publisher=self.events,
            max_file_size=1024,
            allowed_extensions=["pdf", "png", "jpg"],
        )

    # ==================== Seeding helpers ====================

    def add_slot(
        self,
        practitioner_id: int = PRACTITIONER_ID,
        slot_date: date = date(2030, 3, 4),
        start: time = time(9, 0),
        end: time = time(9, 30),
        claimed: bool = False,
    ) -> TimeSlot:
        slot = TimeSlot.open(practitioner_id, slot_date, start, end)
        slot.claimed = claimed
        self.db.seed("slots", slot)
        return slot

    def add_patient(self, patient_id: int = PATIENT_ID, email: str = "jane.doe@example.com") -> Patient:
        patient = Patient(
            id=patient_id,
            first_name="Jane",
            last_name="Doe",
            email=email,
            phone="555-0100",
            password_hash="hashed:secret",
        )
        self.db.seed("patients", patient)
        return patient

    def add_appointment(
        self,
        status: AppointmentStatus = AppointmentStatus.SCHEDULED,
        slot: TimeSlot | None = None,
        patient: Patient | None = None,
    ) -> Appointment:
        slot = slot or self.add_slot(claimed=status.is_active())
        patient = patient or self.patients_by_id(PATIENT_ID) or self.add_patient()
        appointment = Appointment.book(slot, patient, reason="Check-up", symptoms="Cough")
        appointment.status = status
        self.db.seed("appointments", appointment)
        return appointment

    def patients_by_id(self, patient_id: int) -> Patient | None:
        return self.db.committed["patients"].get(patient_id)

    def committed_slot(self, slot_id: int) -> TimeSlot | None:
        return self.db.committed["slots"].get(slot_id)

    def committed_appointment(self, appointment_id: int) -> Appointment | None:
        return self.db.committed["appointments"].get(appointment_id)

    def committed_record(self, record_id: int) -> VisitRecord | None:
        return self.db.committed["records"].get(record_id)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def harness() -> SchedulingHarness:
    return SchedulingHarness()


@pytest.fixture
def practitioner_context() -> RequestContext:
    return RequestContext(user_id=PRACTITIONER_ID, role=Role.PRACTITIONER)


@pytest.fixture
def other_practitioner_context() -> RequestContext:
    return RequestContext(user_id=OTHER_PRACTITIONER_ID, role=Role.PRACTITIONER)


@pytest.fixture
def patient_context() -> RequestContext:
    return RequestContext(user_id=PATIENT_ID, role=Role.PATIENT, email="jane.doe@example.com")


@pytest.fixture
def admin_context() -> RequestContext:
    return RequestContext(user_id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def sample_contact() -> PatientContact:
    return PatientContact(first_name="John", last_name="Smith", email="John.Smith@Example.com", phone="555-0199")
