# ============================================================================
# Tests for scheduling domain entities and value objects
# ============================================================================
"""Unit tests for TimeWindow, TimeSlot, Appointment and VisitRecord."""

from datetime import date, time

import pytest

from app.core.domain import (
    InvalidRangeException,
    InvalidTransitionException,
    SlotLockedException,
    ValidationException,
)
from app.domains.scheduling.domain import (
    Appointment,
    AppointmentBooked,
    AppointmentCancelled,
    AppointmentCompleted,
    AppointmentConfirmed,
    AppointmentStatus,
    ClinicalData,
    LabReport,
    Patient,
    PatientContact,
    PrescriptionLine,
    TimeSlot,
    TimeWindow,
    VisitRecord,
    VitalSigns,
    filter_prescription,
)

DAY = date(2030, 3, 4)


def make_slot(start=time(9, 0), end=time(9, 30), practitioner_id=7, slot_id=1) -> TimeSlot:
    slot = TimeSlot.open(practitioner_id, DAY, start, end)
    slot.id = slot_id
    return slot


def make_patient() -> Patient:
    return Patient(id=100, first_name="Jane", last_name="Doe", email="jane@example.com", phone="555-0100")


def make_appointment(status=AppointmentStatus.SCHEDULED) -> Appointment:
    appointment = Appointment.book(make_slot(), make_patient(), reason="Check-up", symptoms="Cough")
    appointment.id = 42
    appointment.status = status
    return appointment


# ============================================================================
# TimeWindow
# ============================================================================


@pytest.mark.unit
class TestTimeWindow:
    def test_rejects_start_equal_to_end(self):
        with pytest.raises(InvalidRangeException) as exc_info:
            TimeWindow(start=time(10, 0), end=time(10, 0))

        assert exc_info.value.code == "INVALID_RANGE"

    def test_rejects_start_after_end(self):
        with pytest.raises(InvalidRangeException):
            TimeWindow(start=time(11, 0), end=time(10, 0))

    def test_touching_windows_do_not_overlap(self):
        first = TimeWindow(start=time(9, 0), end=time(9, 30))
        second = TimeWindow(start=time(9, 30), end=time(10, 0))

        assert first.overlaps_with(second) is False
        assert second.overlaps_with(first) is False

    def test_intersecting_windows_overlap(self):
        first = TimeWindow(start=time(9, 0), end=time(10, 0))
        contained = TimeWindow(start=time(9, 15), end=time(9, 45))
        crossing = TimeWindow(start=time(9, 45), end=time(10, 15))

        assert first.overlaps_with(contained)
        assert contained.overlaps_with(first)
        assert first.overlaps_with(crossing)

    def test_display_and_duration(self):
        window = TimeWindow(start=time(9, 5), end=time(10, 0))

        assert window.display() == "09:05 - 10:00"
        assert str(window) == "09:05 - 10:00"
        assert window.duration_minutes == 55


# ============================================================================
# AppointmentStatus
# ============================================================================


@pytest.mark.unit
class TestAppointmentStatus:
    @pytest.mark.parametrize(
        "current,target,allowed",
        [
            (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED, True),
            (AppointmentStatus.SCHEDULED, AppointmentStatus.CANCELLED, True),
            (AppointmentStatus.SCHEDULED, AppointmentStatus.COMPLETED, True),
            (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, True),
            (AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED, True),
            (AppointmentStatus.CONFIRMED, AppointmentStatus.SCHEDULED, False),
            (AppointmentStatus.CANCELLED, AppointmentStatus.SCHEDULED, False),
            (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, False),
        ],
    )
    def test_transition_graph(self, current, target, allowed):
        assert current.can_transition_to(target) is allowed

    def test_terminal_and_active_states(self):
        assert AppointmentStatus.CANCELLED.is_terminal()
        assert AppointmentStatus.COMPLETED.is_terminal()
        assert not AppointmentStatus.SCHEDULED.is_terminal()
        assert AppointmentStatus.SCHEDULED.is_active()
        assert AppointmentStatus.CONFIRMED.is_active()
        assert not AppointmentStatus.CANCELLED.is_active()


# ============================================================================
# TimeSlot
# ============================================================================


@pytest.mark.unit
class TestTimeSlot:
    def test_open_creates_unclaimed_slot(self):
        slot = TimeSlot.open(7, DAY, time(14, 0), time(14, 45))

        assert slot.claimed is False
        assert slot.time_range == "14:00 - 14:45"
        assert slot.to_dict()["date"] == "2030-03-04"

    def test_open_rejects_invalid_range(self):
        with pytest.raises(InvalidRangeException):
            TimeSlot.open(7, DAY, time(15, 0), time(14, 0))

    def test_overlap_requires_same_practitioner_and_day(self):
        slot = make_slot()
        same_time_other_practitioner = make_slot(practitioner_id=8, slot_id=2)
        other_day = TimeSlot.open(7, date(2030, 3, 5), time(9, 0), time(9, 30))
        intersecting = make_slot(start=time(9, 15), end=time(9, 45), slot_id=3)

        assert not slot.overlaps(same_time_other_practitioner)
        assert not slot.overlaps(other_day)
        assert slot.overlaps(intersecting)

    def test_ensure_unclaimed_raises_for_claimed_slot(self):
        slot = make_slot()
        slot.claimed = True

        with pytest.raises(SlotLockedException) as exc_info:
            slot.ensure_unclaimed()

        assert exc_info.value.slot_id == 1


# ============================================================================
# Patient
# ============================================================================


@pytest.mark.unit
class TestPatient:
    def test_contact_normalizes_email(self):
        contact = PatientContact(first_name=" John ", last_name="Smith", email="John.Smith@Example.COM")

        assert contact.first_name == "John"
        assert contact.email == "john.smith@example.com"
        assert contact.full_name == "John Smith"

    def test_contact_requires_names(self):
        with pytest.raises(ValidationException):
            PatientContact(first_name="", last_name="Smith", email="a@b.com")

    def test_update_contact_keeps_phone_when_not_given(self):
        patient = make_patient()

        changed = patient.update_contact(PatientContact(first_name="Janet", last_name="Doe", email="jane@example.com"))

        assert changed is True
        assert patient.first_name == "Janet"
        assert patient.phone == "555-0100"

    def test_update_contact_reports_no_change(self):
        patient = make_patient()

        changed = patient.update_contact(patient.contact)

        assert changed is False


# ============================================================================
# Appointment
# ============================================================================


@pytest.mark.unit
class TestAppointment:
    def test_book_copies_slot_and_patient(self):
        appointment = Appointment.book(make_slot(), make_patient(), reason="Check-up")

        assert appointment.status == AppointmentStatus.SCHEDULED
        assert appointment.slot_id == 1
        assert appointment.practitioner_id == 7
        assert appointment.patient_id == 100
        assert appointment.appointment_date == DAY
        assert appointment.time_range == "09:00 - 09:30"
        assert appointment.patient_name == "Jane Doe"

    def test_record_booking_records_event(self):
        appointment = make_appointment()

        appointment.record_booking(new_account_created=True)
        events = appointment.pull_domain_events()

        assert len(events) == 1
        assert isinstance(events[0], AppointmentBooked)
        assert events[0].new_account_created is True
        assert events[0].appointment_id == 42
        assert appointment.pull_domain_events() == []

    def test_confirm_then_complete(self):
        appointment = make_appointment()

        appointment.confirm()
        appointment.complete(record_id=9)

        assert appointment.status == AppointmentStatus.COMPLETED
        events = appointment.pull_domain_events()
        assert [type(e) for e in events] == [AppointmentConfirmed, AppointmentCompleted]
        assert events[1].record_id == 9

    def test_cancel_keeps_reason(self):
        appointment = make_appointment(AppointmentStatus.CONFIRMED)

        appointment.cancel("Patient request")

        assert appointment.status == AppointmentStatus.CANCELLED
        assert appointment.cancellation_reason == "Patient request"
        event = appointment.pull_domain_events()[0]
        assert isinstance(event, AppointmentCancelled)
        assert event.reason == "Patient request"

    def test_confirm_confirmed_is_rejected(self):
        appointment = make_appointment(AppointmentStatus.CONFIRMED)

        with pytest.raises(InvalidTransitionException) as exc_info:
            appointment.confirm()

        assert exc_info.value.current_status == "Confirmed"
        assert appointment.get_domain_events() == []

    @pytest.mark.parametrize("terminal", [AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED])
    def test_terminal_states_reject_every_move(self, terminal):
        appointment = make_appointment(terminal)

        for move in (appointment.confirm, appointment.cancel, appointment.complete):
            with pytest.raises(InvalidTransitionException):
                move()
        assert appointment.status == terminal


# ============================================================================
# Clinical value objects
# ============================================================================


@pytest.mark.unit
class TestClinicalValues:
    def test_filter_prescription_drops_blank_lines(self):
        lines = [
            PrescriptionLine(medicine_name="Amoxicillin", dosage="500mg"),
            PrescriptionLine(medicine_name="   "),
            PrescriptionLine(medicine_name=""),
            PrescriptionLine(medicine_name="Ibuprofen"),
        ]

        kept = filter_prescription(lines)

        assert [line.medicine_name for line in kept] == ["Amoxicillin", "Ibuprofen"]

    def test_vital_signs_length_is_bounded(self):
        with pytest.raises(ValidationException):
            VitalSigns(bp="1" * 100)

    def test_vital_signs_round_trip_dict(self):
        vitals = VitalSigns(bp="120/80", heart_rate="72")

        assert VitalSigns.from_dict(vitals.to_dict()) == vitals

    def test_lab_report_requires_url(self):
        with pytest.raises(ValidationException):
            LabReport(url="")


# ============================================================================
# VisitRecord
# ============================================================================


@pytest.mark.unit
class TestVisitRecord:
    def test_create_requires_diagnosis(self):
        with pytest.raises(ValidationException) as exc_info:
            VisitRecord.create(make_appointment(), ClinicalData(diagnosis="  "))

        assert exc_info.value.field == "diagnosis"

    def test_create_snapshots_patient_and_filters_prescription(self):
        clinical = ClinicalData(
            diagnosis="Flu",
            prescription=[PrescriptionLine(medicine_name="Rest"), PrescriptionLine(medicine_name="")],
        )

        record = VisitRecord.create(make_appointment(), clinical, [LabReport(url="/a/1.pdf")])

        assert record.appointment_id == 42
        assert record.patient_name == "Jane Doe"
        assert record.patient_email == "jane@example.com"
        assert [line.medicine_name for line in record.prescription] == ["Rest"]
        assert record.lab_report_urls == ["/a/1.pdf"]
        assert record.vital_signs == VitalSigns()

    def test_revise_only_touches_supplied_fields(self):
        record = VisitRecord.create(
            make_appointment(),
            ClinicalData(diagnosis="Flu", symptoms="Fever", doctor_notes="Rest"),
        )

        record.revise(ClinicalData(symptoms="Fever, cough"))

        assert record.diagnosis == "Flu"
        assert record.symptoms == "Fever, cough"
        assert record.doctor_notes == "Rest"

    def test_revise_rejects_blank_diagnosis(self):
        record = VisitRecord.create(make_appointment(), ClinicalData(diagnosis="Flu"))

        with pytest.raises(ValidationException):
            record.revise(ClinicalData(diagnosis=""))

    def test_reconcile_removes_and_appends(self):
        record = VisitRecord.create(
            make_appointment(),
            ClinicalData(diagnosis="Flu"),
            [LabReport(url="/a/1.pdf"), LabReport(url="/a/2.pdf")],
        )

        detached = record.reconcile_lab_reports(["/a/1.pdf"], [LabReport(url="/a/3.pdf"), LabReport(url="/a/2.pdf")])

        assert [r.url for r in detached] == ["/a/1.pdf"]
        assert record.lab_report_urls == ["/a/2.pdf", "/a/3.pdf"]

    def test_missing_lab_reports(self):
        record = VisitRecord.create(make_appointment(), ClinicalData(diagnosis="Flu"), [LabReport(url="/a/1.pdf")])

        assert record.missing_lab_reports(["/a/1.pdf", "/a/9.pdf", "/a/9.pdf"]) == ["/a/9.pdf"]
