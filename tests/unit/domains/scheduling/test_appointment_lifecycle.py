# ============================================================================
# Tests for AppointmentLifecycle
# ============================================================================
"""Unit tests for appointment status transitions and their side effects."""

import asyncio
from datetime import time

import pytest

from app.core.domain import (
    AuthorizationException,
    EntityNotFoundException,
    InvalidTransitionException,
    ValidationException,
)
from app.domains.scheduling.domain import (
    AppointmentCancelled,
    AppointmentConfirmed,
    AppointmentStatus,
)


@pytest.mark.use_case
class TestConfirm:
    @pytest.mark.asyncio
    async def test_practitioner_confirms_scheduled(self, harness, practitioner_context):
        # Arrange
        appointment = harness.add_appointment()

        # Act
        result = await harness.lifecycle.confirm(appointment.id, practitioner_context)

        # Assert
        assert result.status == AppointmentStatus.CONFIRMED
        assert harness.committed_appointment(appointment.id).status == AppointmentStatus.CONFIRMED
        assert len(harness.events.of_type(AppointmentConfirmed)) == 1

    @pytest.mark.asyncio
    async def test_confirming_twice_is_invalid(self, harness, practitioner_context):
        appointment = harness.add_appointment(AppointmentStatus.CONFIRMED)

        with pytest.raises(InvalidTransitionException):
            await harness.lifecycle.confirm(appointment.id, practitioner_context)

        assert harness.events.events == []

    @pytest.mark.asyncio
    async def test_patient_cannot_confirm(self, harness, patient_context):
        appointment = harness.add_appointment()

        with pytest.raises(AuthorizationException):
            await harness.lifecycle.confirm(appointment.id, patient_context)

    @pytest.mark.asyncio
    async def test_unknown_appointment(self, harness, admin_context):
        with pytest.raises(EntityNotFoundException):
            await harness.lifecycle.confirm(12345, admin_context)


@pytest.mark.use_case
class TestCancel:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED])
    async def test_cancel_releases_slot(self, harness, patient_context, status):
        # Arrange
        appointment = harness.add_appointment(status)
        assert harness.committed_slot(appointment.slot_id).claimed is True

        # Act
        result = await harness.lifecycle.cancel(appointment.id, "Feeling better", patient_context)

        # Assert
        assert result.status == AppointmentStatus.CANCELLED
        stored = harness.committed_appointment(appointment.id)
        assert stored.status == AppointmentStatus.CANCELLED
        assert stored.cancellation_reason == "Feeling better"
        assert harness.committed_slot(appointment.slot_id).claimed is False
        cancelled = harness.events.of_type(AppointmentCancelled)
        assert len(cancelled) == 1
        assert cancelled[0].reason == "Feeling better"

    @pytest.mark.asyncio
    async def test_released_slot_can_be_booked_again(self, harness, patient_context):
        # Arrange
        appointment = harness.add_appointment()
        await harness.lifecycle.cancel(appointment.id, None, patient_context)

        # Act
        result = await harness.booking_engine.book(appointment.slot_id, None, "Rebook", "", patient_context)

        # Assert
        assert result.appointment.slot_id == appointment.slot_id
        assert result.appointment.id != appointment.id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED])
    async def test_terminal_appointments_cannot_be_cancelled(self, harness, practitioner_context, status):
        appointment = harness.add_appointment(status)

        with pytest.raises(InvalidTransitionException):
            await harness.lifecycle.cancel(appointment.id, None, practitioner_context)

        assert harness.committed_appointment(appointment.id).status == status

    @pytest.mark.asyncio
    async def test_other_practitioner_cannot_cancel(self, harness, other_practitioner_context):
        appointment = harness.add_appointment()

        with pytest.raises(AuthorizationException):
            await harness.lifecycle.cancel(appointment.id, None, other_practitioner_context)

    @pytest.mark.asyncio
    async def test_concurrent_cancel_and_confirm_have_one_winner(self, harness, practitioner_context):
        # Arrange
        appointment = harness.add_appointment()
        original_update = harness.appointments.update_status

        async def slow_update(entity, expected):
            await asyncio.sleep(0)
            return await original_update(entity, expected)

        harness.appointments.update_status = slow_update

        # Act
        outcomes = await asyncio.gather(
            harness.lifecycle.cancel(appointment.id, None, practitioner_context),
            harness.lifecycle.confirm(appointment.id, practitioner_context),
            return_exceptions=True,
        )

        # Assert
        failures = [o for o in outcomes if isinstance(o, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InvalidTransitionException)
        assert len(harness.events.events) == 1


@pytest.mark.use_case
class TestChangeStatus:
    @pytest.mark.asyncio
    async def test_routes_confirmed(self, harness, practitioner_context):
        appointment = harness.add_appointment()

        result = await harness.lifecycle.change_status(
            appointment.id, AppointmentStatus.CONFIRMED, practitioner_context
        )

        assert result.status == AppointmentStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_routes_cancelled_with_reason(self, harness, practitioner_context):
        appointment = harness.add_appointment()

        result = await harness.lifecycle.change_status(
            appointment.id, AppointmentStatus.CANCELLED, practitioner_context, reason="Doctor unavailable"
        )

        assert result.cancellation_reason == "Doctor unavailable"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", [AppointmentStatus.COMPLETED, AppointmentStatus.SCHEDULED])
    async def test_other_targets_are_invalid(self, harness, practitioner_context, target):
        appointment = harness.add_appointment()

        with pytest.raises(InvalidTransitionException) as exc_info:
            await harness.lifecycle.change_status(appointment.id, target, practitioner_context)

        assert exc_info.value.target_status == target.value
        assert harness.committed_appointment(appointment.id).status == AppointmentStatus.SCHEDULED


@pytest.mark.use_case
class TestQueries:
    @pytest.mark.asyncio
    async def test_patient_sees_own_appointment(self, harness, patient_context):
        appointment = harness.add_appointment()

        found = await harness.lifecycle.get_appointment(appointment.id, patient_context)

        assert found.id == appointment.id

    @pytest.mark.asyncio
    async def test_other_practitioner_cannot_view(self, harness, other_practitioner_context):
        appointment = harness.add_appointment()

        with pytest.raises(AuthorizationException):
            await harness.lifecycle.get_appointment(appointment.id, other_practitioner_context)

    @pytest.mark.asyncio
    async def test_list_defaults_to_callers_appointments(self, harness, practitioner_context, patient_context):
        harness.add_appointment()

        by_practitioner = await harness.lifecycle.list_appointments(practitioner_context)
        by_patient = await harness.lifecycle.list_appointments(patient_context)

        assert len(by_practitioner) == 1
        assert len(by_patient) == 1

    @pytest.mark.asyncio
    async def test_list_filters_by_status(self, harness, admin_context):
        harness.add_appointment()
        cancelled_slot = harness.add_slot(start=time(10, 0), end=time(10, 30))
        harness.add_appointment(AppointmentStatus.CANCELLED, slot=cancelled_slot)

        cancelled = await harness.lifecycle.list_appointments(
            admin_context, practitioner_id=7, status=AppointmentStatus.CANCELLED
        )

        assert [a.slot_id for a in cancelled] == [cancelled_slot.id]

    @pytest.mark.asyncio
    async def test_admin_must_filter(self, harness, admin_context):
        with pytest.raises(ValidationException):
            await harness.lifecycle.list_appointments(admin_context)

    @pytest.mark.asyncio
    async def test_patient_cannot_list_other_patient(self, harness, patient_context):
        with pytest.raises(AuthorizationException):
            await harness.lifecycle.list_appointments(patient_context, patient_id=999)
