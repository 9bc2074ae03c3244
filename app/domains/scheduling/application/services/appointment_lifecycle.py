"""
Appointment Lifecycle

State machine over appointment status and the side effects of each move.
"""

import logging

from app.core.domain import (
    AuthorizationException,
    EntityNotFoundException,
    InvalidTransitionException,
    ValidationException,
)
from app.domains.scheduling.application.dto import RequestContext
from app.domains.scheduling.application.ports import (
    IAppointmentRepository,
    IEventPublisher,
    IUnitOfWork,
)
from app.domains.scheduling.domain.entities import Appointment
from app.domains.scheduling.domain.value_objects import AppointmentStatus

from .slot_store import SlotStore

logger = logging.getLogger(__name__)


class AppointmentLifecycle:
    """
    Governs appointment status transitions.

    Scheduled -> Confirmed -> Completed, and Scheduled/Confirmed -> Cancelled.
    Every write is conditional on the status read, so of two concurrent
    transitions on the same appointment only one succeeds. Events are
    published after commit, once per successful transition.
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        slot_store: SlotStore,
        unit_of_work: IUnitOfWork,
        event_publisher: IEventPublisher,
    ):
        self._appointments = appointment_repository
        self._slot_store = slot_store
        self._uow = unit_of_work
        self._events = event_publisher

    # ==================== Transitions ====================

    async def confirm(self, appointment_id: int, context: RequestContext) -> Appointment:
        """
        Scheduled -> Confirmed.

        Raises:
            InvalidTransitionException: From any other status
        """
        appointment = await self.get_appointment(appointment_id)
        if not context.acts_for_practitioner(appointment.practitioner_id):
            raise AuthorizationException("confirm_appointment", f"appointment:{appointment_id}", str(context.user_id))

        expected = appointment.status
        appointment.confirm()

        try:
            await self._persist_status(appointment, expected)
            await self._uow.commit()
        except Exception:
            await self._uow.rollback()
            raise

        logger.info(f"Appointment {appointment_id} confirmed")
        await self._events.publish_all(appointment.pull_domain_events())
        return appointment

    async def cancel(self, appointment_id: int, reason: str | None, context: RequestContext) -> Appointment:
        """
        Scheduled/Confirmed -> Cancelled, releasing the slot in the same transaction.

        Raises:
            InvalidTransitionException: From Cancelled or Completed
        """
        appointment = await self.get_appointment(appointment_id)
        if not (
            context.acts_for_practitioner(appointment.practitioner_id)
            or context.acts_for_patient(appointment.patient_id)
        ):
            raise AuthorizationException("cancel_appointment", f"appointment:{appointment_id}", str(context.user_id))

        expected = appointment.status
        appointment.cancel(reason)

        try:
            await self._persist_status(appointment, expected)
            if appointment.slot_id is not None:
                await self._slot_store.release(appointment.slot_id)
            await self._uow.commit()
        except Exception:
            await self._uow.rollback()
            raise

        logger.info(f"Appointment {appointment_id} cancelled, slot {appointment.slot_id} released")
        await self._events.publish_all(appointment.pull_domain_events())
        return appointment

    async def complete(self, appointment_id: int, record_id: int | None = None) -> Appointment:
        """
        Scheduled/Confirmed -> Completed.

        Runs inside the visit record creation transaction and does not commit.
        The caller publishes the recorded events after its own commit.
        """
        appointment = await self.get_appointment(appointment_id)
        expected = appointment.status
        appointment.complete(record_id=record_id)
        await self._persist_status(appointment, expected)
        logger.debug(f"Appointment {appointment_id} marked completed (record {record_id})")
        return appointment

    async def change_status(
        self,
        appointment_id: int,
        status: AppointmentStatus,
        context: RequestContext,
        reason: str | None = None,
    ) -> Appointment:
        """
        Apply a status requested by a caller.

        Completion is only reachable by creating a visit record, so asking
        for Completed here is reported as an invalid transition.
        """
        if status == AppointmentStatus.CONFIRMED:
            return await self.confirm(appointment_id, context)
        if status == AppointmentStatus.CANCELLED:
            return await self.cancel(appointment_id, reason, context)

        appointment = await self.get_appointment(appointment_id, context)
        raise InvalidTransitionException(appointment.id, appointment.status.value, status.value)

    # ==================== Queries ====================

    async def get_appointment(self, appointment_id: int, context: RequestContext | None = None) -> Appointment:
        appointment = await self._appointments.find_by_id(appointment_id)
        if appointment is None:
            raise EntityNotFoundException("Appointment", appointment_id)
        if context is not None and not (
            context.acts_for_practitioner(appointment.practitioner_id)
            or context.acts_for_patient(appointment.patient_id)
        ):
            raise AuthorizationException("view_appointment", f"appointment:{appointment_id}", str(context.user_id))
        return appointment

    async def list_appointments(
        self,
        context: RequestContext,
        practitioner_id: int | None = None,
        patient_id: int | None = None,
        status: AppointmentStatus | None = None,
    ) -> list[Appointment]:
        """
        Appointments of one practitioner or one patient, ordered by date and time.

        Without filters the caller's own appointments are returned.
        """
        if practitioner_id is None and patient_id is None:
            if context.is_practitioner:
                practitioner_id = context.user_id
            elif context.is_patient:
                patient_id = context.user_id
            else:
                raise ValidationException("practitionerId or patientId is required", field="practitionerId")

        if practitioner_id is not None:
            if not context.acts_for_practitioner(practitioner_id):
                raise AuthorizationException("list_appointments", f"practitioner:{practitioner_id}", str(context.user_id))
            return await self._appointments.find_by_practitioner(practitioner_id, status)

        assert patient_id is not None
        if not context.acts_for_patient(patient_id):
            raise AuthorizationException("list_appointments", f"patient:{patient_id}", str(context.user_id))
        return await self._appointments.find_by_patient(patient_id, status)

    async def _persist_status(self, appointment: Appointment, expected: AppointmentStatus) -> None:
        if not await self._appointments.update_status(appointment, expected):
            # Another request moved the appointment after we read it
            raise InvalidTransitionException(appointment.id, expected.value, appointment.status.value)
