"""
Visit Record Manager

Creates and revises the clinical record of a consultation, including the
lab report attachment reconciliation.
"""

import logging
from pathlib import PurePath

from app.core.domain import (
    AttachmentNotFoundException,
    AuthorizationException,
    EntityNotFoundException,
    InvalidTransitionException,
    ValidationException,
)
from app.domains.scheduling.application.dto import NewAttachment, RequestContext
from app.domains.scheduling.application.ports import (
    IAppointmentRepository,
    IAttachmentStorage,
    IEventPublisher,
    IUnitOfWork,
    IVisitRecordRepository,
)
from app.domains.scheduling.domain.entities import Appointment, VisitRecord
from app.domains.scheduling.domain.value_objects import AppointmentStatus, ClinicalData, LabReport

from .appointment_lifecycle import AppointmentLifecycle

logger = logging.getLogger(__name__)


class VisitRecordManager:
    """
    Visit record creation and revision.

    create_record stores the files, inserts the record and completes the
    appointment in one transaction; on failure the stored files are removed
    again. update_record deletes detached files only after its commit, so a
    failed update leaves every previously attached file in place.
    """

    def __init__(
        self,
        appointment_repository: IAppointmentRepository,
        record_repository: IVisitRecordRepository,
        lifecycle: AppointmentLifecycle,
        storage: IAttachmentStorage,
        unit_of_work: IUnitOfWork,
        event_publisher: IEventPublisher,
        max_file_size: int = 10 * 1024 * 1024,
        allowed_extensions: list[str] | None = None,
    ):
        self._appointments = appointment_repository
        self._records = record_repository
        self._lifecycle = lifecycle
        self._storage = storage
        self._uow = unit_of_work
        self._events = event_publisher
        self._max_file_size = max_file_size
        self._allowed_extensions = {ext.lower().lstrip(".") for ext in allowed_extensions or []}

    async def create_record(
        self,
        appointment_id: int,
        clinical: ClinicalData,
        attachments: list[NewAttachment],
        context: RequestContext,
    ) -> VisitRecord:
        """
        Create the record and complete the appointment.

        Raises:
            InvalidTransitionException: Unless the appointment is Scheduled or Confirmed
            ValidationException: Missing diagnosis or unacceptable attachment
        """
        appointment = await self._load_appointment(appointment_id)
        self._ensure_author(appointment, context, "create_visit_record")
        appointment.ensure_can_transition_to(AppointmentStatus.COMPLETED)

        self._validate_attachments(attachments)
        record = VisitRecord.create(appointment, clinical)

        stored: list[LabReport] = []
        try:
            await self._store_all(attachments, stored)
            record.reconcile_lab_reports([], stored)
            record = await self._records.add(record)
            completed = await self._lifecycle.complete(appointment_id, record_id=record.id)
            await self._uow.commit()
        except Exception:
            await self._uow.rollback()
            await self._discard(stored)
            raise

        logger.info(
            f"Created visit record {record.id} for appointment {appointment_id} "
            f"with {len(stored)} lab report(s)"
        )
        await self._events.publish_all(completed.pull_domain_events())
        return record

    async def update_record(
        self,
        record_id: int,
        clinical: ClinicalData,
        attachments: list[NewAttachment],
        removed_urls: list[str],
        context: RequestContext,
    ) -> VisitRecord:
        """
        Revise a record: lab reports become (existing - removed) + new.

        Raises:
            AttachmentNotFoundException: If a removed URL is not attached to the record
            InvalidTransitionException: Unless the appointment is Completed
        """
        record = await self._records.find_by_id(record_id)
        if record is None:
            raise EntityNotFoundException("VisitRecord", record_id)

        appointment = await self._load_appointment(record.appointment_id)
        self._ensure_author(appointment, context, "update_visit_record")
        if not appointment.is_completed():
            raise InvalidTransitionException(
                appointment.id,
                appointment.status.value,
                AppointmentStatus.COMPLETED.value,
            )

        missing = record.missing_lab_reports(removed_urls)
        if missing:
            raise AttachmentNotFoundException(record_id, missing)

        self._validate_attachments(attachments)
        record.revise(clinical)

        stored: list[LabReport] = []
        try:
            await self._store_all(attachments, stored)
            detached = record.reconcile_lab_reports(removed_urls, stored)
            record = await self._records.update(record)
            await self._uow.commit()
        except Exception:
            await self._uow.rollback()
            await self._discard(stored)
            raise

        await self._discard(detached)

        logger.info(
            f"Updated visit record {record_id}: +{len(stored)} / -{len(detached)} lab report(s)"
        )
        return record

    async def get_record(self, appointment_id: int, context: RequestContext) -> VisitRecord:
        """
        Record of an appointment.

        Raises:
            EntityNotFoundException: If the appointment has no record yet
        """
        record = await self._records.find_by_appointment(appointment_id)
        if record is None:
            raise EntityNotFoundException(
                "VisitRecord",
                appointment_id,
                message=f"No visit record found for appointment {appointment_id}",
            )

        if not (
            context.acts_for_practitioner(record.practitioner_id)
            or context.acts_for_patient(record.patient_id)
        ):
            raise AuthorizationException("view_visit_record", f"appointment:{appointment_id}", str(context.user_id))
        return record

    async def list_records(
        self,
        context: RequestContext,
        patient_id: int | None = None,
        practitioner_id: int | None = None,
    ) -> list[VisitRecord]:
        """
        Records of one patient or one practitioner, newest first.

        Without filters the caller's own records are returned. A practitioner
        asking for a patient sees only the records they wrote for that patient.
        """
        if patient_id is None and practitioner_id is None:
            if context.is_patient:
                patient_id = context.user_id
            elif context.is_practitioner:
                practitioner_id = context.user_id
            else:
                raise ValidationException("patientId or practitionerId is required", field="patientId")

        if patient_id is not None:
            if context.is_practitioner and practitioner_id in (None, context.user_id):
                practitioner_id = context.user_id
            elif not context.acts_for_patient(patient_id):
                raise AuthorizationException("list_visit_records", f"patient:{patient_id}", str(context.user_id))
            records = await self._records.find_by_patient(patient_id)
            if practitioner_id is not None:
                records = [r for r in records if r.practitioner_id == practitioner_id]
            return records

        assert practitioner_id is not None
        if not context.acts_for_practitioner(practitioner_id):
            raise AuthorizationException(
                "list_visit_records", f"practitioner:{practitioner_id}", str(context.user_id)
            )
        return await self._records.find_by_practitioner(practitioner_id)

    # ==================== Helpers ====================

    async def _load_appointment(self, appointment_id: int) -> Appointment:
        appointment = await self._appointments.find_by_id(appointment_id)
        if appointment is None:
            raise EntityNotFoundException("Appointment", appointment_id)
        return appointment

    def _ensure_author(self, appointment: Appointment, context: RequestContext, operation: str) -> None:
        """Only the practitioner who owns the appointment writes its record."""
        if not (context.is_practitioner and appointment.is_managed_by(context.user_id)):
            raise AuthorizationException(operation, f"appointment:{appointment.id}", str(context.user_id))

    def _validate_attachments(self, attachments: list[NewAttachment]) -> None:
        for attachment in attachments:
            if not attachment.filename:
                raise ValidationException("Attachment file name is required", field="labReports")
            if attachment.size == 0:
                raise ValidationException(f"Attachment '{attachment.filename}' is empty", field="labReports")
            if attachment.size > self._max_file_size:
                raise ValidationException(
                    f"Attachment '{attachment.filename}' exceeds {self._max_file_size} bytes",
                    field="labReports",
                )
            extension = PurePath(attachment.filename).suffix.lower().lstrip(".")
            if self._allowed_extensions and extension not in self._allowed_extensions:
                raise ValidationException(
                    f"Attachment type '.{extension}' is not allowed",
                    field="labReports",
                    details={"allowed_extensions": sorted(self._allowed_extensions)},
                )

    async def _store_all(self, attachments: list[NewAttachment], stored: list[LabReport]) -> None:
        """Store files one by one, appending to stored so partial progress can be undone."""
        for attachment in attachments:
            stored.append(await self._storage.store(attachment.content, attachment.filename))

    async def _discard(self, reports: list[LabReport]) -> None:
        for report in reports:
            try:
                await self._storage.delete(report.url)
            except OSError as e:
                logger.warning(f"Could not delete attachment {report.url}: {e}")
