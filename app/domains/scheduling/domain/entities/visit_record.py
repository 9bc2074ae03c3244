"""
VisitRecord Entity

Clinical documentation of a completed consultation.
"""

from dataclasses import dataclass, field

from app.core.domain import Entity, ValidationException

from ..value_objects.clinical import (
    ClinicalData,
    LabReport,
    PrescriptionLine,
    VitalSigns,
    filter_prescription,
)
from .appointment import Appointment


@dataclass
class VisitRecord(Entity[int]):
    """
    Visit record attached one-to-one to an appointment.

    Lab reports behave as a set keyed by URL, kept in insertion order.
    """

    appointment_id: int = 0
    practitioner_id: int = 0
    patient_id: int = 0

    # Patient snapshot
    patient_name: str = ""
    patient_email: str = ""
    patient_phone: str = ""

    # Clinical content
    diagnosis: str = ""
    symptoms: str = ""
    vital_signs: VitalSigns = field(default_factory=VitalSigns)
    prescription: list[PrescriptionLine] = field(default_factory=list)
    doctor_notes: str = ""
    patient_advice: str = ""
    lab_reports: list[LabReport] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        appointment: Appointment,
        clinical: ClinicalData,
        lab_reports: list[LabReport] | None = None,
    ) -> "VisitRecord":
        """
        Build a new record for an appointment.

        Raises:
            ValidationException: If no diagnosis is given
        """
        diagnosis = (clinical.diagnosis or "").strip()
        if not diagnosis:
            raise ValidationException("Diagnosis is required", field="diagnosis")

        contact = appointment.patient_contact
        record = cls(
            appointment_id=appointment.id or 0,
            practitioner_id=appointment.practitioner_id,
            patient_id=appointment.patient_id,
            patient_name=contact.full_name if contact else "",
            patient_email=contact.email if contact else "",
            patient_phone=contact.phone if contact else "",
            diagnosis=diagnosis,
            symptoms=clinical.symptoms or "",
            vital_signs=clinical.vital_signs or VitalSigns(),
            prescription=filter_prescription(clinical.prescription or []),
            doctor_notes=clinical.doctor_notes or "",
            patient_advice=clinical.patient_advice or "",
        )
        record._merge_lab_reports(lab_reports or [])
        return record

    def revise(self, clinical: ClinicalData) -> None:
        """Apply supplied clinical fields; omitted ones keep their value."""
        if clinical.diagnosis is not None:
            diagnosis = clinical.diagnosis.strip()
            if not diagnosis:
                raise ValidationException("Diagnosis cannot be empty", field="diagnosis")
            self.diagnosis = diagnosis
        if clinical.symptoms is not None:
            self.symptoms = clinical.symptoms
        if clinical.vital_signs is not None:
            self.vital_signs = clinical.vital_signs
        if clinical.prescription is not None:
            self.prescription = filter_prescription(clinical.prescription)
        if clinical.doctor_notes is not None:
            self.doctor_notes = clinical.doctor_notes
        if clinical.patient_advice is not None:
            self.patient_advice = clinical.patient_advice
        self.touch()

    # ==================== Lab reports ====================

    @property
    def lab_report_urls(self) -> list[str]:
        return [report.url for report in self.lab_reports]

    def missing_lab_reports(self, urls: list[str]) -> list[str]:
        """URLs from the list that are not attached to this record."""
        attached = set(self.lab_report_urls)
        return [url for url in dict.fromkeys(urls) if url not in attached]

    def reconcile_lab_reports(self, removed_urls: list[str], added: list[LabReport]) -> list[LabReport]:
        """
        Replace the attachment set with (existing - removed) + added.

        The caller verifies beforehand that every removed URL is attached.

        Returns:
            The lab reports that were detached
        """
        removed = set(removed_urls)
        detached = [report for report in self.lab_reports if report.url in removed]
        self.lab_reports = [report for report in self.lab_reports if report.url not in removed]
        self._merge_lab_reports(added)
        if detached or added:
            self.touch()
        return detached

    def _merge_lab_reports(self, reports: list[LabReport]) -> None:
        known = set(self.lab_report_urls)
        for report in reports:
            if report.url not in known:
                self.lab_reports.append(report)
                known.add(report.url)
