"""
Clinical Value Objects

Vital signs, prescription lines, lab report attachments and the clinical
payload used to create or revise a visit record.
"""

from dataclasses import dataclass
from typing import Any

from app.core.domain import ValidationException, ValueObject

MAX_VITAL_LENGTH = 32


@dataclass(frozen=True)
class VitalSigns(ValueObject):
    """
    Vital signs as recorded by the practitioner.

    Values are kept as entered ("120/80", "72 kg", "98.6 F").
    """

    bp: str | None = None
    weight: str | None = None
    temperature: str | None = None
    spo2: str | None = None
    heart_rate: str | None = None

    def _validate(self) -> None:
        for name, value in self.to_dict().items():
            if value is not None and len(value) > MAX_VITAL_LENGTH:
                raise ValidationException(
                    f"Vital sign '{name}' exceeds {MAX_VITAL_LENGTH} characters",
                    field=name,
                )

    def to_dict(self) -> dict[str, str | None]:
        return {
            "bp": self.bp,
            "weight": self.weight,
            "temperature": self.temperature,
            "spo2": self.spo2,
            "heart_rate": self.heart_rate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "VitalSigns":
        data = data or {}
        return cls(
            bp=data.get("bp"),
            weight=data.get("weight"),
            temperature=data.get("temperature"),
            spo2=data.get("spo2"),
            heart_rate=data.get("heart_rate"),
        )


@dataclass(frozen=True)
class PrescriptionLine(ValueObject):
    """A single medicine entry of a prescription."""

    medicine_name: str = ""
    dosage: str = ""
    frequency: str = ""
    duration: str = ""
    instructions: str = ""

    def _validate(self) -> None:
        object.__setattr__(self, "medicine_name", (self.medicine_name or "").strip())

    @property
    def is_blank(self) -> bool:
        return not self.medicine_name

    def to_dict(self) -> dict[str, str]:
        return {
            "medicine_name": self.medicine_name,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "duration": self.duration,
            "instructions": self.instructions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrescriptionLine":
        return cls(
            medicine_name=data.get("medicine_name") or "",
            dosage=data.get("dosage") or "",
            frequency=data.get("frequency") or "",
            duration=data.get("duration") or "",
            instructions=data.get("instructions") or "",
        )


def filter_prescription(lines: list[PrescriptionLine]) -> list[PrescriptionLine]:
    """Drop lines without a medicine name, keeping the order of the rest."""
    return [line for line in lines if not line.is_blank]


@dataclass(frozen=True)
class LabReport(ValueObject):
    """A stored lab report file referenced by a visit record."""

    url: str
    original_name: str = ""

    def _validate(self) -> None:
        if not self.url:
            raise ValidationException("Lab report URL is required", field="url")

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "original_name": self.original_name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LabReport":
        return cls(url=data["url"], original_name=data.get("original_name") or "")


@dataclass
class ClinicalData:
    """
    Clinical fields of a visit record.

    None means "not supplied": on creation the field is stored empty,
    on revision the stored value is kept.
    """

    diagnosis: str | None = None
    symptoms: str | None = None
    vital_signs: VitalSigns | None = None
    prescription: list[PrescriptionLine] | None = None
    doctor_notes: str | None = None
    patient_advice: str | None = None
