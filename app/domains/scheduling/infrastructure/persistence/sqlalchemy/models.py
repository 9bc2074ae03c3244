"""
Scheduling SQLAlchemy Models

Database models for scheduling domain persistence.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import relationship

from app.models.db.base import Base, TimestampMixin
from app.domains.scheduling.domain.value_objects.appointment_status import AppointmentStatus

ACTIVE_STATUSES_SQL = "status IN ('Scheduled', 'Confirmed')"


class PatientModel(Base, TimestampMixin):
    """SQLAlchemy model for Patient entity."""

    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(30), nullable=True)
    password_hash = Column(String(255), nullable=False)

    appointments = relationship("AppointmentModel", back_populates="patient")

    def __repr__(self) -> str:
        return f"<Patient(id={self.id}, email='{self.email}')>"


class TimeSlotModel(Base, TimestampMixin):
    """SQLAlchemy model for TimeSlot entity."""

    __tablename__ = "time_slots"
    __table_args__ = (
        UniqueConstraint("practitioner_id", "date", "start_time", name="uq_time_slots_practitioner_start"),
        Index("ix_time_slots_practitioner_date", "practitioner_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    practitioner_id = Column(Integer, nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    claimed = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    def __repr__(self) -> str:
        return f"<TimeSlot(id={self.id}, date={self.date}, start={self.start_time}, claimed={self.claimed})>"


# Overlapping windows of one practitioner are rejected across processes (needs btree_gist).
_slots = TimeSlotModel.__table__
_slots.append_constraint(
    ExcludeConstraint(
        (_slots.c.practitioner_id, "="),
        (
            func.tsrange(_slots.c.date + _slots.c.start_time, _slots.c.date + _slots.c.end_time),
            "&&",
        ),
        name="ex_time_slots_no_overlap",
        using="gist",
    )
)


class AppointmentModel(Base, TimestampMixin):
    """SQLAlchemy model for Appointment entity."""

    __tablename__ = "appointments"
    __table_args__ = (
        # At most one active appointment per slot
        Index(
            "uq_appointments_active_slot",
            "slot_id",
            unique=True,
            postgresql_where=text(ACTIVE_STATUSES_SQL),
            sqlite_where=text(ACTIVE_STATUSES_SQL),
        ),
        Index("ix_appointments_practitioner_date", "practitioner_id", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)

    # References
    slot_id = Column(Integer, ForeignKey("time_slots.id", ondelete="SET NULL"), nullable=True)
    practitioner_id = Column(Integer, nullable=False)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)

    # Scheduling snapshot
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    time_range = Column(String(20), nullable=False)

    # Request
    reason = Column(Text, nullable=False, default="")
    symptoms = Column(Text, nullable=False, default="")
    patient_details = Column(JSON, nullable=True)

    # Status
    status = Column(
        SQLEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda enum: [member.value for member in enum],
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )
    cancellation_reason = Column(Text, nullable=True)

    patient = relationship("PatientModel", back_populates="appointments")
    visit_record = relationship("VisitRecordModel", back_populates="appointment", uselist=False)

    def __repr__(self) -> str:
        return f"<Appointment(id={self.id}, slot_id={self.slot_id}, status={self.status})>"


class VisitRecordModel(Base, TimestampMixin):
    """SQLAlchemy model for VisitRecord entity."""

    __tablename__ = "visit_records"

    id = Column(Integer, primary_key=True, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), nullable=False, unique=True)
    practitioner_id = Column(Integer, nullable=False, index=True)
    patient_id = Column(Integer, ForeignKey("patients.id"), nullable=False, index=True)

    # Patient snapshot {name, email, phone}
    patient_details = Column(JSON, nullable=True)

    diagnosis = Column(Text, nullable=False)
    symptoms = Column(Text, nullable=False, default="")
    vital_signs = Column(JSON, nullable=False, default=dict)
    prescription = Column(JSON, nullable=False, default=list)
    doctor_notes = Column(Text, nullable=False, default="")
    patient_advice = Column(Text, nullable=False, default="")
    lab_reports = Column(JSON, nullable=False, default=list)

    appointment = relationship("AppointmentModel", back_populates="visit_record")

    def __repr__(self) -> str:
        return f"<VisitRecord(id={self.id}, appointment_id={self.appointment_id})>"
