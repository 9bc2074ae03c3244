"""Scheduling schema - patients, time slots, appointments and visit records.

Revision ID: 001_scheduling_schema
Revises: None
Create Date: 2026-10-19

Constraints enforced by the database:
- one slot per (practitioner_id, date, start_time)
- at most one active (Scheduled/Confirmed) appointment per slot
- one visit record per appointment
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001_scheduling_schema"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_STATUSES_SQL = "status IN ('Scheduled', 'Confirmed')"

appointment_status = sa.Enum("Scheduled", "Confirmed", "Cancelled", "Completed", name="appointment_status")


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create scheduling tables."""
    op.create_table(
        "patients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_patients_id", "patients", ["id"])
    op.create_index("ix_patients_email", "patients", ["email"], unique=True)

    op.create_table(
        "time_slots",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("practitioner_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("claimed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.UniqueConstraint("practitioner_id", "date", "start_time", name="uq_time_slots_practitioner_start"),
        sa.CheckConstraint("start_time < end_time", name="ck_time_slots_window"),
    )
    op.create_index("ix_time_slots_id", "time_slots", ["id"])
    op.create_index("ix_time_slots_practitioner_date", "time_slots", ["practitioner_id", "date"])

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slot_id", sa.Integer(), sa.ForeignKey("time_slots.id", ondelete="SET NULL"), nullable=True),
        sa.Column("practitioner_id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("time_range", sa.String(20), nullable=False),
        sa.Column("reason", sa.Text(), nullable=False, server_default=""),
        sa.Column("symptoms", sa.Text(), nullable=False, server_default=""),
        sa.Column("patient_details", sa.JSON(), nullable=True),
        sa.Column("status", appointment_status, nullable=False, server_default="Scheduled"),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_appointments_id", "appointments", ["id"])
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_practitioner_date", "appointments", ["practitioner_id", "date"])
    op.create_index(
        "uq_appointments_active_slot",
        "appointments",
        ["slot_id"],
        unique=True,
        postgresql_where=sa.text(ACTIVE_STATUSES_SQL),
    )

    op.create_table(
        "visit_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("appointment_id", sa.Integer(), sa.ForeignKey("appointments.id"), nullable=False, unique=True),
        sa.Column("practitioner_id", sa.Integer(), nullable=False),
        sa.Column("patient_id", sa.Integer(), sa.ForeignKey("patients.id"), nullable=False),
        sa.Column("patient_details", sa.JSON(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=False),
        sa.Column("symptoms", sa.Text(), nullable=False, server_default=""),
        sa.Column("vital_signs", sa.JSON(), nullable=False),
        sa.Column("prescription", sa.JSON(), nullable=False),
        sa.Column("doctor_notes", sa.Text(), nullable=False, server_default=""),
        sa.Column("patient_advice", sa.Text(), nullable=False, server_default=""),
        sa.Column("lab_reports", sa.JSON(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_visit_records_id", "visit_records", ["id"])
    op.create_index("ix_visit_records_practitioner_id", "visit_records", ["practitioner_id"])
    op.create_index("ix_visit_records_patient_id", "visit_records", ["patient_id"])


def downgrade() -> None:
    """Drop scheduling tables."""
    op.drop_table("visit_records")
    op.drop_index("uq_appointments_active_slot", table_name="appointments")
    op.drop_table("appointments")
    op.drop_table("time_slots")
    op.drop_table("patients")
    appointment_status.drop(op.get_bind(), checkfirst=True)
