"""Reject overlapping time slots of one practitioner in the database.

Revision ID: 002_slot_overlap_exclusion
Revises: 001_scheduling_schema
Create Date: 2026-10-19

The per-practitioner lock only serializes slot creation inside one process.
This exclusion constraint covers writers in other processes; a violation
surfaces as SlotOverlap like the unique start constraint does.
"""

from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002_slot_overlap_exclusion"
down_revision: Union[str, Sequence[str], None] = "001_scheduling_schema"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Enable btree_gist and add the overlap exclusion constraint."""
    # btree_gist provides the gist "=" operator class for integer columns
    op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
    op.execute(
        """
        ALTER TABLE time_slots
        ADD CONSTRAINT ex_time_slots_no_overlap
        EXCLUDE USING gist (
            practitioner_id WITH =,
            tsrange(date + start_time, date + end_time) WITH &&
        )
        """
    )


def downgrade() -> None:
    """Drop the overlap exclusion constraint."""
    op.execute("ALTER TABLE time_slots DROP CONSTRAINT IF EXISTS ex_time_slots_no_overlap")
