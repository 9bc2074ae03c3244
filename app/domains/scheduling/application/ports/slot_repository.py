"""
Time Slot Repository Port

Interface for slot data access following Clean Architecture.
"""

from collections.abc import AsyncIterator
from datetime import date
from typing import Protocol, runtime_checkable

from app.domains.scheduling.domain.entities.time_slot import TimeSlot
from app.domains.scheduling.domain.value_objects.time_window import TimeWindow


@runtime_checkable
class ISlotRepository(Protocol):
    """
    Time slot repository interface.

    Implementations never commit; the unit of work owns the transaction.
    claim/release/delete_unclaimed are single conditional statements so
    they stay atomic with respect to each other.
    """

    async def find_by_id(self, slot_id: int) -> TimeSlot | None:
        """
        Find slot by ID.

        Args:
            slot_id: Unique slot identifier

        Returns:
            TimeSlot if found, None otherwise
        """
        ...

    async def find_overlapping(
        self,
        practitioner_id: int,
        slot_date: date,
        window: TimeWindow,
    ) -> list[TimeSlot]:
        """
        Find slots of a practitioner on a day that intersect a window.

        Uses half-open comparison: existing.start < window.end AND existing.end > window.start.
        """
        ...

    def iter_slots(
        self,
        practitioner_id: int,
        slot_date: date | None = None,
        available_only: bool = False,
    ) -> AsyncIterator[TimeSlot]:
        """
        Stream slots ordered by (date, start_time).

        Args:
            practitioner_id: Owner of the slots
            slot_date: Restrict to one day
            available_only: Skip claimed slots
        """
        ...

    async def add(self, slot: TimeSlot) -> TimeSlot:
        """Insert a new slot and return it with its ID assigned."""
        ...

    async def try_claim(self, slot_id: int) -> bool:
        """
        Compare-and-set claimed false -> true.

        Returns:
            True if this call claimed the slot, False if it was taken or missing
        """
        ...

    async def release(self, slot_id: int) -> bool:
        """
        Compare-and-set claimed true -> false.

        Returns:
            True if the slot was claimed and is now free
        """
        ...

    async def delete_unclaimed(self, slot_id: int) -> bool:
        """
        Delete the slot only if it is not claimed.

        Returns:
            True if a row was deleted
        """
        ...
