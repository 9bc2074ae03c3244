"""
Slot Store

Owns practitioner availability windows. Every slot mutation in the system
goes through this service.
"""

import logging
from collections.abc import AsyncIterator
from datetime import date, time

from app.core.domain import (
    AuthorizationException,
    EntityNotFoundException,
    SlotLockedException,
    SlotOverlapException,
)
from app.domains.scheduling.application.dto import RequestContext
from app.domains.scheduling.application.ports import ILockRegistry, ISlotRepository, IUnitOfWork
from app.domains.scheduling.domain.entities import TimeSlot

logger = logging.getLogger(__name__)


class SlotSequence:
    """
    Lazy, restartable sequence of slots ordered by (date, start time).

    Nothing is queried until iteration starts, and every new iteration
    runs a fresh query, so the sequence reflects the current state.

    Example:
        ```python
        slots = slot_store.list_slots(practitioner_id=7, slot_date=date(2025, 3, 1))
        async for slot in slots:
            ...
        refreshed = await slots.to_list()
        ```
    """

    def __init__(
        self,
        repository: ISlotRepository,
        practitioner_id: int,
        slot_date: date | None = None,
        available_only: bool = False,
    ):
        self._repository = repository
        self.practitioner_id = practitioner_id
        self.slot_date = slot_date
        self.available_only = available_only

    def __aiter__(self) -> AsyncIterator[TimeSlot]:
        return self._repository.iter_slots(
            self.practitioner_id,
            slot_date=self.slot_date,
            available_only=self.available_only,
        ).__aiter__()

    async def to_list(self) -> list[TimeSlot]:
        return [slot async for slot in self]


class SlotStore:
    """
    Availability windows per practitioner per day.

    claim() and release() are internal transitions: they run inside the
    caller's transaction and never commit on their own.
    """

    def __init__(
        self,
        slot_repository: ISlotRepository,
        unit_of_work: IUnitOfWork,
        locks: ILockRegistry,
    ):
        self._slots = slot_repository
        self._uow = unit_of_work
        self._locks = locks

    async def create_slot(
        self,
        practitioner_id: int,
        slot_date: date,
        start: time,
        end: time,
        context: RequestContext,
    ) -> TimeSlot:
        """
        Publish a new unclaimed slot.

        Raises:
            InvalidRangeException: If start >= end
            SlotOverlapException: If the window intersects another slot of the same day
            AuthorizationException: If the caller does not act for the practitioner
        """
        if not context.acts_for_practitioner(practitioner_id):
            raise AuthorizationException("create_slot", f"practitioner:{practitioner_id}", str(context.user_id))

        slot = TimeSlot.open(practitioner_id, slot_date, start, end)

        async with self._locks.hold(("slots", practitioner_id, slot_date)):
            try:
                overlapping = await self._slots.find_overlapping(practitioner_id, slot_date, slot.window)
                if overlapping:
                    raise SlotOverlapException(practitioner_id, slot_date, overlapping[0].id)

                slot = await self._slots.add(slot)
                await self._uow.commit()
            except Exception:
                await self._uow.rollback()
                raise

        logger.info(f"Created slot {slot.id} for practitioner {practitioner_id} on {slot_date} {slot.time_range}")
        return slot

    async def delete_slot(self, slot_id: int, context: RequestContext) -> None:
        """
        Remove an unclaimed slot.

        Raises:
            EntityNotFoundException: If the slot does not exist
            SlotLockedException: If the slot is claimed
        """
        slot = await self.get_slot(slot_id)
        if not context.acts_for_practitioner(slot.practitioner_id):
            raise AuthorizationException("delete_slot", f"slot:{slot_id}", str(context.user_id))

        slot.ensure_unclaimed()

        try:
            # A concurrent booking may claim the slot after the read above
            if not await self._slots.delete_unclaimed(slot_id):
                raise SlotLockedException(slot_id)
            await self._uow.commit()
        except Exception:
            await self._uow.rollback()
            raise

        logger.info(f"Deleted slot {slot_id}")

    def list_slots(
        self,
        practitioner_id: int,
        slot_date: date | None = None,
        available_only: bool = False,
    ) -> SlotSequence:
        """Slots of a practitioner, optionally for one day and only unclaimed ones."""
        return SlotSequence(self._slots, practitioner_id, slot_date, available_only)

    async def get_slot(self, slot_id: int) -> TimeSlot:
        slot = await self._slots.find_by_id(slot_id)
        if slot is None:
            raise EntityNotFoundException("TimeSlot", slot_id)
        return slot

    # ==================== Internal transitions ====================

    async def claim(self, slot_id: int) -> bool:
        """Atomically mark a slot as booked. Used by BookingEngine only."""
        claimed = await self._slots.try_claim(slot_id)
        logger.debug(f"Claim slot {slot_id}: {'won' if claimed else 'lost'}")
        return claimed

    async def release(self, slot_id: int) -> bool:
        """Atomically free a booked slot. Used by AppointmentLifecycle only."""
        released = await self._slots.release(slot_id)
        if not released:
            logger.warning(f"Slot {slot_id} was not claimed when released")
        return released
