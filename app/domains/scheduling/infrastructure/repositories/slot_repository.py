"""
Time Slot Repository Implementation

SQLAlchemy implementation of ISlotRepository.
"""

import logging
from collections.abc import AsyncIterator
from datetime import UTC, date, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.domain import SlotOverlapException
from app.domains.scheduling.application.ports.slot_repository import ISlotRepository
from app.domains.scheduling.domain.entities.time_slot import TimeSlot
from app.domains.scheduling.domain.value_objects.time_window import TimeWindow
from app.domains.scheduling.infrastructure.persistence.sqlalchemy.models import TimeSlotModel

logger = logging.getLogger(__name__)


class SQLAlchemySlotRepository(ISlotRepository):
    """
    SQLAlchemy implementation of slot repository.

    Writes are flushed, never committed; claim, release and delete are
    single conditional statements whose rowcount tells whether they applied.
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, slot_id: int) -> TimeSlot | None:
        """Find slot by ID."""
        result = await self.session.execute(select(TimeSlotModel).where(TimeSlotModel.id == slot_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def find_overlapping(
        self,
        practitioner_id: int,
        slot_date: date,
        window: TimeWindow,
    ) -> list[TimeSlot]:
        """Find slots intersecting [window.start, window.end) on the same day."""
        query = (
            select(TimeSlotModel)
            .where(
                TimeSlotModel.practitioner_id == practitioner_id,
                TimeSlotModel.date == slot_date,
                TimeSlotModel.start_time < window.end,
                TimeSlotModel.end_time > window.start,
            )
            .order_by(TimeSlotModel.start_time)
        )
        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def iter_slots(
        self,
        practitioner_id: int,
        slot_date: date | None = None,
        available_only: bool = False,
    ) -> AsyncIterator[TimeSlot]:
        """Stream slots ordered by date and start time."""
        query = select(TimeSlotModel).where(TimeSlotModel.practitioner_id == practitioner_id)

        if slot_date is not None:
            query = query.where(TimeSlotModel.date == slot_date)
        if available_only:
            query = query.where(TimeSlotModel.claimed.is_(False))

        query = query.order_by(TimeSlotModel.date, TimeSlotModel.start_time)

        result = await self.session.stream_scalars(query)
        async for model in result:
            yield self._to_entity(model)

    async def add(self, slot: TimeSlot) -> TimeSlot:
        """Insert slot; a unique-start violation from a concurrent insert is an overlap."""
        model = self._to_model(slot)
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning(f"Slot insert rejected by constraint: {e.orig}")
            raise SlotOverlapException(slot.practitioner_id, slot.slot_date) from e  # type: ignore[arg-type]
        return self._to_entity(model)

    async def try_claim(self, slot_id: int) -> bool:
        """UPDATE time_slots SET claimed = true WHERE id = :id AND claimed = false."""
        result = await self.session.execute(
            update(TimeSlotModel)
            .where(TimeSlotModel.id == slot_id, TimeSlotModel.claimed.is_(False))
            .values(claimed=True, updated_at=datetime.now(UTC))
        )
        return result.rowcount == 1

    async def release(self, slot_id: int) -> bool:
        """UPDATE time_slots SET claimed = false WHERE id = :id AND claimed = true."""
        result = await self.session.execute(
            update(TimeSlotModel)
            .where(TimeSlotModel.id == slot_id, TimeSlotModel.claimed.is_(True))
            .values(claimed=False, updated_at=datetime.now(UTC))
        )
        return result.rowcount == 1

    async def delete_unclaimed(self, slot_id: int) -> bool:
        """DELETE FROM time_slots WHERE id = :id AND claimed = false."""
        result = await self.session.execute(
            delete(TimeSlotModel).where(TimeSlotModel.id == slot_id, TimeSlotModel.claimed.is_(False))
        )
        return result.rowcount == 1

    def _to_entity(self, model: TimeSlotModel) -> TimeSlot:
        """Convert model to entity."""
        return TimeSlot(
            id=model.id,  # type: ignore[arg-type]
            practitioner_id=model.practitioner_id,  # type: ignore[arg-type]
            slot_date=model.date,  # type: ignore[arg-type]
            start_time=model.start_time,  # type: ignore[arg-type]
            end_time=model.end_time,  # type: ignore[arg-type]
            claimed=bool(model.claimed),
            created_at=model.created_at,  # type: ignore[arg-type]
            updated_at=model.updated_at,  # type: ignore[arg-type]
        )

    def _to_model(self, entity: TimeSlot) -> TimeSlotModel:
        """Convert entity to model."""
        return TimeSlotModel(
            practitioner_id=entity.practitioner_id,
            date=entity.slot_date,
            start_time=entity.start_time,
            end_time=entity.end_time,
            claimed=entity.claimed,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
