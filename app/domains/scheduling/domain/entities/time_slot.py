"""
TimeSlot Entity

A single bookable window published by a practitioner.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Any

from app.core.domain import Entity, SlotLockedException

from ..value_objects.time_window import TIME_FORMAT, TimeWindow


@dataclass
class TimeSlot(Entity[int]):
    """
    Availability window of one practitioner on one day.

    A claimed slot is immutable; only the cancellation path releases it.

    Example:
        ```python
        slot = TimeSlot.open(
            practitioner_id=7,
            slot_date=date(2025, 3, 1),
            start=time(9, 0),
            end=time(9, 30),
        )
        slot.window.overlaps_with(other.window)
        ```
    """

    practitioner_id: int = 0
    slot_date: date | None = None
    start_time: time | None = None
    end_time: time | None = None
    claimed: bool = False

    @classmethod
    def open(cls, practitioner_id: int, slot_date: date, start: time, end: time) -> "TimeSlot":
        """Create an unclaimed slot, validating the window."""
        window = TimeWindow(start=start, end=end)
        return cls(
            practitioner_id=practitioner_id,
            slot_date=slot_date,
            start_time=window.start,
            end_time=window.end,
            claimed=False,
        )

    @property
    def window(self) -> TimeWindow:
        assert self.start_time is not None and self.end_time is not None
        return TimeWindow(start=self.start_time, end=self.end_time)

    @property
    def time_range(self) -> str:
        return self.window.display()

    def overlaps(self, other: "TimeSlot") -> bool:
        """Same practitioner, same day, intersecting windows."""
        return (
            self.practitioner_id == other.practitioner_id
            and self.slot_date == other.slot_date
            and self.window.overlaps_with(other.window)
        )

    def ensure_unclaimed(self) -> None:
        """Raise SlotLockedException if the slot is booked."""
        if self.claimed:
            raise SlotLockedException(self.id or 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "practitioner_id": self.practitioner_id,
            "date": self.slot_date.isoformat() if self.slot_date else None,
            "start_time": self.start_time.strftime(TIME_FORMAT) if self.start_time else None,
            "end_time": self.end_time.strftime(TIME_FORMAT) if self.end_time else None,
            "claimed": self.claimed,
        }
