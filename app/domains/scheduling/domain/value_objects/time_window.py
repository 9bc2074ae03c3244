"""
Time Window Value Object

A half-open interval [start, end) within a single day.
"""

from dataclasses import dataclass
from datetime import datetime, time

from app.core.domain import InvalidRangeException, ValueObject

TIME_FORMAT = "%H:%M"


@dataclass(frozen=True)
class TimeWindow(ValueObject):
    """
    Half-open time interval.

    Two windows that merely touch (09:00-09:30 and 09:30-10:00) do not overlap.
    """

    start: time
    end: time

    def _validate(self) -> None:
        if self.start >= self.end:
            raise InvalidRangeException(self.start, self.end)

    def overlaps_with(self, other: "TimeWindow") -> bool:
        """Check if two windows share any instant."""
        return self.start < other.end and other.start < self.end

    @property
    def duration_minutes(self) -> int:
        start = datetime.combine(datetime.min, self.start)
        end = datetime.combine(datetime.min, self.end)
        return int((end - start).total_seconds() // 60)

    def display(self) -> str:
        """Format as 'HH:MM - HH:MM'."""
        return f"{self.start.strftime(TIME_FORMAT)} - {self.end.strftime(TIME_FORMAT)}"

    def __str__(self) -> str:
        return self.display()
