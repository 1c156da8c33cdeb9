from datetime import datetime, date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


def join_memos(first: str, second: str) -> str:
    """Join two memos with ", ", skipping whichever side is empty."""
    if first and second:
        return f"{first}, {second}"
    return first or second


class Direction(str, Enum):
    IN = "In"
    OUT = "Out"

    @classmethod
    def parse(cls, text: str) -> "Direction":
        value = text.strip().lower()
        if value == "in":
            return cls.IN
        if value == "out":
            return cls.OUT
        raise ValueError(f'Direction must be "In" or "Out", got {text!r}')


class Punch(BaseModel):
    model_config = ConfigDict(frozen=True)

    direction: Direction
    instant: datetime
    memo: str = ""

    @field_validator("instant")
    @classmethod
    def require_offset(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("punch instants need an explicit UTC offset")
        return value

    @property
    def stamp(self) -> str:
        return self.instant.strftime("%Y-%m-%d %I:%M ") + self.instant.strftime("%p").lower()

    def __str__(self) -> str:
        return f"{self.direction.value:3} {self.stamp} {self.memo}"


class Interval(BaseModel):
    start: Punch
    end: Punch
    complete: bool
    memo: str = ""

    @classmethod
    def pair(cls, start: Punch, end: Punch, complete: bool) -> "Interval":
        return cls(start=start, end=end, complete=complete, memo=join_memos(start.memo, end.memo))

    @property
    def date(self) -> date:
        # calendar date in the start punch's own offset
        return self.start.instant.date()

    @property
    def duration(self) -> float:
        return (self.end.instant - self.start.instant).total_seconds()


class RoundingMode(str, Enum):
    UP = "up"
    DOWN = "down"
    HALF = "half"
    NONE = "none"


class RoundingSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: RoundingMode
    granularity: float = 0.0

    @classmethod
    def up(cls, granularity: float) -> "RoundingSpec":
        return cls(mode=RoundingMode.UP, granularity=granularity)

    @classmethod
    def down(cls, granularity: float) -> "RoundingSpec":
        return cls(mode=RoundingMode.DOWN, granularity=granularity)

    @classmethod
    def half(cls, granularity: float) -> "RoundingSpec":
        return cls(mode=RoundingMode.HALF, granularity=granularity)

    @classmethod
    def none(cls) -> "RoundingSpec":
        return cls(mode=RoundingMode.NONE)


class DailyRecord(BaseModel):
    """Worked seconds attributed to one calendar date.

    ``complete`` is false as soon as any contributing interval had a
    synthesized punch.
    """

    date: date
    duration: float
    memo: str = ""
    complete: bool = True

    @classmethod
    def from_interval(cls, interval: Interval) -> "DailyRecord":
        return cls(
            date=interval.date,
            duration=interval.duration,
            memo=interval.memo,
            complete=interval.complete,
        )

    @property
    def seconds(self) -> float:
        return self.duration

    @property
    def minutes(self) -> float:
        return self.duration / 60.0

    @property
    def hours(self) -> float:
        return self.duration / 3600.0

    def add_seconds(self, seconds: float) -> None:
        self.duration += seconds

    def append_memo(self, memo: str) -> None:
        self.memo = join_memos(self.memo, memo)

    def combine(self, other: "DailyRecord") -> bool:
        """Merge ``other`` into this record when both fall on the same date.

        Returns False and leaves this record untouched otherwise.
        """
        if self.date != other.date:
            return False
        self.add_seconds(other.duration)
        self.append_memo(other.memo)
        self.complete = self.complete and other.complete
        return True

    def render(self, seconds: Optional[float] = None) -> str:
        """Report line, optionally showing an already rounded duration."""
        if seconds is None:
            seconds = self.duration
        line = f"{self.date:%Y-%m-%d} {seconds / 3600.0:.2f} {self.memo}"
        if not self.complete:
            line += " Missing record(s)"
        return line

    def __str__(self) -> str:
        return self.render()


class TimeField(str, Enum):
    DATE = "date"
    HOUR = "hour"
    MINUTE = "minute"
    SECOND = "second"
    MICROSECOND = "microsecond"
    OFFSET = "offset"


class DateTimeFields(BaseModel):
    """Date and time components as written, before range checks."""

    model_config = ConfigDict(frozen=True)

    year: Optional[int] = None
    month: Optional[int] = None
    day: Optional[int] = None
    hour: int = 0
    minute: int = 0
    second: int = 0
    microsecond: int = 0
    utc_offset: Optional[int] = None
