"""Value types for wall-clock scheduling.

Every time that enters the system is parsed exactly once into a
:class:`TimeOfDay`; everything downstream compares ``TimeOfDay`` and
:class:`Interval` values, never raw strings.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, time
from enum import IntEnum
from typing import Any

from pydantic_core import core_schema

from app.core.exceptions import InvalidInterval, InvalidTimeFormat

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
MINUTES_PER_DAY = 24 * 60


class DayOfWeek(IntEnum):
    """ISO day numbering: Monday is 1, Sunday is 7."""

    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


@dataclass(frozen=True, order=True)
class TimeOfDay:
    """Minute-precision time of day, ordered by minutes since midnight."""

    minutes: int

    def __post_init__(self) -> None:
        if not 0 <= self.minutes < MINUTES_PER_DAY:
            raise InvalidTimeFormat(self.minutes)

    @classmethod
    def parse(cls, value: str) -> "TimeOfDay":
        if not isinstance(value, str) or not TIME_PATTERN.fullmatch(value):
            raise InvalidTimeFormat(value)
        hours, minutes = value.split(":")
        return cls(int(hours) * 60 + int(minutes))

    @classmethod
    def from_time(cls, value: time | datetime) -> "TimeOfDay":
        # Seconds and below are not significant for scheduling.
        return cls(value.hour * 60 + value.minute)

    @classmethod
    def coerce(cls, value: Any) -> "TimeOfDay":
        if isinstance(value, TimeOfDay):
            return value
        if isinstance(value, (time, datetime)):
            return cls.from_time(value)
        return cls.parse(value)

    @property
    def hour(self) -> int:
        return self.minutes // 60

    @property
    def minute(self) -> int:
        return self.minutes % 60

    def to_time(self) -> time:
        return time(self.hour, self.minute)

    def __str__(self) -> str:
        return format_time(self)

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            _validate_time_of_day,
            serialization=core_schema.plain_serializer_function_ser_schema(format_time),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema: Any, handler: Any) -> dict:
        return {"type": "string", "pattern": TIME_PATTERN.pattern, "examples": ["09:00"]}


def _validate_time_of_day(value: Any) -> TimeOfDay:
    try:
        return TimeOfDay.coerce(value)
    except InvalidTimeFormat as exc:
        raise ValueError(exc.message) from exc


def parse_time(value: str) -> TimeOfDay:
    return TimeOfDay.parse(value)


def format_time(value: TimeOfDay) -> str:
    return f"{value.hour:02d}:{value.minute:02d}"


@dataclass(frozen=True)
class Interval:
    """Half-open ``[start, end)`` range on one day of the week."""

    day: DayOfWeek
    start: TimeOfDay
    end: TimeOfDay

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise InvalidInterval(format_time(self.start), format_time(self.end), int(self.day))

    def overlaps(self, other: "Interval") -> bool:
        # Touching endpoints (10:00 end, 10:00 start) are not an overlap.
        return self.day == other.day and self.start < other.end and self.end > other.start

    def as_dict(self) -> dict:
        return {
            "start_time": format_time(self.start),
            "end_time": format_time(self.end),
            "day_of_week": int(self.day),
        }


def overlaps(first: Interval, second: Interval) -> bool:
    return first.overlaps(second)
