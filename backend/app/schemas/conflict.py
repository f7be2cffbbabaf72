from enum import Enum

from pydantic import BaseModel, Field

from app.services.time_values import DayOfWeek, Interval, TimeOfDay


class ConflictKind(str, Enum):
    TEACHER = "TEACHER"
    CLASSROOM = "CLASSROOM"
    BREAK_TIME = "BREAK_TIME"
    TIME_SLOT = "TIME_SLOT"


class IntervalOut(BaseModel):
    start_time: TimeOfDay
    end_time: TimeOfDay
    day_of_week: DayOfWeek

    @classmethod
    def from_interval(cls, interval: Interval) -> "IntervalOut":
        return cls(**interval.as_dict())


class ScheduleConflict(BaseModel):
    kind: ConflictKind
    conflicting_interval: IntervalOut
    conflicting_entity_id: str
    # Which submitted period collided, when checking a batch.
    candidate_id: str | None = None
    # Owner of the conflicting booking, e.g. "Class: 7B".
    additional_info: str | None = None


class AvailabilityCheck(BaseModel):
    is_available: bool
    conflicts: list[ScheduleConflict] = Field(default_factory=list)
