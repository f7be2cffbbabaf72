from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field, field_validator, model_validator

from app.core.config import get_settings
from app.models.timetable import BreakType
from app.schemas.reference import ClassroomOut, SubjectOut, TeacherOut
from app.services.time_values import TIME_PATTERN, DayOfWeek, Interval, TimeOfDay


def _timestamp_to_time(value: Any) -> Any:
    # Periods may arrive as full ISO timestamps; only hour and minute matter.
    # A bare date has no time part and is left for the time parser to reject.
    if isinstance(value, str) and not TIME_PATTERN.fullmatch(value) and ("T" in value or " " in value.strip()):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return value


PeriodTime = Annotated[TimeOfDay, BeforeValidator(_timestamp_to_time)]


def _default_period_minutes() -> int:
    return get_settings().default_period_minutes


class BreakWindowInput(BaseModel):
    start_time: TimeOfDay
    end_time: TimeOfDay
    day_of_week: DayOfWeek

    @model_validator(mode="after")
    def validate_time_order(self) -> "BreakWindowInput":
        if self.end_time <= self.start_time:
            raise ValueError("Break end time must be after start time")
        return self

    @property
    def interval(self) -> Interval:
        return Interval(self.day_of_week, self.start_time, self.end_time)


class BreakTimeInput(BreakWindowInput):
    type: BreakType


class PeriodInput(BaseModel):
    start_time: PeriodTime
    end_time: PeriodTime
    days_of_week: list[DayOfWeek] = Field(min_length=1, max_length=7)
    subject_id: str = Field(min_length=1, max_length=36)
    teacher_id: str = Field(min_length=1, max_length=36)
    classroom_id: str = Field(min_length=1, max_length=36)
    duration_in_minutes: int = Field(default_factory=_default_period_minutes, ge=1)

    @field_validator("days_of_week")
    @classmethod
    def dedupe_days(cls, value: list[DayOfWeek]) -> list[DayOfWeek]:
        seen: list[DayOfWeek] = []
        for day in value:
            if day not in seen:
                seen.append(day)
        return seen

    @field_validator("duration_in_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        limit = get_settings().max_period_minutes
        if value > limit:
            raise ValueError(f"Period duration cannot exceed {limit} minutes")
        return value

    @model_validator(mode="after")
    def validate_time_order(self) -> "PeriodInput":
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self

    def intervals(self) -> list[Interval]:
        return [Interval(day, self.start_time, self.end_time) for day in self.days_of_week]


class TimetableInput(BaseModel):
    term_id: str = Field(min_length=1, max_length=36)
    class_group_id: str | None = Field(default=None, min_length=1, max_length=36)
    class_id: str | None = Field(default=None, min_length=1, max_length=36)
    start_time: TimeOfDay
    end_time: TimeOfDay
    break_times: list[BreakTimeInput] = Field(default_factory=list, max_length=70)
    periods: list[PeriodInput] = Field(default_factory=list, max_length=200)

    @model_validator(mode="after")
    def validate_scope(self) -> "TimetableInput":
        if self.class_id is None and self.class_group_id is None:
            raise ValueError("Either class_id or class_group_id is required")
        if self.end_time <= self.start_time:
            raise ValueError("Daily end time must be after daily start time")
        return self


class PeriodBatchRequest(BaseModel):
    periods: list[PeriodInput] = Field(default_factory=list, max_length=200)


class AvailabilityRequest(BaseModel):
    period: PeriodInput
    break_times: list[BreakWindowInput] = Field(default_factory=list, max_length=70)
    exclude_period_id: str | None = Field(default=None, min_length=1, max_length=36)
    # Limits the check to timetables of one term; all terms when omitted.
    term_id: str | None = Field(default=None, min_length=1, max_length=36)


class BreakTimeOut(BaseModel):
    id: str
    timetable_id: str
    day_of_week: DayOfWeek
    start_time: TimeOfDay
    end_time: TimeOfDay
    type: BreakType

    model_config = {"from_attributes": True}


class PeriodOut(BaseModel):
    id: str
    timetable_id: str
    day_of_week: DayOfWeek
    start_time: TimeOfDay
    end_time: TimeOfDay
    duration_in_minutes: int
    subject_id: str
    teacher_id: str
    classroom_id: str
    subject: SubjectOut
    teacher: TeacherOut
    classroom: ClassroomOut

    model_config = {"from_attributes": True}


class TimetableOut(BaseModel):
    id: str
    term_id: str
    class_id: str | None
    class_group_id: str | None
    start_time: TimeOfDay
    end_time: TimeOfDay
    break_times: list[BreakTimeOut]
    periods: list[PeriodOut]
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class ScheduleOut(BaseModel):
    periods: list[PeriodOut]
    break_times: list[BreakTimeOut]
