from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from app.models.timetable import BreakTime, Period
from app.schemas.conflict import AvailabilityCheck, ConflictKind, IntervalOut, ScheduleConflict
from app.services.time_values import Interval


@dataclass(frozen=True)
class BookedPeriod:
    id: str
    interval: Interval
    teacher_id: str
    classroom_id: str
    owner: str | None = None

    @classmethod
    def from_model(cls, period: Period) -> "BookedPeriod":
        owner = None
        if period.timetable is not None:
            owner = f"Class: {period.timetable.scope_label}"
        return cls(
            id=period.id,
            interval=period.interval,
            teacher_id=period.teacher_id,
            classroom_id=period.classroom_id,
            owner=owner,
        )


@dataclass(frozen=True)
class BookedBreak:
    id: str
    interval: Interval

    @classmethod
    def from_model(cls, break_time: BreakTime) -> "BookedBreak":
        return cls(id=break_time.id, interval=break_time.interval)


def _conflict(
    kind: ConflictKind,
    interval: Interval,
    entity_id: str,
    *,
    candidate_id: str | None = None,
    additional_info: str | None = None,
) -> ScheduleConflict:
    return ScheduleConflict(
        kind=kind,
        conflicting_interval=IntervalOut.from_interval(interval),
        conflicting_entity_id=entity_id,
        candidate_id=candidate_id,
        additional_info=additional_info,
    )


def check_availability(
    candidate: BookedPeriod,
    existing_periods: Iterable[BookedPeriod],
    existing_breaks: Iterable[BookedBreak],
) -> AvailabilityCheck:
    """Collects every teacher, classroom and break conflict for ``candidate``.

    All three checks always run so that a slot that is double-booked for both
    teacher and classroom reports both. Existing periods with the candidate's
    own id are ignored, which lets a stored period be re-checked in place.
    """
    periods = [period for period in existing_periods if period.id != candidate.id]
    conflicts: list[ScheduleConflict] = []

    for period in periods:
        if period.teacher_id == candidate.teacher_id and period.interval.overlaps(candidate.interval):
            conflicts.append(
                _conflict(
                    ConflictKind.TEACHER,
                    period.interval,
                    period.id,
                    candidate_id=candidate.id,
                    additional_info=period.owner,
                )
            )

    for period in periods:
        if period.classroom_id == candidate.classroom_id and period.interval.overlaps(candidate.interval):
            conflicts.append(
                _conflict(
                    ConflictKind.CLASSROOM,
                    period.interval,
                    period.id,
                    candidate_id=candidate.id,
                    additional_info=period.owner,
                )
            )

    for break_window in existing_breaks:
        if break_window.interval.overlaps(candidate.interval):
            conflicts.append(
                _conflict(ConflictKind.BREAK_TIME, break_window.interval, break_window.id, candidate_id=candidate.id)
            )

    return AvailabilityCheck(is_available=not conflicts, conflicts=conflicts)


def check_batch(
    candidates: Sequence[BookedPeriod],
    existing_periods: Sequence[BookedPeriod],
    existing_breaks: Sequence[BookedBreak],
) -> AvailabilityCheck:
    """Checks a batch of new periods against the stored schedule and each other.

    Each candidate is compared with the existing periods plus the candidates
    before it, so an overlapping pair inside the batch is reported once.
    """
    conflicts: list[ScheduleConflict] = []
    for index, candidate in enumerate(candidates):
        result = check_availability(candidate, [*existing_periods, *candidates[:index]], existing_breaks)
        conflicts.extend(result.conflicts)
    return AvailabilityCheck(is_available=not conflicts, conflicts=conflicts)


def merge_checks(checks: Iterable[AvailabilityCheck]) -> AvailabilityCheck:
    conflicts = [conflict for check in checks for conflict in check.conflicts]
    return AvailabilityCheck(is_available=not conflicts, conflicts=conflicts)


def check_time_slots(
    candidates: Sequence[BookedPeriod],
    class_periods: Iterable[BookedPeriod],
) -> AvailabilityCheck:
    """Reports candidates that overlap another period of the same timetable.

    A class attends one period at a time, whoever teaches it, so any overlap
    with the timetable's own periods (or an earlier candidate) is a conflict.
    """
    booked = list(class_periods)
    conflicts: list[ScheduleConflict] = []
    for candidate in candidates:
        for period in booked:
            if period.id != candidate.id and period.interval.overlaps(candidate.interval):
                conflicts.append(
                    _conflict(
                        ConflictKind.TIME_SLOT,
                        period.interval,
                        period.id,
                        candidate_id=candidate.id,
                        additional_info=period.owner,
                    )
                )
        booked.append(candidate)
    return AvailabilityCheck(is_available=not conflicts, conflicts=conflicts)
