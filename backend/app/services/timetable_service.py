from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from app.core.exceptions import (
    DuplicateTimetableError,
    ReferenceNotFoundError,
    ResourceNotFoundError,
    ScheduleConflictError,
)
from app.models.classroom import Classroom
from app.models.school_class import ClassGroup, SchoolClass
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.term import Term
from app.models.timetable import BreakTime, Period, Timetable
from app.schemas.conflict import AvailabilityCheck
from app.schemas.timetable import AvailabilityRequest, BreakTimeInput, PeriodInput, TimetableInput
from app.services.conflict_service import (
    BookedBreak,
    BookedPeriod,
    check_availability,
    check_batch,
    check_time_slots,
    merge_checks,
)
from app.services.scope_locks import (
    ScopeLockRegistry,
    booking_scope_keys,
    get_scope_locks,
    timetable_scope_keys,
)

logger = logging.getLogger(__name__)


def expand_periods(periods: Sequence[PeriodInput]) -> list[tuple[BookedPeriod, PeriodInput]]:
    """One booked period per (input, day); ids point back at the input position."""
    expanded: list[tuple[BookedPeriod, PeriodInput]] = []
    for index, period in enumerate(periods):
        for interval in period.intervals():
            booked = BookedPeriod(
                id=f"periods[{index}].day{int(interval.day)}",
                interval=interval,
                teacher_id=period.teacher_id,
                classroom_id=period.classroom_id,
            )
            expanded.append((booked, period))
    return expanded


def _break_candidates(break_times: Sequence[BreakTimeInput]) -> list[BookedBreak]:
    return [BookedBreak(id=f"break_times[{index}]", interval=item.interval) for index, item in enumerate(break_times)]


class TimetableService:
    """Creates and reads timetables on a caller-owned session.

    The session is the only store handle used; transaction boundaries are
    owned here so that creation is all-or-nothing.
    """

    def __init__(self, db: Session, *, locks: ScopeLockRegistry | None = None) -> None:
        self.db = db
        self.locks = locks or get_scope_locks()

    # Reads

    def _timetable_query(self):
        return select(Timetable).options(
            selectinload(Timetable.periods),
            selectinload(Timetable.break_times),
            joinedload(Timetable.school_class),
            joinedload(Timetable.class_group),
        )

    def get_timetable(self, timetable_id: str) -> Timetable:
        timetable = self.db.execute(
            self._timetable_query().where(Timetable.id == timetable_id)
        ).scalar_one_or_none()
        if timetable is None:
            raise ResourceNotFoundError("Timetable", timetable_id)
        return timetable

    def list_timetables(self, term_id: str | None = None) -> list[Timetable]:
        stmt = self._timetable_query().order_by(Timetable.created_at.asc(), Timetable.id.asc())
        if term_id:
            stmt = stmt.where(Timetable.term_id == term_id)
        return list(self.db.execute(stmt).scalars().unique())

    def teacher_schedule(self, teacher_id: str, term_id: str) -> dict:
        self._require(Teacher, teacher_id, "Teacher", missing=ResourceNotFoundError)
        return self._schedule_for(Period.teacher_id == teacher_id, term_id)

    def classroom_schedule(self, classroom_id: str, term_id: str) -> dict:
        self._require(Classroom, classroom_id, "Classroom", missing=ResourceNotFoundError)
        return self._schedule_for(Period.classroom_id == classroom_id, term_id)

    def _schedule_for(self, condition, term_id: str) -> dict:
        periods = list(
            self.db.execute(
                select(Period)
                .join(Period.timetable)
                .where(condition, Timetable.term_id == term_id)
                .order_by(Period.day_of_week.asc(), Period.start_time.asc())
            )
            .scalars()
            .unique()
        )
        timetable_ids = {period.timetable_id for period in periods}
        break_times: list[BreakTime] = []
        if timetable_ids:
            break_times = list(
                self.db.execute(
                    select(BreakTime)
                    .where(BreakTime.timetable_id.in_(timetable_ids))
                    .order_by(BreakTime.day_of_week.asc(), BreakTime.start_time.asc())
                ).scalars()
            )
        return {"periods": periods, "break_times": break_times}

    # Validation

    def validate_creation(self, payload: TimetableInput) -> None:
        existing = self._find_existing(payload.term_id, payload.class_id, payload.class_group_id)
        if existing is not None:
            logger.warning("Rejected duplicate timetable for term %s; %s already exists", payload.term_id, existing.id)
            raise DuplicateTimetableError(existing.id)

    def _find_existing(self, term_id: str, class_id: str | None, class_group_id: str | None) -> Timetable | None:
        scope = []
        if class_id:
            scope.append(Timetable.class_id == class_id)
        if class_group_id:
            scope.append(Timetable.class_group_id == class_group_id)
        if not scope:
            return None
        return self.db.execute(
            select(Timetable).where(Timetable.term_id == term_id, or_(*scope)).limit(1)
        ).scalar_one_or_none()

    def _require(self, model, resource_id: str, resource_type: str, *, missing=ReferenceNotFoundError):
        instance = self.db.get(model, resource_id)
        if instance is None:
            raise missing(resource_type, resource_id)
        return instance

    def _resolve_scope(self, payload: TimetableInput) -> None:
        self._require(Term, payload.term_id, "Term")
        if payload.class_id:
            self._require(SchoolClass, payload.class_id, "Class")
        if payload.class_group_id:
            self._require(ClassGroup, payload.class_group_id, "ClassGroup")

    def _resolve_period_references(self, periods: Sequence[PeriodInput]) -> None:
        checked: set[tuple[str, str]] = set()
        for period in periods:
            for model, resource_type, resource_id in (
                (Subject, "Subject", period.subject_id),
                (Teacher, "Teacher", period.teacher_id),
                (Classroom, "Classroom", period.classroom_id),
            ):
                if (resource_type, resource_id) in checked:
                    continue
                self._require(model, resource_id, resource_type)
                checked.add((resource_type, resource_id))

    def _existing_periods(
        self,
        candidates: Sequence[BookedPeriod],
        *,
        term_id: str | None = None,
        exclude_timetable_id: str | None = None,
        exclude_period_id: str | None = None,
    ) -> list[BookedPeriod]:
        if not candidates:
            return []
        days = {int(candidate.interval.day) for candidate in candidates}
        teacher_ids = {candidate.teacher_id for candidate in candidates}
        classroom_ids = {candidate.classroom_id for candidate in candidates}
        stmt = (
            select(Period)
            .options(
                joinedload(Period.timetable).joinedload(Timetable.school_class),
                joinedload(Period.timetable).joinedload(Timetable.class_group),
            )
            .where(
                Period.day_of_week.in_(days),
                or_(Period.teacher_id.in_(teacher_ids), Period.classroom_id.in_(classroom_ids)),
            )
        )
        if term_id:
            # Timetables of other terms occupy different weeks.
            stmt = stmt.where(Period.timetable_id.in_(select(Timetable.id).where(Timetable.term_id == term_id)))
        if exclude_timetable_id:
            stmt = stmt.where(Period.timetable_id != exclude_timetable_id)
        if exclude_period_id:
            stmt = stmt.where(Period.id != exclude_period_id)
        return [BookedPeriod.from_model(period) for period in self.db.execute(stmt).scalars().unique()]

    def _ensure_no_conflicts(
        self,
        candidates: Sequence[BookedPeriod],
        breaks: Sequence[BookedBreak],
        *,
        term_id: str,
        exclude_timetable_id: str | None = None,
        exclude_period_id: str | None = None,
        class_periods: Sequence[BookedPeriod] | None = None,
    ) -> None:
        existing = self._existing_periods(
            candidates,
            term_id=term_id,
            exclude_timetable_id=exclude_timetable_id,
            exclude_period_id=exclude_period_id,
        )
        checks = [check_batch(candidates, existing, breaks)]
        if class_periods is not None:
            checks.append(check_time_slots(candidates, class_periods))
        result = merge_checks(checks)
        if not result.is_available:
            logger.warning("Rejected schedule with %d conflict(s)", len(result.conflicts))
            raise ScheduleConflictError([conflict.model_dump(mode="json") for conflict in result.conflicts])

    # Writes

    @staticmethod
    def _write_keys(
        term_id: str,
        class_id: str | None,
        class_group_id: str | None,
        periods: Sequence[PeriodInput],
    ) -> list[str]:
        return timetable_scope_keys(term_id, class_id, class_group_id) + booking_scope_keys(
            term_id,
            (period.teacher_id for period in periods),
            (period.classroom_id for period in periods),
        )

    def _reload_timetable(self, timetable_id: str) -> Timetable:
        # State read before the lock was taken may be stale.
        self.db.expire_all()
        return self.get_timetable(timetable_id)

    @staticmethod
    def _build_periods(expanded: Sequence[tuple[BookedPeriod, PeriodInput]]) -> list[Period]:
        return [
            Period(
                day_of_week=int(booked.interval.day),
                start_time=booked.interval.start,
                end_time=booked.interval.end,
                duration_in_minutes=period.duration_in_minutes,
                subject_id=period.subject_id,
                teacher_id=period.teacher_id,
                classroom_id=period.classroom_id,
            )
            for booked, period in expanded
        ]

    def create_timetable(self, payload: TimetableInput) -> Timetable:
        keys = self._write_keys(payload.term_id, payload.class_id, payload.class_group_id, payload.periods)
        with self.locks.hold(keys):
            self.validate_creation(payload)
            self._resolve_scope(payload)
            self._resolve_period_references(payload.periods)

            expanded = expand_periods(payload.periods)
            self._ensure_no_conflicts(
                [booked for booked, _ in expanded],
                _break_candidates(payload.break_times),
                term_id=payload.term_id,
            )

            timetable = Timetable(
                term_id=payload.term_id,
                class_id=payload.class_id,
                class_group_id=payload.class_group_id,
                start_time=payload.start_time,
                end_time=payload.end_time,
            )
            try:
                self.db.add(timetable)
                self.db.flush()
                if payload.break_times:
                    timetable.break_times.extend(
                        BreakTime(
                            day_of_week=int(item.day_of_week),
                            start_time=item.start_time,
                            end_time=item.end_time,
                            type=item.type,
                        )
                        for item in payload.break_times
                    )
                    self.db.flush()
                if expanded:
                    timetable.periods.extend(self._build_periods(expanded))
                    self.db.flush()
                self.db.commit()
            except IntegrityError as exc:
                self.db.rollback()
                existing = self._find_existing(payload.term_id, payload.class_id, payload.class_group_id)
                if existing is not None:
                    raise DuplicateTimetableError(existing.id) from exc
                raise
            except Exception:
                self.db.rollback()
                raise
            timetable_id = timetable.id

        logger.info(
            "Created timetable %s for term %s (%d period(s), %d break(s))",
            timetable_id,
            payload.term_id,
            len(expanded),
            len(payload.break_times),
        )
        return self.get_timetable(timetable_id)

    def replace_periods(self, timetable_id: str, periods: Sequence[PeriodInput]) -> Timetable:
        timetable = self.get_timetable(timetable_id)
        keys = self._write_keys(timetable.term_id, timetable.class_id, timetable.class_group_id, periods)
        with self.locks.hold(keys):
            timetable = self._reload_timetable(timetable_id)
            self._resolve_period_references(periods)
            expanded = expand_periods(periods)
            self._ensure_no_conflicts(
                [booked for booked, _ in expanded],
                [BookedBreak.from_model(item) for item in timetable.break_times],
                term_id=timetable.term_id,
                exclude_timetable_id=timetable.id,
            )
            try:
                timetable.periods.clear()
                self.db.flush()
                timetable.periods.extend(self._build_periods(expanded))
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        logger.info("Replaced periods of timetable %s (%d period(s))", timetable_id, len(expanded))
        return self.get_timetable(timetable_id)

    def add_periods(self, timetable_id: str, periods: Sequence[PeriodInput]) -> Timetable:
        """Adds periods to an existing timetable, one per listed day.

        Besides teacher, classroom and break conflicts, a new period may not
        overlap any period the timetable already has.
        """
        timetable = self.get_timetable(timetable_id)
        keys = self._write_keys(timetable.term_id, timetable.class_id, timetable.class_group_id, periods)
        with self.locks.hold(keys):
            timetable = self._reload_timetable(timetable_id)
            self._resolve_period_references(periods)
            expanded = expand_periods(periods)
            self._ensure_no_conflicts(
                [booked for booked, _ in expanded],
                [BookedBreak.from_model(item) for item in timetable.break_times],
                term_id=timetable.term_id,
                class_periods=[BookedPeriod.from_model(item) for item in timetable.periods],
            )
            try:
                timetable.periods.extend(self._build_periods(expanded))
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        logger.info("Added %d period(s) to timetable %s", len(expanded), timetable_id)
        return self.get_timetable(timetable_id)

    def update_period(self, period_id: str, period: PeriodInput) -> Timetable:
        """Replaces one stored period with ``period`` expanded over its days."""
        stored = self._require(Period, period_id, "Period", missing=ResourceNotFoundError)
        timetable = self.get_timetable(stored.timetable_id)
        keys = self._write_keys(timetable.term_id, timetable.class_id, timetable.class_group_id, [period])
        with self.locks.hold(keys):
            self.db.expire_all()
            stored = self._require(Period, period_id, "Period", missing=ResourceNotFoundError)
            timetable = self.get_timetable(stored.timetable_id)
            self._resolve_period_references([period])
            expanded = expand_periods([period])
            self._ensure_no_conflicts(
                [booked for booked, _ in expanded],
                [BookedBreak.from_model(item) for item in timetable.break_times],
                term_id=timetable.term_id,
                exclude_period_id=period_id,
                class_periods=[BookedPeriod.from_model(item) for item in timetable.periods if item.id != period_id],
            )
            try:
                timetable.periods.remove(stored)
                self.db.flush()
                timetable.periods.extend(self._build_periods(expanded))
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
            timetable_id = timetable.id

        logger.info("Updated period %s of timetable %s (%d period(s))", period_id, timetable_id, len(expanded))
        return self.get_timetable(timetable_id)

    def delete_timetable(self, timetable_id: str) -> None:
        timetable = self.get_timetable(timetable_id)
        try:
            self.db.delete(timetable)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("Deleted timetable %s", timetable_id)

    # Availability

    def check_period_availability(self, request: AvailabilityRequest) -> AvailabilityCheck:
        """Checks one period, on each of its days, against the stored schedule.

        ``exclude_period_id`` lets an existing period be moved without
        colliding with itself.
        """
        candidates = [
            BookedPeriod(
                id=request.exclude_period_id or f"period.day{int(interval.day)}",
                interval=interval,
                teacher_id=request.period.teacher_id,
                classroom_id=request.period.classroom_id,
            )
            for interval in request.period.intervals()
        ]
        existing = self._existing_periods(candidates, term_id=request.term_id)
        breaks = [
            BookedBreak(id=f"break_times[{index}]", interval=item.interval)
            for index, item in enumerate(request.break_times)
        ]
        return merge_checks(check_availability(candidate, existing, breaks) for candidate in candidates)
