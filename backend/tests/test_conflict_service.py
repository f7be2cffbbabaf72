import pytest

from app.schemas.conflict import ConflictKind
from app.services.conflict_service import (
    BookedBreak,
    BookedPeriod,
    check_availability,
    check_batch,
    check_time_slots,
    merge_checks,
)
from app.services.time_values import DayOfWeek, Interval, parse_time

MONDAY = DayOfWeek.MONDAY


def iv(start: str, end: str, day: DayOfWeek = MONDAY) -> Interval:
    return Interval(day, parse_time(start), parse_time(end))


def period(pid: str, start: str, end: str, teacher: str, room: str, day: DayOfWeek = MONDAY) -> BookedPeriod:
    return BookedPeriod(id=pid, interval=iv(start, end, day), teacher_id=teacher, classroom_id=room)


@pytest.fixture
def c1_schedule():
    # Class C1 already has Ta teaching in Rm1 on Monday 09:00-10:00.
    return [BookedPeriod(id="p1", interval=iv("09:00", "10:00"), teacher_id="Ta", classroom_id="Rm1", owner="Class: C1")]


def test_same_teacher_overlap_reports_teacher_conflict_only(c1_schedule):
    candidate = period("new", "09:30", "10:30", "Ta", "Rm2")

    result = check_availability(candidate, c1_schedule, [])

    assert result.is_available is False
    assert [conflict.kind for conflict in result.conflicts] == [ConflictKind.TEACHER]
    conflict = result.conflicts[0]
    assert conflict.conflicting_entity_id == "p1"
    assert conflict.additional_info == "Class: C1"
    assert conflict.conflicting_interval.model_dump(mode="json") == {
        "start_time": "09:00",
        "end_time": "10:00",
        "day_of_week": 1,
    }


def test_teacher_and_classroom_double_booking_reports_both(c1_schedule):
    candidate = period("new", "09:15", "09:45", "Ta", "Rm1")

    result = check_availability(candidate, c1_schedule, [])

    assert {conflict.kind for conflict in result.conflicts} == {ConflictKind.TEACHER, ConflictKind.CLASSROOM}


def test_every_overlapping_booking_is_reported():
    existing = [
        period("p1", "08:00", "09:00", "Ta", "Rm1"),
        period("p2", "09:00", "10:00", "Ta", "Rm2"),
        period("p3", "12:00", "13:00", "Ta", "Rm2"),
    ]
    candidate = period("new", "08:30", "09:30", "Ta", "Rm3")

    result = check_availability(candidate, existing, [])

    assert [conflict.conflicting_entity_id for conflict in result.conflicts] == ["p1", "p2"]


def test_break_window_overlap_is_a_conflict():
    lunch = BookedBreak(id="b1", interval=iv("09:30", "09:45"))
    candidate = period("new", "09:00", "09:45", "Ta", "Rm1")

    result = check_availability(candidate, [], [lunch])

    assert [conflict.kind for conflict in result.conflicts] == [ConflictKind.BREAK_TIME]
    assert result.conflicts[0].conflicting_entity_id == "b1"


def test_period_touching_break_window_is_available():
    morning_break = BookedBreak(id="b1", interval=iv("09:00", "10:00"))
    candidate = period("new", "10:00", "11:00", "Ta", "Rm1")

    assert check_availability(candidate, [], [morning_break]).is_available is True


def test_other_days_and_other_resources_are_ignored(c1_schedule):
    same_time_tuesday = period("new", "09:00", "10:00", "Ta", "Rm1", day=DayOfWeek.TUESDAY)
    other_teacher_room = period("new2", "09:00", "10:00", "Tb", "Rm2")
    tuesday_break = BookedBreak(id="b1", interval=iv("09:00", "10:00", DayOfWeek.TUESDAY))

    assert check_availability(same_time_tuesday, c1_schedule, []).is_available is True
    assert check_availability(other_teacher_room, c1_schedule, [tuesday_break]).is_available is True


def test_candidate_is_not_compared_with_itself(c1_schedule):
    moved = period("p1", "09:30", "10:30", "Ta", "Rm1")

    assert check_availability(moved, c1_schedule, []).is_available is True


def test_no_false_negatives_for_shared_teacher_or_room():
    slots = [("08:00", "09:00"), ("08:30", "09:30"), ("09:00", "10:00"), ("08:45", "08:50"), ("07:00", "12:00")]
    for index, (start1, end1) in enumerate(slots):
        for start2, end2 in slots[index + 1:]:
            first, second = iv(start1, end1), iv(start2, end2)
            if not first.overlaps(second):
                continue
            existing = [BookedPeriod(id="old", interval=first, teacher_id="Ta", classroom_id="Rm1")]
            by_teacher = BookedPeriod(id="new", interval=second, teacher_id="Ta", classroom_id="Rm9")
            by_room = BookedPeriod(id="new", interval=second, teacher_id="Tz", classroom_id="Rm1")

            teacher_kinds = {c.kind for c in check_availability(by_teacher, existing, []).conflicts}
            room_kinds = {c.kind for c in check_availability(by_room, existing, []).conflicts}

            assert ConflictKind.TEACHER in teacher_kinds
            assert ConflictKind.CLASSROOM in room_kinds


def test_batch_detects_overlaps_between_new_periods():
    batch = [
        period("periods[0].day1", "09:00", "10:00", "Ta", "Rm1"),
        period("periods[1].day1", "09:30", "10:30", "Ta", "Rm2"),
        period("periods[2].day1", "10:30", "11:30", "Ta", "Rm1"),
    ]

    result = check_batch(batch, [], [])

    assert len(result.conflicts) == 1
    conflict = result.conflicts[0]
    assert conflict.kind == ConflictKind.TEACHER
    assert conflict.candidate_id == "periods[1].day1"
    assert conflict.conflicting_entity_id == "periods[0].day1"


def test_batch_checks_each_period_against_existing_schedule_and_breaks(c1_schedule):
    batch = [
        period("periods[0].day1", "09:00", "09:30", "Ta", "Rm2"),
        period("periods[1].day1", "12:00", "13:00", "Tb", "Rm2"),
    ]
    lunch = BookedBreak(id="break_times[0]", interval=iv("12:30", "13:15"))

    result = check_batch(batch, c1_schedule, [lunch])

    assert [(c.candidate_id, c.kind) for c in result.conflicts] == [
        ("periods[0].day1", ConflictKind.TEACHER),
        ("periods[1].day1", ConflictKind.BREAK_TIME),
    ]


def test_merge_checks_combines_conflicts():
    lunch = BookedBreak(id="b1", interval=iv("12:00", "13:00"))
    first = check_availability(period("a", "12:00", "12:30", "Ta", "Rm1"), [], [lunch])
    second = check_availability(period("b", "08:00", "09:00", "Ta", "Rm1"), [], [lunch])

    merged = merge_checks([first, second])

    assert merged.is_available is False
    assert len(merged.conflicts) == 1
    assert merge_checks([second]).is_available is True


def test_time_slot_check_ignores_teacher_and_room():
    own = [period("p1", "09:00", "10:00", "Ta", "Rm1"), period("p2", "10:00", "11:00", "Ta", "Rm1")]
    batch = [
        period("periods[0].day1", "10:30", "11:30", "Tb", "Rm2"),
        period("periods[1].day1", "11:15", "12:00", "Tc", "Rm3"),
        period("periods[2].day2", "09:00", "10:00", "Tb", "Rm2", day=DayOfWeek.TUESDAY),
    ]

    result = check_time_slots(batch, own)

    assert [(c.kind, c.candidate_id, c.conflicting_entity_id) for c in result.conflicts] == [
        (ConflictKind.TIME_SLOT, "periods[0].day1", "p2"),
        (ConflictKind.TIME_SLOT, "periods[1].day1", "periods[0].day1"),
    ]
    assert check_time_slots(batch[2:], own).is_available is True
