from datetime import datetime, time

import pytest

from app.core.exceptions import InvalidInterval, InvalidTimeFormat, ValidationError
from app.services.time_values import DayOfWeek, Interval, TimeOfDay, format_time, overlaps, parse_time


def iv(day: int, start: str, end: str) -> Interval:
    return Interval(DayOfWeek(day), parse_time(start), parse_time(end))


def test_every_valid_clock_string_round_trips():
    for hour in range(24):
        for minute in range(60):
            value = f"{hour:02d}:{minute:02d}"
            assert format_time(parse_time(value)) == value


@pytest.mark.parametrize("value", ["24:00", "9:00", "09:60", "0900", "09:00:00", "", " 09:00", "ab:cd", None, 900])
def test_parse_rejects_malformed_values(value):
    with pytest.raises(InvalidTimeFormat) as excinfo:
        parse_time(value)
    assert isinstance(excinfo.value, ValidationError)
    assert excinfo.value.status_code == 422


def test_time_of_day_orders_by_minutes():
    assert parse_time("08:59") < parse_time("09:00") < parse_time("23:59")
    assert parse_time("00:00").minutes == 0
    assert parse_time("13:15").minutes == 13 * 60 + 15


def test_from_timestamp_keeps_only_hour_and_minute():
    assert TimeOfDay.from_time(datetime(1970, 1, 1, 9, 30, 59)) == parse_time("09:30")
    assert TimeOfDay.coerce(time(14, 5, 12)) == parse_time("14:05")
    assert TimeOfDay.coerce("14:05").to_time() == time(14, 5)


def test_day_of_week_is_monday_first():
    assert DayOfWeek.MONDAY == 1
    assert DayOfWeek.SUNDAY == 7
    assert DayOfWeek(3) is DayOfWeek.WEDNESDAY
    with pytest.raises(ValueError):
        DayOfWeek(0)


@pytest.mark.parametrize("start,end", [("10:00", "10:00"), ("11:00", "10:00")])
def test_interval_rejects_empty_and_inverted_ranges(start, end):
    with pytest.raises(InvalidInterval):
        iv(1, start, end)


def test_overlap_is_symmetric():
    samples = [
        iv(1, "08:00", "09:00"),
        iv(1, "08:30", "09:30"),
        iv(1, "09:00", "10:00"),
        iv(1, "07:00", "12:00"),
        iv(1, "08:15", "08:45"),
        iv(2, "08:00", "09:00"),
    ]
    for first in samples:
        for second in samples:
            assert overlaps(first, second) == overlaps(second, first)


def test_touching_endpoints_do_not_overlap():
    assert not iv(1, "09:00", "10:00").overlaps(iv(1, "10:00", "11:00"))
    assert not iv(1, "10:00", "11:00").overlaps(iv(1, "09:00", "10:00"))


def test_identical_times_on_different_days_do_not_overlap():
    assert not iv(1, "09:00", "10:00").overlaps(iv(2, "09:00", "10:00"))


def test_contained_and_partial_ranges_overlap():
    assert iv(3, "09:00", "12:00").overlaps(iv(3, "10:00", "10:30"))
    assert iv(3, "09:00", "10:00").overlaps(iv(3, "09:59", "11:00"))
    assert iv(3, "09:00", "10:00").overlaps(iv(3, "09:00", "10:00"))


def test_interval_as_dict_uses_clock_strings():
    assert iv(5, "13:15", "14:05").as_dict() == {"start_time": "13:15", "end_time": "14:05", "day_of_week": 5}
