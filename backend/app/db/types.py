from __future__ import annotations

from datetime import time

from sqlalchemy import Time
from sqlalchemy.types import TypeDecorator

from app.services.time_values import TimeOfDay


class TimeOfDayType(TypeDecorator):
    """Stores :class:`TimeOfDay` in a ``TIME`` column and loads it back as one."""

    impl = Time
    cache_ok = True

    def process_bind_param(self, value, dialect) -> time | None:
        if value is None:
            return None
        return TimeOfDay.coerce(value).to_time()

    def process_result_value(self, value, dialect) -> TimeOfDay | None:
        if value is None:
            return None
        return TimeOfDay.from_time(value)
