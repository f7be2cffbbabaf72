from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.db.base import Base
from app.db.session import engine as default_engine
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "terms": {"id", "name"},
    "class_groups": {"id", "name"},
    "classes": {"id", "name", "class_group_id"},
    "subjects": {"id", "code", "name"},
    "teachers": {"id", "name", "email"},
    "classrooms": {"id", "name", "capacity"},
    "timetables": {"id", "term_id", "class_id", "class_group_id", "start_time", "end_time"},
    "break_times": {"id", "timetable_id", "day_of_week", "start_time", "end_time", "type"},
    "periods": {
        "id",
        "timetable_id",
        "day_of_week",
        "start_time",
        "end_time",
        "duration_in_minutes",
        "subject_id",
        "teacher_id",
        "classroom_id",
    },
}


def missing_schema_items(bind: Engine) -> tuple[list[str], dict[str, list[str]]]:
    with bind.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables: list[str] = []
        missing_columns: dict[str, list[str]] = {}
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                missing_tables.append(table_name)
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_runtime_schema(bind: Engine | None = None) -> None:
    bind = bind or default_engine
    try:
        Base.metadata.create_all(bind=bind)
        missing_tables, missing_columns = missing_schema_items(bind)
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")
        if missing_columns:
            flat = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
            raise RuntimeError(f"Missing required columns: {', '.join(flat)}")
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
