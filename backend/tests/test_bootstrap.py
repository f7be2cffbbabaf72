import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.pool import StaticPool

from app.db import bootstrap


def _memory_engine():
    return create_engine("sqlite+pysqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)


def test_runtime_schema_bootstrap_creates_every_table():
    engine = _memory_engine()

    bootstrap.ensure_runtime_schema(engine)

    assert bootstrap.missing_schema_items(engine) == ([], {})


def test_missing_columns_are_reported():
    engine = _memory_engine()
    with engine.begin() as connection:
        connection.execute(text("CREATE TABLE teachers (id VARCHAR(36) PRIMARY KEY, name VARCHAR(200))"))

    missing_tables, missing_columns = bootstrap.missing_schema_items(engine)

    assert "teachers" not in missing_tables
    assert "periods" in missing_tables
    assert missing_columns == {"teachers": ["email"]}


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)

    with pytest.raises(RuntimeError, match="Runtime schema bootstrap failed"):
        bootstrap.ensure_runtime_schema(_memory_engine())
