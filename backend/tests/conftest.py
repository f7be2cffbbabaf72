import os

# The app builds its engine at import time; keep tests off any configured server.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient #gives you a fake http client that can call your FastAPI routes without running a real server.
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.models.classroom import Classroom
from app.models.school_class import ClassGroup, SchoolClass
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.term import Term
from app.services.scope_locks import get_scope_locks


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory): #fake http client
    get_scope_locks().clear()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_scope_locks().clear()


def seed_school(db) -> dict[str, str]:
    """Two classes in one group, two teachers, two rooms, two subjects, one term."""
    group = ClassGroup(name="Grade 7")
    db.add(group)
    db.flush()
    records = {
        "term": Term(name="Autumn 2026"),
        "other_term": Term(name="Spring 2027"),
        "group": group,
        "c1": SchoolClass(name="7A", class_group_id=group.id),
        "c2": SchoolClass(name="7B", class_group_id=group.id),
        "c3": SchoolClass(name="8A"),
        "math": Subject(code="MATH7", name="Mathematics"),
        "bio": Subject(code="BIO7", name="Biology"),
        "ta": Teacher(name="Ada Byron", email="ada@example.com"),
        "tb": Teacher(name="Alan Turing", email="alan@example.com"),
        "rm1": Classroom(name="Room 1", building="North", capacity=32),
        "rm2": Classroom(name="Room 2", building="North", capacity=28),
    }
    db.add_all(records.values())
    db.commit()
    return {key: record.id for key, record in records.items()}


@pytest.fixture()
def school(db) -> dict[str, str]:
    return seed_school(db)
