"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

from __future__ import annotations

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

import liftcoach.db.session as session_module
from liftcoach.core.auth_jwt import create_access_token
from liftcoach.db.models import Base, Exercise, TemplateExercise, WorkoutTemplate
from liftcoach.db.session import configure_engine, get_session
from liftcoach.workouts.registry import registry
from factories import FakeClock


# Enable foreign key constraints for SQLite
@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key constraints in SQLite connections."""
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@pytest.fixture
def db_engine(monkeypatch):
    """Isolated in-memory SQLite database per test.

    StaticPool keeps a single connection so every get_session() call sees the
    same in-memory database. The module-level engine is restored afterwards.
    """
    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    monkeypatch.setattr(session_module, "_engine", None)
    monkeypatch.setattr(session_module, "_SessionLocal", None)
    configure_engine(engine)

    yield engine

    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(autouse=True)
def clear_registry():
    registry.clear()
    yield
    registry.clear()


@pytest.fixture
def user_id() -> str:
    return "user-1"


@pytest.fixture
def auth_headers(user_id):
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def exercise_library(db_engine) -> dict[str, str]:
    """A small exercise library. Returns name -> id."""
    rows = [
        ("Barbell Bench Press", "barbell", "chest", "pectorals", 9.5),
        ("Barbell Squat", "barbell", "upper legs", "quads", 9.8),
        ("Dumbbell Fly", "dumbbell", "chest", "pectorals", 7.2),
        ("Cable Row", "cable", "back", "lats", 8.1),
        ("Push-up", "body weight", "chest", "pectorals", 6.0),
    ]
    ids: dict[str, str] = {}
    with get_session() as session:
        for name, equipment, body_part, target, rating in rows:
            exercise = Exercise(name=name, equipment=equipment, body_part=body_part, target_muscle=target, rating=rating)
            session.add(exercise)
            session.flush()
            ids[name] = exercise.id
    return ids


@pytest.fixture
def make_program(db_engine, user_id):
    """Factory creating a program for the test user (or a shared one with shared=True).

    Usage:
        program_id = make_program("Push Day", [(exercise_id, 3, 10, 90)])
    """

    def _make(
        name: str,
        slots: list[tuple[str, int | None, int | None, int | None]],
        owner: str | None = None,
        shared: bool = False,
    ) -> str:
        with get_session() as session:
            template = WorkoutTemplate(user_id=None if shared else owner or user_id, name=name)
            session.add(template)
            session.flush()
            for index, (exercise_id, sets, reps, rest) in enumerate(slots):
                session.add(
                    TemplateExercise(
                        template_id=template.id,
                        exercise_id=exercise_id,
                        target_sets=sets,
                        target_reps=reps,
                        rest_seconds=rest,
                        order_index=index,
                    )
                )
            return template.id

    return _make


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
