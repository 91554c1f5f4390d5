"""Incremental persistence of completed sets.

One row is written per completed set. The parent session and
session-exercise rows are created on first write, which is why a session
abandoned before any completed set leaves nothing behind.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import Session

from liftcoach.db.models import CompletedSet, SessionExercise, WorkoutSession
from liftcoach.db.session import get_session
from liftcoach.workouts.state import ExerciseState, SessionState, SetState


class SetStore(Protocol):
    """Destination for completed sets."""

    def save_completed_set(self, session: SessionState, exercise_index: int, set_state: SetState) -> None: ...

    def mark_completed(self, session: SessionState) -> None: ...


def _ensure_session_row(db: Session, session: SessionState, user_id: str) -> None:
    if db.get(WorkoutSession, session.id) is not None:
        return
    db.add(
        WorkoutSession(
            id=session.id,
            user_id=user_id,
            template_id=session.program_id,
            name=session.name,
            status="in_progress",
            started_at=session.started_at,
        )
    )
    db.flush()
    logger.info(f"Created workout session row session_id={session.id} user_id={user_id}")


def _ensure_exercise_row(db: Session, session: SessionState, exercise: ExerciseState, order_index: int) -> str:
    row = db.execute(
        select(SessionExercise)
        .where(SessionExercise.session_id == session.id)
        .where(SessionExercise.exercise_id == exercise.id)
    ).scalar_one_or_none()
    if row is None:
        row = SessionExercise(session_id=session.id, exercise_id=exercise.id, order_index=order_index)
        db.add(row)
        db.flush()
    return row.id


class DatabaseSetStore:
    """SetStore backed by the relational database.

    Parent row ids are cached only after a successful commit, so a failed
    write is retried from scratch on the next set.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        self._session_row_created = False
        self._exercise_rows: dict[str, str] = {}

    def save_completed_set(self, session: SessionState, exercise_index: int, set_state: SetState) -> None:
        exercise = session.exercises[exercise_index]
        with get_session() as db:
            if not self._session_row_created:
                _ensure_session_row(db, session, self.user_id)
            session_exercise_id = self._exercise_rows.get(exercise.id)
            if session_exercise_id is None:
                session_exercise_id = _ensure_exercise_row(db, session, exercise, exercise_index)
            db.add(
                CompletedSet(
                    session_exercise_id=session_exercise_id,
                    set_number=set_state.set_number,
                    reps=set_state.completed_reps or 0,
                    weight=set_state.weight or 0.0,
                    difficulty=set_state.difficulty.value if set_state.difficulty else None,
                )
            )

        self._session_row_created = True
        self._exercise_rows[exercise.id] = session_exercise_id
        logger.debug(
            f"Saved set {set_state.set_number} of {exercise.name} "
            f"({set_state.weight}kg x {set_state.completed_reps}) session_id={session.id}"
        )

    def mark_completed(self, session: SessionState) -> None:
        if not self._session_row_created:
            return
        with get_session() as db:
            row = db.get(WorkoutSession, session.id)
            if row is None:
                return
            row.status = "completed"
            row.completed_at = datetime.now(timezone.utc)
        logger.info(f"Workout session completed session_id={session.id}")


class NullSetStore:
    """SetStore for anonymous sessions: nothing is persisted."""

    def save_completed_set(self, session: SessionState, exercise_index: int, set_state: SetState) -> None:
        logger.debug(f"Anonymous session, not saving set session_id={session.id}")

    def mark_completed(self, session: SessionState) -> None:
        return None
