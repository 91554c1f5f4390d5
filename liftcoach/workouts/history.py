"""Workout history queries.

Provides the per-exercise history used to pre-fill sessions and coaching
tips (last performance, personal record) and the session list shown on the
history screen.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from sqlalchemy import select

from liftcoach.db.models import CompletedSet, Exercise, SessionExercise, WorkoutSession
from liftcoach.db.session import get_session

# Sets considered when building the PR list for the chat assistant
RECENT_SETS_FOR_RECORDS = 50


@dataclass(frozen=True)
class ExerciseHistory:
    """What the user did last time and their best set for one exercise."""

    last_weight: float = 0.0
    last_reps: int = 0
    pr_weight: float = 0.0
    pr_reps: int = 0


@dataclass(frozen=True)
class PersonalRecord:
    exercise_name: str
    weight: float
    reps: int


def load_exercise_history(user_id: str, exercise_ids: Iterable[str]) -> dict[str, ExerciseHistory]:
    """Load last and best completed sets per exercise for a user.

    Args:
        user_id: Owner of the history
        exercise_ids: Exercises to look up

    Returns:
        Mapping of exercise id to history. Exercises never performed are absent.
    """
    ids = list(dict.fromkeys(exercise_ids))
    if not ids:
        return {}

    stmt = (
        select(SessionExercise.exercise_id, CompletedSet.weight, CompletedSet.reps)
        .join(CompletedSet, CompletedSet.session_exercise_id == SessionExercise.id)
        .join(WorkoutSession, WorkoutSession.id == SessionExercise.session_id)
        .where(WorkoutSession.user_id == user_id)
        .where(SessionExercise.exercise_id.in_(ids))
        .order_by(CompletedSet.created_at.desc(), CompletedSet.set_number.desc())
    )

    history: dict[str, ExerciseHistory] = {}
    with get_session() as session:
        rows = session.execute(stmt).all()

    for exercise_id, weight, reps in rows:
        existing = history.get(exercise_id)
        if existing is None:
            # Rows are newest first, so the first row is the most recent set
            history[exercise_id] = ExerciseHistory(
                last_weight=weight,
                last_reps=reps,
                pr_weight=weight,
                pr_reps=reps,
            )
        elif weight > existing.pr_weight:
            history[exercise_id] = ExerciseHistory(
                last_weight=existing.last_weight,
                last_reps=existing.last_reps,
                pr_weight=weight,
                pr_reps=reps,
            )

    logger.debug(f"Loaded history for {len(history)}/{len(ids)} exercises user_id={user_id}")
    return history


def load_personal_records(user_id: str, limit: int = RECENT_SETS_FOR_RECORDS) -> list[PersonalRecord]:
    """Heaviest set per exercise among the user's most recent completed sets."""
    stmt = (
        select(Exercise.name, CompletedSet.weight, CompletedSet.reps)
        .join(SessionExercise, SessionExercise.id == CompletedSet.session_exercise_id)
        .join(Exercise, Exercise.id == SessionExercise.exercise_id)
        .join(WorkoutSession, WorkoutSession.id == SessionExercise.session_id)
        .where(WorkoutSession.user_id == user_id)
        .order_by(CompletedSet.created_at.desc())
        .limit(limit)
    )
    with get_session() as session:
        rows = session.execute(stmt).all()

    records: dict[str, PersonalRecord] = {}
    for name, weight, reps in rows:
        if not weight:
            continue
        best = records.get(name)
        if best is None or weight > best.weight:
            records[name] = PersonalRecord(exercise_name=name, weight=weight, reps=reps)
    return list(records.values())


def format_duration(started_at: datetime, completed_at: datetime | None) -> str:
    """Human readable session duration ("In progress" when not finished)."""
    if completed_at is None:
        return "In progress"
    minutes = int((completed_at - started_at).total_seconds() // 60)
    return f"{minutes} min"


def list_sessions(user_id: str) -> list[WorkoutSession]:
    """All persisted sessions of a user, newest first."""
    stmt = (
        select(WorkoutSession)
        .where(WorkoutSession.user_id == user_id)
        .order_by(WorkoutSession.started_at.desc())
    )
    with get_session() as session:
        return list(session.execute(stmt).scalars().all())
