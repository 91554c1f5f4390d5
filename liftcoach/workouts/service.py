"""Building a workout session from a saved program."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal

from loguru import logger
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from liftcoach.config.settings import settings
from liftcoach.db.models import TemplateExercise, WorkoutTemplate
from liftcoach.db.session import get_session
from liftcoach.workouts.history import ExerciseHistory, load_exercise_history
from liftcoach.workouts.state import ExerciseState, SessionState, SetState

EmptyReason = Literal["no_program", "no_exercises"]

# Label used in tip and chat prompts when the library has no body part or target
DEFAULT_MUSCLE_GROUP = "General"


@dataclass(frozen=True)
class StartResult:
    """Outcome of starting a session.

    Exactly one of ``session`` and ``empty_reason`` is set. An empty result is
    a normal outcome shown as an empty state, not an error.
    """

    session: SessionState | None = None
    empty_reason: EmptyReason | None = None
    history: dict[str, ExerciseHistory] | None = None


def _build_exercise(row: TemplateExercise, history: ExerciseHistory | None) -> ExerciseState:
    target_sets = row.target_sets or settings.default_target_sets
    target_reps = row.target_reps or settings.default_target_reps
    weight = history.last_weight if history else 0.0
    exercise = row.exercise
    return ExerciseState(
        id=exercise.id,
        name=exercise.name,
        muscle_group=exercise.body_part or exercise.target_muscle or DEFAULT_MUSCLE_GROUP,
        rest_seconds=row.rest_seconds or settings.default_rest_seconds,
        sets=tuple(
            SetState(set_number=number, target_reps=target_reps, weight=weight)
            for number in range(1, target_sets + 1)
        ),
    )


def _load_history(user_id: str, exercise_ids: list[str]) -> dict[str, ExerciseHistory]:
    try:
        return load_exercise_history(user_id, exercise_ids)
    except Exception:
        # A session without pre-filled weights is still usable
        logger.warning(f"Could not load exercise history user_id={user_id}", exc_info=True)
        return {}


def start_session(program_id: str, user_id: str | None = None) -> StartResult:
    """Create a fresh in-memory session for a program.

    Args:
        program_id: Program (workout template) to run
        user_id: Authenticated user. Enables history pre-fill and restricts
            the lookup to the user's own programs; without it only shared
            programs can be started.

    Returns:
        StartResult holding the session, or the reason it is empty
    """
    stmt = (
        select(WorkoutTemplate)
        .options(selectinload(WorkoutTemplate.exercises).selectinload(TemplateExercise.exercise))
        .where(WorkoutTemplate.id == program_id)
    )
    if user_id is not None:
        stmt = stmt.where(WorkoutTemplate.user_id == user_id)
    else:
        stmt = stmt.where(WorkoutTemplate.user_id.is_(None))

    with get_session() as db:
        template = db.execute(stmt).scalar_one_or_none()
        if template is None:
            logger.info(f"Program not found program_id={program_id} user_id={user_id}")
            return StartResult(empty_reason="no_program")
        rows = list(template.exercises)
        name = template.name

    if not rows:
        logger.info(f"Program has no exercises program_id={program_id}")
        return StartResult(empty_reason="no_exercises")

    history = _load_history(user_id, [row.exercise_id for row in rows]) if user_id else {}
    exercises = tuple(_build_exercise(row, history.get(row.exercise_id)) for row in rows)

    session = SessionState(
        id=str(uuid.uuid4()),
        name=name,
        started_at=datetime.now(timezone.utc),
        exercises=exercises,
        program_id=program_id,
    )
    logger.info(
        f"Started workout session session_id={session.id} program_id={program_id} "
        f"exercises={len(exercises)} user_id={user_id}"
    )
    return StartResult(session=session, history=history)
