"""Session summary aggregation."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from liftcoach.workouts.state import ExerciseState, SessionState


def total_volume(exercises: Iterable[ExerciseState]) -> float:
    """Sum of weight x reps over every set.

    Uses completed reps when present, otherwise the target reps. A set with
    no weight contributes nothing.
    """
    volume = 0.0
    for exercise in exercises:
        for s in exercise.sets:
            reps = s.completed_reps if s.completed_reps is not None else s.target_reps
            volume += (s.weight or 0) * reps
    return volume


@dataclass(frozen=True)
class SessionSummary:
    total_volume: float
    completed_exercises: int
    total_exercises: int
    completed_sets: int
    is_complete: bool


def summarize(state: SessionState) -> SessionSummary:
    return SessionSummary(
        total_volume=total_volume(state.exercises),
        completed_exercises=state.completed_exercises,
        total_exercises=state.total_exercises,
        completed_sets=state.completed_set_count,
        is_complete=state.is_complete,
    )
