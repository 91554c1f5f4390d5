"""Pure session transitions.

Every function takes a SessionState and returns a new one. Side effects
(persistence, rest timers, coaching tips) belong to the controller.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Literal

from liftcoach.workouts.errors import SetAlreadyCompletedError
from liftcoach.workouts.state import Difficulty, ExerciseState, SessionState, SetState

ReorderDirection = Literal["up", "down"]


@dataclass(frozen=True)
class SetCompletion:
    """Outcome of completing the active exercise's current set.

    Attributes:
        state: Session after the transition
        exercise_index: Index (before any pointer move) of the exercise the set belongs to
        completed_set: The set as it was marked complete
        moved_to_next_exercise: Whether the active pointer advanced to the next exercise
        opens_rest: Whether a rest window should follow this set
        rest_seconds: Rest duration of the exercise the set belongs to
    """

    state: SessionState
    exercise_index: int
    completed_set: SetState
    moved_to_next_exercise: bool
    opens_rest: bool
    rest_seconds: int


def _replace_exercise(state: SessionState, index: int, exercise: ExerciseState) -> SessionState:
    exercises = state.exercises[:index] + (exercise,) + state.exercises[index + 1 :]
    return replace(state, exercises=exercises)


def _replace_set(exercise: ExerciseState, set_state: SetState) -> ExerciseState:
    index = set_state.set_number - 1
    sets = exercise.sets[:index] + (set_state,) + exercise.sets[index + 1 :]
    return replace(exercise, sets=sets)


def _advance(state: SessionState, exercise: ExerciseState) -> tuple[SessionState, bool]:
    """Shared pointer movement for complete and skip.

    Moves ``current_set`` forward when the exercise has further sets, otherwise
    moves the active pointer to the next exercise (if there is one).
    """
    index = state.active_index
    was_last_set = exercise.is_last_set
    if not was_last_set:
        exercise = replace(exercise, current_set=exercise.current_set + 1)
    state = _replace_exercise(state, index, exercise)

    if was_last_set and not state.is_last_exercise_active:
        return replace(state, active_index=index + 1), True
    return state, False


def _require_pending(exercise: ExerciseState) -> SetState:
    current = exercise.current
    if current is None or current.completed:
        raise SetAlreadyCompletedError(exercise.id, exercise.current_set)
    return current


def complete_current_set(
    state: SessionState,
    reps: int,
    weight: float,
    difficulty: Difficulty = Difficulty.NORMAL,
) -> SetCompletion:
    """Mark the active exercise's current set complete and advance.

    Raises:
        SetAlreadyCompletedError: If the current set is not pending. Calling
            this twice never advances ``current_set`` twice.
    """
    index = state.active_index
    exercise = state.active_exercise
    current = _require_pending(exercise)

    was_last_set = exercise.is_last_set
    was_last_exercise = state.is_last_exercise_active

    completed = replace(
        current,
        completed=True,
        completed_reps=reps,
        weight=weight,
        difficulty=Difficulty(difficulty),
    )
    exercise = _replace_set(exercise, completed)
    new_state, moved = _advance(state, exercise)

    return SetCompletion(
        state=new_state,
        exercise_index=index,
        completed_set=completed,
        moved_to_next_exercise=moved,
        opens_rest=not (was_last_set and was_last_exercise),
        rest_seconds=exercise.rest_seconds,
    )


def skip_current_set(state: SessionState) -> SessionState:
    """Advance past the current set without recording it.

    On the final set of the final exercise there is nowhere to advance to, so
    the state is returned unchanged and the set stays incomplete.
    """
    exercise = state.active_exercise
    _require_pending(exercise)
    new_state, _ = _advance(state, exercise)
    return new_state


def move_active(state: SessionState, delta: int) -> SessionState:
    """Move the active pointer by ``delta``, clamped to the exercise range."""
    if not state.exercises:
        return state
    target = max(0, min(len(state.exercises) - 1, state.active_index + delta))
    if target == state.active_index:
        return state
    return replace(state, active_index=target)


def next_exercise(state: SessionState) -> SessionState:
    return move_active(state, 1)


def previous_exercise(state: SessionState) -> SessionState:
    return move_active(state, -1)


def reorder_active(state: SessionState, direction: ReorderDirection) -> SessionState:
    """Swap the active exercise with its neighbour; the pointer follows it."""
    index = state.active_index
    target = index - 1 if direction == "up" else index + 1
    if target < 0 or target >= len(state.exercises):
        return state

    exercises = list(state.exercises)
    exercises[index], exercises[target] = exercises[target], exercises[index]
    return replace(state, exercises=tuple(exercises), active_index=target)
