"""Workout session data models.

Immutable value types for an in-progress workout. All updates go through
the functions in ``liftcoach.workouts.transitions`` which return new
instances via ``dataclasses.replace``; nothing here is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class Difficulty(StrEnum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


@dataclass(frozen=True)
class SetState:
    """One set within an exercise.

    Attributes:
        set_number: 1-based position within the exercise
        target_reps: Prescribed rep count
        completed_reps: Reps actually performed (set once completed)
        weight: Pre-filled weight before completion, lifted weight after
        completed: Whether the set has been completed
        difficulty: Subjective difficulty reported on completion
    """

    set_number: int
    target_reps: int
    completed_reps: int | None = None
    weight: float | None = None
    completed: bool = False
    difficulty: Difficulty | None = None


@dataclass(frozen=True)
class ExerciseState:
    """An exercise within a session.

    ``current_set`` is a 1-based pointer into ``sets``. It only moves forward.
    """

    id: str
    name: str
    muscle_group: str
    rest_seconds: int
    sets: tuple[SetState, ...]
    current_set: int = 1

    @property
    def total_sets(self) -> int:
        return len(self.sets)

    @property
    def is_complete(self) -> bool:
        return all(s.completed for s in self.sets)

    @property
    def is_last_set(self) -> bool:
        return self.current_set >= len(self.sets)

    @property
    def current(self) -> SetState | None:
        """The set the pointer is on, or None if the pointer ran past the end."""
        index = self.current_set - 1
        if 0 <= index < len(self.sets):
            return self.sets[index]
        return None

    @property
    def has_pending_set(self) -> bool:
        current = self.current
        return current is not None and not current.completed


@dataclass(frozen=True)
class SessionState:
    """An in-progress workout built from a program.

    Attributes:
        id: Session identifier (also used as the persisted row id)
        name: Display name (the program name)
        started_at: When the session was created
        exercises: Ordered exercises
        program_id: Source program, if any
        active_index: Index of the exercise the user is looking at
    """

    id: str
    name: str
    started_at: datetime
    exercises: tuple[ExerciseState, ...]
    program_id: str | None = None
    active_index: int = 0

    @property
    def active_exercise(self) -> ExerciseState:
        return self.exercises[self.active_index]

    @property
    def total_exercises(self) -> int:
        return len(self.exercises)

    @property
    def completed_exercises(self) -> int:
        return sum(1 for exercise in self.exercises if exercise.is_complete)

    @property
    def is_complete(self) -> bool:
        total = self.total_exercises
        return total > 0 and self.completed_exercises == total

    @property
    def is_last_exercise_active(self) -> bool:
        return self.active_index >= len(self.exercises) - 1

    @property
    def completed_set_count(self) -> int:
        return sum(1 for exercise in self.exercises for s in exercise.sets if s.completed)
