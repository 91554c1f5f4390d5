"""Program (workout template) API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ProgramExerciseIn(BaseModel):
    exercise_id: str
    target_sets: int = Field(default=3, ge=1, le=20)
    target_reps: int = Field(default=10, ge=1, le=100)
    rest_seconds: int | None = Field(default=None, ge=0, le=900)


class ProgramCreateRequest(BaseModel):
    """New program. Exercises are optional and kept in the given order."""

    name: str
    exercises: list[ProgramExerciseIn] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Program name cannot be empty")
        return value


class ProgramExerciseOut(BaseModel):
    exercise_id: str
    name: str
    equipment: str | None = None
    body_part: str | None = None
    target_sets: int
    target_reps: int
    rest_seconds: int | None = None
    order_index: int


class ProgramSummary(BaseModel):
    id: str
    name: str
    exercise_count: int
    created_at: datetime
    updated_at: datetime


class ProgramDetail(ProgramSummary):
    exercises: list[ProgramExerciseOut]


class GenerateWorkoutRequest(BaseModel):
    """Either a free-text prompt or the structured generator options."""

    prompt: str | None = None
    goal: Literal["strength", "hypertrophy", "endurance"] | None = None
    body_parts: list[str] = Field(default_factory=list)
    exercise_count: int = Field(default=6, ge=1, le=12)
    notes: str | None = None


class GeneratedExerciseOut(BaseModel):
    id: str
    name: str
    equipment: str | None = None
    body_part: str | None = None
    target_sets: int
    target_reps: int


class GenerateWorkoutResponse(BaseModel):
    name: str | None = None
    exercises: list[GeneratedExerciseOut]


class AlternativeRequest(BaseModel):
    exercise_name: str
    body_part: str | None = None
    target_sets: int | None = None
    target_reps: int | None = None


class AlternativeResponse(BaseModel):
    exercise: GeneratedExerciseOut | None = None
