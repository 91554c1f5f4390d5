"""Profile / onboarding API schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

Goal = Literal["strength", "muscle", "endurance", "lose_fat", "general"]
Experience = Literal["beginner", "intermediate", "advanced"]


class ProfileUpdateRequest(BaseModel):
    """Onboarding answers.

    All four steps must be answered: a name of at least two characters, one
    or more goals, an experience level and 2-6 training days per week.
    """

    full_name: str = Field(description="Display name")
    goals: list[Goal] = Field(min_length=1, description="Selected training goals")
    experience: Experience
    training_days: int = Field(ge=2, le=6, description="Planned training days per week")
    email: str | None = None

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters")
        return value

    @field_validator("goals")
    @classmethod
    def dedupe_goals(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))


class ProfileResponse(BaseModel):
    id: str
    email: str | None = None
    full_name: str | None = None
    goals: list[str] = Field(default_factory=list)
    experience: str | None = None
    training_days: int | None = None
    training_goal: Literal["strength", "hypertrophy"] = "hypertrophy"
    needs_onboarding: bool = True
