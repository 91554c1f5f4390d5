"""Coach API schemas (Pydantic).

Request bodies use camelCase on the wire to match the mobile client; Python
code uses the snake_case field names.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TrainingGoal = Literal["strength", "hypertrophy"]
TipMode = Literal["quick", "form", "motivation"]
TimeOfDay = Literal["morning", "afternoon", "evening", "night"]
SetDifficulty = Literal["easy", "normal", "hard"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CoachingTipRequest(CamelModel):
    """Context bundle for one coaching tip."""

    exercise_name: str
    muscle_group: str = ""
    current_weight: float = 0
    current_reps: int = 0
    last_weight: float = 0
    last_reps: int = 0
    pr_weight: float = 0
    pr_reps: int = 0
    training_goal: TrainingGoal = "hypertrophy"
    # Previous suggestion, only sent while not resting
    previous_tip: str | None = None
    previous_weight: float | None = None
    previous_reps: int | None = None
    # Rest / set position
    is_resting: bool = False
    rest_time_left: int | None = None
    current_set: int | None = None
    total_sets: int | None = None
    last_set_difficulty: SetDifficulty | None = None
    # Session context
    time_of_day: TimeOfDay | None = None
    workout_duration: int | None = Field(default=None, description="Minutes since the session started")
    total_sets_completed: int | None = None
    tip_mode: TipMode = "quick"


class CoachingTipResponse(BaseModel):
    tip: str


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ExerciseContext(CamelModel):
    name: str
    muscle_group: str = ""
    current_set: int | None = None
    total_sets: int | None = None
    target_reps: int | None = None
    weight: float | None = None


class ChatRequest(CamelModel):
    messages: list[ChatMessage]
    exercise_context: ExerciseContext | None = None


class ChatResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
