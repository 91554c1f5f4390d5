"""Workout session API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from liftcoach.coach.schemas import ChatMessage, TipMode
from liftcoach.workouts.controller import WorkoutSessionController
from liftcoach.workouts.modes import SessionMode
from liftcoach.workouts.state import ExerciseState, SetState
from liftcoach.workouts.summary import SessionSummary

OverlayAction = Literal[
    "open_sets",
    "close_sets",
    "open_chat",
    "close_chat",
    "request_exit",
    "cancel_exit",
    "confirm_exit",
]


class StartSessionRequest(BaseModel):
    program_id: str
    tip_mode: TipMode = "quick"


class CompleteSetRequest(BaseModel):
    """Optional last-moment input values; omitted fields keep the current inputs."""

    weight: float | None = Field(default=None, ge=0)
    reps: int | None = Field(default=None, ge=0)
    difficulty: Literal["easy", "normal", "hard"] | None = None


class InputsRequest(BaseModel):
    weight: float | None = Field(default=None, ge=0)
    weight_delta: float | None = None
    reps: int | None = Field(default=None, ge=0)
    difficulty: Literal["easy", "normal", "hard"] | None = None
    tip_mode: TipMode | None = None


class SwipeRequest(BaseModel):
    dx: float = Field(description="start_x - end_x")
    dy: float = Field(description="start_y - end_y")


class ReorderRequest(BaseModel):
    direction: Literal["up", "down"]


class OverlayRequest(BaseModel):
    action: OverlayAction


class TipRefreshRequest(BaseModel):
    debounce: bool = True


class SessionChatRequest(BaseModel):
    message: str = Field(min_length=1)


class SetOut(BaseModel):
    set_number: int
    target_reps: int
    completed_reps: int | None = None
    weight: float | None = None
    completed: bool
    difficulty: str | None = None

    @classmethod
    def from_state(cls, s: SetState) -> SetOut:
        return cls(
            set_number=s.set_number,
            target_reps=s.target_reps,
            completed_reps=s.completed_reps,
            weight=s.weight,
            completed=s.completed,
            difficulty=s.difficulty.value if s.difficulty else None,
        )


class ExerciseOut(BaseModel):
    id: str
    name: str
    muscle_group: str
    rest_seconds: int
    current_set: int
    total_sets: int
    is_complete: bool
    sets: list[SetOut]

    @classmethod
    def from_state(cls, exercise: ExerciseState) -> ExerciseOut:
        return cls(
            id=exercise.id,
            name=exercise.name,
            muscle_group=exercise.muscle_group,
            rest_seconds=exercise.rest_seconds,
            current_set=exercise.current_set,
            total_sets=exercise.total_sets,
            is_complete=exercise.is_complete,
            sets=[SetOut.from_state(s) for s in exercise.sets],
        )


class RestOut(BaseModel):
    duration: int
    remaining: int
    progress: float
    ends_at_ms: int


class SummaryOut(BaseModel):
    total_volume: float
    completed_exercises: int
    total_exercises: int
    completed_sets: int
    is_complete: bool

    @classmethod
    def from_summary(cls, summary: SessionSummary) -> SummaryOut:
        return cls(
            total_volume=summary.total_volume,
            completed_exercises=summary.completed_exercises,
            total_exercises=summary.total_exercises,
            completed_sets=summary.completed_sets,
            is_complete=summary.is_complete,
        )


class SessionStateResponse(BaseModel):
    """Full screen state of a session.

    ``status`` is "empty" when the program is missing or has no exercises;
    only ``empty_reason`` is filled in that case.
    """

    status: Literal["active", "empty", "closed"]
    empty_reason: Literal["no_program", "no_exercises"] | None = None
    session_id: str | None = None
    name: str | None = None
    started_at: datetime | None = None
    mode: str | None = None
    active_index: int | None = None
    exercises: list[ExerciseOut] = Field(default_factory=list)
    current_weight: float | None = None
    current_reps: int | None = None
    pending_difficulty: str | None = None
    last_difficulty: str | None = None
    rest: RestOut | None = None
    tip: str | None = None
    tip_mode: TipMode | None = None
    training_goal: str | None = None
    chat_messages: list[ChatMessage] = Field(default_factory=list)
    summary: SummaryOut | None = None
    discarded: bool | None = None

    @classmethod
    def empty(cls, reason: Literal["no_program", "no_exercises"]) -> SessionStateResponse:
        return cls(status="empty", empty_reason=reason)

    @classmethod
    def from_controller(cls, controller: WorkoutSessionController) -> SessionStateResponse:
        state = controller.state
        now = controller.clock()
        rest = None
        if controller.rest is not None:
            rest = RestOut(
                duration=controller.rest.duration,
                remaining=controller.rest.remaining(now),
                progress=controller.rest.progress(now),
                ends_at_ms=controller.rest.ends_at_ms,
            )
        return cls(
            status="closed" if controller.mode == SessionMode.CLOSED else "active",
            session_id=state.id,
            name=state.name,
            started_at=state.started_at,
            mode=controller.mode.value,
            active_index=state.active_index,
            exercises=[ExerciseOut.from_state(e) for e in state.exercises],
            current_weight=controller.current_weight,
            current_reps=controller.current_reps,
            pending_difficulty=controller.pending_difficulty.value,
            last_difficulty=controller.last_difficulty.value if controller.last_difficulty else None,
            rest=rest,
            tip=controller.tip,
            tip_mode=controller.tip_mode,
            training_goal=controller.training_goal,
            chat_messages=list(controller.chat_messages),
            summary=SummaryOut.from_summary(controller.summary()),
        )


class TipRefreshResponse(BaseModel):
    tip: str | None = None
    stale: bool = False


class TickResponse(BaseModel):
    remaining: int
    mode: str


class SessionChatResponse(BaseModel):
    reply: ChatMessage | None = None
    messages: list[ChatMessage]


class HistoryItem(BaseModel):
    id: str
    name: str
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    duration: str
