"""Workout session endpoints.

A running session is held in the in-memory registry and driven through
these endpoints one action at a time. Handlers are ``async`` so that actions
on one session are applied in order on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from liftcoach.api.dependencies.auth import get_current_user_id, get_optional_user_id
from liftcoach.api.schemas.workouts import (
    CompleteSetRequest,
    HistoryItem,
    InputsRequest,
    OverlayRequest,
    ReorderRequest,
    SessionChatRequest,
    SessionChatResponse,
    SessionStateResponse,
    StartSessionRequest,
    SummaryOut,
    SwipeRequest,
    TickResponse,
    TipRefreshRequest,
    TipRefreshResponse,
)
from liftcoach.coach.chat import LLMChatResponder
from liftcoach.coach.tips import LLMTipGenerator
from liftcoach.services.profile_service import load_training_goal
from liftcoach.workouts.controller import WorkoutSessionController
from liftcoach.workouts.errors import (
    InvalidTransitionError,
    SessionClosedError,
    SessionNotFoundError,
    SetAlreadyCompletedError,
)
from liftcoach.workouts.history import format_duration, list_sessions
from liftcoach.workouts.persistence import DatabaseSetStore, NullSetStore
from liftcoach.workouts.registry import registry
from liftcoach.workouts.service import start_session

router = APIRouter(prefix="/workouts", tags=["workouts"])


def _controller(session_id: str, user_id: str | None) -> WorkoutSessionController:
    try:
        return registry.get(session_id, user_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post("/sessions", response_model=SessionStateResponse)
async def start(
    request: StartSessionRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> SessionStateResponse:
    """Start a new session from a program.

    A missing program or one without exercises is not an error; the response
    has ``status="empty"`` and the reason.
    """
    result = start_session(request.program_id, user_id)
    if result.session is None:
        return SessionStateResponse.empty(result.empty_reason or "no_program")

    controller = WorkoutSessionController(
        result.session,
        store=DatabaseSetStore(user_id) if user_id else NullSetStore(),
        tip_generator=LLMTipGenerator(),
        chat_responder=LLMChatResponder(user_id),
        history=result.history,
        training_goal=load_training_goal(user_id),
        tip_mode=request.tip_mode,
    )
    registry.add(controller, user_id)
    return SessionStateResponse.from_controller(controller)


@router.get("/sessions/{session_id}", response_model=SessionStateResponse)
async def get_state(session_id: str, user_id: str | None = Depends(get_optional_user_id)) -> SessionStateResponse:
    controller = _controller(session_id, user_id)
    controller.tick()
    return SessionStateResponse.from_controller(controller)


@router.post("/sessions/{session_id}/complete-set", response_model=SessionStateResponse)
async def complete_set(
    session_id: str,
    request: CompleteSetRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> SessionStateResponse:
    controller = _controller(session_id, user_id)
    try:
        if request.weight is not None:
            controller.set_weight(request.weight)
        if request.reps is not None:
            controller.set_reps(request.reps)
        if request.difficulty is not None:
            controller.select_difficulty(request.difficulty)
        controller.complete_set()
    except (SetAlreadyCompletedError, InvalidTransitionError, SessionClosedError) as e:
        raise _conflict(e) from e
    response = SessionStateResponse.from_controller(controller)
    if controller.state.is_complete:
        # The response carries the final summary; nothing is left to drive
        registry.remove(session_id)
        logger.info(f"Workout session finished and released session_id={session_id}")
    return response


@router.post("/sessions/{session_id}/skip-set", response_model=SessionStateResponse)
async def skip_set(session_id: str, user_id: str | None = Depends(get_optional_user_id)) -> SessionStateResponse:
    controller = _controller(session_id, user_id)
    try:
        controller.skip_set()
    except (SetAlreadyCompletedError, InvalidTransitionError, SessionClosedError) as e:
        raise _conflict(e) from e
    return SessionStateResponse.from_controller(controller)


@router.post("/sessions/{session_id}/next", response_model=SessionStateResponse)
async def next_exercise(session_id: str, user_id: str | None = Depends(get_optional_user_id)) -> SessionStateResponse:
    controller = _controller(session_id, user_id)
    try:
        controller.next_exercise()
    except (InvalidTransitionError, SessionClosedError) as e:
        raise _conflict(e) from e
    return SessionStateResponse.from_controller(controller)


@router.post("/sessions/{session_id}/previous", response_model=SessionStateResponse)
async def previous_exercise(
    session_id: str, user_id: str | None = Depends(get_optional_user_id)
) -> SessionStateResponse:
    controller = _controller(session_id, user_id)
    try:
        controller.previous_exercise()
    except (InvalidTransitionError, SessionClosedError) as e:
        raise _conflict(e) from e
    return SessionStateResponse.from_controller(controller)


@router.post("/sessions/{session_id}/swipe", response_model=SessionStateResponse)
async def swipe(
    session_id: str,
    request: SwipeRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> SessionStateResponse:
    """Navigate on a horizontal swipe; other gestures leave the session as is."""
    controller = _controller(session_id, user_id)
    try:
        controller.swipe(request.dx, request.dy)
    except (InvalidTransitionError, SessionClosedError) as e:
        raise _conflict(e) from e
    return SessionStateResponse.from_controller(controller)


@router.post("/sessions/{session_id}/reorder", response_model=SessionStateResponse)
async def reorder(
    session_id: str,
    request: ReorderRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> SessionStateResponse:
    controller = _controller(session_id, user_id)
    try:
        controller.reorder(request.direction)
    except (InvalidTransitionError, SessionClosedError) as e:
        raise _conflict(e) from e
    return SessionStateResponse.from_controller(controller)


@router.put("/sessions/{session_id}/inputs", response_model=SessionStateResponse)
async def update_inputs(
    session_id: str,
    request: InputsRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> SessionStateResponse:
    controller = _controller(session_id, user_id)
    try:
        if request.weight is not None:
            controller.set_weight(request.weight)
        if request.weight_delta is not None:
            controller.adjust_weight(request.weight_delta)
        if request.reps is not None:
            controller.set_reps(request.reps)
        if request.difficulty is not None:
            controller.select_difficulty(request.difficulty)
        if request.tip_mode is not None:
            controller.set_tip_mode(request.tip_mode)
    except SessionClosedError as e:
        raise _conflict(e) from e
    return SessionStateResponse.from_controller(controller)


@router.post("/sessions/{session_id}/tick", response_model=TickResponse)
async def tick(session_id: str, user_id: str | None = Depends(get_optional_user_id)) -> TickResponse:
    controller = _controller(session_id, user_id)
    remaining = controller.tick()
    return TickResponse(remaining=remaining, mode=controller.mode.value)


@router.post("/sessions/{session_id}/skip-rest", response_model=SessionStateResponse)
async def skip_rest(session_id: str, user_id: str | None = Depends(get_optional_user_id)) -> SessionStateResponse:
    controller = _controller(session_id, user_id)
    try:
        controller.skip_rest()
    except SessionClosedError as e:
        raise _conflict(e) from e
    return SessionStateResponse.from_controller(controller)


@router.post("/sessions/{session_id}/overlay", response_model=SessionStateResponse)
async def overlay(
    session_id: str,
    request: OverlayRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> SessionStateResponse:
    """Open or close the sets view, the chat, or the exit confirmation.

    ``confirm_exit`` ends the session and drops it from the registry.
    """
    controller = _controller(session_id, user_id)
    try:
        if request.action == "confirm_exit":
            discarded = controller.confirm_exit()
            registry.remove(session_id)
            response = SessionStateResponse.from_controller(controller)
            response.discarded = discarded
            return response
        getattr(controller, request.action)()
    except (InvalidTransitionError, SessionClosedError) as e:
        raise _conflict(e) from e
    return SessionStateResponse.from_controller(controller)


@router.post("/sessions/{session_id}/tip", response_model=TipRefreshResponse)
async def refresh_tip(
    session_id: str,
    request: TipRefreshRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> TipRefreshResponse:
    """Refresh the coaching tip.

    With ``debounce`` the request waits out the quiet period first; if the
    inputs change meanwhile (or the tip arrives late) ``stale`` is returned.
    """
    controller = _controller(session_id, user_id)
    try:
        tip = await controller.refresh_tip(debounce=request.debounce)
    except SessionClosedError as e:
        raise _conflict(e) from e
    return TipRefreshResponse(tip=tip, stale=tip is None)


@router.post("/sessions/{session_id}/chat", response_model=SessionChatResponse)
async def chat(
    session_id: str,
    request: SessionChatRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> SessionChatResponse:
    controller = _controller(session_id, user_id)
    try:
        reply = await controller.send_chat(request.message)
    except (InvalidTransitionError, SessionClosedError) as e:
        raise _conflict(e) from e
    return SessionChatResponse(reply=reply, messages=list(controller.chat_messages))


@router.get("/sessions/{session_id}/summary", response_model=SummaryOut)
async def summary(session_id: str, user_id: str | None = Depends(get_optional_user_id)) -> SummaryOut:
    controller = _controller(session_id, user_id)
    return SummaryOut.from_summary(controller.summary())


history_router = APIRouter(prefix="/history", tags=["history"])


@history_router.get("", response_model=list[HistoryItem])
def get_history(user_id: str = Depends(get_current_user_id)) -> list[HistoryItem]:
    """Past sessions, newest first."""
    sessions = list_sessions(user_id)
    logger.debug(f"GET /history user_id={user_id} sessions={len(sessions)}")
    return [
        HistoryItem(
            id=s.id,
            name=s.name,
            status=s.status,
            started_at=s.started_at,
            completed_at=s.completed_at,
            duration=format_duration(s.started_at, s.completed_at),
        )
        for s in sessions
    ]
