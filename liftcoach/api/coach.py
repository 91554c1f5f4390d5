"""Coach endpoints: coaching tips and in-workout chat.

The tip endpoint never fails: any problem yields a 200 with a fallback tip.
The chat endpoint reports upstream failures as ``{"error": ...}`` with a
non-200 status so the client can show its own error bubble.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from loguru import logger

from liftcoach.api.dependencies.auth import get_optional_user_id
from liftcoach.coach.chat import generate_chat_reply
from liftcoach.coach.errors import CoachChatError
from liftcoach.coach.schemas import ChatRequest, ChatResponse, CoachingTipRequest, CoachingTipResponse, ErrorResponse
from liftcoach.coach.tips import LAST_RESORT_TIP, generate_coaching_tip

router = APIRouter(prefix="/api", tags=["coach"])


@router.post("/coaching-tip", response_model=CoachingTipResponse)
async def coaching_tip(request: Request) -> CoachingTipResponse:
    """Generate a coaching tip for the exercise on screen.

    The body is validated here rather than by FastAPI so that even a
    malformed request gets a tip instead of a 422.
    """
    try:
        body = CoachingTipRequest.model_validate(await request.json())
    except Exception as e:
        logger.warning(f"Coaching tip request rejected, using fallback tip: {e}")
        return CoachingTipResponse(tip=LAST_RESORT_TIP)
    return CoachingTipResponse(tip=await generate_coaching_tip(body))


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def chat(
    request: ChatRequest,
    user_id: str | None = Depends(get_optional_user_id),
) -> ChatResponse | JSONResponse:
    """Answer a chat message using the exercise context and the user's PRs."""
    logger.info(f"POST /api/chat messages={len(request.messages)} user_id={user_id}")
    try:
        message = await generate_chat_reply(request.messages, request.exercise_context, user_id)
    except CoachChatError as e:
        return JSONResponse(status_code=e.status_code, content=ErrorResponse(error=e.message).model_dump())
    return ChatResponse(message=message)
