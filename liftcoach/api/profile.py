"""Profile API endpoints.

Onboarding stores the user's name, goals, experience and weekly schedule.
The goals decide whether coaching tips are tuned for strength or hypertrophy.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from loguru import logger

from liftcoach.api.dependencies.auth import get_current_user_id
from liftcoach.api.schemas.profile import ProfileResponse, ProfileUpdateRequest
from liftcoach.db.session import get_session
from liftcoach.services.profile_service import get_profile as get_profile_service
from liftcoach.services.profile_service import upsert_profile

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def get_profile(user_id: str = Depends(get_current_user_id)) -> ProfileResponse:
    """Get the user's profile.

    A user who never onboarded gets an empty profile with
    ``needs_onboarding`` set.
    """
    with get_session() as session:
        return get_profile_service(session, user_id)


@router.put("", response_model=ProfileResponse)
def put_profile(
    request: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user_id),
) -> ProfileResponse:
    """Save onboarding answers.

    Args:
        request: Complete onboarding answers
        user_id: Current authenticated user ID (from auth dependency)

    Returns:
        The stored profile
    """
    logger.info(f"PUT /profile user_id={user_id} goals={request.goals} experience={request.experience}")
    with get_session() as session:
        return upsert_profile(session, user_id, request)
