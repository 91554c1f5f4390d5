"""Profile service: onboarding answers and derived training goal."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger
from sqlalchemy.orm import Session

from liftcoach.api.schemas.profile import ProfileResponse, ProfileUpdateRequest
from liftcoach.coach.schemas import TrainingGoal
from liftcoach.db.models import Profile
from liftcoach.db.session import get_session


def training_goal_for(goals: Iterable[str] | None) -> TrainingGoal:
    """Coaching goal for a set of onboarding goals.

    Strength coaching when the user picked "strength", hypertrophy otherwise.
    """
    if goals and "strength" in goals:
        return "strength"
    return "hypertrophy"


def _to_response(user_id: str, profile: Profile | None) -> ProfileResponse:
    if profile is None:
        return ProfileResponse(id=user_id)
    goals = list(profile.goals or [])
    return ProfileResponse(
        id=profile.id,
        email=profile.email,
        full_name=profile.full_name,
        goals=goals,
        experience=profile.experience,
        training_days=profile.training_days,
        training_goal=training_goal_for(goals),
        needs_onboarding=not profile.full_name,
    )


def get_profile(session: Session, user_id: str) -> ProfileResponse:
    return _to_response(user_id, session.get(Profile, user_id))


def upsert_profile(session: Session, user_id: str, request: ProfileUpdateRequest) -> ProfileResponse:
    """Create or replace the user's onboarding answers."""
    profile = session.get(Profile, user_id)
    if profile is None:
        profile = Profile(id=user_id)
        session.add(profile)
        logger.info(f"Creating profile user_id={user_id}")

    profile.full_name = request.full_name
    profile.goals = list(request.goals)
    profile.experience = request.experience
    profile.training_days = request.training_days
    if request.email is not None:
        profile.email = request.email
    session.flush()
    return _to_response(user_id, profile)


def load_training_goal(user_id: str | None) -> TrainingGoal:
    """Training goal for a user, hypertrophy when unknown."""
    if user_id is None:
        return "hypertrophy"
    try:
        with get_session() as session:
            profile = session.get(Profile, user_id)
            return training_goal_for(profile.goals if profile else None)
    except Exception:
        logger.warning(f"Could not load profile goals user_id={user_id}", exc_info=True)
        return "hypertrophy"
