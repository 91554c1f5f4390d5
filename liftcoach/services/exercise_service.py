"""Exercise library search."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from liftcoach.db.models import Exercise

SEARCH_LIMIT = 50


def search_exercises(
    session: Session,
    search: str | None = None,
    body_part: str | None = None,
    equipment: str | None = None,
    limit: int = SEARCH_LIMIT,
) -> list[Exercise]:
    """Search the library, best rated first.

    Args:
        session: Database session
        search: Case-insensitive substring of the exercise name
        body_part: Exact body part filter (case-insensitive)
        equipment: Exact equipment filter (case-insensitive)
        limit: Maximum number of results

    Returns:
        Matching exercises ordered by rating descending
    """
    stmt = select(Exercise)
    if search and search.strip():
        stmt = stmt.where(func.lower(Exercise.name).contains(search.strip().lower()))
    if body_part:
        stmt = stmt.where(func.lower(Exercise.body_part) == body_part.lower())
    if equipment:
        stmt = stmt.where(func.lower(Exercise.equipment) == equipment.lower())
    stmt = stmt.order_by(Exercise.rating.desc(), Exercise.name).limit(limit)
    return list(session.execute(stmt).scalars().all())
