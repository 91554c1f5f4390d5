"""Exercise library endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query
from pydantic import BaseModel

from liftcoach.db.session import get_session
from liftcoach.services.exercise_service import SEARCH_LIMIT, search_exercises

router = APIRouter(prefix="/exercises", tags=["exercises"])


class ExerciseOut(BaseModel):
    id: str
    name: str
    equipment: str | None = None
    body_part: str | None = None
    target_muscle: str | None = None
    rating: float = 0.0


@router.get("", response_model=list[ExerciseOut])
def list_exercises(
    search: str | None = Query(default=None, description="Substring of the exercise name"),
    body_part: str | None = Query(default=None),
    equipment: str | None = Query(default=None),
    limit: int = Query(default=SEARCH_LIMIT, ge=1, le=SEARCH_LIMIT),
) -> list[ExerciseOut]:
    with get_session() as session:
        rows = search_exercises(session, search=search, body_part=body_part, equipment=equipment, limit=limit)
        return [
            ExerciseOut(
                id=row.id,
                name=row.name,
                equipment=row.equipment,
                body_part=row.body_part,
                target_muscle=row.target_muscle,
                rating=row.rating,
            )
            for row in rows
        ]
