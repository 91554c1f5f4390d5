"""Loading the exercise library from a JSON export."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, ValidationError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from liftcoach.db.models import Exercise


class ExerciseRecord(BaseModel):
    name: str
    equipment: str | None = None
    body_part: str | None = None
    target_muscle: str | None = None
    rating: float = 0.0


def read_exercise_file(path: Path) -> list[ExerciseRecord]:
    """Read a JSON list of exercises.

    Invalid entries are skipped with a warning.
    """
    raw: Any = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path} must contain a JSON list of exercises")

    records: list[ExerciseRecord] = []
    for index, item in enumerate(raw):
        try:
            records.append(ExerciseRecord.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Skipping exercise #{index} in {path}: {e.errors()[0]['msg']}")
    return records


def import_exercises(session: Session, records: Iterable[ExerciseRecord]) -> tuple[int, int]:
    """Insert new exercises and update existing ones, matched by name (case-insensitive).

    Returns:
        (created, updated) counts
    """
    created = 0
    updated = 0
    for record in records:
        name = record.name.strip()
        if not name:
            continue
        existing = session.execute(
            select(Exercise).where(func.lower(Exercise.name) == name.lower())
        ).scalar_one_or_none()
        if existing is None:
            session.add(
                Exercise(
                    name=name,
                    equipment=record.equipment,
                    body_part=record.body_part,
                    target_muscle=record.target_muscle,
                    rating=record.rating,
                )
            )
            created += 1
        else:
            existing.equipment = record.equipment
            existing.body_part = record.body_part
            existing.target_muscle = record.target_muscle
            existing.rating = record.rating
            updated += 1
        session.flush()

    logger.info(f"Exercise import finished: created={created} updated={updated}")
    return created, updated
