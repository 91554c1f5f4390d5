"""LLM-assisted workout program generation.

The model is given the top-rated part of the exercise library and asked for a
JSON program. Suggested names are then matched back onto library rows; a
suggestion with no match is dropped rather than invented.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass

from loguru import logger
from pydantic import BaseModel, ValidationError
from sqlalchemy import select

from liftcoach.coach.errors import WorkoutGenerationError
from liftcoach.coach.llm import complete_conversation
from liftcoach.coach.schemas import ChatMessage
from liftcoach.config.settings import settings
from liftcoach.db.models import Exercise
from liftcoach.db.session import get_session

GENERATION_TEMPERATURE = 0.7
GENERATION_MAX_TOKENS = 1000

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```")


class GeneratedExercise(BaseModel):
    name: str
    target_sets: int | None = None
    target_reps: int | None = None


class GeneratedWorkout(BaseModel):
    name: str | None = None
    exercises: list[GeneratedExercise]


@dataclass(frozen=True)
class LibraryExercise:
    id: str
    name: str
    equipment: str | None
    body_part: str | None


@dataclass(frozen=True)
class MatchedExercise:
    id: str
    name: str
    equipment: str | None
    body_part: str | None
    target_sets: int
    target_reps: int


@dataclass(frozen=True)
class WorkoutDraft:
    name: str | None
    exercises: list[MatchedExercise]


def strip_code_fences(content: str) -> str:
    """Remove markdown code fences around a model answer."""
    return _FENCE_RE.sub("", content).strip()


def parse_generated_workout(content: str) -> GeneratedWorkout:
    """Parse the model answer into a GeneratedWorkout.

    Raises:
        WorkoutGenerationError: If the answer is not the expected JSON object
    """
    cleaned = strip_code_fences(content)
    try:
        return GeneratedWorkout.model_validate(json.loads(cleaned))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Failed to parse AI response: {content[:500]}")
        raise WorkoutGenerationError("Failed to parse AI response", raw_output=content) from e


def match_exercise(suggested: str, library: list[LibraryExercise]) -> LibraryExercise | None:
    """Find the library exercise for a suggested name.

    Tried in order: exact name (case-insensitive), a library name containing
    the suggestion (ignoring any parenthesised suffix), then a suggestion
    containing a library name.
    """
    wanted = suggested.lower().strip()
    if not wanted:
        return None

    for exercise in library:
        if exercise.name.lower() == wanted:
            return exercise

    stem = wanted.split("(")[0].strip()
    if stem:
        for exercise in library:
            if stem in exercise.name.lower():
                return exercise

    for exercise in library:
        if exercise.name.lower() in wanted:
            return exercise
    return None


def match_exercises(generated: GeneratedWorkout, library: list[LibraryExercise]) -> list[MatchedExercise]:
    matched: list[MatchedExercise] = []
    for suggestion in generated.exercises:
        exercise = match_exercise(suggestion.name, library)
        if exercise is None:
            logger.debug(f"Dropping unmatched exercise suggestion: {suggestion.name}")
            continue
        matched.append(
            MatchedExercise(
                id=exercise.id,
                name=exercise.name,
                equipment=exercise.equipment,
                body_part=exercise.body_part,
                target_sets=suggestion.target_sets or 3,
                target_reps=suggestion.target_reps or 10,
            )
        )
    return matched


def build_generation_prompt(library: list[LibraryExercise]) -> str:
    exercise_list = "\n".join(f"{e.name} ({e.body_part}, {e.equipment})" for e in library)
    return f"""You are a fitness expert creating workout programs. Generate a workout based on the user's request.

Available exercises (pick from these EXACTLY):
{exercise_list}

Return a JSON object with:
{{
  "name": "Workout name",
  "exercises": [
    {{"name": "Exact exercise name from list", "target_sets": 3, "target_reps": 10}},
    ...
  ]
}}

Pick 4-8 exercises that match the user's goals. Use EXACT exercise names from the list above.
Only return the JSON, no other text."""


def build_request_prompt(goal: str, body_parts: list[str], exercise_count: int, notes: str | None = None) -> str:
    """Turn structured generator options into the user prompt."""
    prompt = f"Create a {goal} workout targeting {', '.join(body_parts)}.\nInclude {exercise_count} exercises."
    if notes:
        prompt += f"\nAdditional requirements: {notes}"
    return prompt


def build_alternative_prompt(exercise_name: str, body_part: str | None) -> str:
    return (
        f'Find an alternative exercise to "{exercise_name}" that targets the same muscle ({body_part or "same"}).\n'
        "Pick just 1 exercise that is different but similar in function."
    )


def load_library(limit: int | None = None) -> list[LibraryExercise]:
    """Top-rated exercises offered to the model."""
    stmt = (
        select(Exercise)
        .order_by(Exercise.rating.desc(), Exercise.name)
        .limit(limit or settings.generator_exercise_limit)
    )
    with get_session() as session:
        rows = session.execute(stmt).scalars().all()
        return [LibraryExercise(id=r.id, name=r.name, equipment=r.equipment, body_part=r.body_part) for r in rows]


async def generate_workout(prompt: str) -> WorkoutDraft:
    """Generate a program draft from a free-text request.

    Args:
        prompt: What the user wants (goal, body parts, constraints)

    Returns:
        Draft with the suggested name and matched exercises

    Raises:
        WorkoutGenerationError: If the library is empty, the model fails, or
            its answer cannot be parsed
    """
    library = load_library()
    if not library:
        raise WorkoutGenerationError("No exercises found")

    logger.info(f"Generating workout from prompt ({len(prompt)} chars) with {len(library)} library exercises")
    try:
        content = await complete_conversation(
            build_generation_prompt(library),
            [ChatMessage(role="user", content=prompt)],
            temperature=GENERATION_TEMPERATURE,
            max_tokens=GENERATION_MAX_TOKENS,
        )
    except Exception as e:
        logger.error("AI generation failed", exc_info=True)
        raise WorkoutGenerationError("AI generation failed") from e

    generated = parse_generated_workout(content)
    exercises = match_exercises(generated, library)
    logger.info(f"Generated workout '{generated.name}': matched {len(exercises)}/{len(generated.exercises)} exercises")
    return WorkoutDraft(name=generated.name, exercises=exercises)


async def find_alternative(
    exercise_name: str,
    body_part: str | None,
    target_sets: int | None = None,
    target_reps: int | None = None,
) -> MatchedExercise | None:
    """Suggest one replacement exercise, keeping the original's sets and reps.

    Returns:
        The replacement, or None when the model suggested nothing usable
    """
    draft = await generate_workout(build_alternative_prompt(exercise_name, body_part))
    if not draft.exercises:
        return None
    alternative = draft.exercises[0]
    return MatchedExercise(
        id=alternative.id,
        name=alternative.name,
        equipment=alternative.equipment,
        body_part=alternative.body_part,
        target_sets=target_sets or 3,
        target_reps=target_reps or 10,
    )
