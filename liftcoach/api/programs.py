"""Program endpoints: CRUD plus LLM-assisted generation."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from loguru import logger

from liftcoach.api.dependencies.auth import get_current_user_id
from liftcoach.api.schemas.programs import (
    AlternativeRequest,
    AlternativeResponse,
    GeneratedExerciseOut,
    GenerateWorkoutRequest,
    GenerateWorkoutResponse,
    ProgramCreateRequest,
    ProgramDetail,
    ProgramSummary,
)
from liftcoach.coach.errors import WorkoutGenerationError
from liftcoach.coach.generation import MatchedExercise, build_request_prompt, find_alternative, generate_workout
from liftcoach.db.session import get_session
from liftcoach.services.program_service import (
    ProgramNotFoundError,
    UnknownExerciseError,
    create_program,
    delete_program,
    get_program,
    list_programs,
)

router = APIRouter(prefix="/programs", tags=["programs"])


def _generated_out(exercise: MatchedExercise) -> GeneratedExerciseOut:
    return GeneratedExerciseOut(
        id=exercise.id,
        name=exercise.name,
        equipment=exercise.equipment,
        body_part=exercise.body_part,
        target_sets=exercise.target_sets,
        target_reps=exercise.target_reps,
    )


@router.get("", response_model=list[ProgramSummary])
def get_programs(user_id: str = Depends(get_current_user_id)) -> list[ProgramSummary]:
    with get_session() as session:
        return list_programs(session, user_id)


@router.post("", response_model=ProgramDetail, status_code=status.HTTP_201_CREATED)
def post_program(request: ProgramCreateRequest, user_id: str = Depends(get_current_user_id)) -> ProgramDetail:
    try:
        with get_session() as session:
            return create_program(session, user_id, request)
    except UnknownExerciseError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


@router.post("/generate", response_model=GenerateWorkoutResponse)
async def generate_program(
    request: GenerateWorkoutRequest,
    user_id: str = Depends(get_current_user_id),
) -> GenerateWorkoutResponse:
    """Draft a program with the LLM.

    The draft is not saved; the client reviews it and saves it with
    ``POST /programs``.

    Raises:
        HTTPException: 400 without a prompt or options, 502 if generation fails
    """
    if request.prompt and request.prompt.strip():
        prompt = request.prompt.strip()
    elif request.goal and request.body_parts:
        prompt = build_request_prompt(request.goal, request.body_parts, request.exercise_count, request.notes)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide a prompt, or a goal with at least one body part",
        )

    logger.info(f"POST /programs/generate user_id={user_id}")
    try:
        draft = await generate_workout(prompt)
    except WorkoutGenerationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message) from e
    return GenerateWorkoutResponse(name=draft.name, exercises=[_generated_out(e) for e in draft.exercises])


@router.post("/alternative", response_model=AlternativeResponse)
async def alternative_exercise(
    request: AlternativeRequest,
    user_id: str = Depends(get_current_user_id),
) -> AlternativeResponse:
    """Suggest a replacement for one exercise of a draft."""
    logger.info(f"POST /programs/alternative user_id={user_id} exercise={request.exercise_name}")
    try:
        alternative = await find_alternative(
            request.exercise_name, request.body_part, request.target_sets, request.target_reps
        )
    except WorkoutGenerationError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message) from e
    return AlternativeResponse(exercise=_generated_out(alternative) if alternative else None)


@router.get("/{program_id}", response_model=ProgramDetail)
def get_program_detail(program_id: str, user_id: str = Depends(get_current_user_id)) -> ProgramDetail:
    try:
        with get_session() as session:
            return get_program(session, user_id, program_id)
    except ProgramNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


@router.delete("/{program_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_program(program_id: str, user_id: str = Depends(get_current_user_id)) -> None:
    try:
        with get_session() as session:
            delete_program(session, user_id, program_id)
    except ProgramNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
