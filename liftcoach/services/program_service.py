"""Program (workout template) service.

All queries are scoped to the owning user.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from liftcoach.api.schemas.programs import (
    ProgramCreateRequest,
    ProgramDetail,
    ProgramExerciseOut,
    ProgramSummary,
)
from liftcoach.db.models import Exercise, TemplateExercise, WorkoutTemplate


class ProgramNotFoundError(Exception):
    def __init__(self, program_id: str):
        self.program_id = program_id
        super().__init__(f"Program {program_id} not found")


class UnknownExerciseError(Exception):
    def __init__(self, exercise_ids: list[str]):
        self.exercise_ids = exercise_ids
        super().__init__(f"Unknown exercises: {', '.join(exercise_ids)}")


def list_programs(session: Session, user_id: str) -> list[ProgramSummary]:
    """Programs of a user, most recently updated first."""
    counts = (
        select(TemplateExercise.template_id, func.count(TemplateExercise.id).label("n"))
        .group_by(TemplateExercise.template_id)
        .subquery()
    )
    stmt = (
        select(WorkoutTemplate, func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.template_id == WorkoutTemplate.id)
        .where(WorkoutTemplate.user_id == user_id)
        .order_by(WorkoutTemplate.updated_at.desc())
    )
    return [
        ProgramSummary(
            id=template.id,
            name=template.name,
            exercise_count=count,
            created_at=template.created_at,
            updated_at=template.updated_at,
        )
        for template, count in session.execute(stmt).all()
    ]


def _detail(template: WorkoutTemplate) -> ProgramDetail:
    return ProgramDetail(
        id=template.id,
        name=template.name,
        exercise_count=len(template.exercises),
        created_at=template.created_at,
        updated_at=template.updated_at,
        exercises=[
            ProgramExerciseOut(
                exercise_id=row.exercise_id,
                name=row.exercise.name,
                equipment=row.exercise.equipment,
                body_part=row.exercise.body_part,
                target_sets=row.target_sets or 3,
                target_reps=row.target_reps or 10,
                rest_seconds=row.rest_seconds,
                order_index=row.order_index,
            )
            for row in template.exercises
        ],
    )


def _load(session: Session, user_id: str, program_id: str) -> WorkoutTemplate:
    stmt = (
        select(WorkoutTemplate)
        .options(selectinload(WorkoutTemplate.exercises).selectinload(TemplateExercise.exercise))
        .where(WorkoutTemplate.id == program_id)
        .where(WorkoutTemplate.user_id == user_id)
    )
    template = session.execute(stmt).scalar_one_or_none()
    if template is None:
        raise ProgramNotFoundError(program_id)
    return template


def get_program(session: Session, user_id: str, program_id: str) -> ProgramDetail:
    """Program with its ordered exercises.

    Raises:
        ProgramNotFoundError: If the program does not exist or belongs to someone else
    """
    return _detail(_load(session, user_id, program_id))


def create_program(session: Session, user_id: str, request: ProgramCreateRequest) -> ProgramDetail:
    """Create a program, optionally with exercises.

    Raises:
        UnknownExerciseError: If an exercise id is not in the library
    """
    wanted = [item.exercise_id for item in request.exercises]
    if wanted:
        known = set(session.execute(select(Exercise.id).where(Exercise.id.in_(wanted))).scalars().all())
        missing = [exercise_id for exercise_id in dict.fromkeys(wanted) if exercise_id not in known]
        if missing:
            raise UnknownExerciseError(missing)

    template = WorkoutTemplate(user_id=user_id, name=request.name)
    session.add(template)
    session.flush()
    for index, item in enumerate(request.exercises):
        session.add(
            TemplateExercise(
                template_id=template.id,
                exercise_id=item.exercise_id,
                target_sets=item.target_sets,
                target_reps=item.target_reps,
                rest_seconds=item.rest_seconds,
                order_index=index,
            )
        )
    session.flush()
    logger.info(f"Created program program_id={template.id} user_id={user_id} exercises={len(request.exercises)}")

    session.expire(template)
    return get_program(session, user_id, template.id)


def delete_program(session: Session, user_id: str, program_id: str) -> None:
    """Delete a program and its exercise slots.

    Raises:
        ProgramNotFoundError: If the program does not exist or belongs to someone else
    """
    template = _load(session, user_id, program_id)
    session.delete(template)
    session.flush()
    logger.info(f"Deleted program program_id={program_id} user_id={user_id}")
