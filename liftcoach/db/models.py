from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, Float, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all database models."""


class Profile(Base):
    """User profile collected during onboarding.

    Stores:
    - id: User ID (the 'sub' claim of the access token)
    - full_name: Display name
    - goals: List of goal ids (strength, muscle, endurance, lose_fat, general)
    - experience: beginner | intermediate | advanced
    - training_days: Planned training days per week
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String, primary_key=True, index=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    full_name: Mapped[str | None] = mapped_column(String, nullable=True)
    goals: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    experience: Mapped[str | None] = mapped_column(String, nullable=True)
    training_days: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


class Exercise(Base):
    """Exercise library entry shared by all users."""

    __tablename__ = "exercises"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)
    equipment: Mapped[str | None] = mapped_column(String, nullable=True)
    body_part: Mapped[str | None] = mapped_column(String, nullable=True)
    target_muscle: Mapped[str | None] = mapped_column(String, nullable=True)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    __table_args__ = (Index("idx_exercises_body_part_equipment", "body_part", "equipment"),)


class WorkoutTemplate(Base):
    """Saved program: an ordered list of exercises with target sets and reps.

    Programs without an owner are shared; they are the only programs an
    anonymous session can start.
    """

    __tablename__ = "workout_templates"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id, index=True)
    user_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    exercises: Mapped[list[TemplateExercise]] = relationship(
        "TemplateExercise",
        back_populates="template",
        order_by="TemplateExercise.order_index",
        cascade="all, delete-orphan",
    )


class TemplateExercise(Base):
    """One exercise slot within a program.

    rest_seconds is optional; sessions fall back to the configured default.
    """

    __tablename__ = "template_exercises"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id, index=True)
    template_id: Mapped[str] = mapped_column(
        String, ForeignKey("workout_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exercise_id: Mapped[str] = mapped_column(String, ForeignKey("exercises.id"), nullable=False)
    target_sets: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rest_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    template: Mapped[WorkoutTemplate] = relationship("WorkoutTemplate", back_populates="exercises")
    exercise: Mapped[Exercise] = relationship("Exercise")


class WorkoutSession(Base):
    """A performed workout.

    Rows are created lazily when the first set of a session is saved, so a
    session the user abandons before completing anything never reaches the
    database.

    Schema:
    - status: in_progress | completed
    - completed_at: Set when every set of the session is completed
    """

    __tablename__ = "workout_sessions"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id, index=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    template_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workout_templates.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="in_progress")
    started_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    exercises: Mapped[list[SessionExercise]] = relationship(
        "SessionExercise",
        back_populates="session",
        cascade="all, delete-orphan",
    )


class SessionExercise(Base):
    """An exercise performed within a session."""

    __tablename__ = "session_exercises"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id, index=True)
    session_id: Mapped[str] = mapped_column(
        String, ForeignKey("workout_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    exercise_id: Mapped[str] = mapped_column(String, ForeignKey("exercises.id"), nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    session: Mapped[WorkoutSession] = relationship("WorkoutSession", back_populates="exercises")
    exercise: Mapped[Exercise] = relationship("Exercise")
    sets: Mapped[list[CompletedSet]] = relationship(
        "CompletedSet",
        back_populates="session_exercise",
        order_by="CompletedSet.set_number",
        cascade="all, delete-orphan",
    )

    __table_args__ = (UniqueConstraint("session_id", "exercise_id", name="uq_session_exercise"),)


class CompletedSet(Base):
    """One completed set, written as soon as the user completes it."""

    __tablename__ = "completed_sets"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id, index=True)
    session_exercise_id: Mapped[str] = mapped_column(
        String, ForeignKey("session_exercises.id", ondelete="CASCADE"), nullable=False, index=True
    )
    set_number: Mapped[int] = mapped_column(Integer, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    difficulty: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, index=True)

    session_exercise: Mapped[SessionExercise] = relationship("SessionExercise", back_populates="sets")
