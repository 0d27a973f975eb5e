from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.enums import AssignmentStatus, TrackingType
from ..database import Base
from .exercise import Exercise
from .user import User


class WorkoutPlan(Base):
    __tablename__ = "workout_plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=True
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    is_system_routine: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    system_routine_category: Mapped[Optional[str]] = mapped_column(String(80))
    training_type: Mapped[Optional[str]] = mapped_column(String(80))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=datetime.utcnow, nullable=False
    )

    exercises: Mapped[list["WorkoutPlanExercise"]] = relationship(
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="WorkoutPlanExercise.order",
    )


class WorkoutPlanExercise(Base):
    __tablename__ = "workout_plan_exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    workout_plan_id: Mapped[int] = mapped_column(
        ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    sets: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    tracking_type: Mapped[TrackingType] = mapped_column(
        Enum(TrackingType, native_enum=False), default=TrackingType.REPS, nullable=False
    )
    reps: Mapped[Optional[int]] = mapped_column(Integer)
    exercise_duration: Mapped[Optional[int]] = mapped_column(Integer)
    order: Mapped[Optional[int]] = mapped_column(Integer)

    plan: Mapped[WorkoutPlan] = relationship(back_populates="exercises")
    exercise: Mapped[Exercise] = relationship(lazy="joined")


class AssignedWorkout(Base):
    __tablename__ = "assigned_workouts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    workout_plan_id: Mapped[int] = mapped_column(
        ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False
    )
    assigned_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    assigned_at: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date)
    status: Mapped[AssignmentStatus] = mapped_column(
        Enum(AssignmentStatus, native_enum=False), default=AssignmentStatus.PENDING, nullable=False
    )
    notes: Mapped[Optional[str]] = mapped_column(Text)

    user: Mapped[User] = relationship(back_populates="assigned_workouts", foreign_keys=[user_id])
    workout_plan: Mapped[WorkoutPlan] = relationship(lazy="joined")


class WorkoutLog(Base):
    __tablename__ = "workout_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    workout_plan_id: Mapped[int] = mapped_column(
        ForeignKey("workout_plans.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[date] = mapped_column(Date, default=date.today, nullable=False)
    duration: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_rest_time_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_active_time_seconds: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    in_progress: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    workout_plan: Mapped[WorkoutPlan] = relationship(lazy="joined")
    exercises: Mapped[list["WorkoutLogExercise"]] = relationship(
        back_populates="workout_log", cascade="all, delete-orphan"
    )


class WorkoutLogExercise(Base):
    __tablename__ = "workout_log_exercises"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    workout_log_id: Mapped[int] = mapped_column(
        ForeignKey("workout_logs.id", ondelete="CASCADE"), nullable=False
    )
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    tracking_type: Mapped[TrackingType] = mapped_column(
        Enum(TrackingType, native_enum=False), default=TrackingType.REPS, nullable=False
    )

    workout_log: Mapped[WorkoutLog] = relationship(back_populates="exercises")
    exercise: Mapped[Exercise] = relationship(lazy="joined")
    sets: Mapped[list["SetLog"]] = relationship(
        back_populates="workout_log_exercise",
        cascade="all, delete-orphan",
        order_by="SetLog.order",
    )


class SetLog(Base):
    __tablename__ = "set_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    workout_log_exercise_id: Mapped[int] = mapped_column(
        ForeignKey("workout_log_exercises.id", ondelete="CASCADE"), nullable=False
    )
    weight: Mapped[Optional[float]] = mapped_column()
    reps: Mapped[Optional[int]] = mapped_column(Integer)
    exercise_duration: Mapped[Optional[int]] = mapped_column(Integer)
    order: Mapped[Optional[int]] = mapped_column(Integer)

    workout_log_exercise: Mapped[WorkoutLogExercise] = relationship(back_populates="sets")


class UserExercisePB(Base):
    __tablename__ = "user_exercise_pbs"
    __table_args__ = (UniqueConstraint("user_id", "exercise_id", name="user_exercise_pb_unique"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    exercise_id: Mapped[int] = mapped_column(
        ForeignKey("exercises.id", ondelete="CASCADE"), nullable=False
    )
    weight: Mapped[float] = mapped_column(nullable=False)
    reps: Mapped[Optional[int]] = mapped_column(Integer)
    exercise_duration: Mapped[Optional[int]] = mapped_column(Integer)
    workout_log_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("workout_logs.id", ondelete="SET NULL"), nullable=True
    )
