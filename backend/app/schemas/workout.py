import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, Field

from ..core.enums import AssignmentStatus, TrackingType
from .exercise import ExerciseRead
from .user import UserRead


class PlanExerciseIn(BaseModel):
    exercise_id: int
    sets: int = Field(default=1, ge=1)
    tracking_type: TrackingType = TrackingType.REPS
    reps: Optional[int] = Field(default=None, ge=0)
    exercise_duration: Optional[int] = Field(default=None, ge=0)


class PlanExerciseRead(PlanExerciseIn):
    id: int
    order: Optional[int] = None
    exercise: ExerciseRead

    model_config = {"from_attributes": True}


class RoutineCreate(BaseModel):
    name: str = Field(min_length=1)
    notes: Optional[str] = None
    exercises: list[PlanExerciseIn] = Field(default_factory=list)


class RoutineExerciseAdd(BaseModel):
    exercise_id: int


class WorkoutPlanRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    name: str
    notes: Optional[str] = None
    is_system_routine: bool
    system_routine_category: Optional[str] = None
    training_type: Optional[str] = None
    created_at: dt.datetime
    exercises: list[PlanExerciseRead] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class WorkoutPlanSummary(BaseModel):
    id: int
    user_id: Optional[int] = None
    name: str
    notes: Optional[str] = None
    is_system_routine: bool
    system_routine_category: Optional[str] = None
    training_type: Optional[str] = None
    created_at: dt.datetime
    exercise_count: int


class WorkoutPlanPage(BaseModel):
    workouts: list[WorkoutPlanSummary]
    total: int
    page: int
    limit: int
    total_pages: int


class AssignmentCreate(BaseModel):
    user_id: int
    workout_plan_id: int
    assigned_date: Optional[dt.date] = None
    due_date: Optional[dt.date] = None
    notes: Optional[str] = None


class AssignmentUpdate(BaseModel):
    status: Optional[AssignmentStatus] = None
    notes: Optional[str] = None
    assigned_date: Optional[dt.date] = None


class UserAssignmentStatusUpdate(BaseModel):
    assignment_id: int
    status: AssignmentStatus


class AssignmentRead(BaseModel):
    id: int
    user_id: int
    workout_plan_id: int
    assigned_by: Optional[int] = None
    assigned_at: dt.date
    due_date: Optional[dt.date] = None
    status: AssignmentStatus
    notes: Optional[str] = None
    workout_plan: WorkoutPlanRead

    model_config = {"from_attributes": True}


class AssignmentSummary(BaseModel):
    id: int
    user_id: int
    workout_plan_id: int
    workout_plan_name: str
    exercise_count: int
    assigned_at: dt.date
    due_date: Optional[dt.date] = None
    status: AssignmentStatus
    notes: Optional[str] = None


class SetIn(BaseModel):
    weight: Optional[float] = Field(default=None, ge=0)
    reps: Optional[int] = Field(default=None, ge=0)
    exercise_duration: Optional[int] = Field(default=None, ge=0)


class LoggedExerciseIn(BaseModel):
    exercise_id: int
    sets: list[SetIn] = Field(default_factory=list)


class WorkoutLogCreate(BaseModel):
    workout_plan_id: Optional[int] = None
    date: Optional[dt.date] = None
    duration: int = Field(default=0, ge=0)
    total_rest_time_seconds: int = Field(default=0, ge=0)
    total_active_time_seconds: int = Field(default=0, ge=0)
    exercises: Optional[list[LoggedExerciseIn]] = None
    target_user_id: Optional[int] = None


class WorkoutLogUpdate(BaseModel):
    date: dt.date
    duration: int = Field(ge=0)
    exercises: list[LoggedExerciseIn]


class AdminLoggedExerciseIn(BaseModel):
    id: int
    sets: list[SetIn]


class AdminWorkoutLogUpdate(BaseModel):
    date: Optional[dt.date] = None
    duration: Optional[int] = Field(default=None, ge=0)
    exercises: Optional[list[Any]] = None


class SetRead(BaseModel):
    id: int
    weight: Optional[float] = None
    reps: Optional[int] = None
    exercise_duration: Optional[int] = None
    order: Optional[int] = None

    model_config = {"from_attributes": True}


class LoggedExerciseRead(BaseModel):
    id: int
    exercise_id: int
    tracking_type: TrackingType
    exercise: ExerciseRead
    sets: list[SetRead]

    model_config = {"from_attributes": True}


class WorkoutLogRead(BaseModel):
    id: int
    user_id: int
    workout_plan_id: int
    date: dt.date
    duration: int
    total_rest_time_seconds: int
    total_active_time_seconds: int
    in_progress: bool
    updated_at: Optional[dt.datetime] = None
    exercises: list[LoggedExerciseRead]

    model_config = {"from_attributes": True}


class WorkoutLogPage(BaseModel):
    logs: list[WorkoutLogRead]
    total: int
    page: int
    limit: int
    total_pages: int


class WorkoutLogSummary(BaseModel):
    id: int
    duration: int
    total_rest_time_seconds: int
    total_active_time_seconds: int
    exercise_count: int
    workout_plan_name: str


class ProgressStats(BaseModel):
    total_assignments: int
    completed_assignments: int
    absent_assignments: int
    skipped_assignments: int
    completion_rate: int
    avg_workout_duration: int
    total_workouts: int
    streak_days: int


class UserProgress(BaseModel):
    user: UserRead
    assignments: list[AssignmentRead]
    workout_logs: list[WorkoutLogRead]
    stats: ProgressStats
