from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.enums import TrackingType
from ..core.security import is_admin_role
from ..database import get_db
from ..dependencies import Pagination, get_current_user, get_pagination
from ..models.exercise import Exercise
from ..models.user import User
from ..models.workout import AssignedWorkout, WorkoutLog, WorkoutPlan, WorkoutPlanExercise
from ..schemas.user import SuccessResponse
from ..schemas.workout import (
    PlanExerciseIn,
    RoutineCreate,
    RoutineExerciseAdd,
    WorkoutLogCreate,
    WorkoutLogPage,
    WorkoutLogRead,
    WorkoutLogSummary,
    WorkoutLogUpdate,
    WorkoutPlanRead,
)
from ..services.workout_logs import (
    ensure_exercises_exist,
    fill_log_exercises,
    update_personal_bests,
)

router = APIRouter(prefix="/workouts", tags=["workouts"])
logs_router = APIRouter(prefix="/workout-logs", tags=["workout-logs"])


@router.get("/routines", response_model=list[WorkoutPlanRead])
def list_routines(
    category: str | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[WorkoutPlan]:
    system_filter = WorkoutPlan.is_system_routine.is_(True)
    if category:
        system_filter = system_filter & (WorkoutPlan.system_routine_category == category)
    return (
        db.query(WorkoutPlan)
        .filter(or_(WorkoutPlan.user_id == current_user.id, system_filter))
        .order_by(WorkoutPlan.is_system_routine, WorkoutPlan.created_at.desc())
        .all()
    )


@router.get("/routines/{plan_id}", response_model=WorkoutPlanRead)
def read_routine(
    plan_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutPlan:
    plan = _get_plan_or_404(db, plan_id)
    if not (
        plan.is_system_routine
        or plan.user_id == current_user.id
        or is_admin_role(current_user.role)
    ):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return plan


@router.post("/routines", response_model=WorkoutPlanRead, status_code=status.HTTP_201_CREATED)
def create_routine(
    payload: RoutineCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutPlan:
    ensure_exercises_exist(db, [item.exercise_id for item in payload.exercises])
    plan = WorkoutPlan(user_id=current_user.id, name=payload.name, notes=payload.notes)
    _fill_plan_exercises(plan, payload.exercises)
    db.add(plan)
    db.commit()
    db.refresh(plan)
    return plan


@router.put("/routines/{plan_id}", response_model=WorkoutPlanRead)
def replace_routine(
    plan_id: int,
    payload: RoutineCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutPlan:
    plan = _get_editable_plan(db, plan_id, current_user)
    ensure_exercises_exist(db, [item.exercise_id for item in payload.exercises])
    plan.name = payload.name
    plan.notes = payload.notes
    plan.exercises.clear()
    db.flush()
    _fill_plan_exercises(plan, payload.exercises)
    db.commit()
    db.refresh(plan)
    return plan


@router.delete("/routines/{plan_id}", response_model=SuccessResponse)
def delete_routine(
    plan_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    plan = _get_plan_or_404(db, plan_id)
    if plan.is_system_routine:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete system routines")
    if plan.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    db.query(AssignedWorkout).filter(AssignedWorkout.workout_plan_id == plan.id).delete(
        synchronize_session=False
    )
    for log in db.query(WorkoutLog).filter(WorkoutLog.workout_plan_id == plan.id).all():
        db.delete(log)
    db.delete(plan)
    db.commit()
    return SuccessResponse()


@router.post("/routines/{plan_id}/exercises", response_model=WorkoutPlanRead)
def add_routine_exercise(
    plan_id: int,
    payload: RoutineExerciseAdd,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutPlan:
    plan = _get_editable_plan(db, plan_id, current_user)
    if not db.get(Exercise, payload.exercise_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not found")
    plan.exercises.append(
        WorkoutPlanExercise(
            exercise_id=payload.exercise_id,
            sets=1,
            tracking_type=TrackingType.REPS,
            reps=8,
            order=len(plan.exercises),
        )
    )
    db.commit()
    db.refresh(plan)
    return plan


@router.delete("/routines/{plan_id}/exercises/{exercise_id}", response_model=WorkoutPlanRead)
def remove_routine_exercise(
    plan_id: int,
    exercise_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutPlan:
    plan = _get_editable_plan(db, plan_id, current_user)
    matching = [item for item in plan.exercises if item.exercise_id == exercise_id]
    if not matching:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exercise not in routine")
    for item in matching:
        plan.exercises.remove(item)
    for order, item in enumerate(plan.exercises):
        item.order = order
    db.commit()
    db.refresh(plan)
    return plan


@logs_router.post("", response_model=WorkoutLogSummary, status_code=status.HTTP_201_CREATED)
def create_workout_log(
    payload: WorkoutLogCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutLogSummary:
    if not payload.workout_plan_id or not payload.exercises:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="workout_plan_id and exercises are required",
        )
    plan = _get_plan_or_404(db, payload.workout_plan_id)
    user_id = current_user.id
    if payload.target_user_id and payload.target_user_id != current_user.id:
        if not is_admin_role(current_user.role):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required.")
        if not db.get(User, payload.target_user_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        user_id = payload.target_user_id
    ensure_exercises_exist(db, [item.exercise_id for item in payload.exercises])

    log = WorkoutLog(
        user_id=user_id,
        workout_plan_id=plan.id,
        date=payload.date or date.today(),
        duration=payload.duration,
        total_rest_time_seconds=payload.total_rest_time_seconds,
        total_active_time_seconds=payload.total_active_time_seconds,
        in_progress=False,
    )
    fill_log_exercises(log, payload.exercises)
    db.add(log)
    db.flush()
    update_personal_bests(db, user_id, log)
    db.commit()
    db.refresh(log)
    return WorkoutLogSummary(
        id=log.id,
        duration=log.duration,
        total_rest_time_seconds=log.total_rest_time_seconds,
        total_active_time_seconds=log.total_active_time_seconds,
        exercise_count=len(log.exercises),
        workout_plan_name=plan.name,
    )


@logs_router.get("", response_model=WorkoutLogPage)
def list_workout_logs(
    pagination: Pagination = Depends(get_pagination),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutLogPage:
    query = db.query(WorkoutLog).filter(
        WorkoutLog.user_id == current_user.id, WorkoutLog.in_progress.is_(False)
    )
    total = query.count()
    logs = pagination.apply(query.order_by(WorkoutLog.date.desc(), WorkoutLog.id.desc()))
    return WorkoutLogPage(
        logs=[WorkoutLogRead.model_validate(log) for log in logs],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        total_pages=pagination.total_pages(total),
    )


@logs_router.put("/{log_id}", response_model=WorkoutLogRead)
def replace_workout_log(
    log_id: int,
    payload: WorkoutLogUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkoutLog:
    log = db.get(WorkoutLog, log_id)
    if not log or log.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout log not found")
    ensure_exercises_exist(db, [item.exercise_id for item in payload.exercises])
    log.date = payload.date
    log.duration = payload.duration
    log.exercises.clear()
    db.flush()
    fill_log_exercises(log, payload.exercises)
    log.updated_at = datetime.utcnow()
    db.flush()
    update_personal_bests(db, log.user_id, log)
    db.commit()
    db.refresh(log)
    return log


def _fill_plan_exercises(plan: WorkoutPlan, exercises: list[PlanExerciseIn]) -> None:
    for order, item in enumerate(exercises):
        plan.exercises.append(
            WorkoutPlanExercise(
                exercise_id=item.exercise_id,
                sets=item.sets,
                tracking_type=item.tracking_type,
                reps=item.reps,
                exercise_duration=item.exercise_duration,
                order=order,
            )
        )


def _get_plan_or_404(db: Session, plan_id: int) -> WorkoutPlan:
    plan = db.get(WorkoutPlan, plan_id)
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout plan not found")
    return plan


def _get_editable_plan(db: Session, plan_id: int, user: User) -> WorkoutPlan:
    """Owners edit their routines; system routines are edited by admins."""
    plan = _get_plan_or_404(db, plan_id)
    if plan.is_system_routine:
        allowed = is_admin_role(user.role)
    else:
        allowed = plan.user_id == user.id
    if not allowed:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return plan
