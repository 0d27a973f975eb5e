from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..core.enums import AssignmentStatus
from ..database import get_db
from ..dependencies import Pagination, get_pagination, require_admin
from ..models.user import User
from ..models.workout import AssignedWorkout, WorkoutLog, WorkoutPlan
from ..schemas.user import SuccessResponse
from ..schemas.workout import (
    AdminLoggedExerciseIn,
    AdminWorkoutLogUpdate,
    AssignmentCreate,
    AssignmentRead,
    AssignmentSummary,
    AssignmentUpdate,
    WorkoutLogRead,
    WorkoutPlanPage,
    WorkoutPlanSummary,
)
from ..services.workout_logs import apply_set_updates

router = APIRouter(prefix="/admin", tags=["admin-workouts"])


@router.get("/assignments", response_model=list[AssignmentRead])
def list_assignments(
    user_id: int | None = None,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[AssignedWorkout]:
    query = db.query(AssignedWorkout)
    if user_id is not None:
        query = query.filter(AssignedWorkout.user_id == user_id)
    return query.order_by(AssignedWorkout.assigned_at.desc(), AssignedWorkout.id.desc()).all()


@router.post("/assignments", response_model=AssignmentRead, status_code=status.HTTP_201_CREATED)
def create_assignment(
    payload: AssignmentCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AssignedWorkout:
    if not db.get(User, payload.user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not db.get(WorkoutPlan, payload.workout_plan_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout plan not found")
    assigned_date = payload.assigned_date or date.today()
    _ensure_free_day(db, payload.user_id, assigned_date)
    assignment = AssignedWorkout(
        user_id=payload.user_id,
        workout_plan_id=payload.workout_plan_id,
        assigned_by=current_user.id,
        assigned_at=assigned_date,
        due_date=payload.due_date,
        status=AssignmentStatus.PENDING,
        notes=payload.notes,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return assignment


@router.patch("/assignments/{assignment_id}", response_model=AssignmentRead)
def update_assignment(
    assignment_id: int,
    payload: AssignmentUpdate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> AssignedWorkout:
    assignment = _get_assignment_or_404(db, assignment_id)
    if payload.assigned_date and payload.assigned_date != assignment.assigned_at:
        _ensure_free_day(db, assignment.user_id, payload.assigned_date, exclude_id=assignment.id)
        assignment.assigned_at = payload.assigned_date
    if payload.status is not None:
        assignment.status = payload.status
    if payload.notes is not None:
        assignment.notes = payload.notes
    db.commit()
    db.refresh(assignment)
    return assignment


@router.delete("/assignments/{assignment_id}", response_model=SuccessResponse)
def delete_assignment(
    assignment_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    assignment = _get_assignment_or_404(db, assignment_id)
    db.delete(assignment)
    db.commit()
    return SuccessResponse()


@router.get("/users/{user_id}/assigned-workouts", response_model=list[AssignmentSummary])
def list_user_assignments(
    user_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[AssignmentSummary]:
    if not db.get(User, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    assignments = (
        db.query(AssignedWorkout)
        .filter(AssignedWorkout.user_id == user_id)
        .order_by(AssignedWorkout.assigned_at.desc())
        .all()
    )
    return [
        AssignmentSummary(
            id=item.id,
            user_id=item.user_id,
            workout_plan_id=item.workout_plan_id,
            workout_plan_name=item.workout_plan.name,
            exercise_count=len(item.workout_plan.exercises),
            assigned_at=item.assigned_at,
            due_date=item.due_date,
            status=item.status,
            notes=item.notes,
        )
        for item in assignments
    ]


@router.get("/workout-plans", response_model=list[WorkoutPlanSummary])
def list_workout_plans(
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[WorkoutPlanSummary]:
    plans = db.query(WorkoutPlan).order_by(WorkoutPlan.created_at.desc()).all()
    return [_plan_summary(plan) for plan in plans]


@router.get("/workouts", response_model=WorkoutPlanPage)
def list_workouts(
    search: str | None = None,
    pagination: Pagination = Depends(get_pagination),
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> WorkoutPlanPage:
    query = db.query(WorkoutPlan)
    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                WorkoutPlan.name.ilike(pattern),
                WorkoutPlan.notes.ilike(pattern),
                WorkoutPlan.system_routine_category.ilike(pattern),
            )
        )
    total = query.count()
    plans = pagination.apply(query.order_by(WorkoutPlan.created_at.desc()))
    return WorkoutPlanPage(
        workouts=[_plan_summary(plan) for plan in plans],
        total=total,
        page=pagination.page,
        limit=pagination.limit,
        total_pages=pagination.total_pages(total),
    )


@router.put("/workout-logs/{log_id}", response_model=WorkoutLogRead)
def update_workout_log(
    log_id: int,
    payload: AdminWorkoutLogUpdate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> WorkoutLog:
    if payload.date is None or payload.duration is None or payload.exercises is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="date, duration and exercises are required",
        )
    try:
        exercises = [AdminLoggedExerciseIn.model_validate(item) for item in payload.exercises]
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid exercise data")

    log = db.get(WorkoutLog, log_id)
    if not log:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Workout log not found")
    logged_by_id = {logged.id: logged for logged in log.exercises}
    for item in exercises:
        logged = logged_by_id.get(item.id)
        if logged is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Exercise {item.id} does not belong to this workout log",
            )
        apply_set_updates(logged, item.sets)

    log.date = payload.date
    log.duration = payload.duration
    log.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(log)
    return log


def _ensure_free_day(
    db: Session, user_id: int, day: date, exclude_id: int | None = None
) -> None:
    """One assignment per user per calendar day."""
    query = db.query(AssignedWorkout).filter(
        AssignedWorkout.user_id == user_id, AssignedWorkout.assigned_at == day
    )
    if exclude_id is not None:
        query = query.filter(AssignedWorkout.id != exclude_id)
    existing = query.first()
    if existing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "error": "USER_ALREADY_HAS_WORKOUT_TODAY",
                "message": "This user already has a workout assigned for this date.",
                "existing_workout": existing.workout_plan.name,
                "date": day.isoformat(),
            },
        )


def _get_assignment_or_404(db: Session, assignment_id: int) -> AssignedWorkout:
    assignment = db.get(AssignedWorkout, assignment_id)
    if not assignment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Assignment not found")
    return assignment


def _plan_summary(plan: WorkoutPlan) -> WorkoutPlanSummary:
    return WorkoutPlanSummary(
        id=plan.id,
        user_id=plan.user_id,
        name=plan.name,
        notes=plan.notes,
        is_system_routine=plan.is_system_routine,
        system_routine_category=plan.system_routine_category,
        training_type=plan.training_type,
        created_at=plan.created_at,
        exercise_count=len(plan.exercises),
    )
