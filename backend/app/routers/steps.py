from datetime import date, timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..database import get_db
from ..dependencies import get_current_user, require_admin
from ..models.steps import StepGoal, StepLog
from ..models.user import User
from ..schemas.steps import (
    DashboardWeeklyProgress,
    StepDashboard,
    StepGoalCreate,
    StepGoalDetail,
    StepGoalRead,
    StepGoalUpdate,
    StepLogCreate,
    StepLogList,
    StepLogRead,
    StepLogResult,
    StepStats,
    WeeklyProgressRead,
)
from ..schemas.user import SuccessResponse
from ..services.step_targets import calculate_daily_target, progress_message, week_start
from ..services.streaks import completed_streak, round_half_up

router = APIRouter(prefix="/user", tags=["steps"])
admin_router = APIRouter(prefix="/admin/step-goals", tags=["admin-steps"])

GOAL_EXPIRED = "Step goal has expired. Please contact your trainer for a new goal."


@router.get("/step-logs", response_model=StepLogList)
def list_step_logs(
    days: int = Query(default=30, ge=1, le=366),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StepLogList:
    today = date.today()
    goal = _active_goal(db, current_user.id, today)
    logs = (
        db.query(StepLog)
        .filter(StepLog.user_id == current_user.id, StepLog.date >= today - timedelta(days=days))
        .order_by(StepLog.date.desc())
        .all()
    )
    return StepLogList(
        step_logs=[StepLogRead.model_validate(log) for log in logs],
        active_goal=StepGoalRead.model_validate(goal) if goal else None,
    )


@router.post("/step-logs", response_model=StepLogResult)
def record_steps(
    payload: StepLogCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StepLogResult:
    today = date.today()
    goal = _latest_active_goal(db, current_user.id)
    if goal and goal.is_expired(today):
        goal.is_active = False
        db.commit()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=GOAL_EXPIRED)

    base_target = goal.daily_target if goal else get_settings().default_daily_step_target
    earlier_week_logs = (
        db.query(StepLog)
        .filter(
            StepLog.user_id == current_user.id,
            StepLog.date >= week_start(payload.date),
            StepLog.date < payload.date,
        )
        .all()
    )
    previous_log = (
        db.query(StepLog)
        .filter(StepLog.user_id == current_user.id, StepLog.date == payload.date - timedelta(days=1))
        .first()
    )
    target = calculate_daily_target(payload.date, base_target, earlier_week_logs, previous_log)

    log = (
        db.query(StepLog)
        .filter(StepLog.user_id == current_user.id, StepLog.date == payload.date)
        .first()
    )
    if log is None:
        log = StepLog(user_id=current_user.id, date=payload.date)
        db.add(log)
    log.step_goal_id = goal.id if goal else None
    log.actual_steps = payload.steps
    log.target_steps = target.target_steps
    log.carry_over_steps = target.carry_over_steps
    log.excess_steps = target.excess_steps
    log.is_completed = payload.steps >= target.target_steps
    db.commit()
    db.refresh(log)

    return StepLogResult(
        step_log=StepLogRead.model_validate(log),
        weekly_progress=WeeklyProgressRead(**vars(target.weekly_progress)),
        message=progress_message(target.weekly_progress),
    )


@router.get("/step-dashboard", response_model=StepDashboard)
def read_step_dashboard(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StepDashboard:
    today = date.today()
    goal = _active_goal(db, current_user.id, today)
    base_target = goal.daily_target if goal else get_settings().default_daily_step_target

    history = (
        db.query(StepLog)
        .filter(StepLog.user_id == current_user.id, StepLog.date >= today - timedelta(days=366))
        .order_by(StepLog.date.desc())
        .all()
    )
    last_7 = [log for log in history if log.date > today - timedelta(days=7)]
    last_30 = [log for log in history if log.date > today - timedelta(days=30)]
    today_log = next((log for log in history if log.date == today), None)

    weekly_progress = None
    if goal:
        start = week_start(today)
        week_logs = [log for log in history if start <= log.date <= today]
        actual = sum(log.actual_steps for log in week_logs)
        weekly_progress = DashboardWeeklyProgress(
            weekly_target=base_target * 7,
            actual_steps=actual,
            target_so_far=sum(log.target_steps for log in week_logs),
            days_completed=sum(1 for log in week_logs if log.is_completed),
            remaining_days=7 - len(week_logs),
            is_on_track=actual >= base_target * len(week_logs),
        )

    best = max(last_30, key=lambda log: log.actual_steps, default=None)
    return StepDashboard(
        active_goal=StepGoalRead.model_validate(goal) if goal else None,
        today_log=StepLogRead.model_validate(today_log) if today_log else None,
        last_7_days=[StepLogRead.model_validate(log) for log in last_7],
        last_30_days=[StepLogRead.model_validate(log) for log in last_30],
        stats=StepStats(
            total_steps_7_days=sum(log.actual_steps for log in last_7),
            total_steps_30_days=sum(log.actual_steps for log in last_30),
            avg_steps_7_days=_average_steps(last_7),
            avg_steps_30_days=_average_steps(last_30),
            completion_rate_7_days=_completion_percent(last_7),
            completion_rate_30_days=_completion_percent(last_30),
            completed_days_7=sum(1 for log in last_7 if log.is_completed),
            completed_days_30=sum(1 for log in last_30 if log.is_completed),
            best_day=StepLogRead.model_validate(best) if best else None,
            current_target=goal.daily_target if goal else 0,
        ),
        streak=completed_streak({log.date: log.is_completed for log in history}, today),
        weekly_progress=weekly_progress,
    )


@admin_router.get("", response_model=list[StepGoalDetail])
def list_step_goals(
    user_id: int | None = None,
    active: bool | None = None,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[StepGoalDetail]:
    query = db.query(StepGoal)
    if user_id is not None:
        query = query.filter(StepGoal.user_id == user_id)
    if active is not None:
        query = query.filter(StepGoal.is_active.is_(active))
    goals = query.order_by(StepGoal.created_at.desc()).all()
    return [_goal_detail(goal, log_limit=7) for goal in goals]


@admin_router.post("", response_model=StepGoalRead, status_code=status.HTTP_201_CREATED)
def create_step_goal(
    payload: StepGoalCreate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StepGoal:
    if not 1 <= payload.goal_duration_weeks <= 3:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Goal duration must be between 1 and 3 weeks",
        )
    if not db.get(User, payload.target_user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    db.query(StepGoal).filter(
        StepGoal.user_id == payload.target_user_id, StepGoal.is_active.is_(True)
    ).update({StepGoal.is_active: False}, synchronize_session=False)

    today = date.today()
    goal = StepGoal(
        user_id=payload.target_user_id,
        assigned_by=current_user.id,
        daily_target=payload.daily_target,
        start_date=today,
        end_date=today + timedelta(weeks=payload.goal_duration_weeks),
        notes=payload.notes,
        is_active=True,
    )
    db.add(goal)
    db.commit()
    db.refresh(goal)
    return goal


@admin_router.get("/{goal_id}", response_model=StepGoalDetail)
def read_step_goal(
    goal_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StepGoalDetail:
    return _goal_detail(_get_goal_or_404(db, goal_id), log_limit=30)


@admin_router.patch("/{goal_id}", response_model=StepGoalRead)
def update_step_goal(
    goal_id: int,
    payload: StepGoalUpdate,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> StepGoal:
    goal = _get_goal_or_404(db, goal_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(goal, field, value)
    db.commit()
    db.refresh(goal)
    return goal


@admin_router.delete("/{goal_id}", response_model=SuccessResponse)
def delete_step_goal(
    goal_id: int,
    _: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    goal = _get_goal_or_404(db, goal_id)
    db.query(StepLog).filter(StepLog.step_goal_id == goal.id).update(
        {StepLog.step_goal_id: None}, synchronize_session=False
    )
    db.delete(goal)
    db.commit()
    return SuccessResponse()


def _latest_active_goal(db: Session, user_id: int) -> StepGoal | None:
    return (
        db.query(StepGoal)
        .filter(StepGoal.user_id == user_id, StepGoal.is_active.is_(True))
        .order_by(StepGoal.created_at.desc())
        .first()
    )


def _active_goal(db: Session, user_id: int, today: date) -> StepGoal | None:
    """Active goal for the user, deactivating it first when it has expired."""
    goal = _latest_active_goal(db, user_id)
    if goal and goal.is_expired(today):
        goal.is_active = False
        db.commit()
        return None
    return goal


def _get_goal_or_404(db: Session, goal_id: int) -> StepGoal:
    goal = db.get(StepGoal, goal_id)
    if not goal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Step goal not found")
    return goal


def _goal_detail(goal: StepGoal, log_limit: int) -> StepGoalDetail:
    return StepGoalDetail(
        **StepGoalRead.model_validate(goal).model_dump(),
        step_logs=[StepLogRead.model_validate(log) for log in goal.step_logs[:log_limit]],
    )


def _average_steps(logs: list[StepLog]) -> int:
    if not logs:
        return 0
    return round_half_up(sum(log.actual_steps for log in logs) / len(logs))


def _completion_percent(logs: list[StepLog]) -> int:
    if not logs:
        return 0
    return round_half_up(sum(1 for log in logs if log.is_completed) / len(logs) * 100)
