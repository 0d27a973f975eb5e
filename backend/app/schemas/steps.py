import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field


class StepLogRead(BaseModel):
    id: int
    user_id: int
    step_goal_id: Optional[int] = None
    date: dt.date
    actual_steps: int
    target_steps: int
    carry_over_steps: int
    excess_steps: int
    is_completed: bool

    model_config = {"from_attributes": True}


class StepGoalRead(BaseModel):
    id: int
    user_id: int
    assigned_by: Optional[int] = None
    daily_target: int
    start_date: dt.date
    end_date: Optional[dt.date] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: dt.datetime

    model_config = {"from_attributes": True}


class StepGoalDetail(StepGoalRead):
    step_logs: list[StepLogRead] = Field(default_factory=list)


class StepLogCreate(BaseModel):
    steps: int = Field(ge=0)
    date: dt.date


class WeeklyProgressRead(BaseModel):
    total_weekly_target: int
    actual_steps_this_week: int
    remaining_days_in_week: int
    is_last_day_of_week: bool


class StepLogResult(BaseModel):
    step_log: StepLogRead
    weekly_progress: WeeklyProgressRead
    message: str


class StepLogList(BaseModel):
    step_logs: list[StepLogRead]
    active_goal: Optional[StepGoalRead] = None


class StepStats(BaseModel):
    total_steps_7_days: int
    total_steps_30_days: int
    avg_steps_7_days: int
    avg_steps_30_days: int
    completion_rate_7_days: int
    completion_rate_30_days: int
    completed_days_7: int
    completed_days_30: int
    best_day: Optional[StepLogRead] = None
    current_target: int


class DashboardWeeklyProgress(BaseModel):
    weekly_target: int
    actual_steps: int
    target_so_far: int
    days_completed: int
    remaining_days: int
    is_on_track: bool


class StepDashboard(BaseModel):
    active_goal: Optional[StepGoalRead] = None
    today_log: Optional[StepLogRead] = None
    last_7_days: list[StepLogRead]
    last_30_days: list[StepLogRead]
    stats: StepStats
    streak: int
    weekly_progress: Optional[DashboardWeeklyProgress] = None


class StepGoalCreate(BaseModel):
    target_user_id: int
    daily_target: int = Field(gt=0)
    notes: Optional[str] = None
    goal_duration_weeks: int = 1


class StepGoalUpdate(BaseModel):
    daily_target: Optional[int] = Field(default=None, gt=0)
    end_date: Optional[dt.date] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None
