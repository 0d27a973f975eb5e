import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence

from ..models.steps import StepLog
from .streaks import round_half_up

logger = logging.getLogger(__name__)

MIN_TARGET_RATIO = 0.3


@dataclass
class WeeklyProgress:
    total_weekly_target: int
    actual_steps_this_week: int
    remaining_days_in_week: int
    is_last_day_of_week: bool


@dataclass
class DailyTarget:
    target_steps: int
    carry_over_steps: int
    excess_steps: int
    weekly_progress: WeeklyProgress


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def calculate_daily_target(
    log_date: date,
    base_daily_target: int,
    earlier_week_logs: Sequence[StepLog],
    previous_log: StepLog | None,
) -> DailyTarget:
    """Target for ``log_date`` given the week's earlier logs and yesterday's log.

    Shortfalls from earlier in the week are spread over the remaining days;
    the last day of the week must close the whole weekly gap.
    """
    days_elapsed = len(earlier_week_logs)
    total_weekly_target = base_daily_target * 7
    expected_by_now = base_daily_target * days_elapsed
    actual_this_week = sum(log.actual_steps for log in earlier_week_logs)

    weekly_deficit = max(0, expected_by_now - actual_this_week)
    weekly_credit = max(0, actual_this_week - expected_by_now)

    daily_carry_over = 0
    daily_credit = 0
    if previous_log is not None:
        if previous_log.actual_steps < previous_log.target_steps:
            daily_carry_over = previous_log.target_steps - previous_log.actual_steps
        elif previous_log.actual_steps > previous_log.target_steps:
            daily_credit = previous_log.actual_steps - previous_log.target_steps

    remaining_days = 7 - days_elapsed - 1
    is_last_day = remaining_days == 0

    excess: float = 0
    if is_last_day:
        remaining_weekly_target = total_weekly_target - actual_this_week
        target: float = max(remaining_weekly_target, base_daily_target)
        carry_over: float = max(0, remaining_weekly_target - base_daily_target)
    else:
        deficit_per_day = (
            math.ceil(weekly_deficit / (remaining_days + 1)) if remaining_days > 0 else 0
        )
        carry_over = max(daily_carry_over, deficit_per_day)
        excess = min(daily_credit, weekly_credit / (remaining_days + 1))
        target = max(
            base_daily_target + carry_over - excess,
            math.floor(base_daily_target * MIN_TARGET_RATIO),
        )

    logger.debug(
        "Step target for %s: base=%s elapsed=%s target=%s carry=%s excess=%s",
        log_date,
        base_daily_target,
        days_elapsed,
        target,
        carry_over,
        excess,
    )
    return DailyTarget(
        target_steps=round_half_up(target),
        carry_over_steps=round_half_up(carry_over),
        excess_steps=round_half_up(excess),
        weekly_progress=WeeklyProgress(
            total_weekly_target=total_weekly_target,
            actual_steps_this_week=actual_this_week,
            remaining_days_in_week=remaining_days + 1,
            is_last_day_of_week=is_last_day,
        ),
    )


def progress_message(progress: WeeklyProgress) -> str:
    if progress.is_last_day_of_week:
        return "Last day of the week! Complete your weekly target today!"
    return f"{progress.remaining_days_in_week} days remaining this week"
