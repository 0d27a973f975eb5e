"""Date arithmetic shared by the challenge, step and progress endpoints.

All functions operate on calendar dates and take ``today`` explicitly so the
callers decide what "today" means and tests can pin it.
"""

import math
from datetime import date, timedelta
from typing import Iterable, Mapping


def day_span(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end``, rounded up."""
    return math.ceil((end - start).days)


def days_passed(start: date, today: date) -> int:
    """Days the challenge has run, counting the start day as day one."""
    if today < start:
        return 0
    return day_span(start, today) + 1


def days_remaining(end: date, today: date) -> int:
    return max(0, day_span(today, end))


def challenge_streak(post_dates: Iterable[date], today: date, max_days: int) -> int:
    """Consecutive days with a post, counting back from ``today``.

    The walk is bounded by the number of days the challenge has been running,
    so a streak can never exceed ``max_days``.
    """
    posted = set(post_dates)
    streak = 0
    for offset in range(max_days):
        if today - timedelta(days=offset) not in posted:
            break
        streak += 1
    return streak


def completion_rate(completed: int, elapsed_days: int) -> float:
    if elapsed_days <= 0:
        return 0.0
    return completed / elapsed_days * 100


def workout_streak(log_dates: Iterable[date], today: date) -> int:
    """Consecutive workout days ending today, or yesterday when today is empty."""
    logged = set(log_dates)
    if today in logged:
        current = today
    elif today - timedelta(days=1) in logged:
        current = today - timedelta(days=1)
    else:
        return 0
    streak = 0
    while current in logged:
        streak += 1
        current -= timedelta(days=1)
    return streak


def completed_streak(completed_by_date: Mapping[date, bool], today: date, cap: int = 365) -> int:
    """Consecutive completed days ending today; a missing day breaks the run."""
    streak = 0
    current = today
    while streak < cap and completed_by_date.get(current):
        streak += 1
        current -= timedelta(days=1)
    return streak


def weeks_between(start: date, end: date) -> int:
    return math.ceil(abs((end - start).days) / 7)


def round_half_up(value: float) -> int:
    """Round halves away from zero for non-negative values, as client dashboards do."""
    return math.floor(value + 0.5)
