"""Consecutive completion-day streak."""

import logging
from collections.abc import Iterable
from datetime import date, datetime, timedelta, tzinfo

from task_projections.views.dates import local_day
from task_projections.views.dates import today as local_today

logger = logging.getLogger(__name__)

STREAK_WINDOW = 30


def completion_days(
    completions: Iterable[date | datetime], tz: tzinfo | None = None
) -> set[date]:
    """Collapse completion timestamps into distinct local days."""
    return {local_day(value, tz) for value in completions}


def calculate_streak(
    completions: Iterable[date | datetime],
    today: date | None = None,
    tz: tzinfo | None = None,
    window: int = STREAK_WINDOW,
) -> int:
    """Count consecutive completion days ending today.

    Only the `window` most recent completions are considered. The streak is 0
    unless the most recent completion day is today, so a run that ended
    yesterday reports 0 until something is completed today.

    Args:
        completions: Completion timestamps, in any order
        today: Reference day (defaults to the current local day)
        tz: Local zone used to normalize aware timestamps
        window: Number of most recent completions to look at

    Returns:
        Streak length in days (>= 0)
    """
    if today is None:
        today = local_today(tz)

    # Future-dated completions must not take slots in the window
    past = [value for value in completions if local_day(value, tz) <= today]
    recent = sorted(past, key=lambda value: local_day(value, tz), reverse=True)[:window]
    days = sorted(completion_days(recent, tz), reverse=True)

    if not days or days[0] != today:
        return 0

    streak = 1
    previous = days[0]
    for day in days[1:]:
        if previous - day != timedelta(days=1):
            break
        streak += 1
        previous = day

    logger.debug(f"[Streak] {streak} day(s) ending {today.isoformat()}")
    return streak
