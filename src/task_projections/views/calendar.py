"""Month-grid bucketization of tasks by due date."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, tzinfo

from task_projections.api.models import Task
from task_projections.config import SUNDAY
from task_projections.errors import ValidationError
from task_projections.views.dates import add_months, month_grid, month_start, parse_due
from task_projections.views.dates import today as local_today

logger = logging.getLogger(__name__)


def due_day(task: Task, tz: tzinfo | None = None) -> date | None:
    """Due day of a task, or None when missing or unparsable."""
    try:
        return parse_due(task.due_date, tz)
    except ValidationError as e:
        logger.warning(f"[Calendar] Skipping task {task.id}: {e}")
        return None


def group_by_day(
    tasks: Iterable[Task],
    month: date,
    tz: tzinfo | None = None,
    week_start: int = SUNDAY,
) -> dict[date, list[Task]]:
    """Bucket tasks into the grid days of a month.

    Every grid day is a key, in order. Tasks keep their input order inside a
    bucket. Tasks without a usable due date or due outside the grid are left
    out.
    """
    buckets: dict[date, list[Task]] = {day: [] for day in month_grid(month, week_start)}
    for task in tasks:
        day = due_day(task, tz)
        if day is not None and day in buckets:
            buckets[day].append(task)
    return buckets


@dataclass
class CalendarCursor:
    """Displayed month and selected day of the calendar view."""

    month: date
    selected: date
    tz: tzinfo | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.month = month_start(self.month)

    @classmethod
    def for_today(cls, tz: tzinfo | None = None) -> "CalendarCursor":
        current = local_today(tz)
        return cls(month=current, selected=current, tz=tz)

    def next_month(self) -> None:
        self.month = add_months(self.month, 1)

    def previous_month(self) -> None:
        self.month = add_months(self.month, -1)

    def jump_to_today(self, today: date | None = None) -> None:
        """Show the current month and select today."""
        current = today or local_today(self.tz)
        self.month = month_start(current)
        self.selected = current

    def select(self, day: date) -> None:
        self.selected = day

    def in_current_month(self, day: date) -> bool:
        return (day.year, day.month) == (self.month.year, self.month.month)

    def tasks_for_selected(self, tasks: Iterable[Task]) -> list[Task]:
        """Tasks due on the selected day, in input order."""
        return [task for task in tasks if due_day(task, self.tz) == self.selected]
