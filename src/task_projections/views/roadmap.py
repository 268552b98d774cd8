"""Roadmap swimlane packing.

One lane per category. Inside a lane every task is a single-day marker in the
column of its due day; tasks sharing a day are stacked vertically in input
order. The lane is as tall as its busiest day in the displayed month.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, tzinfo

from task_projections.api.models import Category, Task
from task_projections.views.calendar import due_day
from task_projections.views.dates import month_days, month_start

logger = logging.getLogger(__name__)

MIN_ROW_HEIGHT = 60
SLOT_HEIGHT = 40
ROW_PADDING = 20
MARKER_TOP = 10
MARKER_SPACING = 35


@dataclass(frozen=True)
class Placement:
    """Slot assigned to one task inside a lane."""

    task_id: str
    day_offset: int  # Days since the first of the month
    vertical_index: int  # Position within the day's stack


@dataclass
class LaneLayout:
    """Packed lane for one category."""

    category_id: str
    name: str
    color: str
    row_height: int
    placements: list[Placement] = field(default_factory=list)

    @property
    def task_count(self) -> int:
        return len(self.placements)


@dataclass(frozen=True)
class MarkerBox:
    """Absolute pixel box of a marker inside the roadmap grid."""

    left: int
    top: int
    width: int


@dataclass(frozen=True)
class RoadmapGeometry:
    """Pixel geometry of the roadmap grid."""

    cell_width: int = 48
    sidebar_width: int = 180

    def marker_box(self, placement: Placement) -> MarkerBox:
        return MarkerBox(
            left=self.sidebar_width + placement.day_offset * self.cell_width + 2,
            top=MARKER_TOP + placement.vertical_index * MARKER_SPACING,
            width=self.cell_width - 4,
        )

    def grid_width(self, month: date) -> int:
        return self.sidebar_width + len(month_days(month)) * self.cell_width


def row_height(busiest_day_count: int) -> int:
    """Lane height for the busiest day of the lane."""
    return max(MIN_ROW_HEIGHT, busiest_day_count * SLOT_HEIGHT + ROW_PADDING)


def pack_lane(tasks: Iterable[Task], month: date, tz: tzinfo | None = None) -> list[Placement]:
    """Stack a lane's tasks by due day for the month containing `month`.

    Tasks due outside the month, or without a usable due date, are skipped.
    Placements are ordered by day offset, then vertical index.
    """
    first = month_start(month)
    by_day: dict[date, list[Task]] = {}
    for task in tasks:
        day = due_day(task, tz)
        if day is None or (day.year, day.month) != (first.year, first.month):
            continue
        by_day.setdefault(day, []).append(task)

    placements: list[Placement] = []
    for day in sorted(by_day):
        offset = (day - first).days
        for index, task in enumerate(by_day[day]):
            placements.append(Placement(task_id=task.id, day_offset=offset, vertical_index=index))
    return placements


def pack_roadmap(
    tasks: Iterable[Task],
    categories: Iterable[Category],
    month: date,
    tz: tzinfo | None = None,
) -> dict[str, LaneLayout]:
    """Pack every category lane for the displayed month.

    Lanes follow the category order and lanes without tasks in the month are
    omitted. Tasks whose category is not in `categories` are not placed.

    Args:
        tasks: Task snapshot
        categories: Category snapshot, in display order
        month: Any day of the displayed month
        tz: Local zone used to normalize due timestamps

    Returns:
        Mapping of category id to its packed lane
    """
    by_category: dict[str, list[Task]] = {}
    for task in tasks:
        if task.category_id is not None:
            by_category.setdefault(task.category_id, []).append(task)

    lanes: dict[str, LaneLayout] = {}
    for category in categories:
        placements = pack_lane(by_category.get(category.id, []), month, tz)
        if not placements:
            continue
        busiest = max(placement.vertical_index for placement in placements) + 1
        lanes[category.id] = LaneLayout(
            category_id=category.id,
            name=category.name,
            color=category.color,
            row_height=row_height(busiest),
            placements=placements,
        )

    logger.debug(f"[Roadmap] Packed {len(lanes)} lane(s) for {month_start(month).isoformat()}")
    return lanes
