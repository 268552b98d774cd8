"""Projection endpoints: streak, calendar, roadmap and project tree."""

import logging
from datetime import date, datetime, tzinfo

from fastapi import APIRouter, HTTPException

from task_projections.api.models import (
    CalendarDayResponse,
    CalendarResponse,
    LaneResponse,
    PlacementResponse,
    RoadmapResponse,
    StreakResponse,
    Task,
    TaskResponse,
    TreeNodeResponse,
)
from task_projections.factory import get_board, get_config, get_task_store, get_timezone
from task_projections.views.calendar import CalendarCursor, due_day, group_by_day
from task_projections.views.dates import month_days, today
from task_projections.views.roadmap import RoadmapGeometry, pack_roadmap
from task_projections.views.streak import calculate_streak
from task_projections.views.tree import TreeNode, build_tree

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/streak", response_model=StreakResponse)
async def get_streak() -> StreakResponse:
    """Consecutive days, ending today, with at least one completed task."""
    tz = get_timezone()
    completions = [
        task.completed_at
        for task in get_board().tasks()
        if task.status == "done" and task.completed_at is not None
    ]
    streak = calculate_streak(completions, tz=tz, window=get_config().streak_window)
    return StreakResponse(streak=streak)


@router.get("/calendar", response_model=CalendarResponse)
async def get_calendar(month: str | None = None, selected: str | None = None) -> CalendarResponse:
    """Month grid with tasks bucketed by due day.

    Args:
        month: Displayed month as YYYY-MM (defaults to the current month)
        selected: Selected day as YYYY-MM-DD (defaults to today)

    Raises:
        HTTPException: 400 if month or selected is malformed
    """
    tz = get_timezone()
    current = today(tz)
    cursor = CalendarCursor.for_today(tz)
    if month:
        cursor.month = _parse_month(month)
    if selected:
        cursor.select(_parse_day(selected))

    tasks = get_board().tasks()
    buckets = group_by_day(tasks, cursor.month, tz, get_config().week_start)
    days = [
        CalendarDayResponse(
            day=day,
            in_month=cursor.in_current_month(day),
            is_today=day == current,
            is_selected=day == cursor.selected,
            tasks=[task_to_response(task, tz) for task in day_tasks],
        )
        for day, day_tasks in buckets.items()
    ]
    return CalendarResponse(
        month=cursor.month,
        selected=cursor.selected,
        days=days,
        selected_tasks=[task_to_response(task, tz) for task in cursor.tasks_for_selected(tasks)],
    )


@router.get("/roadmap", response_model=RoadmapResponse)
async def get_roadmap(month: str | None = None) -> RoadmapResponse:
    """Category swimlanes for a month.

    Args:
        month: Displayed month as YYYY-MM (defaults to the current month)

    Raises:
        HTTPException: 400 if month is malformed, 500 if categories cannot be read
    """
    tz = get_timezone()
    displayed = _parse_month(month) if month else today(tz).replace(day=1)

    try:
        categories = get_task_store().list_categories()
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read categories: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    tasks = {task.id: task for task in get_board().tasks()}
    geometry = RoadmapGeometry()
    lanes = []
    for lane in pack_roadmap(tasks.values(), categories, displayed, tz).values():
        placements = []
        for placement in lane.placements:
            box = geometry.marker_box(placement)
            placements.append(
                PlacementResponse(
                    task_id=placement.task_id,
                    title=tasks[placement.task_id].title,
                    day_offset=placement.day_offset,
                    vertical_index=placement.vertical_index,
                    left=box.left,
                    top=box.top,
                    width=box.width,
                )
            )
        lanes.append(
            LaneResponse(
                category_id=lane.category_id,
                name=lane.name,
                color=lane.color,
                row_height=lane.row_height,
                task_count=lane.task_count,
                placements=placements,
            )
        )

    return RoadmapResponse(
        month=displayed,
        days=month_days(displayed),
        grid_width=geometry.grid_width(displayed),
        lanes=lanes,
    )


@router.get("/tree", response_model=list[TreeNodeResponse])
async def get_tree() -> list[TreeNodeResponse]:
    """Parent/child hierarchy; cyclic edges are dropped."""
    tz = get_timezone()
    return [_node_to_response(node, tz) for node in build_tree(get_board().tasks())]


def _parse_month(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid month: {value}") from e


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid day: {value}") from e


def _node_to_response(node: TreeNode, tz: tzinfo | None) -> TreeNodeResponse:
    return TreeNodeResponse(
        task=task_to_response(node.task, tz),
        children=[_node_to_response(child, tz) for child in node.children],
    )


def task_to_response(task: Task, tz: tzinfo | None) -> TaskResponse:
    """Convert Task to TaskResponse, normalizing the due date to a local day."""
    return TaskResponse(
        id=task.id,
        title=task.title,
        status=task.status,
        priority=task.priority,
        description=task.description,
        due_date=due_day(task, tz),
        estimated_minutes=task.estimated_minutes,
        parent_id=task.parent_id,
        category_id=task.category_id,
        assignee_id=task.assignee_id,
        position=task.position,
        completed_at=task.completed_at,
        created_at=task.created_at,
    )
