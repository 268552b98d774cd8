"""API models for TaskProjections."""

from dataclasses import dataclass
from datetime import date, datetime

from pydantic import BaseModel

STATUSES = ("todo", "in_progress", "done")
PRIORITIES = ("low", "medium", "high", "urgent")


@dataclass
class Task:
    """Task record as provided by the store."""

    id: str  # Filename without .md
    title: str
    status: str = "todo"  # todo, in_progress, done
    priority: str = "medium"  # low, medium, high, urgent
    description: str | None = None
    due_date: str | date | datetime | None = None  # Raw value, parsed by views.dates
    estimated_minutes: int | None = None
    parent_id: str | None = None
    category_id: str | None = None
    assignee_id: str | None = None
    position: int = 0  # Order within the status partition
    completed_at: datetime | None = None
    created_at: datetime | None = None


@dataclass
class Category:
    """Category used as roadmap lane."""

    id: str
    name: str
    color: str = "#8b5cf6"


class TaskResponse(BaseModel):
    """API response model for tasks."""

    id: str
    title: str
    status: str
    priority: str
    description: str | None
    due_date: date | None
    estimated_minutes: int | None
    parent_id: str | None
    category_id: str | None
    assignee_id: str | None
    position: int
    completed_at: datetime | None
    created_at: datetime | None


class StreakResponse(BaseModel):
    """API response model for the completion streak."""

    streak: int


class CalendarDayResponse(BaseModel):
    """One cell of the month grid."""

    day: date
    in_month: bool
    is_today: bool
    is_selected: bool
    tasks: list[TaskResponse]


class CalendarResponse(BaseModel):
    """API response model for the calendar grid."""

    month: date
    selected: date
    days: list[CalendarDayResponse]
    selected_tasks: list[TaskResponse]


class PlacementResponse(BaseModel):
    """A task marker inside a roadmap lane."""

    task_id: str
    title: str
    day_offset: int
    vertical_index: int
    left: int
    top: int
    width: int


class LaneResponse(BaseModel):
    """API response model for one roadmap lane."""

    category_id: str
    name: str
    color: str
    row_height: int
    task_count: int
    placements: list[PlacementResponse]


class RoadmapResponse(BaseModel):
    """API response model for the roadmap."""

    month: date
    days: list[date]
    grid_width: int
    lanes: list[LaneResponse]


class BoardColumnResponse(BaseModel):
    """One status column on the board."""

    status: str
    count: int
    tasks: list[TaskResponse]


class BoardResponse(BaseModel):
    """API response model for the board."""

    columns: list[BoardColumnResponse]
    pending: list[str]


class TransitionRequest(BaseModel):
    """Request model for moving a task to another column."""

    task_id: str
    target_status: str | None = None


class TransitionResponse(BaseModel):
    """API response model for a transition."""

    task_id: str
    from_status: str
    to_status: str
    applied: bool
    celebrated: bool


class ReorderRequest(BaseModel):
    """Request model for reordering a task inside its column."""

    task_id: str
    index: int


class TreeNodeResponse(BaseModel):
    """API response model for a node of the project tree."""

    task: TaskResponse
    children: list["TreeNodeResponse"]


class ParentRequest(BaseModel):
    """Request model for changing a task's parent."""

    parent_id: str | None = None
