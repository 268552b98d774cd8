"""Board endpoints: columns, transitions and reordering."""

import asyncio
import logging
from contextlib import suppress

from fastapi import APIRouter, HTTPException

from task_projections.api.models import (
    BoardColumnResponse,
    BoardResponse,
    ParentRequest,
    ReorderRequest,
    TaskResponse,
    TransitionRequest,
    TransitionResponse,
)
from task_projections.api.views import task_to_response
from task_projections.board.state_machine import DropCommand
from task_projections.errors import (
    ConcurrentTransitionConflict,
    CyclicParentError,
    TransitionRejected,
    UnknownTaskError,
    ValidationError,
)
from task_projections.factory import (
    get_board,
    get_connection_manager,
    get_task_store,
    get_timezone,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/board", response_model=BoardResponse)
async def get_board_columns() -> BoardResponse:
    """Status columns with their tasks and badge counts."""
    board = get_board()
    tz = get_timezone()
    columns = [
        BoardColumnResponse(
            status=status,
            count=len(tasks),
            tasks=[task_to_response(task, tz) for task in tasks],
        )
        for status, tasks in board.partitions().items()
    ]
    return BoardResponse(columns=columns, pending=board.pending())


@router.post("/board/transitions", response_model=TransitionResponse)
async def move_task(request: TransitionRequest) -> TransitionResponse:
    """Drop a task on a column.

    A missing target_status means the drag ended outside any column and is
    cancelled.

    Raises:
        HTTPException: 404 unknown task, 409 transition pending,
            422 unknown status, 502 store rejected the change
    """
    board = get_board()
    try:
        result = await board.handle_drop(DropCommand(request.task_id, request.target_status))
    except UnknownTaskError as e:
        raise HTTPException(status_code=404, detail=f"Task not found: {request.task_id}") from e
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except ConcurrentTransitionConflict as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except TransitionRejected as e:
        raise HTTPException(status_code=502, detail=str(e)) from e

    if result.applied:
        await get_connection_manager().task_moved(result)

    return TransitionResponse(
        task_id=result.task_id,
        from_status=result.from_status,
        to_status=result.to_status,
        applied=result.applied,
        celebrated=result.celebrated,
    )


@router.post("/board/reorder", response_model=list[TaskResponse])
async def reorder_task(request: ReorderRequest) -> list[TaskResponse]:
    """Move a task within its column.

    Raises:
        HTTPException: 404 if the task is not on the board
    """
    try:
        column = get_board().reorder(request.task_id, request.index)
    except UnknownTaskError as e:
        raise HTTPException(status_code=404, detail=f"Task not found: {request.task_id}") from e
    tz = get_timezone()
    return [task_to_response(task, tz) for task in column]


@router.post("/board/reload")
async def reload_board() -> dict[str, int | str]:
    """Reload the board snapshot from the store.

    Raises:
        HTTPException: 409 while a transition is pending
    """
    board = get_board()
    try:
        board.load(get_task_store().list_tasks())
    except ConcurrentTransitionConflict as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    return {"status": "success", "count": len(board.tasks())}


@router.patch("/tasks/{task_id}/parent")
async def update_task_parent(task_id: str, request: ParentRequest) -> dict[str, str | None]:
    """Re-parent a task in the store and on the board.

    Raises:
        HTTPException: 404 if the task is not found, 409 if the edge closes a cycle
    """
    try:
        await asyncio.to_thread(get_task_store().update_task_parent, task_id, request.parent_id)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except CyclicParentError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    with suppress(UnknownTaskError):
        get_board().get(task_id).parent_id = request.parent_id
    return {"status": "success", "task_id": task_id, "parent_id": request.parent_id}
