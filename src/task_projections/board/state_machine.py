"""Kanban board with optimistic status transitions."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Protocol

from task_projections.api.models import STATUSES, Task
from task_projections.errors import (
    ConcurrentTransitionConflict,
    TransitionRejected,
    UnknownTaskError,
    ValidationError,
)

logger = logging.getLogger(__name__)

DONE = "done"

CelebrationHook = Callable[[Task], Awaitable[None] | None]


class StatusWriter(Protocol):
    """Persistence collaborator used to confirm transitions."""

    def update_task_status(self, task_id: str, new_status: str) -> None:
        """Persist a status change, raising on failure."""
        ...


@dataclass(frozen=True)
class DropCommand:
    """A drag released over a column (target_status None: outside any column)."""

    task_id: str
    target_status: str | None


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a transition request."""

    task_id: str
    from_status: str
    to_status: str
    applied: bool
    celebrated: bool = False


@dataclass(frozen=True)
class _Checkpoint:
    status: str
    position: int
    completed_at: datetime | None


def partition(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """Group tasks by status, each column ordered by position.

    Tasks with a status outside STATUSES are not placed in any column.
    """
    columns: dict[str, list[Task]] = {status: [] for status in STATUSES}
    for task in tasks:
        if task.status in columns:
            columns[task.status].append(task)
    for column in columns.values():
        column.sort(key=lambda task: task.position)
    return columns


class BoardStateMachine:
    """Status board over a task snapshot.

    Transitions are applied locally first, then confirmed through the store.
    A failed confirmation restores the previous status. At most one
    transition per task may be in flight.
    """

    def __init__(
        self,
        tasks: Iterable[Task],
        store: StatusWriter,
        on_celebrate: CelebrationHook | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize board with a snapshot and its persistence collaborator.

        Args:
            tasks: Task snapshot; records are copied, never mutated
            store: Collaborator providing update_task_status()
            on_celebrate: Called once per confirmed transition into done
            clock: Source of completion timestamps
        """
        self._store = store
        self._on_celebrate = on_celebrate
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._tasks: dict[str, Task] = {}
        self._pending: set[str] = set()
        self._replace_snapshot(tasks)

    def _replace_snapshot(self, tasks: Iterable[Task]) -> None:
        self._tasks = {task.id: replace(task) for task in tasks}

    def load(self, tasks: Iterable[Task]) -> None:
        """Replace the board snapshot.

        Raises:
            ConcurrentTransitionConflict: If any transition is still pending
        """
        if self._pending:
            raise ConcurrentTransitionConflict(sorted(self._pending)[0])
        self._replace_snapshot(tasks)
        logger.info(f"[Board] Loaded {len(self._tasks)} tasks")

    def tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def get(self, task_id: str) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise UnknownTaskError(task_id) from None

    def is_pending(self, task_id: str) -> bool:
        return task_id in self._pending

    def pending(self) -> list[str]:
        return sorted(self._pending)

    def partitions(self, tasks: Iterable[Task] | None = None) -> dict[str, list[Task]]:
        """Columns of the board, or of the given snapshot."""
        return partition(self._tasks.values() if tasks is None else tasks)

    def counts(self) -> dict[str, int]:
        """Badge count per column."""
        return {status: len(column) for status, column in self.partitions().items()}

    async def handle_drop(self, command: DropCommand) -> TransitionResult:
        """Apply a drag-and-drop gesture.

        A drop outside any column (no target), or on the task's own column, is
        cancelled without contacting the store. Any other target goes through
        request_transition, so an unknown status raises ValidationError.
        """
        task = self.get(command.task_id)
        if command.target_status is None:
            logger.debug(f"[Board] Drop of {command.task_id} outside any column, cancelled")
            return TransitionResult(task.id, task.status, task.status, applied=False)
        return await self.request_transition(command.task_id, command.target_status)

    async def request_transition(self, task_id: str, target_status: str) -> TransitionResult:
        """Move a task to another status column.

        Args:
            task_id: Task to move
            target_status: One of STATUSES

        Returns:
            TransitionResult; applied is False for a same-status request

        Raises:
            ValidationError: If target_status is not a board status
            UnknownTaskError: If the task is not on the board
            ConcurrentTransitionConflict: If a transition for the task is pending
            TransitionRejected: If the store declined; the task is rolled back
        """
        if target_status not in STATUSES:
            raise ValidationError(f"Unknown status: {target_status!r}")
        task = self.get(task_id)
        current = task.status

        if task_id in self._pending:
            logger.warning(f"[Board] Transition already pending for {task_id}")
            raise ConcurrentTransitionConflict(task_id)
        if current == target_status:
            return TransitionResult(task_id, current, target_status, applied=False)

        self._pending.add(task_id)
        checkpoint = self._apply(task, target_status)
        logger.info(f"[Board] Moving {task_id}: {current} -> {target_status}")
        try:
            await asyncio.to_thread(self._store.update_task_status, task_id, target_status)
        except asyncio.CancelledError:
            self._rollback(task, checkpoint)
            raise
        except Exception as e:
            self._rollback(task, checkpoint)
            logger.error(f"[Board] Store rejected {task_id} -> {target_status}: {e}")
            raise TransitionRejected(task_id, current, target_status, str(e)) from e
        finally:
            self._pending.discard(task_id)

        celebrated = False
        if target_status == DONE:
            celebrated = await self._celebrate(task)
        return TransitionResult(task_id, current, target_status, applied=True, celebrated=celebrated)

    def reorder(self, task_id: str, index: int) -> list[Task]:
        """Move a task within its column and renumber positions.

        Other tasks in the column keep their relative order.

        Returns:
            The column in its new order
        """
        task = self.get(task_id)
        column = [other for other in self.partitions()[task.status] if other.id != task_id]
        index = max(0, min(index, len(column)))
        column.insert(index, task)
        for position, member in enumerate(column):
            member.position = position
        return column

    def _apply(self, task: Task, target_status: str) -> _Checkpoint:
        checkpoint = _Checkpoint(task.status, task.position, task.completed_at)
        column = self.partitions()[target_status]
        task.position = column[-1].position + 1 if column else 0
        task.status = target_status
        if target_status == DONE:
            task.completed_at = self._clock()
        elif checkpoint.status == DONE:
            task.completed_at = None
        return checkpoint

    def _rollback(self, task: Task, checkpoint: _Checkpoint) -> None:
        column = self.partitions()[checkpoint.status] if checkpoint.status in STATUSES else []
        taken = {other.position for other in column if other.id != task.id}
        task.status = checkpoint.status
        # A reorder while pending may have reused the old slot
        task.position = (
            checkpoint.position if checkpoint.position not in taken else max(taken) + 1
        )
        task.completed_at = checkpoint.completed_at
        logger.info(f"[Board] Rolled back {task.id} to {checkpoint.status}")

    async def _celebrate(self, task: Task) -> bool:
        if self._on_celebrate is None:
            return False
        try:
            outcome = self._on_celebrate(task)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            logger.error(f"[Board] Celebration hook failed for {task.id}: {e}", exc_info=True)
            return False
        return True
