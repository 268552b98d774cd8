"""Project tree built from parent references."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from task_projections.api.models import Task

logger = logging.getLogger(__name__)


@dataclass
class TreeNode:
    """Task with its child nodes."""

    task: Task
    children: list["TreeNode"] = field(default_factory=list)


def ancestors(tasks: Iterable[Task], task_id: str) -> list[str]:
    """Parent chain of a task, nearest first.

    Stops at a missing parent or when the chain loops back on itself.
    """
    parents = {task.id: task.parent_id for task in tasks}
    chain: list[str] = []
    seen = {task_id}
    current = parents.get(task_id)
    while current is not None and current in parents and current not in seen:
        chain.append(current)
        seen.add(current)
        current = parents[current]
    return chain


def would_create_cycle(tasks: Iterable[Task], task_id: str, parent_id: str | None) -> bool:
    """Check whether setting task_id's parent to parent_id closes a cycle."""
    if parent_id is None:
        return False
    if parent_id == task_id:
        return True
    return task_id in ancestors(tasks, parent_id)


def build_tree(tasks: Iterable[Task]) -> list[TreeNode]:
    """Arrange tasks into a forest.

    Tasks with no parent, a parent outside the snapshot, or a parent edge that
    closes a cycle become roots. Every task appears exactly once and children
    keep input order.
    """
    task_list = list(tasks)
    nodes = {task.id: TreeNode(task) for task in task_list}
    parents: dict[str, str | None] = {}

    # Attach edges one at a time so the first edge that closes a loop is dropped
    for task in task_list:
        parent_id = task.parent_id
        if parent_id is not None and parent_id not in nodes:
            parent_id = None
        if parent_id is not None and _reaches(parents, parent_id, task.id):
            logger.warning(f"[Tree] Ignoring cyclic parent edge {task.id} -> {parent_id}")
            parent_id = None
        parents[task.id] = parent_id

    roots: list[TreeNode] = []
    for task in task_list:
        parent_id = parents[task.id]
        if parent_id is None:
            roots.append(nodes[task.id])
        else:
            nodes[parent_id].children.append(nodes[task.id])
    return roots


def _reaches(parents: dict[str, str | None], start: str, target: str) -> bool:
    current: str | None = start
    while current is not None:
        if current == target:
            return True
        current = parents.get(current)
    return False


def flatten(roots: Iterable[TreeNode]) -> list[Task]:
    """Depth-first task order of a forest."""
    result: list[Task] = []
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        result.append(node.task)
        stack.extend(reversed(node.children))
    return result
