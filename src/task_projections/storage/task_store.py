"""Markdown task store.

Tasks live in `<data_dir>/<tasks_folder>/<id>.md` with YAML frontmatter;
categories in `<data_dir>/<categories_file>` as a YAML list.
"""

import logging
import re
from contextlib import suppress
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import yaml

from task_projections.api.models import Category, Task
from task_projections.errors import CyclicParentError
from task_projections.views.tree import would_create_cycle

logger = logging.getLogger(__name__)

_FRONTMATTER_RE = re.compile(r"^(---\s*\n)(.*?)(\n---)", re.DOTALL)


class TaskStore(Protocol):
    """Protocol for the persistence collaborator."""

    def list_tasks(self, status_filter: list[str] | None = None) -> list[Task]:
        """List all tasks, optionally filtered by status."""
        ...

    def list_categories(self) -> list[Category]:
        """List all categories in display order."""
        ...

    def update_task_status(self, task_id: str, new_status: str) -> None:
        """Persist a status change."""
        ...

    def update_task_parent(self, task_id: str, parent_id: str | None) -> None:
        """Persist a parent change."""
        ...


class MarkdownTaskStore:
    """Task store backed by markdown files with YAML frontmatter."""

    def __init__(self, data_dir: str, tasks_folder: str, categories_file: str) -> None:
        """Initialize store with data directory layout."""
        self._tasks_dir = Path(data_dir) / tasks_folder
        self._categories_path = Path(data_dir) / categories_file

    def list_tasks(self, status_filter: list[str] | None = None) -> list[Task]:
        """List all tasks, optionally filtered by status.

        Files that fail to parse are logged and skipped.
        """
        tasks: list[Task] = []
        if not self._tasks_dir.exists():
            logger.warning(f"[TaskStore] Tasks folder not found: {self._tasks_dir}")
            return tasks
        for file_path in sorted(self._tasks_dir.glob("*.md")):
            try:
                task = self._parse_task(file_path)
            except Exception as e:
                logger.warning(f"[TaskStore] Failed to parse {file_path.name}: {e}")
                continue
            if status_filter is None or task.status in status_filter:
                tasks.append(task)
        return tasks

    def read_task(self, task_id: str) -> Task:
        """Read a specific task by ID (filename without .md)."""
        return self._parse_task(self._task_path(task_id))

    def list_categories(self) -> list[Category]:
        """Read categories in file order."""
        if not self._categories_path.exists():
            return []
        data = yaml.safe_load(self._categories_path.read_text(encoding="utf-8")) or []
        if not isinstance(data, list):
            raise ValueError(f"Expected a list in {self._categories_path.name}")

        categories = []
        for entry in data:
            if not isinstance(entry, dict) or "id" not in entry:
                logger.warning(f"[TaskStore] Skipping malformed category entry: {entry!r}")
                continue
            categories.append(
                Category(
                    id=str(entry["id"]),
                    name=str(entry.get("name", entry["id"])),
                    color=str(entry.get("color", "#8b5cf6")),
                )
            )
        return categories

    def update_task_status(self, task_id: str, new_status: str) -> None:
        """Update status, setting or clearing completed_at accordingly."""

        def change(data: dict[str, Any]) -> None:
            data["status"] = new_status
            if new_status == "done":
                data["completed_at"] = datetime.now(timezone.utc).isoformat()
            else:
                data["completed_at"] = None

        self._update_frontmatter(task_id, change)

    def update_task_parent(self, task_id: str, parent_id: str | None) -> None:
        """Set the parent reference, refusing edges that close a cycle."""
        if would_create_cycle(self.list_tasks(), task_id, parent_id):
            raise CyclicParentError(f"Setting parent of {task_id} to {parent_id} creates a cycle")

        def change(data: dict[str, Any]) -> None:
            data["parent"] = parent_id

        self._update_frontmatter(task_id, change)

    def _task_path(self, task_id: str) -> Path:
        file_path = self._tasks_dir / f"{task_id}.md"
        if not file_path.exists():
            raise FileNotFoundError(f"Task not found: {task_id}")
        return file_path

    def _read_text(self, file_path: Path) -> tuple[str, str]:
        # Try UTF-8 first, fallback to latin-1 for non-UTF-8 files
        try:
            return file_path.read_text(encoding="utf-8"), "utf-8"
        except UnicodeDecodeError:
            return file_path.read_text(encoding="latin-1"), "latin-1"

    def _update_frontmatter(self, task_id: str, change: Any) -> None:
        file_path = self._task_path(task_id)
        content, encoding = self._read_text(file_path)

        match = _FRONTMATTER_RE.match(content)
        if not match:
            raise ValueError(f"Task {task_id} has no frontmatter")

        try:
            data = yaml.safe_load(match.group(2)) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in task {task_id}") from e

        change(data)

        new_frontmatter = yaml.dump(data, default_flow_style=False, sort_keys=False)
        new_content = f"---\n{new_frontmatter}---" + content[match.end() :]
        file_path.write_text(new_content, encoding=encoding)

    def _parse_task(self, file_path: Path) -> Task:
        """Parse markdown file into Task object."""
        content, _ = self._read_text(file_path)
        frontmatter = self._extract_frontmatter(content)

        return Task(
            id=file_path.stem,
            title=str(frontmatter.get("title") or file_path.stem),
            status=str(frontmatter.get("status") or "todo"),
            priority=str(frontmatter.get("priority") or "medium"),
            description=self._extract_description(content),
            # Raw value, validated lazily by the projections
            due_date=frontmatter.get("due_date"),
            estimated_minutes=self._to_int(frontmatter.get("estimated_minutes")),
            parent_id=self._to_ref(frontmatter.get("parent")),
            category_id=self._to_ref(frontmatter.get("category")),
            assignee_id=self._to_ref(frontmatter.get("assignee")),
            position=self._to_int(frontmatter.get("position")) or 0,
            completed_at=self._to_datetime(frontmatter.get("completed_at")),
            created_at=self._to_datetime(frontmatter.get("created_at"))
            or datetime.fromtimestamp(file_path.stat().st_mtime),
        )

    def _to_int(self, value: Any) -> int | None:
        """Normalize numeric fields.

        Booleans, floats, empty and non-numeric strings are rejected (None).
        """
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            with suppress(ValueError):
                return int(value.strip())
        return None

    def _to_ref(self, value: Any) -> str | None:
        """Normalize a reference: plain ids or [[wikilinks]]."""
        if value is None:
            return None
        text = str(value).strip().strip("[]").strip()
        return text or None

    def _to_datetime(self, value: Any) -> datetime | None:
        """Convert YAML timestamps, dates and ISO strings."""
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime(value.year, value.month, value.day)
        if isinstance(value, str) and value.strip():
            text = value.strip()
            if text.endswith(("Z", "z")):
                text = text[:-1] + "+00:00"
            with suppress(ValueError):
                return datetime.fromisoformat(text)
        return None

    def _extract_frontmatter(self, content: str) -> dict[str, Any]:
        """Extract YAML frontmatter from markdown content."""
        match = _FRONTMATTER_RE.match(content)
        if not match:
            return {}
        try:
            data = yaml.safe_load(match.group(2))
            return data if isinstance(data, dict) else {}
        except yaml.YAMLError:
            return {}

    def _extract_description(self, content: str) -> str | None:
        """Extract first 100 chars of content after frontmatter for description.

        Removes frontmatter, markdown formatting, and extra whitespace.
        """
        match = re.match(r"^---\s*\n.*?\n---\s*\n", content, re.DOTALL)
        if match:
            content = content[match.end() :]

        content = re.sub(r"#{1,6}\s+", "", content)  # Headers
        content = re.sub(r"\[([^\]]+)\]\([^\)]+\)", r"\1", content)  # Links [text](url) -> text
        content = re.sub(r"\[\[([^\]]+)\]\]", r"\1", content)  # Wikilinks [[text]] -> text
        content = re.sub(r"\s+", " ", content)
        content = content.strip()

        if not content:
            return None
        return content[:100] + ("..." if len(content) > 100 else "")

