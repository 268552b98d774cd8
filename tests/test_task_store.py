"""Tests for MarkdownTaskStore."""

from datetime import date, datetime
from pathlib import Path

import pytest
import yaml

from task_projections.errors import CyclicParentError
from task_projections.storage.task_store import MarkdownTaskStore


def _store(data_dir: Path) -> MarkdownTaskStore:
    return MarkdownTaskStore(str(data_dir), "tasks", "categories.yaml")


def _frontmatter(path: Path) -> dict:
    text = path.read_text()
    return yaml.safe_load(text.split("---")[1])


def test_list_tasks_empty(tmp_data_dir: Path) -> None:
    """Test listing tasks from empty store."""
    assert _store(tmp_data_dir).list_tasks() == []


def test_list_tasks_missing_folder(tmp_path: Path) -> None:
    assert _store(tmp_path / "nowhere").list_tasks() == []


def test_list_tasks_with_file(tmp_data_dir: Path, sample_task_file: Path) -> None:
    """Test parsing every frontmatter field."""
    tasks = _store(tmp_data_dir).list_tasks()

    assert len(tasks) == 1
    task = tasks[0]
    assert task.id == "write-report"
    assert task.title == "Write report"
    assert task.status == "in_progress"
    assert task.priority == "high"
    assert task.category_id == "work"
    assert task.parent_id == "quarterly-review"
    assert task.due_date == date(2026, 10, 20)
    assert task.estimated_minutes == 90
    assert task.position == 2
    assert task.created_at == datetime.fromisoformat("2026-10-01T09:00:00+00:00")
    assert task.completed_at is None
    assert task.description == "Impact Summarize the quarter for the team."


def test_defaults_for_sparse_task(tmp_data_dir: Path) -> None:
    """Missing fields fall back to todo/medium and the filename as title."""
    (tmp_data_dir / "tasks" / "bare.md").write_text("---\nestimated_minutes: soon\n---\n")

    task = _store(tmp_data_dir).read_task("bare")

    assert task.title == "bare"
    assert task.status == "todo"
    assert task.priority == "medium"
    assert task.estimated_minutes is None
    assert task.description is None
    assert task.created_at is not None


def test_list_tasks_status_filter(tmp_data_dir: Path, sample_task_file: Path) -> None:
    store = _store(tmp_data_dir)
    assert len(store.list_tasks(status_filter=["in_progress"])) == 1
    assert store.list_tasks(status_filter=["done"]) == []


def test_read_task_not_found(tmp_data_dir: Path) -> None:
    with pytest.raises(FileNotFoundError):
        _store(tmp_data_dir).read_task("NonExistent")


def test_malformed_due_date_kept_raw(tmp_data_dir: Path) -> None:
    """The store does not validate due dates; the projections do."""
    (tmp_data_dir / "tasks" / "odd.md").write_text("---\ndue_date: next week\n---\n")
    assert _store(tmp_data_dir).read_task("odd").due_date == "next week"


def test_list_categories(tmp_data_dir: Path) -> None:
    categories = _store(tmp_data_dir).list_categories()
    assert [(c.id, c.name, c.color) for c in categories] == [
        ("work", "Work", "#0ea5e9"),
        ("home", "Home", "#10b981"),
    ]


def test_list_categories_skips_malformed(tmp_data_dir: Path) -> None:
    (tmp_data_dir / "categories.yaml").write_text("- id: a\n- just a string\n- name: no id\n")
    categories = _store(tmp_data_dir).list_categories()
    assert [(c.id, c.name) for c in categories] == [("a", "a")]


def test_update_task_status_to_done_sets_completed_at(
    tmp_data_dir: Path, sample_task_file: Path
) -> None:
    store = _store(tmp_data_dir)
    store.update_task_status("write-report", "done")

    data = _frontmatter(sample_task_file)
    assert data["status"] == "done"
    assert data["completed_at"] is not None
    # Other fields and body survive the rewrite
    assert data["category"] == "work"
    assert "Summarize the" in sample_task_file.read_text()

    task = store.read_task("write-report")
    assert task.completed_at is not None


def test_update_task_status_reopen_clears_completed_at(
    tmp_data_dir: Path, sample_task_file: Path
) -> None:
    store = _store(tmp_data_dir)
    store.update_task_status("write-report", "done")
    store.update_task_status("write-report", "todo")

    assert store.read_task("write-report").completed_at is None


def test_update_task_status_not_found(tmp_data_dir: Path) -> None:
    with pytest.raises(FileNotFoundError):
        _store(tmp_data_dir).update_task_status("ghost", "done")


def test_update_task_status_without_frontmatter(tmp_data_dir: Path) -> None:
    (tmp_data_dir / "tasks" / "plain.md").write_text("Just text\n")
    with pytest.raises(ValueError):
        _store(tmp_data_dir).update_task_status("plain", "done")


def test_update_task_parent_rejects_cycle(tmp_data_dir: Path) -> None:
    tasks_dir = tmp_data_dir / "tasks"
    (tasks_dir / "epic.md").write_text("---\ntitle: Epic\n---\n")
    (tasks_dir / "story.md").write_text("---\ntitle: Story\nparent: epic\n---\n")
    store = _store(tmp_data_dir)

    with pytest.raises(CyclicParentError):
        store.update_task_parent("epic", "story")

    store.update_task_parent("story", None)
    assert store.read_task("story").parent_id is None
    store.update_task_parent("epic", "story")
    assert store.read_task("epic").parent_id == "story"
