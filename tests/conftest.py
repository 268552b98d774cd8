"""Test fixtures for TaskProjections."""

from pathlib import Path

import pytest

from task_projections.api.models import Task


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """Create temporary data directory with tasks folder and categories."""
    data_dir = tmp_path / "data"
    (data_dir / "tasks").mkdir(parents=True)
    (data_dir / "categories.yaml").write_text(
        """- id: work
  name: Work
  color: "#0ea5e9"
- id: home
  name: Home
  color: "#10b981"
"""
    )
    return data_dir


@pytest.fixture
def sample_task_file(tmp_data_dir: Path) -> Path:
    """Create a sample task file."""
    task_file = tmp_data_dir / "tasks" / "write-report.md"

    content = """---
title: Write report
status: in_progress
priority: high
category: work
parent: "[[quarterly-review]]"
due_date: 2026-10-20
estimated_minutes: 90
position: 2
created_at: 2026-10-01T09:00:00+00:00
---

# Impact
Summarize the [quarter](https://example.com) for the team.
"""

    task_file.write_text(content)
    return task_file


def make_task(task_id: str, **fields: object) -> Task:
    """Build a Task with a title derived from the id."""
    fields.setdefault("title", task_id.replace("-", " ").title())
    return Task(id=task_id, **fields)  # type: ignore[arg-type]
