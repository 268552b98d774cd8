"""Tests for day normalization and month grids."""

from datetime import date, datetime, timedelta, timezone

import pytest

from task_projections.config import MONDAY, SUNDAY
from task_projections.errors import ValidationError
from task_projections.views.dates import (
    add_months,
    local_day,
    month_days,
    month_grid,
    parse_due,
    resolve_tz,
)

BRT = timezone(timedelta(hours=-3))


def test_local_day_strips_time() -> None:
    """Naive timestamps are taken as local."""
    assert local_day(datetime(2026, 10, 19, 23, 59)) == date(2026, 10, 19)


def test_local_day_converts_aware_timestamp() -> None:
    """01:30 UTC is still the previous evening three hours west."""
    value = datetime(2026, 10, 20, 1, 30, tzinfo=timezone.utc)
    assert local_day(value, BRT) == date(2026, 10, 19)


def test_parse_due_accepts_supported_forms() -> None:
    """Dates, ISO strings and timestamps all normalize to a day."""
    assert parse_due(None) is None
    assert parse_due("") is None
    assert parse_due(date(2026, 10, 19)) == date(2026, 10, 19)
    assert parse_due("2026-10-19") == date(2026, 10, 19)
    assert parse_due("2026-10-20T02:00:00Z", BRT) == date(2026, 10, 19)
    assert parse_due("2026-10-19T10:00:00") == date(2026, 10, 19)


@pytest.mark.parametrize("value", ["tomorrow", "2026-13-01", "19/10/2026", 42])
def test_parse_due_rejects_malformed(value: object) -> None:
    """Unparsable values raise ValidationError."""
    with pytest.raises(ValidationError):
        parse_due(value)


def test_add_months_clamps_day() -> None:
    """Jan 31 + 1 month lands on the last day of February."""
    assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
    assert add_months(date(2026, 1, 15), -1) == date(2025, 12, 15)
    assert add_months(date(2026, 11, 3), 2) == date(2027, 1, 3)


def test_month_days() -> None:
    days = month_days(date(2026, 10, 19))
    assert days[0] == date(2026, 10, 1)
    assert days[-1] == date(2026, 10, 31)
    assert len(days) == 31


def test_month_grid_sunday_start() -> None:
    """October 2026 starts on a Thursday and ends on a Saturday."""
    grid = month_grid(date(2026, 10, 1), SUNDAY)
    assert grid[0] == date(2026, 9, 27)
    assert grid[-1] == date(2026, 10, 31)
    assert len(grid) == 35


def test_month_grid_six_weeks() -> None:
    """August 2026 starts on a Saturday and needs six rows."""
    grid = month_grid(date(2026, 8, 1), SUNDAY)
    assert grid[0] == date(2026, 7, 26)
    assert grid[-1] == date(2026, 9, 5)
    assert len(grid) == 42


def test_month_grid_monday_start() -> None:
    grid = month_grid(date(2026, 10, 1), MONDAY)
    assert grid[0] == date(2026, 9, 28)
    assert grid[0].weekday() == MONDAY
    assert len(grid) == 35


def test_month_grid_pads_four_week_month() -> None:
    """February 2026 starts on Sunday and fits four weeks; a fifth is added."""
    grid = month_grid(date(2026, 2, 10), SUNDAY)
    assert grid[0] == date(2026, 2, 1)
    assert len(grid) == 35
    assert grid[-1] == date(2026, 3, 7)


@pytest.mark.parametrize("year", [2025, 2026, 2027, 2028])
@pytest.mark.parametrize("week_start", [MONDAY, SUNDAY])
def test_month_grid_always_full_weeks(year: int, week_start: int) -> None:
    """Every month yields 35 or 42 consecutive days starting on week_start."""
    for month in range(1, 13):
        grid = month_grid(date(year, month, 1), week_start)
        assert len(grid) in (35, 42)
        assert grid[0].weekday() == week_start
        assert all(b - a == timedelta(days=1) for a, b in zip(grid, grid[1:]))
        assert date(year, month, 1) in grid


def test_resolve_tz() -> None:
    assert resolve_tz("local") is None
    assert resolve_tz(None) is None
    assert resolve_tz("UTC") is timezone.utc
    assert resolve_tz("-03:00") == BRT
    with pytest.raises(ValueError):
        resolve_tz("Not/AZone")
