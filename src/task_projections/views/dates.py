"""Local-day normalization and month grid generation."""

import calendar
import re
from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from task_projections.config import SUNDAY
from task_projections.errors import ValidationError

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def resolve_tz(name: str | None) -> tzinfo | None:
    """Resolve a configured timezone name.

    Supported forms:
      - None / "" / "local" / "system": None, meaning the machine's local zone
      - "UTC" / "Z" / "GMT"
      - Fixed offsets: "+02:00", "+0200", "-05:00"
      - IANA names, e.g. "America/Sao_Paulo"

    Raises ValueError for invalid identifiers.
    """
    tz_name = (name or "").strip()
    if tz_name.lower() in {"", "local", "system"}:
        return None
    if tz_name.lower() in {"utc", "z", "gmt"}:
        return timezone.utc

    match = _OFFSET_RE.match(tz_name)
    if match:
        sign, hours, minutes = match.groups()
        if int(hours) > 23 or int(minutes) > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        return timezone(offset if sign == "+" else -offset)

    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from e


def today(tz: tzinfo | None = None) -> date:
    """Current local calendar day."""
    return datetime.now(tz).date()


def local_day(value: date | datetime, tz: tzinfo | None = None) -> date:
    """Strip time-of-day from a timestamp.

    Aware datetimes are converted to the local zone first (tz=None means the
    system zone). Naive datetimes are taken as already local.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()
    return value


def parse_due(value: Any, tz: tzinfo | None = None) -> date | None:
    """Parse a raw due value into a local day.

    Returns None for missing values. Date-only strings name that local day
    directly; full timestamps are normalized with local_day().

    Raises:
        ValidationError: If the value cannot be interpreted as a date
    """
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return local_day(value, tz)
    if not isinstance(value, str):
        raise ValidationError(f"Unsupported due date type: {type(value).__name__}")

    text = value.strip()
    if not text:
        return None
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return local_day(datetime.fromisoformat(text), tz)
    except ValueError as e:
        raise ValidationError(f"Invalid due date: {value!r}") from e


def month_start(day: date) -> date:
    """First day of the month containing day."""
    return day.replace(day=1)


def month_end(day: date) -> date:
    """Last day of the month containing day."""
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    last = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last))


def days_between(start: date, end: date) -> list[date]:
    """Inclusive range of days."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def month_days(month: date) -> list[date]:
    """Every day of the month containing the given day."""
    return days_between(month_start(month), month_end(month))


def month_grid(month: date, week_start: int = SUNDAY) -> list[date]:
    """Days covering the month, extended to complete weeks.

    Always returns 35 or 42 days. A month that fills exactly four weeks gets
    one trailing week so the grid keeps five rows.

    Args:
        month: Any day of the displayed month
        week_start: First weekday of a grid row (0=Monday .. 6=Sunday)
    """
    first = month_start(month)
    last = month_end(month)
    start = first - timedelta(days=(first.weekday() - week_start) % 7)
    end = last + timedelta(days=(week_start + 6 - last.weekday()) % 7)
    if (end - start).days + 1 == 28:
        end += timedelta(days=7)
    return days_between(start, end)
