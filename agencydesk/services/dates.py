# agencydesk/services/dates.py
"""
Date normalization for edit forms, submissions and time-bucketed rollups.

Wire dates are either date-only ('2025-01-05') or full ISO instants
('2025-01-05T00:00:00.000Z'). Internally everything is compared as a naive
UTC datetime.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional, Tuple, Union

DateLike = Union[str, date, datetime, None]

_RE_DATE_ONLY = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})\s*$")


def parse_instant(value: DateLike) -> Optional[datetime]:
    """
    Parse a date/instant into a naive UTC datetime. Returns None when the
    value is empty or cannot be read.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    else:
        s = str(value).strip()
        if not s:
            return None
        if s.endswith(("Z", "z")):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_date(value: DateLike, style: str = "iso") -> str:
    """
    Never raises.
      style='iso'  -> '2025-01-05' (edit-form population)
      style='long' -> 'January 5, 2025' (display)
    Empty string for None or unreadable input.
    """
    dt = parse_instant(value)
    if dt is None:
        return ""
    if style == "long":
        return f"{calendar.month_name[dt.month]} {dt.day}, {dt.year}"
    return dt.strftime("%Y-%m-%d")


def to_iso(date_only: Optional[str]) -> Optional[str]:
    """
    Convert a user-entered 'YYYY-MM-DD' to a full ISO instant for submission.

    Returns None for empty input (field intentionally cleared).
    Raises ValueError for anything that is not a real calendar date.
    """
    if date_only is None:
        return None
    s = str(date_only).strip()
    if not s:
        return None
    m = _RE_DATE_ONLY.match(s)
    if not m:
        raise ValueError(f"Invalid date: {date_only!r}. Expected YYYY-MM-DD")
    d = date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    return f"{d.isoformat()}T00:00:00.000Z"


def is_valid_date(value: Any) -> bool:
    return parse_instant(value) is not None


def month_range(y: int, m: int) -> Tuple[datetime, datetime]:
    """
    Inclusive [start, end] datetime range for a given year-month.
    End is the last microsecond of the last day.
    """
    first = datetime(y, m, 1)
    last_day = calendar.monthrange(y, m)[1]
    last = datetime(y, m, last_day, 23, 59, 59, 999999)
    return first, last


def quarter_range(y: int, m: int) -> Tuple[datetime, datetime]:
    """Inclusive range of the calendar quarter containing month m."""
    q_first_month = 3 * ((m - 1) // 3) + 1
    start, _ = month_range(y, q_first_month)
    _, end = month_range(y, q_first_month + 2)
    return start, end


def year_to_date_range(now: datetime) -> Tuple[datetime, datetime]:
    return datetime(now.year, 1, 1), now


def week_start(value: DateLike) -> Optional[date]:
    """Monday of the ISO week containing value."""
    dt = parse_instant(value)
    if dt is None:
        return None
    d = dt.date()
    return d - timedelta(days=d.weekday())


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_now(now: Optional[datetime]) -> datetime:
    if now is None:
        return utc_now()
    return parse_instant(now) or utc_now()
