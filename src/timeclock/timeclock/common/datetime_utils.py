from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """Inclusive [first day 00:00:00, last day 23:59:59.999999] of a month."""
    last_day = calendar.monthrange(year, month)[1]
    start = datetime.combine(date(year, month, 1), time.min)
    end = datetime.combine(date(year, month, last_day), time.max)
    return start, end


def seconds_between(start: datetime, end: datetime) -> int:
    """Whole seconds from start to end, floored and never negative."""
    return max(0, int((end - start) // timedelta(seconds=1)))


def format_elapsed(seconds: int) -> str:
    """HH:MM:SS with unbounded hours, e.g. 3661 -> '01:01:01', 90000 -> '25:00:00'."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_worked_duration(duration: timedelta) -> str:
    """H:MM from whole minutes, e.g. 8h30m15s -> '8:30'."""
    minutes = max(0, int(duration // timedelta(minutes=1)))
    return f"{minutes // 60}:{minutes % 60:02d}"
