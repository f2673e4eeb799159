from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import format_worked_duration, month_bounds
from ..core.constants import EMPTY_PLACEHOLDER, REPORT_MONTH_OPTIONS, REPORT_PAGE_SIZE
from ..core.exceptions import ValidationError
from ..core.logging import get_logger

logger = get_logger(__name__)

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True, order=True)
class MonthSelector:
    year: int
    month: int

    def __post_init__(self):
        if not 1 <= int(self.month) <= 12:
            raise ValidationError(f"Invalid month: {self.month}")
        if not 1 <= int(self.year) <= 9999:
            raise ValidationError(f"Invalid year: {self.year}")

    @classmethod
    def parse(cls, value: str) -> "MonthSelector":
        """Parse 'YYYY-MM'."""
        m = _MONTH_RE.match((value or "").strip())
        if not m:
            raise ValidationError("Month must look like YYYY-MM")
        return cls(int(m.group(1)), int(m.group(2)))

    @classmethod
    def of(cls, day: date) -> "MonthSelector":
        return cls(day.year, day.month)

    def previous(self) -> "MonthSelector":
        if self.month == 1:
            return MonthSelector(self.year - 1, 12)
        return MonthSelector(self.year, self.month - 1)

    def bounds(self) -> tuple[datetime, datetime]:
        return month_bounds(self.year, self.month)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def recent_months(today: date, count: int = REPORT_MONTH_OPTIONS) -> list[MonthSelector]:
    """Month picker options, current month first."""
    months = [MonthSelector.of(today)]
    while len(months) < count:
        months.append(months[-1].previous())
    return months


@dataclass(frozen=True)
class ReportRow:
    entry_id: str
    work_date: str
    clock_in: str
    clock_out: str
    worked: str
    daily_report: str


@dataclass(frozen=True)
class ReportPage:
    month: MonthSelector
    page: int
    page_count: int
    total: int
    rows: list[ReportRow]
    page_size: int = REPORT_PAGE_SIZE

    @property
    def first_index(self) -> int:
        """1-based index of the first row on this page (0 when empty)."""
        if not self.rows:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def last_index(self) -> int:
        if not self.rows:
            return 0
        return self.first_index + len(self.rows) - 1

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count


def worked_display(record: AttendanceRecord) -> str:
    duration = record.worked_duration
    if duration is None:
        return EMPTY_PLACEHOLDER
    return format_worked_duration(duration)


def to_row(record: AttendanceRecord) -> ReportRow:
    return ReportRow(
        entry_id=record.entry_id,
        work_date=record.clock_in_time.strftime("%Y-%m-%d"),
        clock_in=record.clock_in_time.strftime("%H:%M:%S"),
        clock_out=record.clock_out_time.strftime("%H:%M:%S") if record.clock_out_time else EMPTY_PLACEHOLDER,
        worked=worked_display(record),
        daily_report=record.daily_report or EMPTY_PLACEHOLDER,
    )


class ReportAggregator:
    """Monthly attendance history of one user, paginated client-side."""

    def __init__(self, attendance: AttendanceRepository, *, page_size: int = REPORT_PAGE_SIZE):
        self._attendance = attendance
        self._page_size = int(page_size)
        self._month: Optional[MonthSelector] = None
        self._records: list[AttendanceRecord] = []
        self._page = 1

    @property
    def month(self) -> Optional[MonthSelector]:
        return self._month

    @property
    def records(self) -> Sequence[AttendanceRecord]:
        return list(self._records)

    @property
    def total(self) -> int:
        return len(self._records)

    @property
    def page_count(self) -> int:
        return math.ceil(len(self._records) / self._page_size)

    @property
    def current_page(self) -> int:
        return self._page

    async def select_month(self, user_id: str, month: MonthSelector) -> ReportPage:
        """Load the month and reset to page 1. On PersistenceError nothing changes."""
        start, end = month.bounds()
        records = await self._attendance.list_for_user_between(user_id=user_id, start=start, end=end)

        self._month = month
        self._records = sorted(records, key=lambda r: r.clock_in_time, reverse=True)
        self._page = 1
        logger.debug("Loaded %d entries for %s in %s", len(self._records), user_id, month)
        return self.page()

    def go_to_page(self, page: int) -> ReportPage:
        last = max(self.page_count, 1)
        self._page = min(max(int(page), 1), last)
        return self.page()

    def next_page(self) -> ReportPage:
        return self.go_to_page(self._page + 1)

    def previous_page(self) -> ReportPage:
        return self.go_to_page(self._page - 1)

    def page_records(self) -> list[AttendanceRecord]:
        start = (self._page - 1) * self._page_size
        return self._records[start : start + self._page_size]

    def page(self) -> ReportPage:
        if self._month is None:
            raise ValidationError("Select a month first")
        chunk = self.page_records()
        return ReportPage(
            month=self._month,
            page=self._page,
            page_count=self.page_count,
            total=len(self._records),
            rows=[to_row(r) for r in chunk],
            page_size=self._page_size,
        )
