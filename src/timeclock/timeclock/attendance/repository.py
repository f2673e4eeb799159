from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, GeoPoint


class AttendanceRepository(Protocol):
    async def get(self, entry_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    async def find_open_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        """Newest record of the user whose clock-out is still null."""

        raise NotImplementedError

    async def find_unreported_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        """Newest record of the user whose daily report is still null."""

        raise NotImplementedError

    async def create_clock_in(self, *, user_id: str, location_in: Optional[GeoPoint]) -> AttendanceRecord:
        raise NotImplementedError

    async def update_clock_out(self, *, entry_id: str, location_out: Optional[GeoPoint]) -> AttendanceRecord:
        raise NotImplementedError

    async def update_report(self, *, entry_id: str, daily_report: str) -> AttendanceRecord:
        raise NotImplementedError

    async def list_for_user_between(
        self,
        *,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> Sequence[AttendanceRecord]:
        """Records with clock-in in [start, end], newest clock-in first."""

        raise NotImplementedError
