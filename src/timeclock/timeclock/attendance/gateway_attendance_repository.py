from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.constants import TIME_ENTRIES
from ..core.logging import get_logger
from ..persistence.filters import Eq, IsNull, Range
from ..persistence.gateway import SERVER_TIMESTAMP, Document, PersistenceGateway
from .model import AttendanceRecord, GeoPoint
from .repository import AttendanceRepository

logger = get_logger(__name__)


def to_record(doc: Document) -> AttendanceRecord:
    return AttendanceRecord(
        entry_id=str(doc["id"]),
        user_id=str(doc["userId"]),
        clock_in_time=doc["clockInTime"],
        clock_out_time=doc.get("clockOutTime"),
        location_in=GeoPoint.from_value(doc.get("locationIn")),
        location_out=GeoPoint.from_value(doc.get("locationOut")),
        daily_report=doc.get("dailyReport"),
    )


class GatewayAttendanceRepository(AttendanceRepository):
    """Attendance records stored in the ``timeEntries`` collection."""

    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway

    async def get(self, entry_id: str) -> Optional[AttendanceRecord]:
        doc = await self._gateway.get(TIME_ENTRIES, entry_id)
        return to_record(doc) if doc else None

    async def find_open_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        docs = await self._gateway.query(
            TIME_ENTRIES,
            [Eq("userId", user_id), IsNull("clockOutTime")],
            order_by="clockInTime",
            descending=True,
        )
        if len(docs) > 1:
            logger.warning("User %s has %d open time entries; using the newest", user_id, len(docs))
        return to_record(docs[0]) if docs else None

    async def find_unreported_for_user(self, user_id: str) -> Optional[AttendanceRecord]:
        docs = await self._gateway.query(
            TIME_ENTRIES,
            [Eq("userId", user_id), IsNull("dailyReport")],
            order_by="clockInTime",
            descending=True,
            limit=1,
        )
        return to_record(docs[0]) if docs else None

    async def create_clock_in(self, *, user_id: str, location_in: Optional[GeoPoint]) -> AttendanceRecord:
        doc = await self._gateway.insert(
            TIME_ENTRIES,
            {
                "userId": user_id,
                "clockInTime": SERVER_TIMESTAMP,
                "clockOutTime": None,
                "locationIn": location_in.to_dict() if location_in else None,
                "locationOut": None,
                "dailyReport": None,
            },
        )
        return to_record(doc)

    async def update_clock_out(self, *, entry_id: str, location_out: Optional[GeoPoint]) -> AttendanceRecord:
        doc = await self._gateway.update(
            TIME_ENTRIES,
            entry_id,
            {
                "clockOutTime": SERVER_TIMESTAMP,
                "locationOut": location_out.to_dict() if location_out else None,
            },
        )
        return to_record(doc)

    async def update_report(self, *, entry_id: str, daily_report: str) -> AttendanceRecord:
        doc = await self._gateway.update(TIME_ENTRIES, entry_id, {"dailyReport": daily_report})
        return to_record(doc)

    async def list_for_user_between(
        self,
        *,
        user_id: str,
        start: datetime,
        end: datetime,
    ) -> Sequence[AttendanceRecord]:
        docs = await self._gateway.query(
            TIME_ENTRIES,
            [Eq("userId", user_id), Range("clockInTime", gte=start, lte=end)],
            order_by="clockInTime",
            descending=True,
        )
        return [to_record(d) for d in docs]
