from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Union

from ..core.enums import ClockState


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def is_valid(self) -> bool:
        return -90.0 <= self.lat <= 90.0 and -180.0 <= self.lng <= 180.0

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_value(cls, value: Optional[Mapping[str, Any]]) -> Optional["GeoPoint"]:
        if not value:
            return None
        return cls(lat=float(value["lat"]), lng=float(value["lng"]))


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one shift, from clock-in to (optional) clock-out and report."""

    entry_id: str
    user_id: str
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None
    location_in: Optional[GeoPoint] = None
    location_out: Optional[GeoPoint] = None
    daily_report: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.clock_out_time is None

    @property
    def worked_duration(self) -> Optional[timedelta]:
        if self.clock_out_time is None:
            return None
        return self.clock_out_time - self.clock_in_time


@dataclass(frozen=True)
class NoRecord:
    state = ClockState.CLOCKED_OUT
    record = None


@dataclass(frozen=True)
class OpenRecord:
    record: AttendanceRecord
    state = ClockState.CLOCKED_IN


@dataclass(frozen=True)
class ReportPendingRecord:
    record: AttendanceRecord
    state = ClockState.REPORT_PENDING


CurrentRecord = Union[NoRecord, OpenRecord, ReportPendingRecord]

