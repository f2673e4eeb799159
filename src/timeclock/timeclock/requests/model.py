from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..common.datetime_utils import parse_iso_date
from ..core.enums import LeaveStatus


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))


@dataclass(frozen=True)
class LeaveRequest:
    request_id: str
    user_id: str
    start_date: date
    end_date: date
    leave_type: str
    reason: str
    status: LeaveStatus
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: dict) -> "LeaveRequest":
        return cls(
            request_id=str(doc["id"]),
            user_id=str(doc["userId"]),
            start_date=_as_date(doc["startDate"]),
            end_date=_as_date(doc["endDate"]),
            leave_type=str(doc.get("leaveType") or ""),
            reason=str(doc.get("reason") or ""),
            status=LeaveStatus(doc["status"]),
            created_at=doc.get("createdAt"),
        )
