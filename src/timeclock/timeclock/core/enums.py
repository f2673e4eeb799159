from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Session role used for notification scoping."""

    USER = "user"
    ADMIN = "admin"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ClockState(str, Enum):
    """Lifecycle state of the session user's attendance."""

    CLOCKED_OUT = "clocked_out"
    CLOCKED_IN = "clocked_in"
    REPORT_PENDING = "report_pending"


class Urgency(str, Enum):
    UNDER = "under"
    OVER = "over"
