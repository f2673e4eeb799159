from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus
from ..persistence.gateway import Subscription
from .model import LeaveRequest

LeaveSnapshotCallback = Callable[[Sequence[LeaveRequest]], None]


class LeaveRequestRepository(Protocol):
    """Read-only view of leave requests; submitting and deciding them happens elsewhere."""

    async def subscribe(
        self,
        *,
        statuses: Sequence[LeaveStatus],
        user_id: Optional[str],
        callback: LeaveSnapshotCallback,
    ) -> Subscription:
        """Live matching set of requests in ``statuses`` (optionally of one user)."""

        raise NotImplementedError
