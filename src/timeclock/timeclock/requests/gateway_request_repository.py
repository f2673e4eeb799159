from __future__ import annotations

from typing import Optional, Sequence

from ..core.constants import LEAVE_REQUESTS
from ..core.enums import LeaveStatus
from ..persistence.filters import Eq, Filter, In
from ..persistence.gateway import PersistenceGateway, Subscription
from .model import LeaveRequest
from .repository import LeaveRequestRepository, LeaveSnapshotCallback


def _status_filter(statuses: Sequence[LeaveStatus]) -> Filter:
    values = tuple(LeaveStatus(s).value for s in statuses)
    if len(values) == 1:
        return Eq("status", values[0])
    return In("status", values)


class GatewayLeaveRequestRepository(LeaveRequestRepository):
    """Leave requests stored in the ``leaveRequests`` collection."""

    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway

    async def subscribe(
        self,
        *,
        statuses: Sequence[LeaveStatus],
        user_id: Optional[str],
        callback: LeaveSnapshotCallback,
    ) -> Subscription:
        filters: list[Filter] = [_status_filter(statuses)]
        if user_id is not None:
            filters.append(Eq("userId", user_id))

        def on_snapshot(docs):
            callback([LeaveRequest.from_document(d) for d in docs])

        return await self._gateway.subscribe(LEAVE_REQUESTS, filters, on_snapshot)
