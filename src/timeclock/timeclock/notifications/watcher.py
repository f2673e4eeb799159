from __future__ import annotations

from typing import Callable, Optional, Sequence

from ..core.enums import LeaveStatus
from ..core.logging import get_logger
from ..persistence.gateway import Subscription
from ..requests.model import LeaveRequest
from ..requests.repository import LeaveRequestRepository
from ..users.model import AuthSession

logger = get_logger(__name__)

CountListener = Callable[[int], None]

ADMIN_STATUSES = (LeaveStatus.PENDING,)
USER_STATUSES = (LeaveStatus.APPROVED, LeaveStatus.REJECTED)


class NotificationWatcher:
    """Live leave-request counter shown next to the bell.

    Admins see how many requests wait for a decision (all users); everybody
    else sees how many of their own requests were decided. The number is the
    size of the matching set on every push, not an unread counter.
    """

    def __init__(self, requests: LeaveRequestRepository):
        self._requests = requests
        self._session: Optional[AuthSession] = None
        self._subscription: Optional[Subscription] = None
        self._count = 0
        self._listeners: list[CountListener] = []

    @property
    def count(self) -> int:
        return self._count

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    @property
    def active(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def add_listener(self, listener: CountListener) -> None:
        self._listeners.append(listener)

    async def watch(self, session: AuthSession) -> int:
        """(Re)subscribe for ``session``; same identity keeps the current subscription."""
        if self.active and self._session == session:
            return self._count

        self.close()
        self._session = session
        if session.is_admin:
            statuses, user_id = ADMIN_STATUSES, None
        else:
            statuses, user_id = USER_STATUSES, session.user_id

        self._subscription = await self._requests.subscribe(
            statuses=statuses,
            user_id=user_id,
            callback=self._on_snapshot,
        )
        logger.info("Watching leave notifications for %s (%s)", session.user_id, session.role.value)
        return self._count

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        self._session = None
        self._set_count(0)

    def _on_snapshot(self, requests: Sequence[LeaveRequest]) -> None:
        self._set_count(len(requests))

    def _set_count(self, count: int) -> None:
        if count == self._count:
            return
        self._count = count
        for listener in list(self._listeners):
            listener(count)
