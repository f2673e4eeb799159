from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .attendance.clock import ElapsedTimeClock
from .attendance.service import AttendanceStateMachine
from .core.logging import get_logger
from .notifications.watcher import NotificationWatcher
from .users.model import AuthSession

logger = get_logger(__name__)


@dataclass
class AttendanceContext:
    """Everything that lives as long as one signed-in session.

    Owns the elapsed-time timers and the notification subscription; both are
    torn down on sign-out or when the identity changes.
    """

    session: AuthSession
    machine: AttendanceStateMachine
    clock: ElapsedTimeClock
    watcher: NotificationWatcher
    _started: bool = False

    async def start(self) -> None:
        if self._started:
            return
        await self.machine.activate()
        self.clock.start()
        try:
            await self.watcher.watch(self.session)
        except Exception:
            await self.clock.aclose()
            raise
        self._started = True

    async def sign_out(self) -> None:
        await self.clock.aclose()
        self.watcher.close()
        self._started = False
        logger.info("Session of %s closed", self.session.user_id)


ContextFactory = Callable[[AuthSession], AttendanceContext]


class SessionManager:
    """Keeps at most one live AttendanceContext and swaps it on identity change."""

    def __init__(self, factory: ContextFactory):
        self._factory = factory
        self._context: Optional[AttendanceContext] = None

    @property
    def context(self) -> Optional[AttendanceContext]:
        return self._context

    async def switch_session(self, session: Optional[AuthSession]) -> Optional[AttendanceContext]:
        if self._context is not None and self._context.session == session:
            return self._context

        if self._context is not None:
            await self._context.sign_out()
            self._context = None

        if session is None:
            return None

        context = self._factory(session)
        await context.start()
        self._context = context
        return context

    async def sign_out(self) -> None:
        await self.switch_session(None)
