from __future__ import annotations

from datetime import timedelta
from typing import Callable, Optional

from ..common.datetime_utils import format_worked_duration
from ..common.validators import require_non_empty
from ..core.enums import ClockState
from ..core.exceptions import PersistenceError, StaleStateError, StateTransitionError
from ..core.logging import get_logger
from ..location.capture import LocationCapture
from ..users.model import AuthSession
from .model import AttendanceRecord, CurrentRecord, NoRecord, OpenRecord, ReportPendingRecord
from .repository import AttendanceRepository

logger = get_logger(__name__)

RecordListener = Callable[[CurrentRecord], None]


class AttendanceStateMachine:
    """Clock-in / clock-out / report lifecycle of the session user.

    The machine is a read-through cache over the store: ``activate()`` resolves
    the state from stored records, so a reload or a second device resumes
    where the user left off.

    Note: ``clock_in`` checks for an open record and then writes. The two steps
    are not atomic; two devices clocking in at the same moment can both
    succeed.
    """

    def __init__(self, session: AuthSession, attendance: AttendanceRepository, location: LocationCapture):
        self._session = session
        self._attendance = attendance
        self._location = location
        self._current: CurrentRecord = NoRecord()
        self._last_closed: Optional[AttendanceRecord] = None
        self._listeners: list[RecordListener] = []

    @property
    def session(self) -> AuthSession:
        return self._session

    @property
    def current(self) -> CurrentRecord:
        return self._current

    @property
    def state(self) -> ClockState:
        return self._current.state

    @property
    def last_closed(self) -> Optional[AttendanceRecord]:
        """The record closed by the latest successful ``submit_report``."""
        return self._last_closed

    @property
    def worked_duration(self) -> Optional[timedelta]:
        record = self._current.record
        return record.worked_duration if record else None

    @property
    def worked_duration_display(self) -> Optional[str]:
        duration = self.worked_duration
        return format_worked_duration(duration) if duration is not None else None

    def add_listener(self, listener: RecordListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: RecordListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def activate(self) -> CurrentRecord:
        """Resolve the initial state from the store. Raises PersistenceError."""
        current = await self._resolve()
        self._set(current)
        logger.info("Attendance for %s resolved to %s", self._session.user_id, current.state.value)
        return current

    async def refresh_status(self) -> CurrentRecord:
        """Passive status poll; a store failure degrades to clocked out."""
        try:
            current = await self._resolve()
        except PersistenceError as e:
            logger.warning("Clock status refresh failed for %s: %s", self._session.user_id, e)
            current = NoRecord()
        self._set(current)
        return current

    async def clock_in(self) -> AttendanceRecord:
        if isinstance(self._current, OpenRecord):
            raise StateTransitionError("Already clocked in")
        if isinstance(self._current, ReportPendingRecord):
            raise StateTransitionError("Submit the daily report of the previous shift first")

        existing = await self._attendance.find_open_for_user(self._session.user_id)
        if existing:
            self._set(OpenRecord(existing))
            raise StateTransitionError("An open time entry already exists")

        point = await self._location.capture()
        record = await self._attendance.create_clock_in(user_id=self._session.user_id, location_in=point)

        self._set(OpenRecord(record))
        logger.info("User %s clocked in (entry %s)", self._session.user_id, record.entry_id)
        return record

    async def clock_out(self) -> AttendanceRecord:
        current = self._current
        if not isinstance(current, OpenRecord):
            raise StateTransitionError("Not clocked in")

        point = await self._location.capture()

        latest = await self._attendance.get(current.record.entry_id)
        if latest is None or latest.clock_out_time is not None:
            await self.refresh_status()
            raise StaleStateError("This time entry was already closed elsewhere")

        record = await self._attendance.update_clock_out(entry_id=current.record.entry_id, location_out=point)

        self._set(ReportPendingRecord(record))
        logger.info(
            "User %s clocked out (entry %s, worked %s)",
            self._session.user_id,
            record.entry_id,
            self.worked_duration_display,
        )
        return record

    async def submit_report(self, text: str) -> AttendanceRecord:
        current = self._current
        if not isinstance(current, ReportPendingRecord):
            raise StateTransitionError("No shift is waiting for a daily report")
        # validated on the trimmed text, stored as typed
        require_non_empty(text, "Daily report")

        latest = await self._attendance.get(current.record.entry_id)
        if latest is None or latest.daily_report is not None:
            await self.refresh_status()
            raise StaleStateError("The daily report was already submitted elsewhere")

        record = await self._attendance.update_report(entry_id=current.record.entry_id, daily_report=text)

        self._last_closed = record
        self._set(NoRecord())
        logger.info("User %s submitted the report for entry %s", self._session.user_id, record.entry_id)
        return record

    async def _resolve(self) -> CurrentRecord:
        user_id = self._session.user_id
        open_record = await self._attendance.find_open_for_user(user_id)
        if open_record:
            return OpenRecord(open_record)

        unreported = await self._attendance.find_unreported_for_user(user_id)
        if unreported and unreported.clock_out_time is not None:
            return ReportPendingRecord(unreported)
        return NoRecord()

    def _set(self, current: CurrentRecord) -> None:
        if current == self._current:
            return
        self._current = current
        for listener in list(self._listeners):
            listener(current)