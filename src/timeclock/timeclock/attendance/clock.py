from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Callable, Optional

from ..common.datetime_utils import format_elapsed, now_local, seconds_between
from ..core.constants import OVERTIME_THRESHOLD_SECONDS, RESYNC_INTERVAL_SECONDS, TICK_INTERVAL_SECONDS
from ..core.enums import Urgency
from ..core.logging import get_logger
from .model import AttendanceRecord, CurrentRecord, OpenRecord
from .service import AttendanceStateMachine

logger = get_logger(__name__)

ClockListener = Callable[["ElapsedTimeClock"], None]


def classify_elapsed(seconds: int) -> Urgency:
    return Urgency.OVER if seconds >= OVERTIME_THRESHOLD_SECONDS else Urgency.UNDER


class ElapsedTimeClock:
    """Working-time display for the open record.

    Two independent timers:
      - resync: every ``resync_interval`` seconds re-polls the clock status and
        recomputes the base from ``now - clock_in`` (absorbs drift, sleep and
        missed ticks);
      - cosmetic: every ``tick_interval`` seconds adds one to a local counter so
        the display moves between resyncs.

    Timers only run while the state machine holds an open record. ``start()``
    must be called from inside the running event loop.
    """

    def __init__(
        self,
        machine: AttendanceStateMachine,
        *,
        clock: Callable[[], datetime] = now_local,
        resync_interval: float = RESYNC_INTERVAL_SECONDS,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ):
        self._machine = machine
        self._clock = clock
        self._resync_interval = float(resync_interval)
        self._tick_interval = float(tick_interval)

        self._record: Optional[AttendanceRecord] = None
        self._base = 0
        self._ticks = 0
        self._resync_task: Optional[asyncio.Task] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._listeners: list[ClockListener] = []
        self._started = False

    @property
    def elapsed_seconds(self) -> int:
        return self._base + self._ticks

    @property
    def display(self) -> str:
        return format_elapsed(self.elapsed_seconds)

    @property
    def urgency(self) -> Urgency:
        return classify_elapsed(self.elapsed_seconds)

    @property
    def running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def add_listener(self, listener: ClockListener) -> None:
        self._listeners.append(listener)

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._machine.add_listener(self._on_record_changed)
        self._on_record_changed(self._machine.current)

    async def resync(self) -> int:
        """Authoritative recomputation; also the body of the resync timer."""
        await self._machine.refresh_status()
        self._recompute()
        self._notify()
        return self.elapsed_seconds

    def tick(self) -> None:
        if self._record is None:
            return
        self._ticks += 1
        self._notify()

    def close(self) -> None:
        """Cancel both timers and stop following the state machine."""
        self._machine.remove_listener(self._on_record_changed)
        self._started = False
        self._cancel_timers()

    async def aclose(self) -> None:
        tasks = [t for t in (self._resync_task, self._tick_task) if t is not None]
        self.close()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _on_record_changed(self, current: CurrentRecord) -> None:
        if isinstance(current, OpenRecord):
            self._record = current.record
            self._recompute()
            self._ensure_timers()
        else:
            self._record = None
            self._cancel_timers()
            self._recompute()
        self._notify()

    def _recompute(self) -> None:
        self._ticks = 0
        if self._record is None:
            self._base = 0
            return
        self._base = seconds_between(self._record.clock_in_time, self._clock())

    def _ensure_timers(self) -> None:
        if self._resync_task is None or self._resync_task.done():
            self._resync_task = asyncio.get_running_loop().create_task(self._resync_loop())
        if self._tick_task is None or self._tick_task.done():
            self._tick_task = asyncio.get_running_loop().create_task(self._tick_loop())

    def _cancel_timers(self) -> None:
        for task in (self._resync_task, self._tick_task):
            if task is not None and not task.done():
                task.cancel()
        self._resync_task = None
        self._tick_task = None

    async def _resync_loop(self) -> None:
        while True:
            await asyncio.sleep(self._resync_interval)
            try:
                await self.resync()
            except Exception:
                logger.exception("Elapsed time resync failed")

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self._tick_interval)
            self.tick()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
