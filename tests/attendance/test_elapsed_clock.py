from __future__ import annotations

import asyncio

import pytest

from src.timeclock.timeclock.attendance.clock import ElapsedTimeClock, classify_elapsed
from src.timeclock.timeclock.common.datetime_utils import format_elapsed
from src.timeclock.timeclock.core.enums import Urgency


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "00:00:00"),
        (59, "00:00:59"),
        (3661, "01:01:01"),
        (90000, "25:00:00"),
        (-5, "00:00:00"),
    ],
)
def test_format_elapsed(seconds, expected):
    assert format_elapsed(seconds) == expected


def test_overtime_threshold_is_eight_hours():
    assert classify_elapsed(8 * 3600 - 1) == Urgency.UNDER
    assert classify_elapsed(8 * 3600) == Urgency.OVER


@pytest.mark.asyncio
async def test_clock_follows_open_record(container, clock, user_session, office):
    machine = container.state_machine(user_session, office)
    await machine.clock_in()
    clock.advance(seconds=3661)

    timer = ElapsedTimeClock(machine, clock=clock, resync_interval=60, tick_interval=60)
    timer.start()
    assert timer.running
    assert timer.elapsed_seconds == 3661
    assert timer.display == "01:01:01"

    timer.tick()
    timer.tick()
    assert timer.elapsed_seconds == 3663

    # resync drops the cosmetic ticks and recomputes from the wall clock
    assert await timer.resync() == 3661

    clock.advance(seconds=120)
    assert await timer.resync() == 3781

    await timer.aclose()
    assert not timer.running


@pytest.mark.asyncio
async def test_clock_idle_without_open_record(container, clock, user_session, office):
    machine = container.state_machine(user_session, office)
    await machine.activate()

    timer = ElapsedTimeClock(machine, clock=clock)
    timer.start()
    timer.tick()

    assert not timer.running
    assert timer.elapsed_seconds == 0
    assert timer.display == "00:00:00"
    await timer.aclose()


@pytest.mark.asyncio
async def test_clock_out_cancels_timers(container, clock, user_session, office):
    machine = container.state_machine(user_session, office)
    await machine.activate()
    timer = ElapsedTimeClock(machine, clock=clock, resync_interval=60, tick_interval=60)
    timer.start()
    assert not timer.running

    await machine.clock_in()
    assert timer.running

    clock.advance(hours=1)
    await machine.clock_out()
    assert not timer.running
    assert timer.elapsed_seconds == 0
    await timer.aclose()


@pytest.mark.asyncio
async def test_tick_timer_advances_display(container, clock, user_session, office):
    machine = container.state_machine(user_session, office)
    await machine.clock_in()
    updates = []

    timer = ElapsedTimeClock(machine, clock=clock, resync_interval=60, tick_interval=0.01)
    timer.add_listener(lambda t: updates.append(t.elapsed_seconds))
    timer.start()
    await asyncio.sleep(0.1)
    await timer.aclose()

    assert max(updates) >= 1
    assert not timer.running


@pytest.mark.asyncio
async def test_resync_timer_sees_clock_out_elsewhere(container, clock, user_session, office):
    machine = container.state_machine(user_session, office)
    other = container.state_machine(user_session, office)
    await machine.clock_in()
    await other.activate()

    timer = ElapsedTimeClock(machine, clock=clock, resync_interval=0.01, tick_interval=60)
    timer.start()

    await other.clock_out()
    await asyncio.sleep(0.1)

    assert not timer.running
    await timer.aclose()


@pytest.mark.asyncio
async def test_urgency_turns_over_after_eight_hours(container, clock, user_session, office):
    machine = container.state_machine(user_session, office)
    await machine.clock_in()
    clock.advance(hours=7, minutes=59, seconds=59)

    timer = ElapsedTimeClock(machine, clock=clock, resync_interval=60, tick_interval=60)
    timer.start()
    assert timer.urgency == Urgency.UNDER

    timer.tick()
    assert timer.urgency == Urgency.OVER
    await timer.aclose()
