from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from src.timeclock.timeclock.container import build_container
from src.timeclock.timeclock.core.constants import LEAVE_REQUESTS, TIME_ENTRIES
from src.timeclock.timeclock.core.enums import LeaveStatus, Role
from src.timeclock.timeclock.location.capture import StaticPositionProvider
from src.timeclock.timeclock.persistence.gateway import SERVER_TIMESTAMP
from src.timeclock.timeclock.persistence.memory_gateway import InMemoryGateway
from src.timeclock.timeclock.users.model import AuthSession


class FakeClock:
    """Settable wall clock shared by the gateway and the elapsed-time clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class TimeEntrySeeder:
    def __init__(self, gateway: InMemoryGateway):
        self._gateway = gateway

    async def add(
        self,
        user_id: str,
        clock_in: datetime,
        clock_out: Optional[datetime] = None,
        report: Optional[str] = None,
    ) -> dict:
        return await self._gateway.insert(
            TIME_ENTRIES,
            {
                "userId": user_id,
                "clockInTime": clock_in,
                "clockOutTime": clock_out,
                "locationIn": None,
                "locationOut": None,
                "dailyReport": report,
            },
        )

    async def add_days(self, user_id: str, year: int, month: int, days) -> None:
        for day in days:
            start = datetime(year, month, day, 9, 0, 0)
            await self.add(user_id, start, start + timedelta(hours=8), f"day {day}")


class LeaveSeeder:
    """Writes leave requests the way the leave-request screens do."""

    def __init__(self, gateway: InMemoryGateway):
        self._gateway = gateway

    async def add(self, user_id: str, day: date, status: LeaveStatus = LeaveStatus.PENDING) -> str:
        doc = await self._gateway.insert(
            LEAVE_REQUESTS,
            {
                "userId": user_id,
                "startDate": day,
                "endDate": day,
                "leaveType": "annual",
                "reason": "",
                "status": status.value,
                "createdAt": SERVER_TIMESTAMP,
            },
        )
        return doc["id"]

    async def decide(self, request_id: str, status: LeaveStatus) -> None:
        await self._gateway.update(LEAVE_REQUESTS, request_id, {"status": status.value})


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 1, 15, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def gateway(clock) -> InMemoryGateway:
    return InMemoryGateway(clock=clock)


@pytest.fixture
def entries(gateway) -> TimeEntrySeeder:
    return TimeEntrySeeder(gateway)


@pytest.fixture
def leaves(gateway) -> LeaveSeeder:
    return LeaveSeeder(gateway)


@pytest.fixture
def container(gateway):
    return build_container(gateway=gateway, resync_interval=60, tick_interval=1)


@pytest.fixture
def user_session() -> AuthSession:
    return AuthSession(user_id="u1", role=Role.USER)


@pytest.fixture
def admin_session() -> AuthSession:
    return AuthSession(user_id="admin", role=Role.ADMIN)


@pytest.fixture
def office() -> StaticPositionProvider:
    return StaticPositionProvider(10.7769, 106.7009)
