from __future__ import annotations

import asyncio

import pytest

from src.timeclock.timeclock.attendance.model import GeoPoint
from src.timeclock.timeclock.core.exceptions import CapabilityDenied, CapabilityUnavailable
from src.timeclock.timeclock.location.capture import (
    ClientReportedPositionProvider,
    LocationCapture,
    StaticPositionProvider,
)


class SlowProvider:
    async def get_current_position(self) -> GeoPoint:
        await asyncio.sleep(1)
        return GeoPoint(0.0, 0.0)


class CountingProvider:
    def __init__(self):
        self.calls = 0

    async def get_current_position(self) -> GeoPoint:
        self.calls += 1
        return GeoPoint(1.0 * self.calls, 2.0)


@pytest.mark.asyncio
async def test_static_provider():
    point = await LocationCapture(StaticPositionProvider(10.5, 106.7)).capture()
    assert point == GeoPoint(10.5, 106.7)


@pytest.mark.asyncio
async def test_client_reported_coordinates():
    point = await LocationCapture(ClientReportedPositionProvider({"lat": "21.03", "lng": 105.85})).capture()
    assert point.lat == pytest.approx(21.03)
    assert point.lng == pytest.approx(105.85)


@pytest.mark.asyncio
async def test_denied_permission():
    with pytest.raises(CapabilityDenied):
        await LocationCapture(ClientReportedPositionProvider({"geo_error": "denied"})).capture()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        None,
        {},
        {"lat": 1.0},
        {"lat": "north", "lng": 2.0},
        {"geo_error": "timeout"},
        {"lat": 95.0, "lng": 10.0},
    ],
)
async def test_unavailable_positions(payload):
    with pytest.raises(CapabilityUnavailable):
        await LocationCapture(ClientReportedPositionProvider(payload)).capture()


@pytest.mark.asyncio
async def test_timeout_is_unavailable():
    with pytest.raises(CapabilityUnavailable):
        await LocationCapture(SlowProvider(), timeout=0.01).capture()


@pytest.mark.asyncio
async def test_every_capture_queries_again():
    provider = CountingProvider()
    capture = LocationCapture(provider)

    first = await capture.capture()
    second = await capture.capture()

    assert provider.calls == 2
    assert first != second
