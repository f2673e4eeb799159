from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Protocol

from ..attendance.model import GeoPoint
from ..core.exceptions import CapabilityDenied, CapabilityError, CapabilityUnavailable
from ..core.logging import get_logger

logger = get_logger(__name__)


class PositionProvider(Protocol):
    async def get_current_position(self) -> GeoPoint:
        """Return the device position or raise a CapabilityError."""

        raise NotImplementedError


class StaticPositionProvider:
    """Fixed coordinates, e.g. a wall-mounted kiosk at the office entrance."""

    def __init__(self, lat: float, lng: float):
        self._point = GeoPoint(lat=float(lat), lng=float(lng))

    async def get_current_position(self) -> GeoPoint:
        return self._point


class ClientReportedPositionProvider:
    """Position reported by the browser along with the HTTP request.

    Accepts ``{"lat": .., "lng": ..}`` or ``{"geo_error": "denied"|"unavailable"}``.
    """

    def __init__(self, payload: Optional[Mapping[str, Any]]):
        self._payload = dict(payload or {})

    async def get_current_position(self) -> GeoPoint:
        error = str(self._payload.get("geo_error") or "").strip().lower()
        if error == "denied":
            raise CapabilityDenied("Location permission denied")
        if error:
            raise CapabilityUnavailable(f"Location unavailable ({error})")

        lat, lng = self._payload.get("lat"), self._payload.get("lng")
        if lat is None or lng is None:
            raise CapabilityUnavailable("No location reported by the client")
        try:
            return GeoPoint(lat=float(lat), lng=float(lng))
        except (TypeError, ValueError):
            raise CapabilityUnavailable("Malformed location reported by the client")


class LocationCapture:
    """Single-shot position query.

    Every call asks the provider again; nothing is cached and nothing is retried.
    """

    def __init__(self, provider: PositionProvider, *, timeout: Optional[float] = None):
        self._provider = provider
        self._timeout = timeout

    async def capture(self) -> GeoPoint:
        try:
            if self._timeout:
                point = await asyncio.wait_for(self._provider.get_current_position(), self._timeout)
            else:
                point = await self._provider.get_current_position()
        except asyncio.TimeoutError:
            logger.info("Position query timed out after %ss", self._timeout)
            raise CapabilityUnavailable("Timed out waiting for location")
        except CapabilityError as e:
            logger.info("Position query failed: %s", e)
            raise

        if not point.is_valid():
            raise CapabilityUnavailable(f"Invalid coordinates: {point.lat}, {point.lng}")
        return point
