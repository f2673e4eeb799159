from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.clock import ElapsedTimeClock
from .attendance.gateway_attendance_repository import GatewayAttendanceRepository
from .attendance.service import AttendanceStateMachine
from .context import AttendanceContext
from .core.constants import RESYNC_INTERVAL_SECONDS, TICK_INTERVAL_SECONDS
from .core.logging import get_logger
from .database.connection import DatabaseConnection, DBConfig
from .location.capture import LocationCapture, PositionProvider
from .notifications.watcher import NotificationWatcher
from .persistence.gateway import PersistenceGateway
from .persistence.memory_gateway import InMemoryGateway
from .persistence.mysql_gateway import MySQLGateway
from .reports.service import ReportAggregator
from .requests.gateway_request_repository import GatewayLeaveRequestRepository
from .users.model import AuthSession

logger = get_logger(__name__)


@dataclass(frozen=True)
class Container:
    gateway: PersistenceGateway

    attendance_repo: GatewayAttendanceRepository
    requests_repo: GatewayLeaveRequestRepository

    resync_interval: float = RESYNC_INTERVAL_SECONDS
    tick_interval: float = TICK_INTERVAL_SECONDS
    location_timeout: Optional[float] = None

    def location_capture(self, provider: PositionProvider) -> LocationCapture:
        return LocationCapture(provider, timeout=self.location_timeout)

    def state_machine(self, session: AuthSession, provider: PositionProvider) -> AttendanceStateMachine:
        return AttendanceStateMachine(session, self.attendance_repo, self.location_capture(provider))

    def elapsed_clock(self, machine: AttendanceStateMachine) -> ElapsedTimeClock:
        return ElapsedTimeClock(
            machine,
            resync_interval=self.resync_interval,
            tick_interval=self.tick_interval,
        )

    def report_aggregator(self) -> ReportAggregator:
        return ReportAggregator(self.attendance_repo)

    def notification_watcher(self) -> NotificationWatcher:
        return NotificationWatcher(self.requests_repo)

    def attendance_context(self, session: AuthSession, provider: PositionProvider) -> AttendanceContext:
        machine = self.state_machine(session, provider)
        return AttendanceContext(
            session=session,
            machine=machine,
            clock=self.elapsed_clock(machine),
            watcher=self.notification_watcher(),
        )


def build_gateway(*, store_backend: str, db_config: Optional[dict] = None) -> PersistenceGateway:
    backend = (store_backend or "memory").lower()
    if backend == "memory":
        return InMemoryGateway()
    if backend == "mysql":
        if not db_config:
            raise ValueError("DB_CONFIG is required for the mysql store backend")
        conn = DatabaseConnection(DBConfig.from_mapping(db_config))
        return MySQLGateway(conn)
    raise ValueError(f"Unknown store backend: {store_backend!r}")


def build_container(
    *,
    store_backend: str = "memory",
    db_config: Optional[dict] = None,
    gateway: Optional[PersistenceGateway] = None,
    resync_interval: float = RESYNC_INTERVAL_SECONDS,
    tick_interval: float = TICK_INTERVAL_SECONDS,
    location_timeout: Optional[float] = None,
) -> Container:
    gateway = gateway or build_gateway(store_backend=store_backend, db_config=db_config)
    logger.info("Using %s store", type(gateway).__name__)

    return Container(
        gateway=gateway,
        attendance_repo=GatewayAttendanceRepository(gateway),
        requests_repo=GatewayLeaveRequestRepository(gateway),
        resync_interval=float(resync_interval),
        tick_interval=float(tick_interval),
        location_timeout=location_timeout,
    )
