from __future__ import annotations

from datetime import datetime

import pytest

from src.timeclock.timeclock.container import build_gateway
from src.timeclock.timeclock.core.constants import LEAVE_REQUESTS, TIME_ENTRIES
from src.timeclock.timeclock.core.enums import LeaveStatus
from src.timeclock.timeclock.core.exceptions import PersistenceError
from src.timeclock.timeclock.persistence.filters import Eq, In, IsNull, Range
from src.timeclock.timeclock.persistence.mysql_gateway import DEFAULT_TABLES, MySQLGateway, build_where

ENTRIES = DEFAULT_TABLES[TIME_ENTRIES]
LEAVES = DEFAULT_TABLES[LEAVE_REQUESTS]


class FakeCursor:
    def __init__(self, rows):
        self._rows = rows
        self.executed = []

    def execute(self, sql, params=()):
        self.executed.append((sql, params))

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self, rows):
        self.cursor = FakeCursor(rows)

    def connect(self, *, with_database=True):
        return FakeConnection(self.cursor)


def test_where_for_open_entry_lookup():
    where, params = build_where(ENTRIES, [Eq("userId", "u1"), IsNull("clockOutTime")])
    assert where == "user_id=%s AND clock_out_time IS NULL"
    assert params == ["u1"]


def test_where_for_month_range():
    start, end = datetime(2024, 1, 1), datetime(2024, 1, 31, 23, 59, 59)
    where, params = build_where(ENTRIES, [Range("clockInTime", gte=start, lte=end)])
    assert where == "clock_in_time>=%s AND clock_in_time<=%s"
    assert params == [start, end]


def test_where_for_status_sets():
    where, params = build_where(LEAVES, [In("status", (LeaveStatus.APPROVED, LeaveStatus.REJECTED))])
    assert where == "status IN (%s, %s)"
    assert params == ["approved", "rejected"]

    assert build_where(LEAVES, [In("status", ())]) == ("1=0", [])
    assert build_where(LEAVES, []) == ("1=1", [])


def test_unknown_field_is_rejected():
    with pytest.raises(PersistenceError):
        build_where(ENTRIES, [Eq("colour", "red")])


def test_geo_fields_split_into_columns():
    row = ENTRIES.to_row({"userId": "u1", "locationIn": {"lat": 1.5, "lng": 2.5}, "locationOut": None})
    assert row == {
        "user_id": "u1",
        "location_in_lat": 1.5,
        "location_in_lng": 2.5,
        "location_out_lat": None,
        "location_out_lng": None,
    }

    doc = ENTRIES.to_document({"id": 7, "user_id": "u1", "location_in_lat": 1.5, "location_in_lng": 2.5})
    assert doc["id"] == "7"
    assert doc["locationIn"] == {"lat": 1.5, "lng": 2.5}
    assert doc["locationOut"] is None


@pytest.mark.asyncio
async def test_query_builds_ordered_limited_select():
    factory = FakeConnectionFactory([{"id": 3, "user_id": "u1", "clock_in_time": datetime(2024, 1, 2, 9, 0)}])
    gateway = MySQLGateway(factory)

    docs = await gateway.query(TIME_ENTRIES, [Eq("userId", "u1")], order_by="clockInTime", descending=True, limit=1)

    sql, params = factory.cursor.executed[-1]
    assert sql.endswith("FROM time_entries WHERE user_id=%s ORDER BY clock_in_time DESC LIMIT %s")
    assert params == ("u1", 1)
    assert docs[0]["id"] == "3"
    assert docs[0]["clockInTime"] == datetime(2024, 1, 2, 9, 0)


@pytest.mark.asyncio
async def test_invalid_id_is_a_persistence_error():
    gateway = MySQLGateway(FakeConnectionFactory([]))
    with pytest.raises(PersistenceError):
        await gateway.get(TIME_ENTRIES, "not-a-number")


@pytest.mark.asyncio
async def test_unknown_collection():
    gateway = MySQLGateway(FakeConnectionFactory([]))
    with pytest.raises(PersistenceError):
        await gateway.query("payroll", [])


def test_each_gateway_keeps_its_own_db_config():
    first = build_gateway(store_backend="mysql", db_config={"database": "first_db"})
    second = build_gateway(store_backend="mysql", db_config={"database": "second_db", "port": 3307})

    assert first.connection.config.database == "first_db"
    assert second.connection.config.database == "second_db"
    assert second.connection.config.port == 3307
