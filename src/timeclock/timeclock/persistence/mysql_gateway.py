from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import LEAVE_REQUESTS, TIME_ENTRIES
from ..core.exceptions import PersistenceError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .channel import ChangeChannel
from .filters import Eq, Filter, In, IsNull, Range
from .gateway import SERVER_TIMESTAMP, Document, PersistenceGateway, SnapshotCallback, Subscription


@dataclass(frozen=True)
class TableSpec:
    """Maps a document collection onto a table.

    ``geo_fields`` are stored as two DOUBLE columns ``<column>_lat`` and
    ``<column>_lng`` and surface as ``{"lat": .., "lng": ..}`` (or None).
    """

    table: str
    id_column: str
    columns: dict[str, str]
    geo_fields: frozenset = field(default_factory=frozenset)

    def column(self, name: str) -> str:
        if name == "id":
            return self.id_column
        try:
            return self.columns[name]
        except KeyError:
            raise PersistenceError(f"Unknown field {name!r} for {self.table}")

    def select_list(self) -> str:
        cols = [f"{self.id_column} AS id"]
        for name, col in self.columns.items():
            if name in self.geo_fields:
                cols.extend([f"{col}_lat", f"{col}_lng"])
            else:
                cols.append(col)
        return ", ".join(cols)

    def to_row(self, data: Document) -> dict[str, Any]:
        row: dict[str, Any] = {}
        for name, value in data.items():
            if name == "id":
                continue
            col = self.column(name)
            if name in self.geo_fields:
                row[f"{col}_lat"] = value["lat"] if value else None
                row[f"{col}_lng"] = value["lng"] if value else None
            else:
                row[col] = getattr(value, "value", value)
        return row

    def to_document(self, row: dict[str, Any]) -> Document:
        doc: Document = {"id": str(row["id"])}
        for name, col in self.columns.items():
            if name in self.geo_fields:
                lat, lng = row.get(f"{col}_lat"), row.get(f"{col}_lng")
                doc[name] = {"lat": float(lat), "lng": float(lng)} if lat is not None and lng is not None else None
            else:
                doc[name] = row.get(col)
        return doc


DEFAULT_TABLES: dict[str, TableSpec] = {
    TIME_ENTRIES: TableSpec(
        table="time_entries",
        id_column="entry_id",
        columns={
            "userId": "user_id",
            "clockInTime": "clock_in_time",
            "clockOutTime": "clock_out_time",
            "locationIn": "location_in",
            "locationOut": "location_out",
            "dailyReport": "daily_report",
        },
        geo_fields=frozenset({"locationIn", "locationOut"}),
    ),
    LEAVE_REQUESTS: TableSpec(
        table="leave_requests",
        id_column="request_id",
        columns={
            "userId": "user_id",
            "startDate": "start_date",
            "endDate": "end_date",
            "leaveType": "leave_type",
            "reason": "reason",
            "status": "status",
            "createdAt": "created_at",
        },
    ),
}


def _row_id(doc_id: str) -> int:
    try:
        return int(doc_id)
    except (TypeError, ValueError):
        raise PersistenceError(f"Invalid document id: {doc_id!r}")


def build_where(spec: TableSpec, filters: Sequence[Filter]) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []

    for f in filters:
        col = spec.column(f.field)
        if f.field in spec.geo_fields:
            col = f"{col}_lat"

        if isinstance(f, IsNull) or (isinstance(f, Eq) and f.value is None):
            clauses.append(f"{col} IS NULL")
        elif isinstance(f, Eq):
            clauses.append(f"{col}=%s")
            params.append(getattr(f.value, "value", f.value))
        elif isinstance(f, In):
            if not f.values:
                clauses.append("1=0")
                continue
            clauses.append(f"{col} IN ({', '.join(['%s'] * len(f.values))})")
            params.extend(getattr(v, "value", v) for v in f.values)
        elif isinstance(f, Range):
            if f.gte is not None:
                clauses.append(f"{col}>=%s")
                params.append(f.gte)
            if f.lte is not None:
                clauses.append(f"{col}<=%s")
                params.append(f.lte)
        else:
            raise PersistenceError(f"Unsupported filter: {f!r}")

    where = " AND ".join(clauses) if clauses else "1=1"
    return where, params


class MySQLGateway(PersistenceGateway):
    """Gateway over MySQL via mysql-connector.

    Blocking driver calls run in worker threads. Live subscriptions are fed
    by this process's own writes only; writers in other processes are not
    observed.
    """

    def __init__(
        self,
        conn_factory: DatabaseConnection,
        *,
        tables: Optional[dict[str, TableSpec]] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._conn_factory = conn_factory
        self._tables = dict(tables or DEFAULT_TABLES)
        self._clock = clock
        self._channel = ChangeChannel(self._fetch)

    @property
    def connection(self) -> DatabaseConnection:
        return self._conn_factory

    def _spec(self, collection: str) -> TableSpec:
        try:
            return self._tables[collection]
        except KeyError:
            raise PersistenceError(f"Unknown collection: {collection}")

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        spec = self._spec(collection)
        return await asyncio.to_thread(self._get_sync, spec, doc_id)

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        spec = self._spec(collection)
        return await asyncio.to_thread(self._query_sync, spec, tuple(filters), order_by, descending, limit)

    async def insert(self, collection: str, data: Document) -> Document:
        spec = self._spec(collection)
        doc = await asyncio.to_thread(self._insert_sync, spec, self._resolve(data))
        await self._channel.publish(collection, before=None, after=doc)
        return doc

    async def update(self, collection: str, doc_id: str, changes: Document) -> Document:
        spec = self._spec(collection)
        before, after = await asyncio.to_thread(self._update_sync, spec, doc_id, self._resolve(changes))
        await self._channel.publish(collection, before=before, after=after)
        return after

    async def delete(self, collection: str, doc_id: str) -> bool:
        spec = self._spec(collection)
        before = await asyncio.to_thread(self._delete_sync, spec, doc_id)
        if before is None:
            return False
        await self._channel.publish(collection, before=before, after=None)
        return True

    async def subscribe(self, collection: str, filters: Sequence[Filter], callback: SnapshotCallback) -> Subscription:
        self._spec(collection)
        return await self._channel.subscribe(collection, filters, callback)

    async def _fetch(self, collection: str, filters: Sequence[Filter]) -> list[Document]:
        return await self.query(collection, filters)

    def _resolve(self, data: Document) -> Document:
        now = self._clock()
        return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in data.items()}

    # Blocking parts (run in worker threads)

    def _select_by_id(self, cur, spec: TableSpec, doc_id: str) -> Optional[Document]:
        cur.execute(
            f"SELECT {spec.select_list()} FROM {spec.table} WHERE {spec.id_column}=%s",
            (_row_id(doc_id),),
        )
        row = fetchone(cur)
        return spec.to_document(row) if row else None

    def _get_sync(self, spec: TableSpec, doc_id: str) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._select_by_id(cur, spec, doc_id)

    def _query_sync(
        self,
        spec: TableSpec,
        filters: tuple,
        order_by: Optional[str],
        descending: bool,
        limit: Optional[int],
    ) -> list[Document]:
        where, params = build_where(spec, filters)
        sql = f"SELECT {spec.select_list()} FROM {spec.table} WHERE {where}"
        if order_by:
            sql += f" ORDER BY {spec.column(order_by)} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [spec.to_document(r) for r in fetchall(cur)]

    def _insert_sync(self, spec: TableSpec, data: Document) -> Document:
        row = spec.to_row(data)
        cols = ", ".join(row.keys())
        placeholders = ", ".join(["%s"] * len(row))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"INSERT INTO {spec.table}({cols}) VALUES({placeholders})", tuple(row.values()))
            doc = self._select_by_id(cur, spec, str(cur.lastrowid))
        if doc is None:
            raise PersistenceError(f"Inserted row vanished from {spec.table}")
        return doc

    def _update_sync(self, spec: TableSpec, doc_id: str, changes: Document) -> tuple[Document, Document]:
        row = spec.to_row(changes)
        assignments = ", ".join(f"{col}=%s" for col in row)
        with db_cursor(self._conn_factory) as (_, cur):
            before = self._select_by_id(cur, spec, doc_id)
            if before is None:
                raise PersistenceError(f"{spec.table}/{doc_id} does not exist")
            if row:
                cur.execute(
                    f"UPDATE {spec.table} SET {assignments} WHERE {spec.id_column}=%s",
                    (*row.values(), _row_id(doc_id)),
                )
            after = self._select_by_id(cur, spec, doc_id)
        return before, after

    def _delete_sync(self, spec: TableSpec, doc_id: str) -> Optional[Document]:
        with db_cursor(self._conn_factory) as (_, cur):
            before = self._select_by_id(cur, spec, doc_id)
            if before is not None:
                cur.execute(f"DELETE FROM {spec.table} WHERE {spec.id_column}=%s", (_row_id(doc_id),))
        return before
