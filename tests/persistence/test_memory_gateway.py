from __future__ import annotations

from datetime import datetime

import pytest

from src.timeclock.timeclock.core.exceptions import PersistenceError
from src.timeclock.timeclock.persistence.filters import Eq, In, IsNull, Range
from src.timeclock.timeclock.persistence.gateway import SERVER_TIMESTAMP


@pytest.mark.asyncio
async def test_insert_resolves_server_timestamp(gateway, fixed_now):
    doc = await gateway.insert("things", {"name": "a", "at": SERVER_TIMESTAMP})
    assert doc["id"] == "1"
    assert doc["at"] == fixed_now


@pytest.mark.asyncio
async def test_documents_are_copied(gateway):
    payload = {"tags": ["x"]}
    doc = await gateway.insert("things", payload)
    payload["tags"].append("y")
    doc["tags"].append("z")

    stored = await gateway.get("things", doc["id"])
    assert stored["tags"] == ["x"]


@pytest.mark.asyncio
async def test_query_filters_order_and_limit(gateway):
    await gateway.insert("things", {"kind": "a", "n": 3, "gone": None})
    await gateway.insert("things", {"kind": "b", "n": 1})
    await gateway.insert("things", {"kind": "a", "n": 2, "gone": 5})
    await gateway.insert("things", {"kind": "c", "n": None})

    a = await gateway.query("things", [Eq("kind", "a")], order_by="n")
    ab = await gateway.query("things", [In("kind", ("a", "b"))], order_by="n", descending=True, limit=2)
    unset = await gateway.query("things", [IsNull("gone")])
    ranged = await gateway.query("things", [Range("n", gte=2, lte=3)])

    assert [d["n"] for d in a] == [2, 3]
    assert [d["n"] for d in ab] == [3, 2]
    # missing and explicit null both count as null
    assert {d["kind"] for d in unset} == {"a", "b", "c"}
    assert sorted(d["n"] for d in ranged) == [2, 3]


@pytest.mark.asyncio
async def test_update_and_delete(gateway):
    doc = await gateway.insert("things", {"n": 1})

    updated = await gateway.update("things", doc["id"], {"n": 2})
    assert updated == {"id": doc["id"], "n": 2}

    assert await gateway.delete("things", doc["id"]) is True
    assert await gateway.delete("things", doc["id"]) is False
    assert await gateway.get("things", doc["id"]) is None


@pytest.mark.asyncio
async def test_update_missing_document(gateway):
    with pytest.raises(PersistenceError):
        await gateway.update("things", "404", {"n": 1})


@pytest.mark.asyncio
async def test_subscription_gets_snapshots_of_matching_set(gateway):
    snapshots = []

    first = await gateway.insert("things", {"kind": "a"})
    sub = await gateway.subscribe("things", [Eq("kind", "a")], lambda docs: snapshots.append(len(docs)))
    await gateway.insert("things", {"kind": "a"})
    await gateway.insert("things", {"kind": "b"})
    # a document leaving the set triggers a push too
    await gateway.update("things", first["id"], {"kind": "b"})
    sub.unsubscribe()
    await gateway.insert("things", {"kind": "a"})

    assert snapshots == [1, 2, 1]
    assert gateway.channel.active_count("things") == 0


@pytest.mark.asyncio
async def test_broken_listener_does_not_fail_writes(gateway):
    def explode(docs):
        raise RuntimeError("listener bug")

    await gateway.subscribe("things", [], explode)
    doc = await gateway.insert("things", {"at": datetime(2024, 1, 1)})

    assert doc["id"] == "1"
