from __future__ import annotations

import copy
import itertools
from collections import defaultdict
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.exceptions import PersistenceError
from .channel import ChangeChannel
from .filters import Filter, matches_all
from .gateway import SERVER_TIMESTAMP, Document, PersistenceGateway, SnapshotCallback, Subscription


class InMemoryGateway(PersistenceGateway):
    """Process-local document store.

    Used by tests and by the ``memory`` store backend (single process demo).
    Documents are deep-copied in and out so callers never share state with
    the store.
    """

    def __init__(self, *, clock: Callable[[], datetime] = now_local):
        self._clock = clock
        self._docs: dict[str, dict[str, Document]] = defaultdict(dict)
        self._ids = itertools.count(1)
        self._channel = ChangeChannel(self._fetch)

    @property
    def channel(self) -> ChangeChannel:
        return self._channel

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        doc = self._docs[collection].get(str(doc_id))
        return copy.deepcopy(doc) if doc else None

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        items = [d for d in self._docs[collection].values() if matches_all(d, filters)]
        if order_by:
            items.sort(key=lambda d: (d.get(order_by) is not None, d.get(order_by)), reverse=descending)
        if limit is not None:
            items = items[: int(limit)]
        return copy.deepcopy(items)

    async def insert(self, collection: str, data: Document) -> Document:
        doc_id = str(next(self._ids))
        doc = self._resolve(data)
        doc["id"] = doc_id
        self._docs[collection][doc_id] = doc
        await self._channel.publish(collection, before=None, after=doc)
        return copy.deepcopy(doc)

    async def update(self, collection: str, doc_id: str, changes: Document) -> Document:
        doc_id = str(doc_id)
        before = self._docs[collection].get(doc_id)
        if before is None:
            raise PersistenceError(f"{collection}/{doc_id} does not exist")
        after = {**before, **self._resolve(changes), "id": doc_id}
        self._docs[collection][doc_id] = after
        await self._channel.publish(collection, before=before, after=after)
        return copy.deepcopy(after)

    async def delete(self, collection: str, doc_id: str) -> bool:
        before = self._docs[collection].pop(str(doc_id), None)
        if before is None:
            return False
        await self._channel.publish(collection, before=before, after=None)
        return True

    async def subscribe(self, collection: str, filters: Sequence[Filter], callback: SnapshotCallback) -> Subscription:
        return await self._channel.subscribe(collection, filters, callback)

    async def _fetch(self, collection: str, filters: Sequence[Filter]) -> list[Document]:
        return await self.query(collection, filters)

    def _resolve(self, data: Document) -> Document:
        now = self._clock()
        return {k: (now if v is SERVER_TIMESTAMP else copy.deepcopy(v)) for k, v in data.items()}
