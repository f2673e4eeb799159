from __future__ import annotations

from collections import defaultdict
from typing import Awaitable, Callable, Optional, Sequence

from ..core.logging import get_logger
from .filters import Filter, matches_all
from .gateway import Document, SnapshotCallback, Subscription

logger = get_logger(__name__)

Fetch = Callable[[str, Sequence[Filter]], Awaitable[list[Document]]]


class ChangeChannel:
    """In-process fan-out of change events to live subscriptions.

    The owning gateway publishes the before/after image of every write; each
    subscription whose filters match either image gets a fresh snapshot of its
    whole matching set.
    """

    def __init__(self, fetch: Fetch):
        self._fetch = fetch
        self._subs: dict[str, list[Subscription]] = defaultdict(list)

    async def subscribe(self, collection: str, filters: Sequence[Filter], callback: SnapshotCallback) -> Subscription:
        sub = Subscription(collection, filters, callback, on_close=self._remove)
        self._subs[collection].append(sub)
        try:
            await self._push(sub)
        except Exception:
            sub.unsubscribe()
            raise
        logger.debug("Subscribed to %s (%d active)", collection, len(self._subs[collection]))
        return sub

    async def publish(self, collection: str, *, before: Optional[Document], after: Optional[Document]) -> None:
        for sub in list(self._subs.get(collection, ())):
            if not sub.active:
                continue
            if not (matches_all(before, sub.filters) or matches_all(after, sub.filters)):
                continue
            try:
                await self._push(sub)
            except Exception:
                # The write already happened; the subscriber catches up on the next change.
                logger.exception("Could not refresh subscription on %s", collection)

    def active_count(self, collection: str) -> int:
        return sum(1 for s in self._subs.get(collection, ()) if s.active)

    def close(self) -> None:
        for subs in list(self._subs.values()):
            for sub in list(subs):
                sub.unsubscribe()

    async def _push(self, sub: Subscription) -> None:
        docs = await self._fetch(sub.collection, sub.filters)
        sub.deliver(docs)

    def _remove(self, sub: Subscription) -> None:
        subs = self._subs.get(sub.collection)
        if subs and sub in subs:
            subs.remove(sub)
