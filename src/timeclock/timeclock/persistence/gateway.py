from __future__ import annotations

from typing import Any, Callable, Optional, Protocol, Sequence

from ..core.logging import get_logger
from .filters import Filter

logger = get_logger(__name__)

Document = dict[str, Any]
SnapshotCallback = Callable[[list[Document]], None]


class _ServerTimestamp:
    """Placeholder replaced by the store clock when a write is applied."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class Subscription:
    """Handle for a live query. Call ``unsubscribe()`` when the owner goes away."""

    def __init__(
        self,
        collection: str,
        filters: Sequence[Filter],
        callback: SnapshotCallback,
        *,
        on_close: Optional[Callable[["Subscription"], None]] = None,
    ):
        self.collection = collection
        self.filters = tuple(filters)
        self._callback = callback
        self._on_close = on_close
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self, docs: list[Document]) -> None:
        if not self._active:
            return
        try:
            self._callback(docs)
        except Exception:
            # A broken listener must not fail the write that triggered it.
            logger.exception("Snapshot listener failed for %s", self.collection)

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        if self._on_close:
            self._on_close(self)


class PersistenceGateway(Protocol):
    """Document store contract required by the engine.

    Every method raises ``PersistenceError`` when the store fails.
    """

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    async def query(
        self,
        collection: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[Document]:
        raise NotImplementedError

    async def insert(self, collection: str, data: Document) -> Document:
        """Store a new document and return it with its id and resolved timestamps."""

        raise NotImplementedError

    async def update(self, collection: str, doc_id: str, changes: Document) -> Document:
        raise NotImplementedError

    async def delete(self, collection: str, doc_id: str) -> bool:
        raise NotImplementedError

    async def subscribe(
        self,
        collection: str,
        filters: Sequence[Filter],
        callback: SnapshotCallback,
    ) -> Subscription:
        """Deliver the matching set now and again after every relevant change."""

        raise NotImplementedError
