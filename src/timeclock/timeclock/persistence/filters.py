"""Query filters understood by every gateway adapter.

The in-memory gateway evaluates them with ``matches``; the MySQL gateway
translates them to WHERE clauses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union


@dataclass(frozen=True)
class Eq:
    field: str
    value: Any

    def matches(self, doc: Mapping[str, Any]) -> bool:
        return doc.get(self.field) == self.value


@dataclass(frozen=True)
class In:
    field: str
    values: tuple

    def matches(self, doc: Mapping[str, Any]) -> bool:
        return doc.get(self.field) in self.values


@dataclass(frozen=True)
class IsNull:
    """Field is null (a missing field counts as null)."""

    field: str

    def matches(self, doc: Mapping[str, Any]) -> bool:
        return doc.get(self.field) is None


@dataclass(frozen=True)
class Range:
    """Inclusive range; either bound may be omitted."""

    field: str
    gte: Optional[Any] = None
    lte: Optional[Any] = None

    def matches(self, doc: Mapping[str, Any]) -> bool:
        value = doc.get(self.field)
        if value is None:
            return False
        if self.gte is not None and value < self.gte:
            return False
        if self.lte is not None and value > self.lte:
            return False
        return True


Filter = Union[Eq, In, IsNull, Range]


def matches_all(doc: Optional[Mapping[str, Any]], filters: Sequence[Filter]) -> bool:
    if doc is None:
        return False
    return all(f.matches(doc) for f in filters)
