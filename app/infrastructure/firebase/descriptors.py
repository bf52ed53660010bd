"""Query and document descriptors: value objects naming "what to watch".

Descriptors are frozen and hashable, so two descriptors built from the same
inputs compare equal. Live subscriptions use this to keep an open channel
when an equal descriptor is bound again instead of tearing it down.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

_DIRECTIONS = ("ASCENDING", "DESCENDING")
_DIRECTION_ALIASES = {"asc": "ASCENDING", "desc": "DESCENDING"}


class FrozenMap(tuple):
    """Hashable stand-in for a map filter value: its sorted (key, value) items."""

    __slots__ = ()

    def __eq__(self, other: object) -> bool:
        return type(other) is FrozenMap and tuple.__eq__(self, other)

    def __ne__(self, other: object) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash((FrozenMap, tuple(self)))


def _freeze(value: Any) -> Any:
    """Make filter values hashable (lists become tuples, dicts FrozenMaps)."""
    if isinstance(value, FrozenMap):
        return value
    if isinstance(value, list | tuple):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return FrozenMap(sorted((k, _freeze(v)) for k, v in value.items()))
    return value


def thaw(value: Any) -> Any:
    """Undo _freeze for encoding: FrozenMaps become dicts, tuples lists."""
    if isinstance(value, FrozenMap):
        return {k: thaw(v) for k, v in value}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


def _segments(path: str) -> list[str]:
    parts = [p for p in path.strip("/").split("/") if p]
    if not parts:
        raise ValueError("Firestore path must not be empty")
    return parts


@dataclass(frozen=True)
class FieldFilter:
    """A single where() predicate. op uses client SDK syntax (==, <, in, ...)."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _freeze(self.value))


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: str = "ASCENDING"

    def __post_init__(self) -> None:
        direction = _DIRECTION_ALIASES.get(self.direction.lower(), self.direction.upper())
        if direction not in _DIRECTIONS:
            raise ValueError(f"Invalid order direction: {self.direction!r}")
        object.__setattr__(self, "direction", direction)


@dataclass(frozen=True)
class QueryDescriptor:
    """Collection path plus filters, ordering and limit.

    Example:
        QueryDescriptor("users/u1/chatSessions").order("startTime", "desc")
    """

    path: str
    filters: tuple[FieldFilter, ...] = field(default=())
    order_by: tuple[OrderBy, ...] = field(default=())
    limit: int | None = None

    def __post_init__(self) -> None:
        parts = _segments(self.path)
        if len(parts) % 2 == 0:
            raise ValueError(f"Not a collection path (even segment count): {self.path!r}")
        object.__setattr__(self, "path", "/".join(parts))

    @property
    def collection_id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def parent_path(self) -> str:
        """Path of the document owning this collection ('' for root collections)."""
        return self.path.rsplit("/", 1)[0] if "/" in self.path else ""

    def where(self, field_path: str, op: str, value: Any) -> QueryDescriptor:
        return replace(self, filters=self.filters + (FieldFilter(field_path, op, value),))

    def order(self, field_path: str, direction: str = "ASCENDING") -> QueryDescriptor:
        return replace(self, order_by=self.order_by + (OrderBy(field_path, direction),))

    def limited(self, n: int) -> QueryDescriptor:
        if n <= 0:
            raise ValueError("limit must be positive")
        return replace(self, limit=n)


@dataclass(frozen=True)
class DocumentDescriptor:
    """Path of a single document, e.g. users/u1."""

    path: str

    def __post_init__(self) -> None:
        parts = _segments(self.path)
        if len(parts) % 2 != 0:
            raise ValueError(f"Not a document path (odd segment count): {self.path!r}")
        object.__setattr__(self, "path", "/".join(parts))

    @property
    def id(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def collection_path(self) -> str:
        return self.path.rsplit("/", 1)[0]


def collection_path(*segments: str) -> str:
    """Join path segments, e.g. collection_path("users", uid, "chatSessions")."""
    return "/".join(s.strip("/") for s in segments)
