"""
Runtime view of a raw map element, as seen by expressions and generated rows.

Generated table rows call the typed getters of :class:`SourceElement` to
extract their fields; expressions only need ``has_tag``, ``get_tag`` and
``can_be``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

_TRUE_VALUES = frozenset({"yes", "true", "1"})

# imposm3 default z-order ranks for highway values
_HIGHWAY_RANKS: dict[str, int] = {
    "minor": 3,
    "road": 3,
    "unclassified": 3,
    "residential": 3,
    "tertiary_link": 3,
    "tertiary": 4,
    "secondary_link": 3,
    "secondary": 5,
    "primary_link": 3,
    "primary": 6,
    "trunk_link": 3,
    "trunk": 8,
    "motorway_link": 3,
    "motorway": 9,
}
_RAILWAY_RANK = 7
_MAX_Z_ORDER = 10_000


# ---------------------------------------------------------------------------
# Tag value parsing
# ---------------------------------------------------------------------------


def parse_bool(value: Any) -> bool:
    """``yes``, ``true`` and ``1`` are true; anything else is false."""
    return value is not None and str(value).strip().lower() in _TRUE_VALUES


def parse_int(value: Any, default: int = 0) -> int:
    """Parse an integer tag value, falling back to *default*."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return int(float(text))
    except (ValueError, OverflowError):
        return default


def parse_direction(value: Any) -> int:
    """One-way direction: ``1`` forward, ``-1`` reverse, ``0`` both ways."""
    if parse_bool(value):
        return 1
    if value is not None and str(value).strip() == "-1":
        return -1
    return 0


def way_z_order(tags: Mapping[str, Any]) -> int:
    """
    Rendering order of a way, using imposm3's default ranks.

    ``layer * 10`` plus the highway rank (railways rank 7), minus 10 for
    tunnels and plus 10 for bridges.  Values outside ±10000 become 0.
    """
    rank = _HIGHWAY_RANKS.get(
        str(tags.get("highway")), _RAILWAY_RANK if "railway" in tags else 0
    )
    z = parse_int(tags.get("layer")) * 10 + rank
    if parse_bool(tags.get("tunnel")):
        z -= 10
    if parse_bool(tags.get("bridge")):
        z += 10
    return z if abs(z) < _MAX_Z_ORDER else 0


# ---------------------------------------------------------------------------
# Element protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class SourceElement(Protocol):
    """A raw element with tags and a set of geometry types it can be."""

    @property
    def tags(self) -> Mapping[str, Any]: ...

    def has_tag(self, key: str) -> bool: ...

    def get_tag(self, key: str) -> Any: ...

    def can_be(self, geometry_type: str) -> bool: ...

    def get_string(self, key: str) -> str | None: ...

    def get_bool(self, key: str) -> bool: ...

    def get_int(self, key: str) -> int: ...

    def get_way_z_order(self) -> int: ...

    def get_direction(self, key: str) -> int: ...


@dataclass(frozen=True)
class TaggedElement:
    """
    Plain :class:`SourceElement` over a tag mapping.

    Attributes:
        tags: Raw key/value tags of the element.
        geometry_types: Types the element can be matched as, e.g.
            ``{"way", "linestring", "polygon"}`` for a closed way.
        id: Optional source identifier.
    """

    tags: Mapping[str, Any] = field(default_factory=dict)
    geometry_types: frozenset[str] = frozenset()
    id: int | None = None

    def has_tag(self, key: str) -> bool:
        value = self.tags.get(key)
        return value is not None and value != ""

    def get_tag(self, key: str) -> Any:
        return self.tags.get(key)

    def can_be(self, geometry_type: str) -> bool:
        return geometry_type in self.geometry_types

    def get_string(self, key: str) -> str | None:
        value = self.tags.get(key)
        return None if value is None else str(value)

    def get_bool(self, key: str) -> bool:
        return parse_bool(self.tags.get(key))

    def get_int(self, key: str) -> int:
        return parse_int(self.tags.get(key))

    def get_way_z_order(self) -> int:
        return way_z_order(self.tags)

    def get_direction(self, key: str) -> int:
        return parse_direction(self.tags.get(key))
