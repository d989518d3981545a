"""
Shared helpers for walking filter documents and rendering literals.

These are pure-Python helpers with no dependency on the expression tree.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

# ---------------------------------------------------------------------------
# Nested sequence flattening
# ---------------------------------------------------------------------------


def flatten(node: Any) -> list[Any]:
    """
    Return the leaves of arbitrarily nested lists, in document order.

    ``[[["a", "b"], "c"], ["d"]]`` becomes ``["a", "b", "c", "d"]`` and a
    non-list value ``"a"`` becomes ``["a"]``.
    """
    return [leaf for leaf, _ in iter_leaves(node, "")]


def iter_leaves(node: Any, path: str) -> Iterator[tuple[Any, str]]:
    """Yield ``(leaf, path)`` for every non-list leaf of *node*."""
    if isinstance(node, list | tuple):
        for i, item in enumerate(node):
            yield from iter_leaves(item, f"{path}[{i}]")
    else:
        yield node, path


def flatten_values(node: Any) -> list[str]:
    """
    Flatten a value spec into its string literals.

    ``None`` and non-string scalars are dropped, so ``[null]`` and ``[]``
    both yield an empty list.
    """
    return [leaf for leaf in flatten(node) if isinstance(leaf, str)]


# ---------------------------------------------------------------------------
# Literal rendering
# ---------------------------------------------------------------------------


def quote(value: str) -> str:
    """Return *value* as a double-quoted Python string literal."""
    return json.dumps(value, ensure_ascii=False)
