"""
Compiler for the imposm3-style filter mini-language.

A filter document is a YAML value (``None``, scalar, list or mapping).
Compilation runs in two steps:

1. :func:`parse_filter` classifies every node into a closed set of clause
   variants — :class:`AndCombinator`, :class:`OrCombinator`,
   :class:`FieldMap` and :class:`Empty` — flattening nested lists on the way.
2. :func:`compile_clauses` turns the clauses into expressions.

Example::

    compile_filter({"highway": ["primary", "trunk"], "railway": "__any__"})
    # → or_(match_any("highway", "primary", "trunk"), match_field("railway"))

    compile_filter({"__AND__": [{"natural": "water"}, {"water": "lake"}]})
    # → or_(and_(match_any("natural", "water"), match_any("water", "lake")))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeAlias

from .exceptions import MalformedFilterError
from .expression import And, Expression, MatchAny, MatchField, Or
from .utils import flatten_values, iter_leaves

logger = logging.getLogger(__name__)

AND_KEY = "__AND__"
OR_KEY = "__OR__"
ANY_VALUE = "__any__"

_COMBINATOR_KEYS = (AND_KEY, OR_KEY)


# ---------------------------------------------------------------------------
# Clause variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AndCombinator:
    """``{__AND__: [...]}`` — every nested clause must hold."""

    clauses: tuple[FilterClause, ...]


@dataclass(frozen=True)
class OrCombinator:
    """``{__OR__: [...]}`` — at least one nested clause must hold."""

    clauses: tuple[FilterClause, ...]


@dataclass(frozen=True)
class FieldMap:
    """
    Plain ``{field: values, ...}`` mapping.

    Each pair holds the field name and its flattened string literals.
    """

    pairs: tuple[tuple[str, tuple[str, ...]], ...]


@dataclass(frozen=True)
class Empty:
    """A ``null`` branch; contributes no expression."""


FilterClause: TypeAlias = AndCombinator | OrCombinator | FieldMap | Empty


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_filter(node: Any, path: str = "<root>") -> list[FilterClause]:
    """
    Classify a filter document into an ordered list of clauses.

    Lists are flattened to any depth; every leaf becomes one clause.

    Raises:
        MalformedFilterError: If a combinator key shares its mapping with
            other keys, or a bare scalar appears where a clause is expected.
    """
    return [_classify(leaf, leaf_path) for leaf, leaf_path in iter_leaves(node, path)]


def _classify(node: Any, path: str) -> FilterClause:
    if node is None:
        return Empty()

    if not isinstance(node, dict):
        raise MalformedFilterError(
            f"Unsupported filter node {node!r}: expected a mapping, list or null",
            path=path,
        )

    keys = [str(k) for k in node]
    for combinator in _COMBINATOR_KEYS:
        if combinator not in keys:
            continue
        if len(keys) > 1:
            others = [k for k in keys if k != combinator]
            raise MalformedFilterError(
                f"Cannot combine {combinator} with other keys: {', '.join(others)}",
                path=path,
            )
        clauses = tuple(parse_filter(node[combinator], f"{path}.{combinator}"))
        if combinator == AND_KEY:
            return AndCombinator(clauses)
        return OrCombinator(clauses)

    return FieldMap(
        tuple((str(field), tuple(flatten_values(spec))) for field, spec in node.items())
    )


# ---------------------------------------------------------------------------
# Compilation
# ---------------------------------------------------------------------------


def compile_clauses(node: Any, path: str = "<root>") -> list[Expression]:
    """
    Compile a filter document into its clause expressions, in order.

    Callers decide how the list is combined: a mapping is satisfied when
    any clause holds, table ``require`` filters when all of them hold.
    """
    expressions: list[Expression] = []
    for clause in parse_filter(node, path):
        expressions.extend(_compile_clause(clause))
    return expressions


def _compile_clause(clause: FilterClause) -> list[Expression]:
    if isinstance(clause, Empty):
        return []
    if isinstance(clause, AndCombinator):
        return [And(_compile_nested(clause.clauses))]
    if isinstance(clause, OrCombinator):
        return [Or(_compile_nested(clause.clauses))]
    return [_compile_pair(field, values) for field, values in clause.pairs]


def _compile_nested(clauses: tuple[FilterClause, ...]) -> tuple[Expression, ...]:
    return tuple(e for clause in clauses for e in _compile_clause(clause))


def _compile_pair(field: str, values: tuple[str, ...]) -> Expression:
    if not values or ANY_VALUE in values:
        return MatchField(field)
    return MatchAny(field, values)


def compile_filter(node: Any, path: str = "<root>") -> Expression:
    """
    Compile a filter document into a single expression.

    The clauses are combined with OR: a plain mapping matches when any of
    its field/value associations holds.  ``None`` compiles to ``Or()``.
    The result is not simplified.
    """
    expression = Or(compile_clauses(node, path))
    logger.debug("Compiled filter at %s: %s", path, expression)
    return expression
