"""
Canonical boolean expressions over the tags of a source element.

An :class:`Expression` is an immutable tree built from six node types::

    And(children)        all children match      (And() is TRUE)
    Or(children)         any child matches       (Or() is FALSE)
    Not(child)           child does not match
    MatchField(field)    tag is present with any value
    MatchAny(field, vs)  tag value is one of a literal set
    MatchType(type)      element can be the given geometry type

Equality is structural, so compiled expressions can be compared, hashed and
deduplicated.  :func:`simplify` rewrites a tree into its canonical form.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .utils import quote

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .element import SourceElement


class Expression(ABC):
    """Base class for expression nodes with logic operator support."""

    @abstractmethod
    def evaluate(self, element: SourceElement) -> bool:
        """Return ``True`` if *element* satisfies this expression."""
        ...

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Return a plain-data representation of this expression."""
        ...

    @abstractmethod
    def to_source(self) -> str:
        """Return Python code that rebuilds an equal expression."""
        ...

    def simplify(self) -> Expression:
        return simplify(self)

    def __and__(self, other: Expression) -> And:
        return And((self, other))

    def __or__(self, other: Expression) -> Or:
        return Or((self, other))

    def __invert__(self) -> Not:
        return Not(self)

    def __str__(self) -> str:
        return self.to_source()


# -- composites --------------------------------------------------------------


@dataclass(frozen=True)
class And(Expression):
    """Logical AND; ``And()`` matches everything."""

    children: tuple[Expression, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def evaluate(self, element: SourceElement) -> bool:
        return all(child.evaluate(element) for child in self.children)

    def to_dict(self) -> dict[str, Any]:
        return {"op": "and", "children": [c.to_dict() for c in self.children]}

    def to_source(self) -> str:
        return f"and_({', '.join(c.to_source() for c in self.children)})"


@dataclass(frozen=True)
class Or(Expression):
    """Logical OR; ``Or()`` matches nothing."""

    children: tuple[Expression, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "children", tuple(self.children))

    def evaluate(self, element: SourceElement) -> bool:
        return any(child.evaluate(element) for child in self.children)

    def to_dict(self) -> dict[str, Any]:
        return {"op": "or", "children": [c.to_dict() for c in self.children]}

    def to_source(self) -> str:
        return f"or_({', '.join(c.to_source() for c in self.children)})"


@dataclass(frozen=True)
class Not(Expression):
    """Logical NOT."""

    child: Expression

    def evaluate(self, element: SourceElement) -> bool:
        return not self.child.evaluate(element)

    def to_dict(self) -> dict[str, Any]:
        return {"op": "not", "child": self.child.to_dict()}

    def to_source(self) -> str:
        return f"not_({self.child.to_source()})"


# -- leaves ------------------------------------------------------------------


@dataclass(frozen=True)
class MatchField(Expression):
    """Tag *field* is present, with any non-empty value."""

    field: str

    def evaluate(self, element: SourceElement) -> bool:
        return element.has_tag(self.field)

    def to_dict(self) -> dict[str, Any]:
        return {"op": "match_field", "field": self.field}

    def to_source(self) -> str:
        return f"match_field({quote(self.field)})"


@dataclass(frozen=True, eq=False)
class MatchAny(Expression):
    """
    Tag *field* equals one of *values*.

    Values are compared as a set, but first-occurrence order is kept so
    rendered code follows the schema document.
    """

    field: str
    values: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(dict.fromkeys(self.values)))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MatchAny):
            return NotImplemented
        return self.field == other.field and frozenset(self.values) == frozenset(
            other.values
        )

    def __hash__(self) -> int:
        return hash((MatchAny, self.field, frozenset(self.values)))

    def evaluate(self, element: SourceElement) -> bool:
        value = element.get_tag(self.field)
        return value is not None and str(value) in self.values

    def to_dict(self) -> dict[str, Any]:
        return {"op": "match_any", "field": self.field, "values": list(self.values)}

    def to_source(self) -> str:
        args = ", ".join(quote(v) for v in (self.field, *self.values))
        return f"match_any({args})"


@dataclass(frozen=True)
class MatchType(Expression):
    """Element can be the geometry type *type* (``point``, ``way``, ...)."""

    type: str

    def evaluate(self, element: SourceElement) -> bool:
        return element.can_be(self.type)

    def to_dict(self) -> dict[str, Any]:
        return {"op": "match_type", "type": self.type}

    def to_source(self) -> str:
        return f"match_type({quote(self.type)})"


TRUE: And = And()
FALSE: Or = Or()


# -- constructors ------------------------------------------------------------


def and_(*children: Expression) -> And:
    return And(children)


def or_(*children: Expression) -> Or:
    return Or(children)


def not_(child: Expression) -> Not:
    return Not(child)


def match_field(field: str) -> MatchField:
    return MatchField(field)


def match_any(field: str, *values: str) -> MatchAny:
    return MatchAny(field, values)


def match_type(type: str) -> MatchType:
    return MatchType(type)


# -- simplification ----------------------------------------------------------


def simplify(expression: Expression) -> Expression:
    """
    Return the canonical form of *expression*.

    Rewrites are applied until nothing changes, so
    ``simplify(simplify(e)) == simplify(e)``:

    - nested ``And``/``Or`` children with the same operator are merged
    - duplicate children are dropped (first occurrence wins)
    - a single-child ``And``/``Or`` collapses to that child
    - ``And`` containing ``Or()`` becomes ``Or()``
    - ``Or`` containing ``And()`` becomes ``And()``
    - ``Not(Not(x))`` becomes ``x``; ``Not(Or())`` / ``Not(And())`` swap
    """
    current = expression
    while True:
        simplified = _simplify_once(current)
        if simplified == current:
            return simplified
        current = simplified


def _simplify_once(expression: Expression) -> Expression:
    if isinstance(expression, Not):
        child = _simplify_once(expression.child)
        if isinstance(child, Not):
            return child.child
        if child == FALSE:
            return TRUE
        if child == TRUE:
            return FALSE
        return Not(child)

    if isinstance(expression, And):
        children = _merge_children(expression.children, And)
        if FALSE in children:
            return FALSE
        return children[0] if len(children) == 1 else And(children)

    if isinstance(expression, Or):
        children = _merge_children(expression.children, Or)
        if TRUE in children:
            return TRUE
        return children[0] if len(children) == 1 else Or(children)

    return expression


def _merge_children(
    children: Iterable[Expression], op: type[And] | type[Or]
) -> tuple[Expression, ...]:
    """Simplify *children*, inline same-operator groups and drop duplicates."""
    merged: dict[Expression, None] = {}
    for child in children:
        simplified = _simplify_once(child)
        if isinstance(simplified, op):
            merged.update(dict.fromkeys(simplified.children))
        else:
            merged[simplified] = None
    return tuple(merged)
