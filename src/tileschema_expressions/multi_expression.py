"""
Ordered dispatch index over many ``(expression, result)`` rules.

Every rule whose expression matches an element fires; there is no priority
and no short-circuit.  Rule order only decides the order results are
enumerated in, which is always insertion order.

Example::

    index = MultiExpressionIndex.of([
        Rule(match_any("amenity", "cafe"), "cafe"),
        Rule(match_field("amenity"), "any_amenity"),
    ])
    index.get_matches(TaggedElement({"amenity": "cafe"}))
    # → ["cafe", "any_amenity"]
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from .expression import Expression
from .utils import quote

if TYPE_CHECKING:
    from .element import SourceElement

R = TypeVar("R")
S = TypeVar("S")


@dataclass(frozen=True)
class Rule(Generic[R]):
    """Pairs one expression with the result it produces when matched."""

    expression: Expression
    result: R

    def to_source(self, render_result: Callable[[R], str]) -> str:
        return f"Rule({self.expression.to_source()}, {render_result(self.result)})"


class MultiExpressionIndex(Generic[R]):
    """
    Immutable, insertion-ordered collection of :class:`Rule` objects.

    Rules are never deduplicated: two rules with the same expression and
    different results both remain and both fire.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Iterable[Rule[R] | tuple[Expression, R]] = ()) -> None:
        self._rules: tuple[Rule[R], ...] = tuple(_as_rule(r) for r in rules)

    @classmethod
    def of(
        cls, rules: Iterable[Rule[R] | tuple[Expression, R]]
    ) -> MultiExpressionIndex[R]:
        return cls(rules)

    # -- collection protocol -------------------------------------------------

    @property
    def rules(self) -> tuple[Rule[R], ...]:
        return self._rules

    @property
    def results(self) -> list[R]:
        return [rule.result for rule in self._rules]

    def __iter__(self) -> Iterator[Rule[R]]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __bool__(self) -> bool:
        return bool(self._rules)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MultiExpressionIndex):
            return NotImplemented
        return self._rules == other._rules

    def __hash__(self) -> int:
        return hash(self._rules)

    def __repr__(self) -> str:
        return f"MultiExpressionIndex({list(self._rules)!r})"

    # -- matching ------------------------------------------------------------

    def matches(self, element: SourceElement) -> list[Rule[R]]:
        """Return every rule satisfied by *element*, in insertion order."""
        return [rule for rule in self._rules if rule.expression.evaluate(element)]

    def get_matches(self, element: SourceElement) -> list[R]:
        """Return the results of every rule satisfied by *element*."""
        return [rule.result for rule in self.matches(element)]

    # -- transformations -----------------------------------------------------

    def simplify(self) -> MultiExpressionIndex[R]:
        return MultiExpressionIndex(
            Rule(rule.expression.simplify(), rule.result) for rule in self._rules
        )

    def map_results(self, fn: Callable[[R], S]) -> MultiExpressionIndex[S]:
        return MultiExpressionIndex(
            Rule(rule.expression, fn(rule.result)) for rule in self._rules
        )

    def filter_results(self, predicate: Callable[[R], bool]) -> MultiExpressionIndex[R]:
        return MultiExpressionIndex(r for r in self._rules if predicate(r.result))

    # -- rendering -----------------------------------------------------------

    def to_source(self, render_result: Callable[[R], str] | None = None) -> str:
        """
        Return Python code that rebuilds this index.

        Results are rendered with *render_result*; by default they must be
        strings and are rendered as literals.
        """
        render = render_result or _quote_result
        rules = ", ".join(rule.to_source(render) for rule in self._rules)
        return f"MultiExpressionIndex.of([{rules}])"


def build(
    rules: Iterable[Rule[R] | tuple[Expression, R]],
) -> MultiExpressionIndex[R]:
    """Build an index from ``Rule`` objects or ``(expression, result)`` pairs."""
    return MultiExpressionIndex(rules)


def _as_rule(rule: Rule[R] | tuple[Expression, R]) -> Rule[R]:
    if isinstance(rule, Rule):
        return rule
    expression, result = rule
    if not isinstance(expression, Expression):
        raise TypeError(
            f"Expected (Expression, result) pair, got {type(expression).__name__}"
        )
    return Rule(expression, result)


def _quote_result(result: Any) -> str:
    if not isinstance(result, str):
        raise TypeError(
            f"Cannot render result of type {type(result).__name__}; "
            "pass render_result"
        )
    return quote(result)
