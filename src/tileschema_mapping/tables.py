"""
Table-level compilation of imposm3 mapping definitions.

A table selects an element when its mapping matches, every ``require``
clause holds, no ``reject`` clause holds and the element can be the
table's geometry type::

    And(
        Or(clauses(mapping)),
        And(clauses(filters.require)),
        Not(Or(clauses(filters.reject))),
        MatchType(singularize(type)),
    )
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from tileschema_expressions.expression import And, MatchType, Not, Or
from tileschema_expressions.filters import compile_clauses

if TYPE_CHECKING:
    from tileschema_expressions.expression import Expression

    from .model import Imposm3Filters, Imposm3Table

logger = logging.getLogger(__name__)


def singularize(type_tag: str) -> str:
    """
    Strip one trailing ``s`` from a plural type tag: ``"ways"`` → ``"way"``.

    Only this one rule exists; it is not a general lemmatizer.
    """
    return type_tag[:-1] if type_tag.endswith("s") else type_tag


def compile_table_mapping(
    type_tag: str,
    mapping: Any,
    filters: Imposm3Filters | None = None,
    path: str = "<table>",
) -> Expression:
    """Compile one ``(type, mapping, filters)`` triple into a simplified expression."""
    require = filters.require if filters is not None else None
    reject = filters.reject if filters is not None else None
    return And(
        (
            Or(compile_clauses(mapping, f"{path}.mapping")),
            And(compile_clauses(require, f"{path}.filters.require")),
            Not(Or(compile_clauses(reject, f"{path}.filters.reject"))),
            MatchType(singularize(type_tag)),
        )
    ).simplify()


def compile_table_expression(table: Imposm3Table, name: str = "<table>") -> Expression:
    """
    Return the expression selecting the elements of *table*.

    With ``type_mappings`` every sub-mapping is compiled with its own type
    and the results are combined with OR.
    """
    path = f"tables.{name}"
    if table.type_mappings is not None:
        expression = Or(
            tuple(
                compile_table_mapping(
                    sub_type,
                    sub_mapping,
                    table.filters,
                    f"{path}.type_mappings.{sub_type}",
                )
                for sub_type, sub_mapping in table.type_mappings.items()
            )
        ).simplify()
    else:
        expression = compile_table_mapping(table.type, table.mapping, table.filters, path)
    logger.debug("Table %s matches %s", name, expression)
    return expression
