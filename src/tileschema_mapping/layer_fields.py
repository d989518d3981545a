"""
Attribute values of vector tile layer fields.

A layer field's ``values`` is either a list of allowed values or a mapping
from each output value to the filter that produces it::

    class:
      values:
        motorway: {highway: [motorway, motorway_link]}
        rail: {railway: [rail, narrow_gauge]}

Mappings compile to a :class:`MultiExpressionIndex` of output values.
"""

from __future__ import annotations

from typing import Any

from tileschema_expressions.expression import FALSE, TRUE, Or
from tileschema_expressions.filters import compile_clauses
from tileschema_expressions.multi_expression import MultiExpressionIndex, Rule


def compile_field_mapping(
    values_node: dict[str, Any], path: str = "<field>"
) -> MultiExpressionIndex[str]:
    """
    Compile a ``value → filter`` mapping into an ordered index.

    Values whose filter simplifies to ``Or()`` or ``And()`` carry no
    selection logic and are left out.
    """
    rules: list[Rule[str]] = []
    for value, node in values_node.items():
        expression = Or(compile_clauses(node, f"{path}.{value}")).simplify()
        if expression != FALSE and expression != TRUE:
            rules.append(Rule(expression, str(value)))
    return MultiExpressionIndex(rules)


def field_description(field: Any) -> str:
    """A field is either its description or a mapping holding one."""
    if isinstance(field, str):
        return field
    if isinstance(field, dict):
        return str(field.get("description") or "")
    return ""


def documented_values(field: Any) -> list[str]:
    """All values listed for *field*, as written, for documentation."""
    values = field.get("values") if isinstance(field, dict) else None
    if isinstance(values, list):
        return [str(v) for v in values]
    if isinstance(values, dict):
        return [str(k) for k in values]
    return []


def allowed_values(field: Any) -> list[str]:
    """
    Allowed values for constant generation.

    List entries are truncated at their first space (``"rail (narrow)"``
    becomes ``"rail"``); non-string entries are dropped.  Mapping keys are
    used unchanged.  Matching through :func:`compile_field_mapping` always
    uses the full literals.
    """
    values = field.get("values") if isinstance(field, dict) else None
    if isinstance(values, list):
        return [v.split(" ", 1)[0] for v in values if isinstance(v, str)]
    if isinstance(values, dict):
        return [str(k) for k in values]
    return []


def field_mapping_values(field: Any) -> dict[str, Any] | None:
    """The ``value → filter`` mapping of *field*, if it has one."""
    values = field.get("values") if isinstance(field, dict) else None
    return values if isinstance(values, dict) else None
