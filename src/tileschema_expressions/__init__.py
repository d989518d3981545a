"""Boolean expressions over element tags, the filter compiler and dispatch index."""

from .element import (
    SourceElement,
    TaggedElement,
    parse_bool,
    parse_direction,
    parse_int,
    way_z_order,
)
from .exceptions import MalformedFilterError
from .expression import (
    FALSE,
    TRUE,
    And,
    Expression,
    MatchAny,
    MatchField,
    MatchType,
    Not,
    Or,
    and_,
    match_any,
    match_field,
    match_type,
    not_,
    or_,
    simplify,
)
from .filters import (
    AND_KEY,
    ANY_VALUE,
    OR_KEY,
    AndCombinator,
    Empty,
    FieldMap,
    FilterClause,
    OrCombinator,
    compile_clauses,
    compile_filter,
    parse_filter,
)
from .multi_expression import MultiExpressionIndex, Rule, build
from .utils import flatten, flatten_values, quote

__all__ = [
    # Expression tree
    "Expression",
    "And",
    "Or",
    "Not",
    "MatchField",
    "MatchAny",
    "MatchType",
    "TRUE",
    "FALSE",
    "and_",
    "or_",
    "not_",
    "match_field",
    "match_any",
    "match_type",
    "simplify",
    # Filter compiler
    "AND_KEY",
    "OR_KEY",
    "ANY_VALUE",
    "FilterClause",
    "AndCombinator",
    "OrCombinator",
    "FieldMap",
    "Empty",
    "parse_filter",
    "compile_clauses",
    "compile_filter",
    # Dispatch index
    "Rule",
    "MultiExpressionIndex",
    "build",
    # Element runtime
    "SourceElement",
    "TaggedElement",
    "parse_bool",
    "parse_int",
    "parse_direction",
    "way_z_order",
    # Exceptions
    "MalformedFilterError",
    # Utilities
    "flatten",
    "flatten_values",
    "quote",
]
