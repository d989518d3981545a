"""
Typed field extraction for imposm3 table columns.

Each retained column kind maps to a fixed ``(DeclaredType, Extraction)``
pair; structural columns are skipped because the source element already
carries them.  A trailing ``source`` field referencing the raw element is
always appended.

Field types are accumulated across a whole run in a
:class:`FieldTypeRegistry`, which rejects an attribute name declared with
two different types.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from tileschema_core.exceptions import ValidationError
from tileschema_expressions.utils import quote

from .exceptions import (
    ColumnDefinitionError,
    ConflictingFieldTypeError,
    UnsupportedColumnKindError,
)
from .model import RELATION_MEMBER, Imposm3Column

logger = logging.getLogger(__name__)


class ColumnKind(str, Enum):
    """Column kinds that produce a typed field."""

    MAPPING_KEY = "mapping_key"
    MAPPING_VALUE = "mapping_value"
    STRING = "string"
    BOOL = "bool"
    INTEGER = "integer"
    WAYZORDER = "wayzorder"
    DIRECTION = "direction"


# Already available on the source element
STRUCTURAL_KINDS: frozenset[str] = frozenset(
    {
        "id",
        "validated_geometry",
        "area",
        "hstore_tags",
        "geometry",
        "member_id",
        "member_role",
        "member_type",
        "member_index",
    }
)


class DeclaredType(str, Enum):
    """Python type of an extracted field."""

    STRING = "str"
    BOOLEAN = "bool"
    INTEGER = "int"
    RAW_ELEMENT = "SourceElement"

    @property
    def annotation(self) -> str:
        """Annotation used in generated code; strings may be missing."""
        if self is DeclaredType.STRING:
            return "str | None"
        return self.value


class ExtractionKind(str, Enum):
    """How a field value is read from the source element."""

    ATTRIBUTE = "attribute"
    ATTRIBUTE_AS_BOOL = "attribute_as_bool"
    ATTRIBUTE_AS_INT = "attribute_as_int"
    WAY_Z_ORDER = "way_z_order"
    DIRECTION = "direction"
    MAPPING_KEY = "mapping_key"
    MAPPING_VALUE = "mapping_value"
    SELF = "self"


@dataclass(frozen=True)
class Extraction:
    """An extraction rule, keyed by a tag name where the kind needs one."""

    kind: ExtractionKind
    key: str | None = None

    def to_source(self, source: str = "source", mapping_key: str = "mapping_key") -> str:
        """Return the Python expression reading this value from *source*."""
        kind = self.kind
        if kind is ExtractionKind.ATTRIBUTE:
            return f"{source}.get_string({quote(self._require_key())})"
        if kind is ExtractionKind.ATTRIBUTE_AS_BOOL:
            return f"{source}.get_bool({quote(self._require_key())})"
        if kind is ExtractionKind.ATTRIBUTE_AS_INT:
            return f"{source}.get_int({quote(self._require_key())})"
        if kind is ExtractionKind.DIRECTION:
            return f"{source}.get_direction({quote(self._require_key())})"
        if kind is ExtractionKind.WAY_Z_ORDER:
            return f"{source}.get_way_z_order()"
        if kind is ExtractionKind.MAPPING_KEY:
            return mapping_key
        if kind is ExtractionKind.MAPPING_VALUE:
            return f"{source}.get_string({mapping_key})"
        return source

    def _require_key(self) -> str:
        if self.key is None:
            raise ValidationError(f"Extraction '{self.kind.value}' requires a key")
        return self.key


@dataclass(frozen=True)
class TableField:
    """One typed field of a table row."""

    declared_type: DeclaredType
    name: str
    extraction: Extraction


SOURCE_FIELD = TableField(DeclaredType.RAW_ELEMENT, "source", Extraction(ExtractionKind.SELF))

# kind → (declared type, extraction kind, needs key)
_KIND_RULES: dict[ColumnKind, tuple[DeclaredType, ExtractionKind, bool]] = {
    ColumnKind.STRING: (DeclaredType.STRING, ExtractionKind.ATTRIBUTE, True),
    ColumnKind.BOOL: (DeclaredType.BOOLEAN, ExtractionKind.ATTRIBUTE_AS_BOOL, True),
    ColumnKind.INTEGER: (DeclaredType.INTEGER, ExtractionKind.ATTRIBUTE_AS_INT, True),
    ColumnKind.WAYZORDER: (DeclaredType.INTEGER, ExtractionKind.WAY_Z_ORDER, False),
    ColumnKind.DIRECTION: (DeclaredType.INTEGER, ExtractionKind.DIRECTION, True),
    ColumnKind.MAPPING_KEY: (DeclaredType.STRING, ExtractionKind.MAPPING_KEY, False),
    ColumnKind.MAPPING_VALUE: (DeclaredType.STRING, ExtractionKind.MAPPING_VALUE, False),
}


# ---------------------------------------------------------------------------
# FieldTypeRegistry
# ---------------------------------------------------------------------------


class FieldTypeRegistry:
    """
    Insertion-ordered ``attribute name → DeclaredType`` accumulator.

    One registry is threaded through a whole generation run; it backs the
    shared "has this attribute" contracts of the generated rows.

    Usage::

        registry = FieldTypeRegistry()
        registry.merge(extract_fields(columns), table="poi_point")
    """

    def __init__(self) -> None:
        self._types: dict[str, DeclaredType] = {}
        self._origins: dict[str, str | None] = {}

    def register(
        self,
        name: str,
        declared_type: DeclaredType,
        table: str | None = None,
    ) -> None:
        """
        Bind *name* to *declared_type*.

        Raises:
            ConflictingFieldTypeError: If *name* is bound to another type.
        """
        existing = self._types.get(name)
        if existing is None:
            self._types[name] = declared_type
            self._origins[name] = table
        elif existing is not declared_type:
            raise ConflictingFieldTypeError(
                name,
                existing.value,
                declared_type.value,
                table=table,
                existing_table=self._origins.get(name),
            )

    def merge(self, fields: Iterable[TableField], table: str | None = None) -> None:
        """Register every field of one table."""
        for field in fields:
            self.register(field.name, field.declared_type, table=table)

    def get(self, name: str) -> DeclaredType | None:
        return self._types.get(name)

    def items(self) -> list[tuple[str, DeclaredType]]:
        return list(self._types.items())

    def as_dict(self) -> Mapping[str, DeclaredType]:
        return dict(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_fields(
    columns: Iterable[Imposm3Column | Mapping[str, Any]],
    *,
    table_type: str | None = None,
    table: str | None = None,
    registry: FieldTypeRegistry | None = None,
) -> list[TableField]:
    """
    Derive the ordered typed fields of a table from its columns.

    Args:
        columns: Column definitions, as models or raw mappings.
        table_type: Geometry type of the table; member columns of
            ``relation_member`` tables are skipped.
        table: Table name used in error messages.
        registry: Optional run-wide registry to merge the fields into.

    Raises:
        UnsupportedColumnKindError: For a kind outside the supported set.
        ColumnDefinitionError: When a keyed kind has no ``key``, or a field
            name (including the reserved ``source``) repeats.
        ConflictingFieldTypeError: When *registry* binds a field name to
            another type.
    """
    relation_member = table_type == RELATION_MEMBER
    result: list[TableField] = []
    seen = {SOURCE_FIELD.name}
    for raw in columns:
        column = raw if isinstance(raw, Imposm3Column) else Imposm3Column.model_validate(raw)
        if relation_member and column.from_member:
            continue
        if column.kind in STRUCTURAL_KINDS:
            continue
        if column.name in seen:
            raise ColumnDefinitionError(
                column.name,
                f"Column '{column.name}' is declared more than once",
                table=table,
            )
        seen.add(column.name)
        result.append(_column_field(column, table))
    result.append(SOURCE_FIELD)

    logger.debug(
        "Extracted fields for %s: %s", table or "<table>", [f.name for f in result]
    )
    if registry is not None:
        registry.merge(result, table=table)
    return result


def _column_field(column: Imposm3Column, table: str | None) -> TableField:
    try:
        kind = ColumnKind(column.kind)
    except ValueError:
        raise UnsupportedColumnKindError(
            column.kind,
            column.name,
            [k.value for k in ColumnKind],
            table=table,
        ) from None

    declared_type, extraction_kind, needs_key = _KIND_RULES[kind]
    if needs_key and not column.key:
        raise ColumnDefinitionError(
            column.name,
            f"Column '{column.name}' of kind '{kind.value}' requires a 'key'",
            table=table,
        )
    key = column.key if needs_key else None
    return TableField(declared_type, column.name, Extraction(extraction_kind, key))
