"""
Compiles crawled schema documents into the values the emitter renders.

Tables become typed field lists plus one match expression each, gathered
into a single :class:`MultiExpressionIndex` of row constructors.  Layers
become field descriptions, allowed values and field mapping indexes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from tileschema_expressions.expression import Expression
from tileschema_expressions.multi_expression import MultiExpressionIndex, build
from tileschema_mapping.exceptions import ColumnDefinitionError
from tileschema_mapping.fields import SOURCE_FIELD, FieldTypeRegistry, TableField, extract_fields
from tileschema_mapping.layer_fields import (
    allowed_values,
    compile_field_mapping,
    documented_values,
    field_description,
    field_mapping_values,
)
from tileschema_mapping.model import RELATION_MEMBER, Imposm3Table
from tileschema_mapping.tables import compile_table_expression

from .naming import attribute_name, upper_camel, with_protocol_name
from .schema import LayerDocument

logger = logging.getLogger(__name__)

TABLE_PREFIX = "osm_"

#: Members of generated row classes that a column attribute may not shadow.
RESERVED_ROW_MEMBERS = frozenset({SOURCE_FIELD.name, "create", "MAPPING", "Handler"})


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RowConstructorRef:
    """Result of a table index rule: the generated row class to construct."""

    class_name: str
    table_name: str

    def to_source(self) -> str:
        return f"RowConstructor({self.class_name}, {self.class_name}.create)"


@dataclass(frozen=True)
class CompiledTable:
    """One imposm3 table with its typed fields and match expression."""

    key: str
    table_type: str
    fields: list[TableField]
    expression: Expression

    @property
    def table_name(self) -> str:
        return TABLE_PREFIX + self.key

    @property
    def class_name(self) -> str:
        return upper_camel(self.table_name)

    @property
    def is_relation_member(self) -> bool:
        return self.table_type == RELATION_MEMBER


@dataclass(frozen=True)
class CompiledTables:
    """
    All tables of a run.

    Attributes:
        tables: Compiled tables in schema order.
        field_types: Run-wide ``attribute → type`` registry.
        index: Row constructors of every non ``relation_member`` table.
    """

    tables: list[CompiledTable]
    field_types: FieldTypeRegistry
    index: MultiExpressionIndex[RowConstructorRef]

    @property
    def row_tables(self) -> list[CompiledTable]:
        return [t for t in self.tables if not t.is_relation_member]


def compile_tables(
    tables: Mapping[str, Imposm3Table],
    registry: FieldTypeRegistry | None = None,
) -> CompiledTables:
    """
    Compile every table, merging their fields into one registry.

    Raises:
        MalformedFilterError: For an invalid mapping or filter document.
        UnsupportedColumnKindError: For an unknown column kind.
        ColumnDefinitionError: When a column is generated as a reserved row
            member, or two columns are generated as the same identifier.
        ConflictingFieldTypeError: When two tables type one field differently.
    """
    field_types = registry if registry is not None else FieldTypeRegistry()
    compiled: list[CompiledTable] = []
    protocols: dict[str, tuple[str, str]] = {}
    for key, table in tables.items():
        table_name = TABLE_PREFIX + key
        fields = extract_fields(
            table.columns,
            table_type=table.type,
            table=table_name,
            registry=field_types,
        )
        _check_identifiers(table_name, table.type, fields, protocols)
        expression = compile_table_expression(table, table_name)
        compiled.append(CompiledTable(key, table.type, fields, expression))

    index = build(
        (t.expression, RowConstructorRef(t.class_name, t.table_name))
        for t in compiled
        if not t.is_relation_member
    )
    logger.info(
        "Compiled %d tables (%d row classes, %d typed attributes)",
        len(compiled),
        len(index),
        len(field_types),
    )
    return CompiledTables(compiled, field_types, index)


def _check_identifiers(
    table_name: str,
    table_type: str,
    fields: list[TableField],
    protocols: dict[str, tuple[str, str]],
) -> None:
    """
    Reject columns whose generated identifiers collide.

    Row attributes must be unique within a table and must not shadow the
    members every row class defines. ``With<Field>`` protocol names are
    shared by all tables, so each must come from a single field name.
    """
    attributes: dict[str, str] = {}
    row_class = table_type != RELATION_MEMBER
    for field in fields:
        if row_class and field is not SOURCE_FIELD:
            attribute = attribute_name(field.name)
            if attribute in RESERVED_ROW_MEMBERS:
                raise ColumnDefinitionError(
                    field.name,
                    f"Column '{field.name}' is generated as '{attribute}', "
                    "which is reserved on row classes",
                    table=table_name,
                )
            if attribute in attributes:
                raise ColumnDefinitionError(
                    field.name,
                    f"Columns '{attributes[attribute]}' and '{field.name}' are both "
                    f"generated as '{attribute}'",
                    table=table_name,
                )
            attributes[attribute] = field.name

        protocol = with_protocol_name(field.name)
        first_name, first_table = protocols.setdefault(protocol, (field.name, table_name))
        if first_name != field.name:
            raise ColumnDefinitionError(
                field.name,
                f"Column '{field.name}' and column '{first_name}' of table "
                f"'{first_table}' both generate protocol '{protocol}'",
                table=table_name,
            )


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompiledField:
    name: str
    description: str
    documented_values: list[str]
    allowed_values: list[str]
    mapping: MultiExpressionIndex[str] | None


@dataclass(frozen=True)
class CompiledLayer:
    file: str
    id: str
    description: str
    buffer_size: float
    fields: list[CompiledField]

    @property
    def class_name(self) -> str:
        return upper_camel(self.id)


def compile_layers(layers: Iterable[tuple[str, LayerDocument]]) -> list[CompiledLayer]:
    """Compile the fields of every layer, keeping schema order."""
    compiled: list[CompiledLayer] = []
    for layer_file, document in layers:
        layer = document.layer
        fields = []
        for name, field in layer.fields.items():
            values = field_mapping_values(field)
            mapping = (
                compile_field_mapping(values, f"layers.{layer.id}.fields.{name}.values")
                if values is not None
                else None
            )
            fields.append(
                CompiledField(
                    name=name,
                    description=field_description(field),
                    documented_values=documented_values(field),
                    allowed_values=allowed_values(field),
                    mapping=mapping,
                )
            )
        compiled.append(
            CompiledLayer(
                file=layer_file,
                id=layer.id,
                description=layer.description,
                buffer_size=layer.buffer_size,
                fields=fields,
            )
        )
    return compiled
