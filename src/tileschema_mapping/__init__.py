"""imposm3 table model, table-level compilation and typed field extraction."""

from .exceptions import (
    ColumnDefinitionError,
    ConflictingFieldTypeError,
    UnsupportedColumnKindError,
)
from .fields import (
    SOURCE_FIELD,
    STRUCTURAL_KINDS,
    ColumnKind,
    DeclaredType,
    Extraction,
    ExtractionKind,
    FieldTypeRegistry,
    TableField,
    extract_fields,
)
from .layer_fields import (
    allowed_values,
    compile_field_mapping,
    documented_values,
    field_description,
    field_mapping_values,
)
from .model import (
    RELATION_MEMBER,
    Imposm3Column,
    Imposm3Filters,
    Imposm3Table,
    MappingDocument,
    SchemaModel,
    parse_document,
)
from .tables import compile_table_expression, compile_table_mapping, singularize

__all__ = [
    # Object model
    "SchemaModel",
    "Imposm3Column",
    "Imposm3Filters",
    "Imposm3Table",
    "MappingDocument",
    "RELATION_MEMBER",
    "parse_document",
    # Table compilation
    "singularize",
    "compile_table_mapping",
    "compile_table_expression",
    # Field extraction
    "ColumnKind",
    "DeclaredType",
    "Extraction",
    "ExtractionKind",
    "TableField",
    "FieldTypeRegistry",
    "SOURCE_FIELD",
    "STRUCTURAL_KINDS",
    "extract_fields",
    # Layer fields
    "compile_field_mapping",
    "field_description",
    "documented_values",
    "allowed_values",
    "field_mapping_values",
    # Exceptions
    "UnsupportedColumnKindError",
    "ColumnDefinitionError",
    "ConflictingFieldTypeError",
]
