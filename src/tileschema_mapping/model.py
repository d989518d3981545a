"""
Object model for imposm3 mapping documents.

Mirrors the ``mapping.yaml`` files referenced by the layer datasources.
Filter-valued attributes (``mapping``, ``type_mappings``, ``filters``) are
kept as raw YAML values and compiled later by
:mod:`tileschema_expressions.filters`.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from tileschema_core.exceptions import SchemaDocumentError

M = TypeVar("M", bound=BaseModel)

RELATION_MEMBER = "relation_member"


class SchemaModel(BaseModel):
    """Base for schema documents: immutable, unknown keys ignored."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class Imposm3Column(SchemaModel):
    """One column of an imposm3 table; ``kind`` is the YAML ``type`` key."""

    kind: str = Field(alias="type")
    name: str
    key: str | None = None
    from_member: bool = False


class Imposm3Filters(SchemaModel):
    """``require`` / ``reject`` filter documents of a table."""

    require: Any = None
    reject: Any = None


class Imposm3Table(SchemaModel):
    """
    A table definition from an imposm3 mapping file.

    Attributes:
        type: Geometry type tag (``point``, ``linestring``, ``polygon``,
            ``relation_member``, ...).
        columns: Ordered column definitions.
        filters: Optional ``require`` / ``reject`` filters.
        mapping: Filter document selecting the elements of the table.
        type_mappings: Per geometry type sub-mappings; replaces ``mapping``.
    """

    type: str = "geometry"
    columns: list[Imposm3Column] = Field(default_factory=list)
    filters: Imposm3Filters | None = None
    mapping: Any = None
    type_mappings: dict[str, Any] | None = None
    resolve_wikidata: bool = Field(default=False, alias="_resolve_wikidata")

    @property
    def is_relation_member(self) -> bool:
        return self.type == RELATION_MEMBER


class MappingDocument(SchemaModel):
    """A whole ``mapping.yaml`` file; only its tables are used."""

    tables: dict[str, Imposm3Table] = Field(default_factory=dict)


def parse_document(model: type[M], data: Any, reference: str) -> M:
    """
    Map a parsed YAML document onto *model*.

    Raises:
        SchemaDocumentError: If the document does not fit the model.
    """
    try:
        return model.model_validate(data if data is not None else {})
    except PydanticValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in error.get('loc', ())) or '<root>'}: "
            f"{error.get('msg', 'validation error')}"
            for error in exc.errors()
        )
        raise SchemaDocumentError(reference, details) from exc
