"""
Object model for the tileset and layer documents.

``openmaptiles.yaml`` lists the layer files; each ``layers/<id>/<id>.yaml``
describes the layer's fields and its datasources.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field

from tileschema_mapping.model import SchemaModel

IMPOSM3_DATASOURCE = "imposm3"


class TileSet(SchemaModel):
    """Metadata of the whole vector tile schema."""

    layers: list[str] = Field(default_factory=list)
    version: str = ""
    attribution: str = ""
    name: str = ""
    description: str = ""
    languages: list[str] = Field(default_factory=list)


class TileSetDocument(SchemaModel):
    tileset: TileSet


class LayerDetails(SchemaModel):
    """
    A vector tile layer.

    ``fields`` maps an attribute name to either its description or a
    mapping with ``description`` and ``values``.
    """

    id: str
    description: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)
    buffer_size: float = 0.0


class Datasource(SchemaModel):
    type: str
    mapping_file: str | None = None


class LayerDocument(SchemaModel):
    layer: LayerDetails
    datasources: list[Datasource] = Field(default_factory=list)
