"""Shared schema documents and fixtures for code generation tests."""

from __future__ import annotations

import copy
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
import yaml

from tileschema_codegen import GeneratorConfig
from tileschema_core import FetchError

SCHEMA_ROOT = "schema/"

TILESET = {
    "tileset": {
        "name": "OpenMapTiles",
        "version": "3.12.2",
        "attribution": "© OpenMapTiles © OpenStreetMap contributors",
        "description": "A tileset showcasing all layers in OpenMapTiles.",
        "languages": ["en", "de"],
        "layers": ["layers/poi/poi.yaml", "layers/water/water.yaml"],
    }
}

POI_LAYER = {
    "layer": {
        "id": "poi",
        "description": "Points of interest.\n\nOne point per *amenity* or shop.",
        "buffer_size": 64,
        "fields": {
            "name": "The OSM name value of the POI.",
            "class": {
                "description": "More general classes of POIs.",
                "values": {
                    "shop": {"shop": "__any__"},
                    "food": {"amenity": ["restaurant", "cafe"]},
                    "ignored": None,
                },
            },
            "subclass": {
                "description": "Original value of the tag.",
                "values": ["restaurant", "cafe (with seats)", 12],
            },
        },
    },
    "datasources": [{"type": "imposm3", "mapping_file": "./mapping.yaml"}],
}

POI_MAPPING = {
    "tables": {
        "poi_point": {
            "type": "point",
            "columns": [
                {"name": "osm_id", "type": "id"},
                {"name": "geometry", "type": "geometry"},
                {"name": "amenity_key", "type": "mapping_key"},
                {"name": "name", "key": "name", "type": "string"},
            ],
            "mapping": {"amenity": ["restaurant", "cafe"]},
        },
        "poi_polygon": {
            "type": "polygon",
            "columns": [
                {"name": "osm_id", "type": "id"},
                {"name": "subclass", "type": "mapping_value"},
                {"name": "name", "key": "name", "type": "string"},
                {"name": "layer", "key": "layer", "type": "integer"},
            ],
            "filters": {"reject": {"access": ["private"]}},
            "mapping": {"shop": "__any__", "amenity": ["cafe"]},
        },
    }
}

WATER_LAYER = {
    "layer": {
        "id": "water",
        "description": "Water polygons.",
        "buffer_size": 4,
        "fields": {"class": {"description": "Water class.", "values": ["lake", "ocean"]}},
    },
    "datasources": [
        {"type": "imposm3", "mapping_file": "mapping.yaml"},
        {"type": "imposm3", "mapping_file": "../poi/mapping.yaml"},
        {"type": "postgis"},
    ],
}

WATER_MAPPING = {
    "tables": {
        "water_polygon": {
            "type": "polygon",
            "columns": [
                {"name": "natural", "key": "natural", "type": "string"},
                {"name": "is_intermittent", "key": "intermittent", "type": "bool"},
            ],
            "mapping": {"natural": ["water", "bay"], "waterway": ["riverbank"]},
        },
        "route_member": {
            "type": "relation_member",
            "columns": [
                {"name": "member", "type": "member_id"},
                {"name": "name", "key": "name", "type": "string", "from_member": True},
                {"name": "network", "key": "network", "type": "string"},
            ],
            "mapping": {"route": ["ferry"]},
        },
    }
}

DOCUMENTS: dict[str, Any] = {
    "openmaptiles.yaml": TILESET,
    "layers/poi/poi.yaml": POI_LAYER,
    "layers/poi/mapping.yaml": POI_MAPPING,
    "layers/water/water.yaml": WATER_LAYER,
    "layers/water/mapping.yaml": WATER_MAPPING,
}


class FakeFetcher:
    """Serves documents from memory and records every reference fetched."""

    def __init__(self, documents: dict[str, Any], root: str = SCHEMA_ROOT) -> None:
        self.documents = {root + path: doc for path, doc in documents.items()}
        self.fetched: list[str] = []

    def fetch(self, reference: str) -> Any:
        self.fetched.append(reference)
        if reference not in self.documents:
            raise FetchError(reference, "HTTP 404")
        return self.documents[reference]


@pytest.fixture
def config() -> GeneratorConfig:
    return GeneratorConfig(base_url=SCHEMA_ROOT, tag="v3.12.2")


@pytest.fixture
def documents() -> dict[str, Any]:
    """A private copy of the sample schema documents, keyed by relative path."""
    return copy.deepcopy(DOCUMENTS)


@pytest.fixture
def make_fetcher() -> type[FakeFetcher]:
    return FakeFetcher


@pytest.fixture
def fetcher(documents: dict[str, Any]) -> FakeFetcher:
    return FakeFetcher(documents)


def _write_schema(root: Path) -> Path:
    for relative, document in DOCUMENTS.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        text = yaml.safe_dump(document, allow_unicode=True, sort_keys=False)
        path.write_text(text, encoding="utf-8")
    return root


@pytest.fixture(scope="session")
def write_schema() -> Callable[[Path], Path]:
    """Writes the sample schema as YAML files under a directory."""
    return _write_schema


@pytest.fixture
def schema_dir(tmp_path: Path) -> Path:
    return _write_schema(tmp_path / "schema")
