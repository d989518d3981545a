"""End-to-end tests for SchemaGenerator and the generated package."""

from __future__ import annotations

import dataclasses
import importlib
import sys
from types import SimpleNamespace

import pytest

from tileschema_codegen import (
    FileSystemEmitter,
    GeneratorConfig,
    SchemaDocumentFetcher,
    SchemaGenerator,
)
from tileschema_core import ArtifactSet
from tileschema_expressions import TaggedElement, and_, match_any, match_type
from tileschema_mapping import UnsupportedColumnKindError

FIXTURE_LAYERS = '''\
class Poi:
    def __init__(self, *args, **kwargs):
        self.args = args
        self.kwargs = kwargs


class Water(Poi):
    pass
'''


class RecordingEmitter:
    def __init__(self) -> None:
        self.emitted: list[ArtifactSet] = []

    def emit(self, artifacts: ArtifactSet) -> None:
        self.emitted.append(artifacts)


@pytest.fixture(scope="module")
def generated(tmp_path_factory, write_schema):
    """Generates, writes and imports the package of the sample schema."""
    root = tmp_path_factory.mktemp("generated")
    schema_dir = write_schema(root / "schema")
    package_root = root / "pkg"
    package_root.mkdir()
    (package_root / "omt_fixture_layers.py").write_text(FIXTURE_LAYERS, encoding="utf-8")
    output = package_root / "omt_generated"
    config = GeneratorConfig(
        base_url=str(schema_dir),
        output_dir=output,
        layers_package="omt_fixture_layers",
    )
    with SchemaDocumentFetcher() as fetcher:
        SchemaGenerator(config, fetcher, FileSystemEmitter(output)).run()

    sys.path.insert(0, str(package_root))
    importlib.invalidate_caches()
    try:
        yield SimpleNamespace(
            schema=importlib.import_module("omt_generated.schema"),
            tables=importlib.import_module("omt_generated.tables"),
        )
    finally:
        sys.path.remove(str(package_root))
        for name in [n for n in sys.modules if n.startswith(("omt_generated", "omt_fixture"))]:
            del sys.modules[name]


# -- pipeline ----------------------------------------------------------------


def test_generate_renders_without_emitting(config, fetcher):
    emitter = RecordingEmitter()
    artifacts = SchemaGenerator(config, fetcher, emitter).generate()

    assert list(artifacts.files) == ["__init__.py", "schema.py", "tables.py"]
    assert emitter.emitted == []


def test_run_emits_once(config, fetcher):
    emitter = RecordingEmitter()
    artifacts = SchemaGenerator(config, fetcher, emitter).run()
    assert emitter.emitted == [artifacts]


def test_schema_error_aborts_before_emission(config, documents, make_fetcher):
    documents["layers/poi/mapping.yaml"]["tables"]["poi_point"]["columns"].append(
        {"name": "rank", "type": "float"}
    )
    emitter = RecordingEmitter()

    with pytest.raises(UnsupportedColumnKindError, match="osm_poi_point"):
        SchemaGenerator(config, make_fetcher(documents), emitter).run()
    assert emitter.emitted == []


def test_run_writes_package(schema_dir, tmp_path):
    output = tmp_path / "out" / "generated"
    config = GeneratorConfig(base_url=str(schema_dir), output_dir=output)
    with SchemaDocumentFetcher() as fetcher:
        SchemaGenerator(config, fetcher, FileSystemEmitter(output)).run()

    assert sorted(p.name for p in output.iterdir()) == ["__init__.py", "schema.py", "tables.py"]
    assert "DO NOT MODIFY" in (output / "tables.py").read_text(encoding="utf-8")


# -- generated tables module -------------------------------------------------


def test_generated_mapping_expression(generated):
    assert generated.tables.OsmPoiPoint.MAPPING == and_(
        match_any("amenity", "restaurant", "cafe"), match_type("point")
    )


def test_generated_index_builds_rows(generated):
    tables = generated.tables
    element = TaggedElement({"amenity": "cafe", "name": "Corner"}, frozenset({"point"}))

    (constructor,) = tables.MAPPINGS.get_matches(element)
    row = constructor(element, "amenity")

    assert constructor.row_class is tables.OsmPoiPoint
    assert row == tables.OsmPoiPoint("amenity", "Corner", element)
    assert row.source is element
    assert isinstance(row, tables.WithName)
    assert not isinstance(row, tables.WithLayer)
    with pytest.raises(dataclasses.FrozenInstanceError):
        row.name = "Other"


def test_generated_row_extracts_typed_values(generated):
    tables = generated.tables
    element = TaggedElement({"shop": "bakery", "layer": "2"}, frozenset({"polygon"}))

    (constructor,) = tables.MAPPINGS.get_matches(element)
    row = constructor(element, "shop")

    assert type(row) is tables.OsmPoiPolygon
    assert (row.subclass, row.name, row.layer) == ("bakery", None, 2)


def test_generated_index_respects_reject_filter(generated):
    element = TaggedElement({"shop": "bakery", "access": "private"}, frozenset({"polygon"}))
    assert generated.tables.MAPPINGS.get_matches(element) == []


def test_relation_member_tables_are_not_generated(generated):
    assert not hasattr(generated.tables, "OsmRouteMember")
    assert hasattr(generated.tables, "WithNetwork")


def test_generated_dispatch_map(generated):
    tables = generated.tables

    class PoiLayer(tables.OsmPoiPoint.Handler, tables.OsmPoiPolygon.Handler):
        def __init__(self) -> None:
            self.seen: list[tuple[str, object]] = []

        def process_osm_poi_point(self, element, features):
            self.seen.append(("point", element))

        def process_osm_poi_polygon(self, element, features):
            self.seen.append(("polygon", element))

    layer = PoiLayer()
    dispatch = tables.generate_dispatch_map([layer, object()])

    assert list(dispatch) == [tables.OsmPoiPoint, tables.OsmPoiPolygon]
    (point_handler,) = dispatch[tables.OsmPoiPoint]
    assert point_handler.handler_class is PoiLayer

    element = TaggedElement({"amenity": "cafe"}, frozenset({"point"}))
    row = tables.OsmPoiPoint.create(element, "amenity")
    point_handler.process(row, None)
    assert layer.seen == [("point", row)]


def test_handler_is_abstract(generated):
    with pytest.raises(TypeError):
        generated.tables.OsmWaterPolygon.Handler()


# -- generated schema module -------------------------------------------------


def test_generated_schema_constants(generated):
    schema = generated.schema
    assert schema.NAME == "OpenMapTiles"
    assert schema.VERSION == "3.12.2"
    assert schema.LANGUAGES == ("en", "de")
    assert schema.LAYERS == (schema.Poi, schema.Water)


def test_generated_layer_classes(generated):
    poi = generated.schema.Poi
    assert poi.LAYER_NAME == "poi"
    assert poi.BUFFER_SIZE == 64.0
    assert poi.Fields.CLASS == "class"
    assert poi.Fields.NAME == "name"
    assert poi.FieldValues.SUBCLASS_VALUES == frozenset({"restaurant", "cafe"})
    assert poi.FieldValues.CLASS_FOOD == "food"
    assert generated.schema.Water.FieldValues.CLASS_VALUES == frozenset({"lake", "ocean"})


def test_generated_field_mapping(generated):
    mapping = generated.schema.Poi.FieldMappings.Class
    assert mapping.get_matches(TaggedElement({"amenity": "cafe"})) == ["food"]
    assert mapping.get_matches(TaggedElement({"shop": "books", "amenity": "cafe"})) == [
        "shop",
        "food",
    ]


def test_create_instances(generated):
    instances = generated.schema.create_instances("translations", stats=None)

    assert [type(i).__name__ for i in instances] == ["Poi", "Water"]
    assert instances[0].args == ("translations",)
    assert instances[1].kwargs == {"stats": None}
