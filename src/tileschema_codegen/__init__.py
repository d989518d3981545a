"""Crawls an OpenMapTiles schema and generates Python layer and table modules."""

from .compiler import (
    CompiledField,
    CompiledLayer,
    CompiledTable,
    CompiledTables,
    RowConstructorRef,
    compile_layers,
    compile_tables,
)
from .config import GeneratorConfig
from .crawler import CrawledSchema, SchemaCrawler, resolve_sibling
from .emitter import (
    GENERATED_FILE_HEADER,
    FileSystemEmitter,
    render_schema_module,
    render_tables_module,
)
from .fetcher import (
    HttpDocumentFetcher,
    LocalDocumentFetcher,
    SchemaDocumentFetcher,
    SchemaLoader,
    load_yaml,
)
from .generator import SchemaGenerator
from .schema import (
    Datasource,
    LayerDetails,
    LayerDocument,
    TileSet,
    TileSetDocument,
)

__all__ = [
    # Configuration
    "GeneratorConfig",
    # Fetching
    "SchemaLoader",
    "load_yaml",
    "HttpDocumentFetcher",
    "LocalDocumentFetcher",
    "SchemaDocumentFetcher",
    # Schema documents
    "TileSet",
    "TileSetDocument",
    "LayerDetails",
    "LayerDocument",
    "Datasource",
    "CrawledSchema",
    "SchemaCrawler",
    "resolve_sibling",
    # Compilation
    "RowConstructorRef",
    "CompiledTable",
    "CompiledTables",
    "CompiledField",
    "CompiledLayer",
    "compile_tables",
    "compile_layers",
    # Rendering and emission
    "GENERATED_FILE_HEADER",
    "render_schema_module",
    "render_tables_module",
    "FileSystemEmitter",
    "SchemaGenerator",
]
