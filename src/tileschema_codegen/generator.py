"""
Generation pipeline: crawl → compile → render → emit.

Nothing is written until every artifact has been rendered, so any schema
error aborts the run with the previous output untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tileschema_core.ports import ArtifactSet

from .compiler import compile_layers, compile_tables
from .crawler import SchemaCrawler
from .emitter import GENERATED_FILE_HEADER, render_schema_module, render_tables_module

if TYPE_CHECKING:
    from tileschema_core.ports import IArtifactEmitter, IDocumentFetcher

    from .config import GeneratorConfig

logger = logging.getLogger(__name__)

SCHEMA_MODULE = "schema.py"
TABLES_MODULE = "tables.py"
PACKAGE_INIT = "__init__.py"


class SchemaGenerator:
    """
    Generates the schema package of one tileset.

    Usage::

        with SchemaDocumentFetcher.from_config(config.timeout, config.user_agent) as fetcher:
            SchemaGenerator(config, fetcher, FileSystemEmitter(config.output_dir)).run()
    """

    def __init__(
        self,
        config: GeneratorConfig,
        fetcher: IDocumentFetcher,
        emitter: IArtifactEmitter,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.emitter = emitter

    def generate(self) -> ArtifactSet:
        """Render every artifact in memory without writing anything."""
        schema = SchemaCrawler(self.fetcher, self.config).crawl()
        tables = compile_tables(schema.tables)
        layers = compile_layers(schema.layers)

        artifacts = ArtifactSet()
        artifacts.add(PACKAGE_INIT, self._render_init())
        artifacts.add(SCHEMA_MODULE, render_schema_module(schema.tileset, layers, self.config))
        artifacts.add(TABLES_MODULE, render_tables_module(tables, self.config))
        return artifacts

    def run(self) -> ArtifactSet:
        artifacts = self.generate()
        self.emitter.emit(artifacts)
        logger.info(
            "Generated %d files for schema %s in %s",
            len(artifacts),
            self.config.tag,
            self.config.output_dir,
        )
        return artifacts

    def _render_init(self) -> str:
        return (
            f"{GENERATED_FILE_HEADER}"
            f'"""OpenMapTiles vector tile schema {self.config.tag}."""\n'
        )
