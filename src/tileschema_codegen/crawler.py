"""
Discovers the schema documents of one tileset.

Starts from the tileset document, then reads every layer file it lists, then
every imposm3 mapping file those layers reference.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import TYPE_CHECKING

from tileschema_mapping.model import Imposm3Table, MappingDocument, parse_document

from .schema import IMPOSM3_DATASOURCE, LayerDocument, TileSet, TileSetDocument

if TYPE_CHECKING:
    from tileschema_core.ports import IDocumentFetcher

    from .config import GeneratorConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrawledSchema:
    """Everything a generation run needs, in schema order.

    Attributes:
        tileset: Tileset metadata.
        layers: ``(layer file, layer document)`` pairs, as listed.
        tables: Table definitions of all mapping files, merged.
    """

    tileset: TileSet
    layers: list[tuple[str, LayerDocument]]
    tables: dict[str, Imposm3Table]


class SchemaCrawler:
    """Walks tileset → layer files → mapping files with one fetcher."""

    def __init__(self, fetcher: IDocumentFetcher, config: GeneratorConfig) -> None:
        self._fetcher = fetcher
        self._config = config

    def crawl(self) -> CrawledSchema:
        root = self._config.root_reference
        tileset = parse_document(TileSetDocument, self._fetcher.fetch(root), root).tileset

        layers: list[tuple[str, LayerDocument]] = []
        mapping_files: dict[str, None] = {}
        for layer_file in tileset.layers:
            reference = self._config.resolve(layer_file)
            layer = parse_document(LayerDocument, self._fetcher.fetch(reference), reference)
            layers.append((layer_file, layer))
            for datasource in layer.datasources:
                if datasource.type != IMPOSM3_DATASOURCE:
                    logger.warning(
                        "Unknown datasource type '%s' in %s", datasource.type, layer_file
                    )
                elif not datasource.mapping_file:
                    logger.warning("imposm3 datasource without mapping_file in %s", layer_file)
                else:
                    mapping_files[resolve_sibling(layer_file, datasource.mapping_file)] = None

        tables: dict[str, Imposm3Table] = {}
        for mapping_file in mapping_files:
            reference = self._config.resolve(mapping_file)
            document = parse_document(
                MappingDocument, self._fetcher.fetch(reference), reference
            )
            tables.update(document.tables)

        logger.info(
            "Crawled %d layers and %d tables from %d mapping files",
            len(layers),
            len(tables),
            len(mapping_files),
        )
        return CrawledSchema(tileset=tileset, layers=layers, tables=tables)


def resolve_sibling(document: str, relative: str) -> str:
    """Path of *relative* next to *document*: ``layers/a/a.yaml`` + ``mapping.yaml``."""
    return posixpath.normpath(posixpath.join(posixpath.dirname(document), relative))
