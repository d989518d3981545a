"""
Command line entry point.

Usage::

    tileschema-codegen --tag v3.12.2 --output src/basemap/generated
    tileschema-codegen --base-url ../openmaptiles/ --output generated -v
"""

from __future__ import annotations

import argparse
import logging
import sys

from tileschema_core.exceptions import TileSchemaError

from .config import DEFAULT_BASE_URL, DEFAULT_TAG, GeneratorConfig
from .emitter import FileSystemEmitter
from .fetcher import SchemaDocumentFetcher
from .generator import SchemaGenerator

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tileschema-codegen",
        description=(
            "Generate Python layer definitions and imposm3 table parsers "
            "from an OpenMapTiles schema."
        ),
    )
    parser.add_argument("--tag", help=f"schema tag or branch (default: {DEFAULT_TAG})")
    parser.add_argument(
        "--base-url",
        help=(
            "schema root URL or local directory; {tag} is substituted "
            f"(default: {DEFAULT_BASE_URL})"
        ),
    )
    parser.add_argument("--output", help="directory of the generated package (default: generated)")
    parser.add_argument(
        "--layers-package",
        help="module holding the layer implementations (default: layers)",
    )
    parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds (default: 30)")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    config = GeneratorConfig.from_namespace(args)
    try:
        with SchemaDocumentFetcher.from_config(config) as fetcher:
            SchemaGenerator(config, fetcher, FileSystemEmitter(config.output_dir)).run()
    except TileSchemaError as exc:
        logger.error("Generation failed: %s", exc)
        logger.debug("Error details: %s", exc.to_dict())
        return 1
    return 0
