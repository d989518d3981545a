"""Generator configuration."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_TAG = "v3.12.2"
DEFAULT_BASE_URL = "https://raw.githubusercontent.com/openmaptiles/openmaptiles/{tag}/"
DEFAULT_ROOT_DOCUMENT = "openmaptiles.yaml"
DEFAULT_SOURCE_URL = "https://github.com/openmaptiles/openmaptiles/blob/{tag}/"
DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "tileschema-codegen/0.1.0"


@dataclass(frozen=True)
class GeneratorConfig:
    """Configuration for one generation run.

    Attributes:
        tag: Schema tag or branch to crawl.
        base_url: Schema root; ``{tag}`` is substituted.  May be a local
            directory holding a checkout of the schema.
        root_document: Tileset document, relative to the schema root.
        output_dir: Directory of the generated package.  Replaced as a
            whole on success.
        layers_package: Module holding the layer implementations that
            ``create_instances()`` of the generated schema instantiates.
        source_url: Browsable schema root linked from generated docstrings.
        timeout: HTTP timeout in seconds.
        user_agent: HTTP ``User-Agent`` header.
    """

    tag: str = DEFAULT_TAG
    base_url: str = DEFAULT_BASE_URL
    root_document: str = DEFAULT_ROOT_DOCUMENT
    output_dir: Path = field(default_factory=lambda: Path("generated"))
    layers_package: str = "layers"
    source_url: str = DEFAULT_SOURCE_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def schema_base(self) -> str:
        """Schema root with the tag substituted, always ending in ``/``."""
        base = self.base_url.format(tag=self.tag)
        return base if base.endswith("/") else base + "/"

    @property
    def root_reference(self) -> str:
        return self.resolve(self.root_document)

    def resolve(self, relative: str) -> str:
        """Reference of a document given relative to the schema root."""
        return self.schema_base + relative

    def source_link(self, relative: str) -> str:
        """Browsable link to a schema document, for generated docstrings."""
        return self.source_url.format(tag=self.tag) + relative

    @classmethod
    def from_namespace(cls, args: argparse.Namespace) -> GeneratorConfig:
        """Build a config from parsed CLI arguments, keeping defaults for unset ones."""
        overrides = {
            name: value
            for name, value in (
                ("tag", args.tag),
                ("base_url", args.base_url),
                ("output_dir", Path(args.output) if args.output else None),
                ("layers_package", args.layers_package),
                ("timeout", args.timeout),
            )
            if value is not None
        }
        return cls(**overrides)
