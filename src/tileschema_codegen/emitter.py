"""
Renders compiled schema values into Python modules and writes them out.

Rendering is pure: every module is produced as text into an
:class:`ArtifactSet` first.  Only :class:`FileSystemEmitter` touches the
disk, and it replaces the output directory as a whole so a failed run never
leaves half-written files behind.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from tileschema_core.ports import ArtifactSet
from tileschema_expressions.utils import quote

from .naming import (
    attribute_name,
    constant_name,
    indent,
    one_line,
    paragraphs,
    upper_camel,
    with_protocol_name,
)

if TYPE_CHECKING:
    from .compiler import CompiledField, CompiledLayer, CompiledTable, CompiledTables
    from .config import GeneratorConfig
    from .schema import TileSet

logger = logging.getLogger(__name__)

GENERATED_FILE_HEADER = """\
# Copyright (c) 2016, KlokanTech.com & OpenMapTiles contributors.
# All rights reserved.
#
# Code license: BSD 3-Clause License
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# * Redistributions of source code must retain the above copyright notice, this
#   list of conditions and the following disclaimer.
#
# * Redistributions in binary form must reproduce the above copyright notice,
#   this list of conditions and the following disclaimer in the documentation
#   and/or other materials provided with the distribution.
#
# * Neither the name of the copyright holder nor the names of its
#   contributors may be used to endorse or promote products derived from
#   this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
# OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
# OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
#
# Design license: CC-BY 4.0
#
# See https://github.com/openmaptiles/openmaptiles/blob/master/LICENSE.md for details on usage
#
# AUTOGENERATED BY tileschema-codegen -- DO NOT MODIFY
# ruff: noqa
"""

_EXPRESSION_IMPORTS = """\
from tileschema_expressions import (  # noqa: F401
    Expression,
    MultiExpressionIndex,
    Rule,
    SourceElement,
    and_,
    match_any,
    match_field,
    match_type,
    not_,
    or_,
)
"""


def _docstring(lines: Iterable[str], spaces: int = 0) -> str:
    body = "\n\n".join(line for line in lines if line)
    return indent(f'"""\n{body}\n"""', spaces)


# ---------------------------------------------------------------------------
# schema.py
# ---------------------------------------------------------------------------


def render_schema_module(
    tileset: TileSet,
    layers: Iterable[CompiledLayer],
    config: GeneratorConfig,
) -> str:
    """
    Render the layer definitions module.

    The module carries the tileset constants, a ``Layer`` base class, one
    class per layer (attribute names, allowed values and field mapping
    indexes) and ``create_instances()``, which instantiates the matching
    implementation classes of ``config.layers_package``.
    """
    layers = list(layers)
    parts = [
        GENERATED_FILE_HEADER,
        _docstring(
            [
                "All vector tile layer definitions, attributes and allowed values "
                f"of the OpenMapTiles vector tile schema {one_line(config.tag)}.",
                f"Generated from {config.source_link(config.root_document)}",
            ]
        ),
        "",
        "from __future__ import annotations",
        "",
        "import importlib",
        "from typing import Any, ClassVar",
        "",
        _EXPRESSION_IMPORTS,
        f"NAME = {quote(tileset.name)}",
        f"DESCRIPTION = {quote(tileset.description)}",
        f"VERSION = {quote(tileset.version)}",
        f"ATTRIBUTION = {quote(tileset.attribution)}",
        f"LANGUAGES = ({''.join(quote(lang) + ', ' for lang in tileset.languages)})",
        f"LAYERS_PACKAGE = {quote(config.layers_package)}",
        "",
        "",
        _LAYER_BASE,
    ]
    for layer in layers:
        parts.extend(["", "", _render_layer(layer, config)])

    layer_names = "".join(f"{layer.class_name}, " for layer in layers)
    parts.extend(
        [
            "",
            "",
            f"LAYERS: tuple[type[Layer], ...] = ({layer_names})",
            "",
            "",
            _CREATE_INSTANCES,
        ]
    )
    return "\n".join(parts)


_LAYER_BASE = '''\
class Layer:
    """A vector tile layer of the schema."""

    BUFFER_SIZE: ClassVar[float]
    LAYER_NAME: ClassVar[str]

    def name(self) -> str:
        return self.LAYER_NAME'''

_CREATE_INSTANCES = '''\
def create_instances(*args: Any, **kwargs: Any) -> list[Layer]:
    """
    Instantiate the implementation of every layer, in schema order.

    Each implementation is the class named like its layer definition in
    ``LAYERS_PACKAGE``; all of them receive the same arguments.
    """
    module = importlib.import_module(LAYERS_PACKAGE)
    return [getattr(module, layer.__name__)(*args, **kwargs) for layer in LAYERS]
'''


def _render_layer(layer: CompiledLayer, config: GeneratorConfig) -> str:
    link = config.source_link(f"layers/{layer.id}/{layer.id}.yaml")
    lines = [
        f"class {layer.class_name}(Layer):",
        _docstring([*paragraphs(layer.description), f"Generated from {link}"], 4),
        "",
        f"    BUFFER_SIZE: ClassVar[float] = {float(layer.buffer_size)!r}",
        f"    LAYER_NAME: ClassVar[str] = {quote(layer.id)}",
        "",
        indent(_render_fields(layer), 4),
        "",
        indent(_render_field_values(layer), 4),
        "",
        indent(_render_field_mappings(layer), 4),
    ]
    return "\n".join(lines)


def _render_fields(layer: CompiledLayer) -> str:
    lines = [
        "class Fields:",
        f'    """Attribute names for map elements in the {one_line(layer.id)} layer."""',
    ]
    for field in layer.fields:
        lines.append("")
        lines.extend(f"    {line}" for line in _field_comment(field))
        lines.append(f"    {constant_name(field.name)} = {quote(field.name)}")
    return "\n".join(lines)


def _field_comment(field: CompiledField) -> list[str]:
    comment = [f"#: {one_line(field.description)}".rstrip()]
    if field.documented_values:
        comment.extend(["#:", "#: Allowed values:", "#:"])
        comment.extend(f"#: - {one_line(value)}".rstrip() for value in field.documented_values)
    return comment


def _render_field_values(layer: CompiledLayer) -> str:
    lines = [
        "class FieldValues:",
        f'    """Attribute values for map elements in the {one_line(layer.id)} layer."""',
    ]
    for field in layer.fields:
        if not field.allowed_values:
            continue
        lines.append("")
        lines.extend(
            f"    {constant_name(field.name, value)} = {quote(value)}"
            for value in field.allowed_values
        )
        values = ", ".join(quote(v) for v in field.allowed_values)
        lines.append(f"    {constant_name(field.name, 'values')} = frozenset(({values},))")
    return "\n".join(lines)


def _render_field_mappings(layer: CompiledLayer) -> str:
    lines = [
        "class FieldMappings:",
        "    \"\"\"Mappings from element tags to attribute values in the "
        f'{one_line(layer.id)} layer."""',
    ]
    for field in layer.fields:
        if field.mapping is None:
            continue
        lines.append("")
        lines.append(f"    {upper_camel(field.name)} = {field.mapping.to_source()}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# tables.py
# ---------------------------------------------------------------------------


def render_tables_module(tables: CompiledTables, config: GeneratorConfig) -> str:
    """
    Render the imposm3 table rows module.

    Every table except ``relation_member`` ones becomes a frozen dataclass
    built from a matched element, with its ``MAPPING`` expression and a
    ``Handler`` ABC layer implementations subclass to receive its rows.
    ``MAPPINGS`` indexes all row constructors and
    ``generate_dispatch_map()`` routes rows to handlers.
    """
    parts = [
        GENERATED_FILE_HEADER,
        _docstring(
            [
                "Element parsers generated from the imposm3 table definitions of the "
                f"OpenMapTiles vector tile schema {one_line(config.tag)}.",
                "Each row class holds the typed attributes imposm3 would store in its "
                "table. Layer implementations subscribe to the rows of a table by "
                "subclassing its ``Handler``.",
                f"Generated from {config.source_link(config.root_document)}",
            ]
        ),
        "",
        "from __future__ import annotations",
        "",
        "from abc import ABC, abstractmethod",
        "from collections.abc import Callable, Iterable",
        "from dataclasses import dataclass",
        "from typing import Any, ClassVar, Generic, Protocol, TypeVar, runtime_checkable",
        "",
        _EXPRESSION_IMPORTS,
        'T = TypeVar("T", bound="Row")',
        "",
        "",
        _ROW_TYPES,
    ]
    for name, declared_type in tables.field_types.items():
        parts.extend(["", "", _render_with_protocol(name, declared_type.annotation)])
    row_tables = tables.row_tables
    for table in row_tables:
        parts.extend(["", "", _render_table(table)])

    rules = "".join(
        f"        Rule({ref.class_name}.MAPPING, {ref.to_source()}),\n"
        for ref in tables.index.results
    )
    handlers = "".join(
        f"    ({t.class_name}, {t.class_name}.Handler, {quote(_handler_method(t))}),\n"
        for t in row_tables
    )
    parts.extend(
        [
            "",
            "",
            "#: Index choosing the tables an element should appear in based on its tags.",
            "MAPPINGS: MultiExpressionIndex[RowConstructor[Any]] = MultiExpressionIndex.of(",
            f"    [\n{rules}    ]",
            ")",
            "",
            f"_HANDLERS: tuple[tuple[type[Row], type, str], ...] = (\n{handlers})",
            "",
            "",
            _DISPATCH_MAP,
        ]
    )
    return "\n".join(parts)


_ROW_TYPES = '''\
class Row(Protocol):
    """An element as it would appear in a row of an imposm3 table."""

    source: SourceElement


@dataclass(frozen=True)
class RowConstructor(Generic[T]):
    """The class of a table row and the factory building it from an element."""

    row_class: type[T]
    create: Callable[[SourceElement, str], T]

    def __call__(self, source: SourceElement, mapping_key: str) -> T:
        return self.create(source, mapping_key)


@dataclass(frozen=True)
class RowHandlerAndClass(Generic[T]):
    """The class of a layer implementation and its bound row handler."""

    handler_class: type
    handler: Callable[[T, Any], None]

    def process(self, element: T, features: Any) -> None:
        self.handler(element, features)'''

_DISPATCH_MAP = '''\
def generate_dispatch_map(
    handlers: Iterable[object],
) -> dict[type[Row], list[RowHandlerAndClass[Any]]]:
    """
    Map each row class to the handlers subscribed to it.

    A layer implementation subscribes to a table by subclassing the
    ``Handler`` of its row class; handlers keep the order they are given in.
    """
    result: dict[type[Row], list[RowHandlerAndClass[Any]]] = {}
    for handler in handlers:
        for row_class, handler_class, method in _HANDLERS:
            if isinstance(handler, handler_class):
                result.setdefault(row_class, []).append(
                    RowHandlerAndClass(type(handler), getattr(handler, method))
                )
    return result
'''


def _render_with_protocol(field_name: str, annotation: str) -> str:
    return "\n".join(
        [
            "@runtime_checkable",
            f"class {with_protocol_name(field_name)}(Protocol):",
            f'    """Rows with a ``{annotation}`` ``{one_line(field_name)}`` attribute."""',
            "",
            f"    {attribute_name(field_name)}: {annotation}",
        ]
    )


def _handler_method(table: CompiledTable) -> str:
    return f"process_{attribute_name(table.table_name)}"


def _render_table(table: CompiledTable) -> str:
    cls = table.class_name
    bases = ", ".join(["Row", *(with_protocol_name(f.name) for f in table.fields)])
    arguments = "".join(f"            {f.extraction.to_source()},\n" for f in table.fields)
    lines = [
        "@dataclass(frozen=True)",
        f"class {cls}({bases}):",
        f'    """An element that would appear in the ``{table.table_name}`` table."""',
        "",
        *(f"    {attribute_name(f.name)}: {f.declared_type.annotation}" for f in table.fields),
        "",
        "    #: Imposm3 mapping selecting the elements of this table.",
        f"    MAPPING: ClassVar[Expression] = {table.expression.to_source()}",
        "",
        "    @classmethod",
        f"    def create(cls, source: SourceElement, mapping_key: str) -> {cls}:",
        f"        return cls(\n{arguments}        )",
        "",
        "    class Handler(ABC):",
        f'        """Layer implementations subclass this to receive ``{cls}`` rows."""',
        "",
        "        @abstractmethod",
        f"        def {_handler_method(table)}(self, element: {cls}, features: Any) -> None:",
        "            ...",
    ]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Emission
# ---------------------------------------------------------------------------


class FileSystemEmitter:
    """
    Writes an :class:`ArtifactSet` into ``output_dir``, replacing it.

    Files are written into a temporary sibling directory first, which is then
    swapped in place of the previous output.  If the swap fails the previous
    output is restored.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = Path(output_dir)

    def emit(self, artifacts: ArtifactSet) -> None:
        target = self.output_dir.resolve()
        target.parent.mkdir(parents=True, exist_ok=True)
        staging = Path(tempfile.mkdtemp(prefix=f".{target.name}-", dir=target.parent))
        try:
            for relative, text in artifacts:
                path = staging / relative
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(text, encoding="utf-8")
                logger.debug("Rendered %s", relative)
            self._swap(staging, target)
        except BaseException:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        for relative, _ in artifacts:
            logger.info("Wrote %s", target / relative)

    @staticmethod
    def _swap(staging: Path, target: Path) -> None:
        backup: Path | None = None
        if target.exists():
            backup = target.with_name(f".{target.name}.previous")
            if backup.exists():
                shutil.rmtree(backup)
            os.replace(target, backup)
        try:
            os.replace(staging, target)
        except OSError:
            if backup is not None:
                os.replace(backup, target)
            raise
        if backup is not None:
            shutil.rmtree(backup, ignore_errors=True)
