"""Identifier and docstring helpers for generated Python source."""

from __future__ import annotations

import keyword
import re

_NON_IDENTIFIER = re.compile(r"\W+")
_WHITESPACE = re.compile(r"\s+")
_PARAGRAPH_BREAK = re.compile(r"[\r\n]\s*[\r\n]+")


def _sanitize(name: str) -> str:
    cleaned = _NON_IDENTIFIER.sub("_", name.strip()).strip("_") or "_"
    return f"_{cleaned}" if cleaned[0].isdigit() else cleaned


def upper_camel(name: str) -> str:
    """``osm_water_polygon`` → ``OsmWaterPolygon``."""
    parts = [p for p in _sanitize(name).split("_") if p]
    camel = "".join(p[:1].upper() + p[1:].lower() for p in parts) or "_"
    if camel[0].isdigit():
        return f"_{camel}"
    return f"{camel}_" if keyword.iskeyword(camel) else camel


def constant_name(*parts: str) -> str:
    """``("class", "rail-way")`` → ``CLASS_RAIL_WAY``."""
    name = "_".join(_sanitize(p).upper() for p in parts)
    return f"{name}_" if keyword.iskeyword(name) else name


def attribute_name(name: str) -> str:
    """A snake_case attribute name safe to use in generated code: ``class`` → ``class_``."""
    cleaned = _sanitize(name)
    return f"{cleaned}_" if keyword.iskeyword(cleaned) else cleaned


def with_protocol_name(field_name: str) -> str:
    """``name:en`` → ``WithNameEn``, the protocol of rows carrying that attribute."""
    return upper_camel(f"with_{field_name}")


def one_line(text: str | None) -> str:
    """Collapse *text* to one line safe inside comments and docstrings."""
    return escape_docstring(_WHITESPACE.sub(" ", (text or "").strip()))


def paragraphs(text: str | None) -> list[str]:
    """Split markdown-ish *text* on blank lines, each paragraph on one line."""
    return [one_line(p) for p in _PARAGRAPH_BREAK.split((text or "").strip()) if p.strip()]


def escape_docstring(text: str) -> str:
    """Escape backslashes and triple quotes for a ``\"\"\"`` docstring."""
    return text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')


def indent(text: str, spaces: int) -> str:
    """Indent every non-empty line of *text*."""
    pad = " " * spaces
    return "\n".join(pad + line if line.strip() else "" for line in text.splitlines())
