"""Shared primitives for the tileschema toolkit: errors and collaborator ports."""

from .exceptions import (
    DuplicateArtifactError,
    FetchError,
    SchemaDocumentError,
    TileSchemaError,
    ValidationError,
)
from .ports import ArtifactSet, IArtifactEmitter, IDocumentFetcher

__all__ = [
    # Exceptions
    "TileSchemaError",
    "ValidationError",
    "SchemaDocumentError",
    "FetchError",
    "DuplicateArtifactError",
    # Ports
    "ArtifactSet",
    "IArtifactEmitter",
    "IDocumentFetcher",
]
