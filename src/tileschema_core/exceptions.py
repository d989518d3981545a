"""Root exception hierarchy shared by every tileschema package.

All exceptions inherit from ``TileSchemaError`` and provide ``to_dict()``
for structured error reporting.
"""

from __future__ import annotations

from typing import Any


class TileSchemaError(Exception):
    """Root exception for the entire tileschema toolkit."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class ValidationError(TileSchemaError):
    """A schema document has a structure the generator cannot compile."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{message} (at {path})" if path else message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "message": self.message,
            "path": self.path,
        }


class SchemaDocumentError(ValidationError):
    """A fetched document does not fit the schema object model."""

    def __init__(self, reference: str, details: str) -> None:
        self.reference = reference
        self.details = details
        super().__init__(
            f"Document '{reference}' does not match the schema: {details}",
            path=reference,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "SCHEMA_DOCUMENT_ERROR",
            "reference": self.reference,
            "details": self.details,
        }


class FetchError(TileSchemaError):
    """A schema document could not be retrieved or parsed.

    Opaque to the compiler: the run aborts, nothing is retried.
    """

    def __init__(self, reference: str, reason: str) -> None:
        self.reference = reference
        self.reason = reason
        super().__init__(f"Failed to fetch '{reference}': {reason}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "FETCH_ERROR",
            "reference": self.reference,
            "reason": self.reason,
        }


class DuplicateArtifactError(TileSchemaError):
    """Two rendered artifacts target the same output path."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Artifact '{path}' was already rendered")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "DUPLICATE_ARTIFACT",
            "path": self.path,
        }
