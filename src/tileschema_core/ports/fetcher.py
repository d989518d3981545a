"""IDocumentFetcher — resolves a document reference to parsed content."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class IDocumentFetcher(Protocol):
    """
    Blocking fetch of one schema document.

    Implementations return the parsed document (plain dicts, lists and
    scalars) or raise :class:`~tileschema_core.exceptions.FetchError`.
    No retries are expected from callers.
    """

    def fetch(self, reference: str) -> Any:
        """Return the parsed content of *reference*."""
        ...
