"""IArtifactEmitter — consumes the fully rendered output of a run."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from ..exceptions import DuplicateArtifactError


@dataclass
class ArtifactSet:
    """
    Ordered ``relative path → text`` collection of generated files.

    Artifacts are buffered here until the whole run has succeeded, then
    handed to an emitter in one call.
    """

    files: dict[str, str] = field(default_factory=dict)

    def add(self, path: str, text: str) -> None:
        if path in self.files:
            raise DuplicateArtifactError(path)
        self.files[path] = text

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.files.items())

    def __len__(self) -> int:
        return len(self.files)

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def __getitem__(self, path: str) -> str:
        return self.files[path]


@runtime_checkable
class IArtifactEmitter(Protocol):
    """Writes a complete :class:`ArtifactSet`; agnostic of the output format."""

    def emit(self, artifacts: ArtifactSet) -> None:
        """Persist every artifact, or nothing at all."""
        ...
