from .emitter import ArtifactSet, IArtifactEmitter
from .fetcher import IDocumentFetcher

__all__ = [
    "ArtifactSet",
    "IArtifactEmitter",
    "IDocumentFetcher",
]
