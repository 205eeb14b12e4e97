"""Domain models for the ragindex index layer."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

SCHEMA_VERSION = "1.0"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Document:
    """A plain-text file loaded once per index run. Never persisted."""

    filename: str
    content: str
    metadata: dict[str, str] = field(default_factory=dict)
    indexed_at: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class Chunk:
    """A positionally addressed substring of a document.

    ``end_index`` is exclusive: ``content == document.content[start_index:end_index]``.
    """

    document_id: str
    document_filename: str
    content: str
    start_index: int
    end_index: int
    chunk_index: int
    id: str = field(default_factory=new_id)


@dataclass(frozen=True)
class Embedding:
    chunk_id: str
    vector: list[float]
    model_name: str
    created_at: datetime = field(default_factory=utc_now)

    @property
    def dimension(self) -> int:
        return len(self.vector)


@dataclass(frozen=True)
class IndexMetadata:
    """Build parameters of one index snapshot."""

    total_documents: int
    total_chunks: int
    model_name: str
    chunk_size: int
    overlap_size: int
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class IndexData:
    """The persisted aggregate.

    ``chunks`` and ``embeddings`` correspond 1:1 through ``Embedding.chunk_id``;
    their positional order is not guaranteed to match.
    """

    chunks: list[Chunk]
    embeddings: list[Embedding]
    metadata: IndexMetadata
    schema_version: str = SCHEMA_VERSION

    def chunk_map(self) -> dict[str, Chunk]:
        return {c.id: c for c in self.chunks}

    @property
    def dimension(self) -> int | None:
        """Vector length shared by every embedding, or None for an empty index."""
        if not self.embeddings:
            return None
        return self.embeddings[0].dimension


@dataclass(frozen=True)
class SearchResult:
    chunk: Chunk
    similarity: float
    embedding: Embedding
