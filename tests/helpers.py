"""Builders for index fixtures used across the test suite."""

from __future__ import annotations

from datetime import datetime, timezone

from ragindex.index.models import Chunk, Embedding, IndexData, IndexMetadata

TS = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_chunk(i: int, text: str | None = None, doc: str = "doc-1", filename: str = "doc.txt") -> Chunk:
    content = text if text is not None else f"chunk text number {i}"
    return Chunk(
        id=f"chunk-{i}",
        document_id=doc,
        document_filename=filename,
        content=content,
        start_index=i * 10,
        end_index=i * 10 + len(content),
        chunk_index=i,
    )


def make_embedding(i: int, vector: list[float]) -> Embedding:
    return Embedding(chunk_id=f"chunk-{i}", vector=vector, model_name="test/embed", created_at=TS)


def make_index(vectors: list[list[float]]) -> IndexData:
    """IndexData with one chunk per vector, all from a single document."""
    chunks = [make_chunk(i) for i in range(len(vectors))]
    embeddings = [make_embedding(i, v) for i, v in enumerate(vectors)]
    metadata = IndexMetadata(
        total_documents=1 if chunks else 0,
        total_chunks=len(chunks),
        model_name="test/embed",
        chunk_size=500,
        overlap_size=150,
        created_at=TS,
    )
    return IndexData(chunks=chunks, embeddings=embeddings, metadata=metadata)
