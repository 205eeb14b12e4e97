"""Cosine-similarity ranker: full linear scan over the loaded index.

  sim(A, B) = (A · B) / (||A|| * ||B||)      0.0 if either norm is zero or non-finite

Ranking policy:
  1. Score every stored embedding against the query vector.
  2. Drop results with similarity < min_similarity.
  3. Stable sort by similarity descending (ties keep stored embedding order).
  4. Keep the first top_k.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from ragindex.errors import CorruptIndex, DimensionMismatch, IndexNotFound
from ragindex.index.models import IndexData, SearchResult


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors, in [-1, 1].

    A zero vector is dissimilar from everything, itself included (returns 0.0).
    So is a vector holding NaN or infinity.

    Raises:
        DimensionMismatch: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(b), len(a))
    if not all(map(math.isfinite, a)) or not all(map(math.isfinite, b)):
        return 0.0

    scale_a = max((abs(x) for x in a), default=0.0)
    scale_b = max((abs(y) for y in b), default=0.0)
    if scale_a == 0.0 or scale_b == 0.0:
        return 0.0
    # Scale to max |component| == 1 so no product or sum can overflow
    a = [x / scale_a for x in a]
    b = [y / scale_b for y in b]

    dot = math.fsum(x * y for x, y in zip(a, b))
    sq_a = math.fsum(x * x for x in a)
    sq_b = math.fsum(y * y for y in b)

    # Rounding can push |sim| a hair past 1.0 for parallel vectors
    return max(-1.0, min(1.0, dot / math.sqrt(sq_a * sq_b)))


def rank(
    query_vector: Sequence[float],
    index: IndexData | None,
    top_k: int = 5,
    min_similarity: float = 0.0,
) -> list[SearchResult]:
    """Return at most *top_k* results with similarity >= *min_similarity*, best-first.

    Args:
        query_vector: Embedding of the question.
        index: Loaded index snapshot; None means no index was ever built.
        top_k: Maximum number of results.
        min_similarity: Inclusive similarity threshold.

    Raises:
        IndexNotFound: If *index* is None.
        DimensionMismatch: If the query length differs from the stored vectors.
        CorruptIndex: If an embedding references a chunk that is not stored.
    """
    if index is None:
        raise IndexNotFound("No index found. Build one before asking questions.")

    if not index.embeddings or top_k <= 0:
        return []

    chunk_map = index.chunk_map()
    scored: list[SearchResult] = []

    for embedding in index.embeddings:
        if embedding.dimension != len(query_vector):
            raise DimensionMismatch(embedding.dimension, len(query_vector))
        similarity = cosine_similarity(query_vector, embedding.vector)
        if similarity < min_similarity:
            continue
        chunk = chunk_map.get(embedding.chunk_id)
        if chunk is None:
            raise CorruptIndex(f"Chunk not found for embedding: {embedding.chunk_id}")
        scored.append(SearchResult(chunk=chunk, similarity=similarity, embedding=embedding))

    # list.sort is stable: equal scores keep stored embedding order
    scored.sort(key=lambda r: r.similarity, reverse=True)
    return scored[:top_k]
