"""Fixed-window text chunker with character overlap."""

from __future__ import annotations

from ragindex.errors import InvalidConfiguration
from ragindex.index.models import Chunk, Document


class TextChunker:
    """Split document text into overlapping fixed-size character windows.

    Consecutive chunks overlap by exactly ``overlap_size`` characters; the final
    chunk may be shorter than ``chunk_size``. Splitting is purely by character
    offset: no sentence or word-boundary awareness and no stripping.

    Example with chunk_size=4, overlap_size=2 on "ABCDEFGHIJ":
        [0,4) "ABCD", [2,6) "CDEF", [4,8) "EFGH", [6,10) "GHIJ", [8,10) "IJ"

    Args:
        chunk_size: Maximum number of characters per chunk.
        overlap_size: Characters shared between consecutive chunks.

    Raises:
        InvalidConfiguration: Unless ``chunk_size > overlap_size > 0``.
    """

    def __init__(self, chunk_size: int = 500, overlap_size: int = 150) -> None:
        if overlap_size <= 0:
            raise InvalidConfiguration(
                f"overlap_size must be > 0, got {overlap_size}"
            )
        if chunk_size <= overlap_size:
            raise InvalidConfiguration(
                f"chunk_size ({chunk_size}) must be greater than overlap_size ({overlap_size})"
            )
        self.chunk_size = chunk_size
        self.overlap_size = overlap_size

    @property
    def step(self) -> int:
        return self.chunk_size - self.overlap_size

    def chunk(self, document: Document) -> list[Chunk]:
        """Return the ordered chunks of *document*. Empty text yields no chunks."""
        text = document.content
        length = len(text)
        chunks: list[Chunk] = []
        offset = 0

        while offset < length:
            end = min(offset + self.chunk_size, length)
            chunks.append(
                Chunk(
                    document_id=document.id,
                    document_filename=document.filename,
                    content=text[offset:end],
                    start_index=offset,
                    end_index=end,
                    chunk_index=len(chunks),
                )
            )
            offset += self.step

        return chunks
