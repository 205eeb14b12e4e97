"""Index layer: document loading, chunking, persistence and the build pipeline."""

from ragindex.index.builder import IndexBuilder
from ragindex.index.chunker import TextChunker
from ragindex.index.loader import DocumentLoader
from ragindex.index.store import IndexStore

__all__ = [
    "DocumentLoader",
    "IndexBuilder",
    "IndexStore",
    "TextChunker",
]
