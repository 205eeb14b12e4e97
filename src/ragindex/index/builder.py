"""Index build pipeline: load → chunk → embed → save.

Every run is a full rebuild; the previous snapshot is replaced atomically on save.
Chunk embeddings are fetched through a fixed-size thread pool. ``Executor.map``
preserves input order, so ``embeddings[i]`` always belongs to ``chunks[i]``.
The first failed embedding aborts the run before anything is written.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from ragindex.errors import InvalidConfiguration
from ragindex.index.chunker import TextChunker
from ragindex.index.loader import DocumentLoader
from ragindex.index.models import Chunk, Document, Embedding, IndexMetadata
from ragindex.index.store import IndexStore
from ragindex.rag.llm_client import ModelClient

logger = logging.getLogger(__name__)


class IndexBuilder:
    """Build a fresh index from a directory of ``.txt`` files.

    Args:
        loader: Document source.
        chunker: Configured chunker (validated at construction).
        client: Embedding adapter.
        store: Destination store.
        workers: Maximum concurrent embedding calls (1 = sequential).

    Raises:
        InvalidConfiguration: If *workers* is below 1.
    """

    def __init__(
        self,
        loader: DocumentLoader,
        chunker: TextChunker,
        client: ModelClient,
        store: IndexStore,
        workers: int = 4,
    ) -> None:
        if workers < 1:
            raise InvalidConfiguration(f"workers must be >= 1, got {workers}")
        self._loader = loader
        self._chunker = chunker
        self._client = client
        self._store = store
        self.workers = workers

    def build(
        self,
        directory: Path | str,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> IndexMetadata:
        """Index every document below *directory* and save the snapshot.

        Args:
            directory: Root of the document tree.
            on_progress: Called as ``on_progress(done, total)`` after each embedding.

        Returns:
            Metadata of the saved snapshot.
        """
        documents = self._loader.load_directory(directory)
        logger.info("Loaded %d document(s) from %s", len(documents), directory)

        chunks = self.chunk_documents(documents)
        embeddings = self.embed_chunks(chunks, on_progress=on_progress)

        metadata = IndexMetadata(
            total_documents=len({c.document_id for c in chunks}),
            total_chunks=len(chunks),
            model_name=self._client.embedding_model,
            chunk_size=self._chunker.chunk_size,
            overlap_size=self._chunker.overlap_size,
        )
        self._store.save(chunks, embeddings, metadata)
        return metadata

    def chunk_documents(self, documents: list[Document]) -> list[Chunk]:
        chunks: list[Chunk] = []
        for doc in documents:
            chunks.extend(self._chunker.chunk(doc))
        logger.info("Created %d chunk(s)", len(chunks))
        return chunks

    def embed_chunks(
        self,
        chunks: list[Chunk],
        on_progress: Callable[[int, int], None] | None = None,
    ) -> list[Embedding]:
        total = len(chunks)
        model = self._client.embedding_model
        embeddings: list[Embedding] = []

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            vectors = pool.map(lambda c: self._client.embed(c.content), chunks)
            try:
                for chunk, vector in zip(chunks, vectors):
                    embeddings.append(
                        Embedding(chunk_id=chunk.id, vector=vector, model_name=model)
                    )
                    if on_progress is not None:
                        on_progress(len(embeddings), total)
            except BaseException:
                pool.shutdown(wait=False, cancel_futures=True)
                raise

        return embeddings
