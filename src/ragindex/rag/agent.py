"""RAG agent: question → embedding → ranking → context → augmented prompt → answer.

Two modes:
  - answer_with_retrieval: retrieves ranked chunks and conditions generation on them.
  - answer_direct: sends the raw question to the generation model, no retrieval.

The agent adds no failure modes of its own. Errors from the model client, the
index store, and the ranker propagate unchanged; a failed call never turns into
a partial or fabricated answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ragindex.index.store import IndexStore
from ragindex.index.models import SearchResult
from ragindex.rag.llm_client import ModelClient
from ragindex.rag.ranker import rank

logger = logging.getLogger(__name__)

NO_CONTEXT = "No relevant information found in the knowledge base."

_PROMPT_TEMPLATE = """\
You are a helpful assistant. Answer the question based on the context provided below.
If the context doesn't contain relevant information, say so clearly.

Context:
{context}

Question: {question}

Answer:"""


@dataclass
class RagResponse:
    question: str
    answer: str
    retrieved_chunks: list[SearchResult] = field(default_factory=list)
    used_retrieval: bool = False


def build_context(results: list[SearchResult]) -> str:
    """Render ranked results as labelled blocks separated by a blank line.

    Example:
        [Source: kotlin.txt, Similarity: 0.87]
        Kotlin is a modern programming language...
    """
    if not results:
        return NO_CONTEXT
    return "\n\n".join(
        f"[Source: {r.chunk.document_filename}, Similarity: {r.similarity:.2f}]\n"
        f"{r.chunk.content.strip()}"
        for r in results
    )


def build_prompt(question: str, context: str) -> str:
    return _PROMPT_TEMPLATE.format(context=context, question=question)


class RagAgent:
    """Compose retrieval with generation.

    Args:
        client: Embedding + generation adapter.
        store: Index store the ranker reads from.
    """

    def __init__(self, client: ModelClient, store: IndexStore) -> None:
        self._client = client
        self._store = store

    def retrieve(
        self,
        question: str,
        top_k: int = 3,
        min_similarity: float = 0.3,
    ) -> list[SearchResult]:
        """Embed *question* and rank it against the stored index."""
        query_vector = self._client.embed(question)
        index = self._store.load()
        results = rank(query_vector, index, top_k=top_k, min_similarity=min_similarity)
        logger.debug("Retrieved %d chunk(s) for %r", len(results), question)
        return results

    def answer_with_retrieval(
        self,
        question: str,
        top_k: int = 3,
        min_similarity: float = 0.3,
        model: str | None = None,
    ) -> RagResponse:
        results = self.retrieve(question, top_k=top_k, min_similarity=min_similarity)
        prompt = build_prompt(question, build_context(results))
        answer = self._client.generate(prompt, model=model)
        return RagResponse(
            question=question,
            answer=answer,
            retrieved_chunks=results,
            used_retrieval=True,
        )

    def answer_direct(self, question: str, model: str | None = None) -> RagResponse:
        answer = self._client.generate(question, model=model)
        return RagResponse(question=question, answer=answer, used_retrieval=False)
