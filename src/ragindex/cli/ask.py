"""ragindex ask / ask-direct: answer a question with or without retrieval.

Usage:
  ragindex ask "What is X?" [--min-similarity 0.3] [--top-k 3] [--model M] [--dry-run]
  ragindex ask-direct "What is X?" [--model M]
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn

from ragindex.cli.common import (
    console,
    fail,
    load_settings,
    make_client,
    make_store,
    require_api_key,
)
from ragindex.errors import RagIndexError
from ragindex.index.models import SearchResult
from ragindex.rag.agent import RagAgent, RagResponse, build_context, build_prompt


def ask_cmd(
    question: Annotated[str, typer.Argument(help="Question to answer from the index.")],
    min_similarity: Annotated[
        float | None,
        typer.Option(
            "--min-similarity",
            "-s",
            min=-1.0,
            max=1.0,
            help="Discard chunks below this cosine similarity.",
        ),
    ] = None,
    top_k: Annotated[
        int | None,
        typer.Option("--top-k", "-k", min=1, help="Maximum chunks to retrieve."),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Generation model (LiteLLM model string)."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show retrieval + augmented prompt without generation."),
    ] = False,
    index_dir: Annotated[
        Path | None,
        typer.Option("--index-dir", help="Directory holding embeddings.json."),
    ] = None,
) -> None:
    """Answer QUESTION using retrieved context (RAG)."""
    cfg = load_settings(index_dir)
    k = top_k if top_k is not None else cfg.retrieval.top_k
    threshold = min_similarity if min_similarity is not None else cfg.retrieval.min_similarity
    agent = RagAgent(make_client(cfg), make_store(cfg))

    require_api_key(cfg.embedding.model)
    if not dry_run:
        require_api_key(model or cfg.generation.model)

    console.print("\n[bold green]RAG mode[/] (with context retrieval)")
    console.print(f"Question: [bold]{escape(question)}[/]\n")

    try:
        if dry_run:
            results = agent.retrieve(question, top_k=k, min_similarity=threshold)
            _show_sources(results, threshold)
            console.print(Panel(escape(build_prompt(question, build_context(results))), title="Prompt"))
            console.print("[dim]Dry run: no generation performed.[/]")
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            prog.add_task("Retrieving and generating…", total=None)
            response = agent.answer_with_retrieval(
                question, top_k=k, min_similarity=threshold, model=model
            )
    except RagIndexError as exc:
        fail(exc, cfg)

    _show_sources(response.retrieved_chunks, threshold)
    _show_answer(response)


def ask_direct_cmd(
    question: Annotated[str, typer.Argument(help="Question to send straight to the model.")],
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Generation model (LiteLLM model string)."),
    ] = None,
) -> None:
    """Answer QUESTION without retrieval (direct generation)."""
    cfg = load_settings()
    agent = RagAgent(make_client(cfg), make_store(cfg))

    require_api_key(model or cfg.generation.model)

    console.print("\n[bold red]Direct mode[/] (no retrieval)")
    console.print(f"Question: [bold]{escape(question)}[/]\n")

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
            console=console,
        ) as prog:
            prog.add_task("Generating…", total=None)
            response = agent.answer_direct(question, model=model)
    except RagIndexError as exc:
        fail(exc, cfg)

    _show_answer(response)


# ------------------------------------------------------------------
# Rendering
# ------------------------------------------------------------------


def _show_sources(results: list[SearchResult], threshold: float) -> None:
    if not results:
        console.print(f"[yellow]No relevant chunks found (similarity < {threshold:.2f})[/]\n")
        return

    console.print("[bold]Retrieved context:[/]\n")
    for i, r in enumerate(results, start=1):
        c = r.chunk
        console.print(
            f"{i}. {escape(c.document_filename)} (similarity: {r.similarity:.2f})\n"
            f"   [dim]Chunk #{c.chunk_index}: {c.start_index}-{c.end_index}[/]\n"
            f"   {escape(c.content.strip())}\n"
        )


def _show_answer(response: RagResponse) -> None:
    console.print(Panel(escape(response.answer), title="[bold]Answer[/]"))
