"""ragindex index: build (or fully rebuild) the index from a directory of .txt files.

Pipeline:
  1. Validate chunking parameters (fails before any work starts)
  2. Load every .txt file below DIRECTORY (first unreadable file aborts the run)
  3. Chunk documents into overlapping character windows
  4. Embed chunks with bounded concurrency
  5. Atomically replace <index_dir>/embeddings.json

Running two index builds against the same index directory at once is unsupported.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from ragindex.cli.common import (
    console,
    fail,
    load_settings,
    make_client,
    make_store,
    require_api_key,
)
from ragindex.errors import RagIndexError
from ragindex.index.builder import IndexBuilder
from ragindex.index.chunker import TextChunker
from ragindex.index.loader import DocumentLoader


def index_cmd(
    directory: Annotated[
        Path,
        typer.Argument(help="Directory containing .txt documents (scanned recursively)."),
    ],
    chunk_size: Annotated[
        int | None,
        typer.Option("--chunk-size", help="Characters per chunk (overrides config)."),
    ] = None,
    overlap: Annotated[
        int | None,
        typer.Option("--overlap", help="Characters shared by consecutive chunks (overrides config)."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", min=1, help="Concurrent embedding calls."),
    ] = None,
    index_dir: Annotated[
        Path | None,
        typer.Option("--index-dir", help="Directory holding embeddings.json."),
    ] = None,
) -> None:
    """Build the index from all .txt files in DIRECTORY (full rebuild)."""
    cfg = load_settings(index_dir)
    size = chunk_size if chunk_size is not None else cfg.chunking.chunk_size
    overlap_size = overlap if overlap is not None else cfg.chunking.overlap_size
    n_workers = workers if workers is not None else cfg.embedding.workers

    store = make_store(cfg)
    try:
        chunker = TextChunker(chunk_size=size, overlap_size=overlap_size)
        builder = IndexBuilder(
            DocumentLoader(),
            chunker,
            make_client(cfg),
            store,
            workers=n_workers,
        )
    except RagIndexError as exc:
        fail(exc, cfg)

    require_api_key(cfg.embedding.model)

    console.print(f"\n[bold]→ Indexing {directory}[/]")
    console.print(
        f"  [dim]chunk size {size} · overlap {overlap_size} · "
        f"model {cfg.embedding.model} · {n_workers} worker(s)[/]"
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            transient=True,
            console=console,
        ) as prog:
            task = prog.add_task("Embedding…", total=None)

            def _on_chunk(done: int, total: int) -> None:
                prog.update(task, completed=done, total=total)

            metadata = builder.build(directory, on_progress=_on_chunk)
    except RagIndexError as exc:
        fail(exc, cfg)

    console.print(f"  [green]✓[/] {metadata.total_documents} document(s)")
    console.print(f"  [green]✓[/] {metadata.total_chunks} chunk(s) embedded")
    console.print(f"  [green]✓[/] Index saved to [bold]{store.path}[/]")
