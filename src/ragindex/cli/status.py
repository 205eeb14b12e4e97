"""ragindex status: show the build parameters of the stored index."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table

from ragindex.cli.common import console, fail, load_settings, make_store
from ragindex.errors import RagIndexError


def status_cmd(
    index_dir: Annotated[
        Path | None,
        typer.Option("--index-dir", help="Directory holding embeddings.json."),
    ] = None,
) -> None:
    """Show index statistics and build parameters."""
    cfg = load_settings(index_dir)
    store = make_store(cfg)

    try:
        data = store.load()
    except RagIndexError as exc:
        fail(exc, cfg)

    if data is None:
        console.print(
            Panel(
                f"[yellow]No index found at {store.path}.[/]\n"
                "  Run:  ragindex index <directory>",
                title="[bold]Index[/]",
                expand=False,
            )
        )
        return

    meta = data.metadata
    size_kb = store.path.stat().st_size / 1024

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")
    table.add_row("File", f"{store.path} ({size_kb:,.1f} KB)")
    table.add_row("Schema", data.schema_version)
    table.add_row("Documents", f"{meta.total_documents:,}")
    table.add_row("Chunks", f"{meta.total_chunks:,}")
    table.add_row("Model", meta.model_name)
    table.add_row("Dimensions", str(data.dimension) if data.dimension is not None else "-")
    table.add_row("Chunk size", f"{meta.chunk_size} (overlap {meta.overlap_size})")
    table.add_row("Built", meta.created_at.strftime("%Y-%m-%d %H:%M:%S %Z"))

    console.print(Panel(table, title="[bold]Index[/]", expand=False))

    if meta.model_name != cfg.embedding.model:
        console.print(
            f"[yellow]⚠[/] Index was built with '{meta.model_name}' but config uses "
            f"'{cfg.embedding.model}'. Queries will fail with a dimension mismatch "
            "if the two models differ in vector size."
        )
