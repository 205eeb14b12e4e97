"""ragindex health: check that the model service is reachable."""

from __future__ import annotations

import typer

from ragindex.cli.common import console, load_settings, make_client


def health_cmd() -> None:
    """Check whether the embedding/generation service is reachable."""
    cfg = load_settings()
    client = make_client(cfg)

    console.print("Checking model service…")
    if client.is_service_reachable():
        console.print(f"[green]✓[/] Service is reachable at {client.base_url}")
        return

    console.print(
        f"[red]✗[/] Service is not reachable at {client.base_url}\n"
        "  Start it (e.g.  ollama serve) or set service.base_url / RAGINDEX_BASE_URL."
    )
    raise typer.Exit(1)
