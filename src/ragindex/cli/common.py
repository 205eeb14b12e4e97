"""Helpers shared by the ragindex CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console

from ragindex.cli.errors import render_error
from ragindex.config import RagConfig, load_config
from ragindex.errors import RagIndexError
from ragindex.index.store import IndexStore
from ragindex.rag.llm_client import ModelClient, validate_api_key

console = Console()


def load_settings(index_dir: Path | None = None) -> RagConfig:
    """Load merged config, applying the --index-dir flag on top. Exits 1 on error."""
    try:
        cfg = load_config()
    except RagIndexError as exc:
        console.print(render_error(exc))
        raise typer.Exit(1)
    if index_dir is not None:
        cfg.storage.index_dir = str(index_dir)
    return cfg


def make_client(cfg: RagConfig) -> ModelClient:
    return ModelClient(
        base_url=cfg.service.base_url,
        timeout=cfg.service.timeout,
        embedding_model=cfg.embedding.model,
        generation_model=cfg.generation.model,
    )


def make_store(cfg: RagConfig) -> IndexStore:
    return IndexStore(Path(cfg.storage.index_dir))


def fail(exc: RagIndexError, cfg: RagConfig) -> NoReturn:
    """Print the actionable message for *exc* and exit with status 1."""
    console.print(
        render_error(
            exc,
            index_path=str(make_store(cfg).path),
            base_url=cfg.service.base_url,
        )
    )
    raise typer.Exit(1)


def require_api_key(model: str) -> None:
    """Exit 1 with a hint when *model*'s provider needs an API key that is not set."""
    try:
        validate_api_key(model)
    except EnvironmentError as exc:
        console.print(f"[red]Error:[/] {exc}")
        raise typer.Exit(1)
