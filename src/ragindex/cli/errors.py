"""ragindex rich error messages: actionable feedback.

Every error shown to the user must contain:
  1. Which stage failed and why
  2. The exact action the user should take to fix it

Usage:
    from ragindex.cli.errors import render_error
    console.print(render_error(exc, index_path=str(store.path), base_url=cfg.service.base_url))
    raise typer.Exit(1)
"""

from __future__ import annotations

from rich.markup import escape

from ragindex.errors import (
    ConfigError,
    CorruptIndex,
    DimensionMismatch,
    DocumentLoadFailure,
    EmbeddingUnavailable,
    GenerationUnavailable,
    IndexNotFound,
    InvalidConfiguration,
    RagIndexError,
    ServiceTimeout,
)


def err_index_not_found(index_path: str) -> str:
    """No index file has been built yet."""
    return (
        f"[red]Error:[/] No index found at '{escape(index_path)}'.\n"
        "  Build one first:  ragindex index <directory>"
    )


def err_corrupt_index(index_path: str, detail: str) -> str:
    return (
        f"[red]Error:[/] Index at '{escape(index_path)}' is corrupt: {escape(detail)}\n"
        "  Rebuild it:  ragindex index <directory>"
    )


def err_service(stage: str, detail: str, base_url: str) -> str:
    """Embedding / generation service failure."""
    return (
        f"[red]Error:[/] {stage} failed: {escape(detail)}\n"
        f"  Check that the model service at {escape(base_url)} is running:  ragindex health"
    )


def err_timeout(stage: str, timeout: float) -> str:
    return (
        f"[red]Error:[/] {stage} call timed out after {timeout:g}s.\n"
        "  Raise service.timeout in ragindex.yaml or check the model service load."
    )


def err_dimension_mismatch(detail: str) -> str:
    return (
        f"[red]Error:[/] {escape(detail)}\n"
        "  Use the embedding model the index was built with, or rebuild:  ragindex index <directory>"
    )


def err_document_load(detail: str) -> str:
    return (
        f"[red]Error:[/] Document loading failed: {escape(detail)}\n"
        "  Fix or remove the file and re-run the index build (no index was written)."
    )


def err_invalid_config(detail: str) -> str:
    return (
        f"[red]Error:[/] Invalid configuration: {escape(detail)}\n"
        "  Chunking requires chunk_size > overlap_size > 0; indexing requires workers >= 1."
    )


def render_error(exc: RagIndexError, *, index_path: str = "", base_url: str = "") -> str:
    """Map a RagIndexError to its actionable message."""
    if isinstance(exc, IndexNotFound):
        return err_index_not_found(index_path)
    if isinstance(exc, CorruptIndex):
        return err_corrupt_index(index_path, str(exc))
    if isinstance(exc, ServiceTimeout):
        return err_timeout(exc.stage.capitalize(), exc.timeout)
    if isinstance(exc, EmbeddingUnavailable):
        return err_service("Embedding", str(exc), base_url)
    if isinstance(exc, GenerationUnavailable):
        return err_service("Generation", str(exc), base_url)
    if isinstance(exc, DimensionMismatch):
        return err_dimension_mismatch(str(exc))
    if isinstance(exc, DocumentLoadFailure):
        return err_document_load(str(exc))
    if isinstance(exc, ConfigError):
        return f"[red]Error:[/] {escape(str(exc))}"
    if isinstance(exc, InvalidConfiguration):
        return err_invalid_config(str(exc))
    return f"[red]Error:[/] {escape(str(exc))}"
