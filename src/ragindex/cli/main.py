"""ragindex CLI entry point."""

from __future__ import annotations

import importlib.metadata
import logging
from typing import Annotated

import typer

from ragindex.cli.ask import ask_cmd, ask_direct_cmd
from ragindex.cli.health import health_cmd
from ragindex.cli.index import index_cmd
from ragindex.cli.status import status_cmd


def _package_version() -> str:
    try:
        return importlib.metadata.version("ragindex")
    except importlib.metadata.PackageNotFoundError:
        return "dev"


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"ragindex {_package_version()}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library diagnostics to stderr; DEBUG with --verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    # LiteLLM and its HTTP stack are noisy at DEBUG
    for name in ("LiteLLM", "httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)


app = typer.Typer(
    name="ragindex",
    help=(
        "ragindex: retrieval-augmented answers over local text documents.\n\n"
        "  ragindex index DIR        Build the index from .txt files.\n"
        "  ragindex ask QUESTION     Answer with retrieved context.\n"
        "  ragindex ask-direct Q     Answer without retrieval.\n"
        "  ragindex health           Check the model service."
    ),
    add_completion=False,
)


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log diagnostics to stderr."),
    ] = False,
) -> None:
    """ragindex: retrieval-augmented answers over local text documents."""
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


app.command("index")(index_cmd)
app.command("ask")(ask_cmd)
app.command("ask-direct")(ask_direct_cmd)
app.command("health")(health_cmd)
app.command("status")(status_cmd)


@app.command("version")
def version_cmd() -> None:
    """Show the installed ragindex version."""
    typer.echo(f"ragindex {_package_version()}")


if __name__ == "__main__":
    app()
