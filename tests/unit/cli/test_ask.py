"""Tests for ragindex ask / ask-direct commands."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from ragindex.cli.main import app
from ragindex.errors import GenerationUnavailable, ServiceTimeout
from ragindex.index.store import IndexStore

from helpers import make_index

runner = CliRunner()

_EMBED = "ragindex.rag.llm_client.ModelClient.embed"
_GENERATE = "ragindex.rag.llm_client.ModelClient.generate"


@pytest.fixture
def indexed(isolated_config: Path) -> Path:
    """Index with one matching chunk (chunk-0) and one orthogonal chunk (chunk-1)."""
    data = make_index([[1.0, 0.0], [0.0, 1.0]])
    IndexStore(isolated_config / "output").save(data.chunks, data.embeddings, data.metadata)
    return isolated_config


# ---------------------------------------------------------------------------
# ask
# ---------------------------------------------------------------------------


def test_ask_shows_sources_and_answer(indexed: Path) -> None:
    with patch(_EMBED, return_value=[1.0, 0.0]), patch(
        _GENERATE, return_value="Kotlin is great."
    ) as mock_gen:
        result = runner.invoke(app, ["ask", "What is Kotlin?"])

    assert result.exit_code == 0, result.output
    assert "RAG mode" in result.output
    assert "chunk text number 0" in result.output
    assert "chunk text number 1" not in result.output
    assert "Kotlin is great." in result.output
    prompt = mock_gen.call_args.args[0]
    assert "[Source: doc.txt, Similarity: 1.00]" in prompt
    assert "Question: What is Kotlin?" in prompt


def test_ask_threshold_and_model_flags(indexed: Path) -> None:
    with patch(_EMBED, return_value=[0.6, 0.8]), patch(_GENERATE, return_value="ok") as mock_gen:
        result = runner.invoke(
            app, ["ask", "Q?", "--min-similarity", "0.7", "--top-k", "1", "-m", "ollama/mistral"]
        )

    assert result.exit_code == 0, result.output
    assert "chunk text number 1" in result.output
    assert "chunk text number 0" not in result.output
    assert mock_gen.call_args.kwargs["model"] == "ollama/mistral"


def test_ask_no_relevant_chunks(indexed: Path) -> None:
    with patch(_EMBED, return_value=[-1.0, -1.0]), patch(_GENERATE, return_value="Unknown.") as mock_gen:
        result = runner.invoke(app, ["ask", "Q?"])

    assert result.exit_code == 0, result.output
    assert "No relevant chunks found" in result.output
    assert "No relevant information found in the knowledge base." in mock_gen.call_args.args[0]


def test_ask_dry_run_skips_generation(indexed: Path) -> None:
    with patch(_EMBED, return_value=[1.0, 0.0]), patch(_GENERATE) as mock_gen:
        result = runner.invoke(app, ["ask", "Q?", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Prompt" in result.output
    assert "Dry run" in result.output
    mock_gen.assert_not_called()


def test_ask_without_index_suggests_indexing(isolated_config: Path) -> None:
    with patch(_EMBED, return_value=[1.0, 0.0]), patch(_GENERATE) as mock_gen:
        result = runner.invoke(app, ["ask", "Q?"])

    assert result.exit_code == 1
    assert "No index found" in result.output
    assert "ragindex index" in result.output
    mock_gen.assert_not_called()


def test_ask_dimension_mismatch(indexed: Path) -> None:
    with patch(_EMBED, return_value=[1.0, 0.0, 0.0]), patch(_GENERATE) as mock_gen:
        result = runner.invoke(app, ["ask", "Q?"])

    assert result.exit_code == 1
    assert "dimension mismatch" in result.output
    mock_gen.assert_not_called()


def test_ask_corrupt_index(isolated_config: Path) -> None:
    out = isolated_config / "output"
    out.mkdir()
    (out / "embeddings.json").write_text("{broken", encoding="utf-8")

    with patch(_EMBED, return_value=[1.0, 0.0]):
        result = runner.invoke(app, ["ask", "Q?"])

    assert result.exit_code == 1
    assert "corrupt" in result.output


def test_ask_generation_timeout(indexed: Path) -> None:
    with patch(_EMBED, return_value=[1.0, 0.0]), patch(
        _GENERATE, side_effect=ServiceTimeout("generation", 60.0)
    ):
        result = runner.invoke(app, ["ask", "Q?"])

    assert result.exit_code == 1
    assert "timed out after 60s" in result.output


@pytest.mark.parametrize("value", ["1.5", "-2"])
def test_ask_rejects_out_of_range_threshold(indexed: Path, value: str) -> None:
    result = runner.invoke(app, ["ask", "Q?", "--min-similarity", value])
    assert result.exit_code != 0


# ---------------------------------------------------------------------------
# ask-direct
# ---------------------------------------------------------------------------


def test_ask_direct_answers_without_index(isolated_config: Path) -> None:
    with patch(_EMBED) as mock_embed, patch(_GENERATE, return_value="Direct answer.") as mock_gen:
        result = runner.invoke(app, ["ask-direct", "What is Kotlin?"])

    assert result.exit_code == 0, result.output
    assert "Direct mode" in result.output
    assert "Direct answer." in result.output
    mock_embed.assert_not_called()
    assert mock_gen.call_args.args[0] == "What is Kotlin?"


def test_ask_direct_generation_failure(isolated_config: Path) -> None:
    with patch(_GENERATE, side_effect=GenerationUnavailable("model not found")):
        result = runner.invoke(app, ["ask-direct", "Q?"])

    assert result.exit_code == 1
    assert "Generation failed" in result.output


def test_ask_direct_hosted_model_without_key(isolated_config: Path, monkeypatch) -> None:
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    with patch(_GENERATE) as mock_gen:
        result = runner.invoke(app, ["ask-direct", "Q?", "--model", "anthropic/claude-3-haiku"])

    assert result.exit_code == 1
    assert "ANTHROPIC_API_KEY" in result.output
    mock_gen.assert_not_called()
