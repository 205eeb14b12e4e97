"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from ragindex.index.store import IndexStore


@pytest.fixture
def store(tmp_path):
    """IndexStore rooted in tmp_path (index file not yet written)."""
    return IndexStore(tmp_path / "output")


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run in tmp_path with no global config and no RAGINDEX_* env overrides."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "ragindex.config._GLOBAL_CONFIG_PATH", tmp_path / "no-global" / "config.yaml"
    )
    for var in (
        "RAGINDEX_BASE_URL",
        "RAGINDEX_EMBEDDING_MODEL",
        "RAGINDEX_GENERATION_MODEL",
        "RAGINDEX_INDEX_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    return tmp_path
