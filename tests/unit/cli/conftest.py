"""CLI test fixtures."""

from __future__ import annotations

import pytest

from ragindex.cli import common


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep tmp paths and hints on one line in captured output."""
    monkeypatch.setattr(common.console, "width", 200)
