"""ragindex configuration loader.

Priority (high → low):
  1. CLI flags           (handled at the call site, not in this module)
  2. Environment variables  (RAGINDEX_BASE_URL, RAGINDEX_EMBEDDING_MODEL,
                             RAGINDEX_GENERATION_MODEL, RAGINDEX_INDEX_DIR)
  3. Per-project ragindex.yaml  (current working directory)
  4. Global ~/.ragindex/config.yaml  (model defaults only, no API keys)
  5. Hardcoded defaults

Global config must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load(), never yaml.load().
Chunking parameters and value ranges are validated here, before any work starts.
"""

from __future__ import annotations

import math
import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ragindex.errors import ConfigError
from ragindex.index.chunker import TextChunker
from ragindex.rag.llm_client import (
    DEFAULT_BASE_URL,
    DEFAULT_EMBEDDING_MODEL,
    DEFAULT_GENERATION_MODEL,
    DEFAULT_TIMEOUT,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_PATH: Path = Path.home() / ".ragindex" / "config.yaml"
_PROJECT_CONFIG_NAME: str = "ragindex.yaml"

# Matches api_key, api-key, api_secret, *_token, token, *_secret, secret,
# password, passwd, credential(s). Does NOT match top_k or timeout.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["service", "embedding", "generation", "chunking", "retrieval", "storage"]
)


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class ServiceCfg:
    """Model service endpoint (ragindex.yaml: service:)."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (ragindex.yaml: embedding:).

    Attributes:
        model: LiteLLM embedding model string.
        workers: Maximum concurrent embedding calls while indexing.
    """

    model: str = DEFAULT_EMBEDDING_MODEL
    workers: int = 4


@dataclass
class GenerationCfg:
    model: str = DEFAULT_GENERATION_MODEL


@dataclass
class ChunkingCfg:
    """Character window size and overlap (ragindex.yaml: chunking:)."""

    chunk_size: int = 500
    overlap_size: int = 150


@dataclass
class RetrievalCfg:
    top_k: int = 3
    min_similarity: float = 0.3


@dataclass
class StorageCfg:
    index_dir: str = "output"


@dataclass
class RagConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    service: ServiceCfg = field(default_factory=ServiceCfg)
    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    generation: GenerationCfg = field(default_factory=GenerationCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    storage: StorageCfg = field(default_factory=StorageCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}', ignored.",
                UserWarning,
                stacklevel=4,
            )


def validate_chunking(chunk_size: int, overlap_size: int) -> None:
    """Raise InvalidConfiguration unless chunk_size > overlap_size > 0.

    Same check and message as the TextChunker constructor.
    """
    TextChunker(chunk_size=chunk_size, overlap_size=overlap_size)


def validate_settings(cfg: RagConfig) -> None:
    """Raise ConfigError if a non-chunking value in *cfg* is out of range."""
    if cfg.service.timeout <= 0 or not math.isfinite(cfg.service.timeout):
        raise ConfigError(
            f"service.timeout must be a positive number of seconds, got {cfg.service.timeout}"
        )
    if cfg.embedding.workers < 1:
        raise ConfigError(f"embedding.workers must be >= 1, got {cfg.embedding.workers}")
    if cfg.retrieval.top_k < 1:
        raise ConfigError(f"retrieval.top_k must be >= 1, got {cfg.retrieval.top_k}")
    if not -1.0 <= cfg.retrieval.min_similarity <= 1.0:
        raise ConfigError(
            f"retrieval.min_similarity must be within [-1, 1], got {cfg.retrieval.min_similarity}"
        )


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file '{path}' is not valid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping at the top level.")
    return data


def _cfg_from_dict(data: dict[str, Any]) -> RagConfig:
    """Build a *RagConfig* from a merged raw YAML dict."""
    cfg = RagConfig()

    try:
        if "service" in data:
            s = data["service"]
            cfg.service = ServiceCfg(
                base_url=str(s.get("base_url", cfg.service.base_url)),
                timeout=float(s.get("timeout", cfg.service.timeout)),
            )

        if "embedding" in data:
            e = data["embedding"]
            cfg.embedding = EmbeddingCfg(
                model=str(e.get("model", cfg.embedding.model)),
                workers=int(e.get("workers", cfg.embedding.workers)),
            )

        if "generation" in data:
            g = data["generation"]
            cfg.generation = GenerationCfg(model=str(g.get("model", cfg.generation.model)))

        if "chunking" in data:
            c = data["chunking"]
            cfg.chunking = ChunkingCfg(
                chunk_size=int(c.get("chunk_size", cfg.chunking.chunk_size)),
                overlap_size=int(c.get("overlap_size", cfg.chunking.overlap_size)),
            )

        if "retrieval" in data:
            r = data["retrieval"]
            cfg.retrieval = RetrievalCfg(
                top_k=int(r.get("top_k", cfg.retrieval.top_k)),
                min_similarity=float(r.get("min_similarity", cfg.retrieval.min_similarity)),
            )

        if "storage" in data:
            st = data["storage"]
            cfg.storage = StorageCfg(index_dir=str(st.get("index_dir", cfg.storage.index_dir)))
    except (AttributeError, TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config value: {exc}") from exc

    return cfg


def _apply_env_overrides(cfg: RagConfig) -> RagConfig:
    """Apply RAGINDEX_* environment variable overrides (layer 2)."""
    if url := os.environ.get("RAGINDEX_BASE_URL"):
        cfg.service.base_url = url
    if model := os.environ.get("RAGINDEX_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if model := os.environ.get("RAGINDEX_GENERATION_MODEL"):
        cfg.generation.model = model
    if index_dir := os.environ.get("RAGINDEX_INDEX_DIR"):
        cfg.storage.index_dir = index_dir
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> RagConfig:
    """Load and return a merged *RagConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *ragindex.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a config file is malformed, a value is out of range, or
            the global config holds API-key-like fields.
        InvalidConfiguration: If the merged chunking parameters are invalid.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = _read_yaml(global_path)
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = _read_yaml(project_cfg_path)
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    validate_settings(cfg)
    validate_chunking(cfg.chunking.chunk_size, cfg.chunking.overlap_size)
    return cfg
