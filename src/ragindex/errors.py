"""Typed error taxonomy for the indexing and retrieval engine.

Library code raises these; the CLI catches ``RagIndexError`` and renders an
actionable message (see ``ragindex.cli.errors``).
"""

from __future__ import annotations


class RagIndexError(Exception):
    """Base class for every error raised by ragindex."""


class InvalidConfiguration(RagIndexError, ValueError):
    """Chunking or other build parameters are invalid. Raised before any work starts."""


class ConfigError(InvalidConfiguration):
    """A config file contains an invalid or forbidden value."""


class DocumentLoadFailure(RagIndexError):
    """A document could not be read. Aborts the whole index run."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load document '{path}': {reason}")


class ServiceError(RagIndexError):
    """The embedding / generation service failed."""


class EmbeddingUnavailable(ServiceError):
    """The embedding call failed or returned no vector."""


class GenerationUnavailable(ServiceError):
    """The generation call failed."""


class ServiceTimeout(ServiceError):
    """An external call exceeded its timeout. Never retried automatically."""

    def __init__(self, stage: str, timeout: float) -> None:
        self.stage = stage
        self.timeout = timeout
        super().__init__(f"{stage} call timed out after {timeout:g}s")


class IndexNotFound(RagIndexError):
    """Retrieval was requested but no index has been built yet."""


class CorruptIndex(RagIndexError):
    """Persisted index data failed structural validation."""


class DimensionMismatch(RagIndexError):
    """Two vectors that must share a dimension do not."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector dimension mismatch: index uses {expected}, got {actual}. "
            "The embedding model probably differs from the one used to build the index."
        )
