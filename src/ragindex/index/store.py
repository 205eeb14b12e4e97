"""JSON index store with crash-safe atomic replace.

File location: ``<index_dir>/embeddings.json``.

Save path:
  1. Validate the aggregate (counts, 1:1 chunk/embedding ids, uniform dimension).
  2. Serialize the whole index in memory.
  3. Write a temp file in the same directory, then ``os.replace`` it over the
     existing index. A reader never sees a partially written file.

Load path:
  - No file → ``None`` (no index built yet, not an error).
  - Invalid JSON, a missing / mistyped required field, or an aggregate that
    fails the save-time validation → ``CorruptIndex``.
  - Unknown keys at any level are ignored.

Only one writer per index directory is supported; concurrent index builds
against the same location are not guarded.
"""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ragindex.errors import CorruptIndex
from ragindex.index.models import (
    SCHEMA_VERSION,
    Chunk,
    Embedding,
    IndexData,
    IndexMetadata,
)

logger = logging.getLogger(__name__)

INDEX_FILENAME = "embeddings.json"


class IndexStore:
    """Single-snapshot index persistence under *index_dir*."""

    def __init__(self, index_dir: Path | str = "output") -> None:
        self.index_dir = Path(index_dir)

    @property
    def path(self) -> Path:
        return self.index_dir / INDEX_FILENAME

    def exists(self) -> bool:
        return self.path.is_file()

    def save(
        self,
        chunks: list[Chunk],
        embeddings: list[Embedding],
        metadata: IndexMetadata,
    ) -> Path:
        """Persist a full snapshot, atomically replacing any previous one.

        Returns:
            Path of the written index file.

        Raises:
            CorruptIndex: If the aggregate violates its invariants.
            OSError: On filesystem failure (the previous index is left intact).
        """
        data = IndexData(chunks=list(chunks), embeddings=list(embeddings), metadata=metadata)
        validate(data)
        payload = json.dumps(_index_to_dict(data), indent=2, ensure_ascii=False)

        self.index_dir.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.index_dir, prefix=f".{INDEX_FILENAME}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

        logger.info(
            "Saved index with %d chunks to %s", len(data.chunks), self.path
        )
        return self.path

    def load(self) -> IndexData | None:
        """Load the current snapshot, or return None when none was saved yet."""
        if not self.path.exists():
            logger.debug("No index file at %s", self.path)
            return None

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise CorruptIndex(f"Index file '{self.path}' is not valid JSON: {exc}") from exc

        try:
            data = _index_from_dict(raw)
            validate(data)
            return data
        except CorruptIndex as exc:
            raise CorruptIndex(f"Index file '{self.path}' is invalid: {exc}") from exc


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------


def validate(data: IndexData) -> None:
    """Raise CorruptIndex if *data* breaks an IndexData invariant."""
    chunk_ids = [c.id for c in data.chunks]
    if len(set(chunk_ids)) != len(chunk_ids):
        raise CorruptIndex("duplicate chunk ids")

    embedded = [e.chunk_id for e in data.embeddings]
    if len(set(embedded)) != len(embedded):
        raise CorruptIndex("more than one embedding for the same chunk")
    if set(embedded) != set(chunk_ids):
        missing = len(set(chunk_ids) - set(embedded))
        dangling = len(set(embedded) - set(chunk_ids))
        raise CorruptIndex(
            f"chunks and embeddings do not correspond 1:1 "
            f"({missing} chunk(s) without embedding, {dangling} dangling embedding(s))"
        )

    dims = {e.dimension for e in data.embeddings}
    if len(dims) > 1:
        raise CorruptIndex(f"embeddings have mixed dimensions: {sorted(dims)}")
    for e in data.embeddings:
        if not all(math.isfinite(v) for v in e.vector):
            raise CorruptIndex(f"embedding for chunk {e.chunk_id} contains NaN or infinity")

    meta = data.metadata
    if meta.total_chunks != len(data.chunks):
        raise CorruptIndex(
            f"metadata.totalChunks is {meta.total_chunks} but index holds {len(data.chunks)} chunks"
        )
    documents = len({c.document_id for c in data.chunks})
    if meta.total_documents != documents:
        raise CorruptIndex(
            f"metadata.totalDocuments is {meta.total_documents} but chunks reference {documents} documents"
        )


# ------------------------------------------------------------------
# Serialization
# ------------------------------------------------------------------


def _index_to_dict(data: IndexData) -> dict[str, Any]:
    return {
        "chunks": [
            {
                "id": c.id,
                "documentId": c.document_id,
                "documentFilename": c.document_filename,
                "content": c.content,
                "startIndex": c.start_index,
                "endIndex": c.end_index,
                "chunkIndex": c.chunk_index,
            }
            for c in data.chunks
        ],
        "embeddings": [
            {
                "chunkId": e.chunk_id,
                "vector": list(e.vector),
                "model": e.model_name,
                "createdAt": _format_ts(e.created_at),
            }
            for e in data.embeddings
        ],
        "metadata": {
            "totalDocuments": data.metadata.total_documents,
            "totalChunks": data.metadata.total_chunks,
            "model": data.metadata.model_name,
            "chunkSize": data.metadata.chunk_size,
            "overlapSize": data.metadata.overlap_size,
            "createdAt": _format_ts(data.metadata.created_at),
        },
        "schemaVersion": data.schema_version,
    }


def _index_from_dict(raw: Any) -> IndexData:
    if not isinstance(raw, dict):
        raise CorruptIndex("top-level value must be an object")

    chunks = [_chunk_from_dict(c) for c in _field(raw, "chunks", list)]
    embeddings = [_embedding_from_dict(e) for e in _field(raw, "embeddings", list)]
    metadata = _metadata_from_dict(_field(raw, "metadata", dict))

    version = raw.get("schemaVersion", raw.get("version", SCHEMA_VERSION))
    if version != SCHEMA_VERSION:
        logger.warning("Index schema version %r differs from %r; loading anyway", version, SCHEMA_VERSION)

    return IndexData(
        chunks=chunks,
        embeddings=embeddings,
        metadata=metadata,
        schema_version=str(version),
    )


def _chunk_from_dict(raw: Any) -> Chunk:
    if not isinstance(raw, dict):
        raise CorruptIndex("chunk entry must be an object")
    start = _field(raw, "startIndex", int)
    end = _field(raw, "endIndex", int)
    if not 0 <= start < end:
        raise CorruptIndex(f"chunk has invalid range [{start}, {end})")
    return Chunk(
        id=_field(raw, "id", str),
        document_id=_field(raw, "documentId", str),
        document_filename=_field(raw, "documentFilename", str),
        content=_field(raw, "content", str),
        start_index=start,
        end_index=end,
        chunk_index=_field(raw, "chunkIndex", int),
    )


def _embedding_from_dict(raw: Any) -> Embedding:
    if not isinstance(raw, dict):
        raise CorruptIndex("embedding entry must be an object")
    vector = _field(raw, "vector", list)
    if not all(_is_number(v) for v in vector):
        raise CorruptIndex("embedding vector must contain only numbers")
    try:
        values = [float(v) for v in vector]
    except OverflowError as exc:
        raise CorruptIndex("embedding vector holds a number out of float range") from exc
    if not all(math.isfinite(v) for v in values):
        raise CorruptIndex("embedding vector must not contain NaN or infinity")
    return Embedding(
        chunk_id=_field(raw, "chunkId", str),
        vector=values,
        model_name=str(raw.get("model", "")),
        created_at=_parse_ts(_field(raw, "createdAt", str)),
    )


def _metadata_from_dict(raw: dict[str, Any]) -> IndexMetadata:
    return IndexMetadata(
        total_documents=_field(raw, "totalDocuments", int),
        total_chunks=_field(raw, "totalChunks", int),
        model_name=_field(raw, "model", str),
        chunk_size=_field(raw, "chunkSize", int),
        overlap_size=_field(raw, "overlapSize", int),
        created_at=_parse_ts(_field(raw, "createdAt", str)),
    )


def _field(raw: dict[str, Any], key: str, type_: type) -> Any:
    if key not in raw:
        raise CorruptIndex(f"missing required field '{key}'")
    value = raw[key]
    # bool is an int subclass; never accept it where a count/offset is expected
    if not isinstance(value, type_) or (type_ is int and isinstance(value, bool)):
        raise CorruptIndex(
            f"field '{key}' must be {type_.__name__}, got {type(value).__name__}"
        )
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _format_ts(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse_ts(value: str) -> datetime:
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise CorruptIndex(f"invalid timestamp {value!r}") from exc
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts
