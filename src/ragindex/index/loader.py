"""Plain-text document source.

Only ``.txt`` files are supported. Directory scans are returned in sorted path
order; correctness never depends on that order, only the relative order of
chunk ids within one run does.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ragindex.errors import DocumentLoadFailure
from ragindex.index.models import Document

logger = logging.getLogger(__name__)

_TEXT_EXTS = {".txt"}


class DocumentLoader:
    """Load plain-text files as Document objects.

    Any unreadable file raises DocumentLoadFailure; directory loads abort on the
    first failure rather than skipping the file.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def load_document(self, path: Path | str) -> Document:
        path = Path(path)
        if not path.exists():
            raise DocumentLoadFailure(str(path), "file does not exist")
        if not path.is_file():
            raise DocumentLoadFailure(str(path), "not a regular file")
        if path.suffix.lower() not in _TEXT_EXTS:
            raise DocumentLoadFailure(
                str(path), f"only .txt files are supported, got {path.suffix or '(none)'!r}"
            )

        try:
            content = path.read_text(encoding=self.encoding)
            size = path.stat().st_size
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentLoadFailure(str(path), str(exc)) from exc

        logger.debug("Loaded %s (%d chars)", path, len(content))
        return Document(
            filename=path.name,
            content=content,
            metadata={
                "path": str(path.resolve()),
                "size": str(size),
                "extension": path.suffix.lstrip("."),
            },
        )

    def load_directory(self, directory: Path | str) -> list[Document]:
        """Load every ``.txt`` file below *directory* (recursive)."""
        directory = Path(directory)
        if not directory.exists():
            raise DocumentLoadFailure(str(directory), "directory does not exist")
        if not directory.is_dir():
            raise DocumentLoadFailure(str(directory), "not a directory")

        return [self.load_document(p) for p in self.scan(directory)]

    @staticmethod
    def scan(directory: Path) -> list[Path]:
        return sorted(
            p for p in directory.rglob("*")
            if p.is_file() and p.suffix.lower() in _TEXT_EXTS
        )
