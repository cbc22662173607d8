"""Document storage used by the merge engine."""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")


class Vault(Protocol):
    """Where documents are read from and written back to."""

    def resolve(self, document: Path | str) -> Path: ...

    async def read(self, document: Path) -> str: ...

    async def write(self, document: Path, content: str) -> None: ...


class FileVault:
    """Vault backed by a directory on disk.

    Relative document paths are resolved against ``root``. Files are read and
    written with newline translation disabled so line endings survive a
    rewrite, and writes go through a temporary file and ``os.replace`` so a
    reader never sees a half-written note.
    """

    def __init__(self, root: Path | str = "."):
        self.root = Path(root)

    def resolve(self, document: Path | str) -> Path:
        path = Path(document)
        return path if path.is_absolute() else self.root / path

    async def read(self, document: Path | str) -> str:
        path = self.resolve(document)
        return await asyncio.to_thread(self._read, path)

    async def write(self, document: Path | str, content: str) -> None:
        path = self.resolve(document)
        await asyncio.to_thread(self._write, path, content)
        logger.info(f"Wrote {path}")

    @staticmethod
    def _read(path: Path) -> str:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()

    @staticmethod
    def _write(path: Path, content: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


def is_markdown(document: Path | str) -> bool:
    return Path(document).suffix.lower() in MARKDOWN_SUFFIXES


def document_key(path: Path | str) -> str:
    """Canonical identity of a document, so "a.md", "./a.md" and an absolute path match."""
    return str(Path(path).resolve())
