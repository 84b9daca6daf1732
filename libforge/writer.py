"""Writing generated files to disk.

The engine only returns ``GeneratedFile`` records; ``FileWriter`` is the one
place that touches the file system.  Writes run in worker threads via
``asyncio.to_thread`` so a caller embedding libforge in an event loop is never
blocked on disk I/O.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from .engine.orchestrator import GeneratedFile

logger = logging.getLogger(__name__)


class WriterError(Exception):
    """Raised when a generated file cannot be placed inside the output root."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot write {path}: {reason}")


@dataclass
class WriteResult:
    written: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.written) + len(self.skipped)


class FileWriter:
    """Writes ``GeneratedFile`` records under *root*.

    Existing files are left untouched unless ``overwrite`` is set; they are
    reported in ``WriteResult.skipped``.
    """

    def __init__(self, root: Path, overwrite: bool = False) -> None:
        self.root = Path(root)
        self.overwrite = overwrite

    def target(self, relative_path: str) -> Path:
        """Resolve *relative_path* under the root, rejecting escapes."""
        posix = PurePosixPath(relative_path)
        if posix.is_absolute() or ".." in posix.parts or not posix.parts:
            raise WriterError(relative_path, "path must be relative to the output root")
        return self.root.joinpath(*posix.parts)

    async def write_all(self, files: Iterable[GeneratedFile]) -> WriteResult:
        files = list(files)
        # Validate every path before the first write.
        targets = [(self.target(f.relative_path), f.content) for f in files]

        result = WriteResult()
        for path, content in targets:
            exists = await asyncio.to_thread(path.exists)
            if exists and not self.overwrite:
                logger.info("Skipping existing file %s", path)
                result.skipped.append(path)
                continue
            await asyncio.to_thread(_write_file, path, content)
            logger.debug("Wrote %s", path)
            result.written.append(path)
        return result


def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
