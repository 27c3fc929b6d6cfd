"""Filesystem implementation of FileStorePort.

Blocking file calls run in a worker thread so the event loop stays free and
the calling task can be cancelled between steps.
"""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path

from ...domain.documents.ports.file_store_port import FileStorePort

logger = logging.getLogger(__name__)


class FilesystemStorage(FileStorePort):
    """Local filesystem file store."""

    async def write(self, path: Path, content: bytes) -> None:
        await asyncio.to_thread(self._write, Path(path), content)
        logger.info(f"Stored {path}", extra={"size_bytes": len(content)})

    async def read(self, path: Path) -> bytes:
        path = Path(path)
        if not await self.exists(path):
            logger.warning(f"File not found: {path}")
            raise FileNotFoundError(f"File not found: {path}")
        return await asyncio.to_thread(path.read_bytes)

    async def move(self, source: Path, destination: Path) -> None:
        await asyncio.to_thread(self._move, Path(source), Path(destination))
        logger.info(f"Moved {source} -> {destination}")

    async def copy(self, source: Path, destination: Path) -> None:
        await asyncio.to_thread(self._copy, Path(source), Path(destination))
        logger.info(f"Copied {source} -> {destination}")

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(Path(path).is_file)

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # Same directory as the target so the final rename stays on one filesystem
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as temp_file:
                temp_file.write(content)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    @staticmethod
    def _check(source: Path, destination: Path) -> None:
        if not source.is_file():
            raise FileNotFoundError(f"Source file not found: {source}")
        if destination.exists():
            raise FileExistsError(f"Destination already exists: {destination}")
        destination.parent.mkdir(parents=True, exist_ok=True)

    def _move(self, source: Path, destination: Path) -> None:
        self._check(source, destination)
        shutil.move(str(source), str(destination))

    def _copy(self, source: Path, destination: Path) -> None:
        self._check(source, destination)
        shutil.copy2(source, destination)
