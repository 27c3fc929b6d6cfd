"""File Store Port - Domain interface for the physical document store.

Revision content lives as one file per revision under a root directory.
Document services write and read that content; the transfer engine moves and
copies the files without reading them.
"""

from abc import ABC, abstractmethod
from pathlib import Path


class FileStorePort(ABC):
    """Port interface for revision file operations.

    Implementations raise ``OSError`` (or a subclass) on failure. Callers turn
    that into a journal state change or a FilesystemError, not into a rollback
    of committed rows.
    """

    @abstractmethod
    async def write(self, path: Path, content: bytes) -> None:
        """Write content to path, replacing any existing file.

        The parent directory is created if missing. Readers never observe a
        partially written file.
        """

    @abstractmethod
    async def read(self, path: Path) -> bytes:
        """Read a whole file.

        Raises:
            FileNotFoundError: If no file exists at path
        """

    @abstractmethod
    async def move(self, source: Path, destination: Path) -> None:
        """Move a file, creating the destination directory if missing.

        Raises:
            FileNotFoundError: If source does not exist
            FileExistsError: If destination already exists
        """

    @abstractmethod
    async def copy(self, source: Path, destination: Path) -> None:
        """Copy a file, creating the destination directory if missing.

        Raises:
            FileNotFoundError: If source does not exist
            FileExistsError: If destination already exists
        """

    @abstractmethod
    async def exists(self, path: Path) -> bool:
        """Check whether a regular file exists at path."""
