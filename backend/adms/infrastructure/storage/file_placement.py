"""File placement resolver for revision files.

Canonical layout:
    {root}/matters/{matter_id}/{document_id}R{revision_number}.{extension}

The resolver is pure path policy: it never touches the filesystem except in
``ensure_directory``. Extension normalisation happens here and nowhere else.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Union
from uuid import UUID

MATTERS_DIRECTORY = "matters"
MAX_EXTENSION_LENGTH = 5

_EXTENSION_RE = re.compile(r"^[A-Za-z0-9]{1,5}$")
_FILENAME_RE = re.compile(
    r"^(?P<document_id>[0-9a-fA-F-]{36})R(?P<revision_number>[0-9]+)\.(?P<extension>[A-Za-z0-9]{1,5})$"
)


@dataclass(frozen=True)
class PlacementKey:
    """Everything that determines where a revision file lives."""
    matter_id: UUID
    document_id: UUID
    revision_number: int
    extension: str


def normalize_extension(extension: str) -> str:
    """Strip one leading dot and validate the extension.

    ``".pdf"`` and ``"pdf"`` both become ``"pdf"``. Case is preserved.

    Raises:
        ValueError: If the result is not 1-5 ASCII letters or digits
    """
    if extension is None:
        raise ValueError("extension is required")
    value = extension.strip()
    if value.startswith("."):
        value = value[1:]
    if not _EXTENSION_RE.match(value):
        raise ValueError(
            f"Invalid extension: {extension!r}. Expected 1-{MAX_EXTENSION_LENGTH} letters or digits."
        )
    return value


def is_valid_extension(extension: str) -> bool:
    try:
        normalize_extension(extension)
    except ValueError:
        return False
    return True


def build_file_name(document_id: UUID, revision_number: int, extension: str) -> str:
    """``{document_id}R{revision_number}.{extension}``"""
    if revision_number < 1:
        raise ValueError(f"revision_number must be >= 1, got {revision_number}")
    return f"{document_id}R{revision_number}.{normalize_extension(extension)}"


class FilePlacementResolver:
    """Resolves canonical revision file paths under a configured root."""

    def __init__(self, root: Union[str, Path]):
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def matters_root(self) -> Path:
        return self._root / MATTERS_DIRECTORY

    def matter_directory(self, matter_id: UUID) -> Path:
        return self.matters_root / str(matter_id)

    def resolve(self, matter_id: UUID, document_id: UUID, revision_number: int, extension: str) -> Path:
        """Return the canonical path of one revision file.

        Raises:
            ValueError: On an invalid extension or revision number
        """
        return self.matter_directory(matter_id) / build_file_name(document_id, revision_number, extension)

    def resolve_key(self, key: PlacementKey) -> Path:
        return self.resolve(key.matter_id, key.document_id, key.revision_number, key.extension)

    def parse(self, path: Union[str, Path]) -> PlacementKey:
        """Recover the placement key from a canonical path.

        Inverse of ``resolve``. The path must sit directly in a matter
        directory under this resolver's root.

        Raises:
            ValueError: If the path does not follow the canonical layout
        """
        path = Path(path)
        match = _FILENAME_RE.match(path.name)
        if not match:
            raise ValueError(f"Not a revision file name: {path.name!r}")
        if path.parent.parent != self.matters_root:
            raise ValueError(f"{path} is not under {self.matters_root}")

        try:
            matter_id = UUID(path.parent.name)
            document_id = UUID(match.group("document_id"))
        except ValueError as e:
            raise ValueError(f"Invalid identifier in {path}: {e}") from e

        return PlacementKey(
            matter_id=matter_id,
            document_id=document_id,
            revision_number=int(match.group("revision_number")),
            extension=match.group("extension"),
        )

    def ensure_directory(self, matter_id: UUID) -> Path:
        """Create the matter's directory (and the root) if missing."""
        directory = self.matter_directory(matter_id)
        directory.mkdir(parents=True, exist_ok=True)
        return directory
