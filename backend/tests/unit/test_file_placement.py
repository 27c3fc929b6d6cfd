"""Unit tests for the canonical revision file layout"""

from pathlib import Path
from uuid import UUID, uuid4

import pytest

from adms.infrastructure.storage.file_placement import (
    FilePlacementResolver,
    PlacementKey,
    build_file_name,
    is_valid_extension,
    normalize_extension,
)

MATTER_ID = UUID("60000000-0000-0000-0000-000000000001")
DOCUMENT_ID = UUID("7c9e6679-7425-40de-944b-e07fc1f90ae7")


class TestNormalizeExtension:
    """Extension normalisation"""

    def test_strips_single_leading_dot(self):
        assert normalize_extension(".pdf") == "pdf"
        assert normalize_extension("pdf") == "pdf"

    def test_preserves_case(self):
        assert normalize_extension(".DOCX") == "DOCX"

    @pytest.mark.parametrize("extension", ["", ".", "..pdf", "toolong", "p df", "pd/f", None])
    def test_rejects_invalid(self, extension):
        with pytest.raises(ValueError):
            normalize_extension(extension)

    def test_is_valid_extension(self):
        assert is_valid_extension("xlsx") is True
        assert is_valid_extension("x.lsx") is False


class TestBuildFileName:
    """Revision file names"""

    def test_file_name_format(self):
        assert build_file_name(DOCUMENT_ID, 3, ".pdf") == f"{DOCUMENT_ID}R3.pdf"

    def test_revision_number_must_be_positive(self):
        with pytest.raises(ValueError):
            build_file_name(DOCUMENT_ID, 0, "pdf")


class TestFilePlacementResolver:
    """Path resolution under a storage root"""

    def test_resolve_canonical_path(self, tmp_path):
        resolver = FilePlacementResolver(tmp_path)

        path = resolver.resolve(MATTER_ID, DOCUMENT_ID, 2, "docx")

        assert path == tmp_path / "matters" / str(MATTER_ID) / f"{DOCUMENT_ID}R2.docx"

    def test_resolve_same_extension_with_or_without_dot(self, tmp_path):
        resolver = FilePlacementResolver(tmp_path)

        assert resolver.resolve(MATTER_ID, DOCUMENT_ID, 1, ".pdf") == resolver.resolve(MATTER_ID, DOCUMENT_ID, 1, "pdf")

    @pytest.mark.parametrize(
        "extension, revision_number, expected_extension",
        [
            ("pdf", 12, "pdf"),
            (".PDF", 1, "PDF"),
            ("docx", 2, "docx"),
            (".Msg", 37, "Msg"),
            ("7z", 10_000, "7z"),
        ],
    )
    def test_parse_recovers_placement_key(self, tmp_path, extension, revision_number, expected_extension):
        resolver = FilePlacementResolver(tmp_path)
        matter_id, document_id = uuid4(), uuid4()

        path = resolver.resolve(matter_id, document_id, revision_number, extension)

        assert resolver.parse(path) == PlacementKey(matter_id, document_id, revision_number, expected_extension)
        assert resolver.resolve_key(resolver.parse(path)) == path

    def test_parse_rejects_path_outside_root(self, tmp_path):
        resolver = FilePlacementResolver(tmp_path / "root")
        stray = tmp_path / "elsewhere" / str(MATTER_ID) / f"{DOCUMENT_ID}R1.pdf"

        with pytest.raises(ValueError):
            resolver.parse(stray)

    def test_parse_rejects_non_revision_name(self, tmp_path):
        resolver = FilePlacementResolver(tmp_path)

        with pytest.raises(ValueError):
            resolver.parse(resolver.matter_directory(MATTER_ID) / "notes.txt")

    def test_parse_rejects_invalid_matter_directory(self, tmp_path):
        resolver = FilePlacementResolver(tmp_path)

        with pytest.raises(ValueError):
            resolver.parse(resolver.matters_root / "not-a-uuid" / f"{DOCUMENT_ID}R1.pdf")

    def test_ensure_directory_creates_matter_directory(self, tmp_path):
        resolver = FilePlacementResolver(tmp_path / "store")

        directory = resolver.ensure_directory(MATTER_ID)

        assert directory.is_dir()
        assert directory == Path(tmp_path / "store" / "matters" / str(MATTER_ID))
