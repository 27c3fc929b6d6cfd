"""Unit tests for the local filesystem file store"""

import pytest

from adms.infrastructure.storage.filesystem_storage import FilesystemStorage


@pytest.fixture
def storage():
    return FilesystemStorage()


class TestFilesystemStorage:
    """write, read, move, copy and exists"""

    @pytest.mark.asyncio
    async def test_move_creates_parent_and_removes_source(self, storage, tmp_path):
        source = tmp_path / "a" / "file.pdf"
        source.parent.mkdir()
        source.write_bytes(b"content")
        destination = tmp_path / "b" / "c" / "file.pdf"

        await storage.move(source, destination)

        assert not source.exists()
        assert destination.read_bytes() == b"content"

    @pytest.mark.asyncio
    async def test_copy_keeps_source(self, storage, tmp_path):
        source = tmp_path / "file.pdf"
        source.write_bytes(b"content")
        destination = tmp_path / "copy" / "file.pdf"

        await storage.copy(source, destination)

        assert source.read_bytes() == b"content"
        assert destination.read_bytes() == b"content"

    @pytest.mark.asyncio
    async def test_missing_source_raises(self, storage, tmp_path):
        with pytest.raises(FileNotFoundError):
            await storage.move(tmp_path / "missing.pdf", tmp_path / "out.pdf")

    @pytest.mark.asyncio
    async def test_existing_destination_is_not_overwritten(self, storage, tmp_path):
        source = tmp_path / "file.pdf"
        source.write_bytes(b"new")
        destination = tmp_path / "existing.pdf"
        destination.write_bytes(b"old")

        with pytest.raises(FileExistsError):
            await storage.copy(source, destination)
        assert destination.read_bytes() == b"old"

    @pytest.mark.asyncio
    async def test_exists_only_for_files(self, storage, tmp_path):
        file_path = tmp_path / "file.pdf"
        file_path.write_bytes(b"x")

        assert await storage.exists(file_path) is True
        assert await storage.exists(tmp_path) is False
        assert await storage.exists(tmp_path / "missing") is False

    @pytest.mark.asyncio
    async def test_write_creates_parent_and_replaces_file(self, storage, tmp_path):
        path = tmp_path / "matters" / "m" / "file.pdf"

        await storage.write(path, b"first")
        await storage.write(path, b"second")

        assert path.read_bytes() == b"second"
        assert [p.name for p in path.parent.iterdir()] == ["file.pdf"]

    @pytest.mark.asyncio
    async def test_read(self, storage, tmp_path):
        path = tmp_path / "file.pdf"
        path.write_bytes(b"content")

        assert await storage.read(path) == b"content"

    @pytest.mark.asyncio
    async def test_read_missing_file_raises(self, storage, tmp_path):
        with pytest.raises(FileNotFoundError):
            await storage.read(tmp_path / "missing.pdf")
        with pytest.raises(FileNotFoundError):
            await storage.read(tmp_path)
