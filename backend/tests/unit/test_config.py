"""Unit tests for settings and startup storage configuration"""

import pytest

from adms.config import CopyRevisionNumbering, LockBackend, Settings
from adms.domain.errors import StorageConfigurationError
from adms.infrastructure.storage.storage_config import StorageConfig, load_storage_config, validate_storage_config


class TestSettings:
    """Environment-driven settings"""

    def test_defaults(self, monkeypatch):
        for name in ("FILE_STORAGE_ROOT", "LOCK_BACKEND", "COPY_REVISION_NUMBERING"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.FILE_STORAGE_ROOT is None
        assert settings.LOCK_BACKEND == LockBackend.LOCAL
        assert settings.COPY_REVISION_NUMBERING == CopyRevisionNumbering.SOURCE_SUCCESSOR

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("FILE_STORAGE_ROOT", str(tmp_path))
        monkeypatch.setenv("LOCK_BACKEND", "redis")
        monkeypatch.setenv("COPY_REVISION_NUMBERING", "new_document")
        monkeypatch.setenv("LOCK_TIMEOUT_SECONDS", "1.5")

        settings = Settings(_env_file=None)

        assert settings.FILE_STORAGE_ROOT == str(tmp_path)
        assert settings.LOCK_BACKEND == LockBackend.REDIS
        assert settings.COPY_REVISION_NUMBERING == CopyRevisionNumbering.NEW_DOCUMENT
        assert settings.LOCK_TIMEOUT_SECONDS == 1.5


class TestStorageConfig:
    """FILE_STORAGE_ROOT resolution at startup"""

    def test_missing_root_is_fatal(self):
        settings = Settings(_env_file=None, FILE_STORAGE_ROOT=None)

        with pytest.raises(StorageConfigurationError) as exc_info:
            load_storage_config(settings)
        assert "FILE_STORAGE_ROOT" in str(exc_info.value)

    def test_blank_root_is_fatal(self):
        with pytest.raises(StorageConfigurationError):
            load_storage_config(Settings(_env_file=None, FILE_STORAGE_ROOT="   "))

    def test_root_is_created(self, tmp_path):
        root = tmp_path / "store"

        config = load_storage_config(Settings(_env_file=None, FILE_STORAGE_ROOT=str(root)))

        assert config.root == root
        assert root.is_dir()

    def test_root_must_exist_when_creation_disabled(self, tmp_path):
        with pytest.raises(StorageConfigurationError):
            validate_storage_config(StorageConfig(root=tmp_path / "missing", create_root=False))

    def test_root_must_be_directory(self, tmp_path):
        not_a_directory = tmp_path / "file"
        not_a_directory.write_text("x")

        with pytest.raises(StorageConfigurationError):
            validate_storage_config(StorageConfig(root=not_a_directory))
