"""Integration tests for application startup and shutdown"""

from unittest.mock import MagicMock

import pytest

from adms.bootstrap import AdmsApplication
from adms.config import Settings
from adms.domain.errors import StorageConfigurationError
from adms.infrastructure.locking.document_lock import LocalDocumentLockManager
from adms.matters.schemas import MatterForCreation


class TestStart:
    """AdmsApplication.start"""

    @pytest.mark.asyncio
    async def test_start_loads_catalog_and_serves(self, settings, engine, actor, storage_root):
        app = await AdmsApplication.start(settings, engine=engine, configure_logs=False)

        assert len(app.catalog) == 19
        assert app.storage.root == storage_root
        assert isinstance(app.locks, LocalDocumentLockManager)

        async with app.unit_of_work() as services:
            matter = await services.matters.create_matter(MatterForCreation(description="Estate Planning"), actor)
        assert matter is not None

        await app.shutdown()

    @pytest.mark.asyncio
    async def test_missing_storage_root_is_fatal(self, database_url):
        settings = Settings(_env_file=None, DATABASE_URL=database_url, FILE_STORAGE_ROOT=None)
        engine = MagicMock()

        with pytest.raises(StorageConfigurationError):
            await AdmsApplication.start(settings, engine=engine, configure_logs=False)

        # Fails before the database is touched
        assert engine.mock_calls == []

    @pytest.mark.asyncio
    async def test_storage_root_created(self, settings, engine, tmp_path):
        root = tmp_path / "new-root"
        settings = settings.model_copy(update={"FILE_STORAGE_ROOT": str(root)})

        app = await AdmsApplication.start(settings, engine=engine, configure_logs=False)

        assert root.is_dir()
        await app.locks.close()
