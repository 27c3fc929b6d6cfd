"""Application wiring for the ADMS core.

Builds the process-wide pieces once (settings, logging, storage root, engine,
activity catalog, lock manager, file store) and hands out per-operation
service bundles sharing one unit of work.

Usage:
    app = await AdmsApplication.start()
    async with app.unit_of_work() as services:
        document = await services.documents.create_document(matter_id, data, actor)
    await app.shutdown()
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from .audit.catalog import ActivityCatalog
from .audit.history import AuditHistoryService
from .audit.service import AuditRecorder
from .config import Settings, get_settings
from .database import create_engine_from_settings, create_session_factory, session_scope
from .documents.service import DocumentLifecycleService
from .domain.documents.ports.file_store_port import FileStorePort
from .domain.validation import ValidationService
from .infrastructure.locking.document_lock import DocumentLockManager, build_lock_manager
from .infrastructure.repositories.entity_store import EntityStore
from .infrastructure.storage.file_placement import FilePlacementResolver
from .infrastructure.storage.filesystem_storage import FilesystemStorage
from .infrastructure.storage.storage_config import StorageConfig, load_storage_config
from .matters.service import MatterService
from .observability.logging_config import configure_logging
from .transfers.service import TransferService

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Everything one operation needs, bound to a single unit of work."""
    store: EntityStore
    recorder: AuditRecorder
    validator: ValidationService
    documents: DocumentLifecycleService
    matters: MatterService
    transfers: TransferService
    history: AuditHistoryService


class AdmsApplication:
    """Process-wide container for the ADMS core."""

    def __init__(
        self,
        settings: Settings,
        engine: AsyncEngine,
        storage: StorageConfig,
        catalog: ActivityCatalog,
        locks: DocumentLockManager,
        files: Optional[FileStorePort] = None,
    ):
        self.settings = settings
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        self.storage = storage
        self.resolver = FilePlacementResolver(storage.root)
        self.catalog = catalog
        self.locks = locks
        self.files = files or FilesystemStorage()

    @classmethod
    async def start(
        cls,
        settings: Optional[Settings] = None,
        engine: Optional[AsyncEngine] = None,
        locks: Optional[DocumentLockManager] = None,
        files: Optional[FileStorePort] = None,
        configure_logs: bool = True,
    ) -> "AdmsApplication":
        """Resolve configuration and load the activity catalog.

        Raises:
            StorageConfigurationError: If FILE_STORAGE_ROOT is missing or unusable
        """
        settings = settings or get_settings()
        if configure_logs:
            configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

        # Fatal before anything touches the database
        storage = load_storage_config(settings)

        engine = engine or create_engine_from_settings(settings)
        async with session_scope(create_session_factory(engine)) as session:
            catalog = await ActivityCatalog.load(session)

        app = cls(
            settings=settings,
            engine=engine,
            storage=storage,
            catalog=catalog,
            locks=locks or build_lock_manager(settings),
            files=files,
        )
        logger.info(
            "ADMS core started",
            extra={
                "environment": settings.ENVIRONMENT,
                "storage_root": str(storage.root),
                "lock_backend": settings.LOCK_BACKEND.value,
                "copy_revision_numbering": settings.COPY_REVISION_NUMBERING.value,
            },
        )
        return app

    def build_services(self, store: EntityStore) -> Services:
        recorder = AuditRecorder(store, self.catalog)
        validator = ValidationService(store)
        documents = DocumentLifecycleService(
            store, recorder, validator, resolver=self.resolver, files=self.files
        )
        return Services(
            store=store,
            recorder=recorder,
            validator=validator,
            documents=documents,
            matters=MatterService(store, recorder, validator),
            transfers=TransferService(
                store,
                recorder,
                validator,
                documents,
                resolver=self.resolver,
                files=self.files,
                locks=self.locks,
                copy_numbering=self.settings.COPY_REVISION_NUMBERING,
            ),
            history=AuditHistoryService(store),
        )

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[Services]:
        """Service bundle over a fresh session, closed (and rolled back if uncommitted) on exit."""
        async with session_scope(self.session_factory) as session:
            yield self.build_services(EntityStore(session))

    async def shutdown(self) -> None:
        await self.locks.close()
        await self.engine.dispose()
        logger.info("ADMS core stopped")
