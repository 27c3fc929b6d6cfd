"""Pytest fixtures for the ADMS core.

Provides reusable test fixtures for:
- A file-backed SQLite database (aiosqlite) with the schema and activity catalog
- A seeded acting user, detached from any session like a real caller's user
- A file store root under tmp_path
- An AdmsApplication wired with a local lock manager
- A service bundle over one unit of work

Usage:
    @pytest.mark.asyncio
    async def test_create(services, matter, actor):
        document = await services.documents.create_document(matter.id, data, actor)
        assert document is not None
"""

import os
from pathlib import Path
from typing import Optional
from uuid import UUID

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("LOG_JSON", "false")

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from adms.audit.catalog import ActivityCatalog, seed_activity_catalog
from adms.audit.seed_data import SEED_USERS
from adms.bootstrap import AdmsApplication
from adms.config import Settings
from adms.database import create_all, create_session_factory, enable_sqlite_foreign_keys, session_scope
from adms.documents.schemas import DocumentForCreation
from adms.infrastructure.locking.document_lock import LocalDocumentLockManager
from adms.infrastructure.storage.file_placement import FilePlacementResolver
from adms.infrastructure.storage.storage_config import StorageConfig
from adms.matters.schemas import MatterForCreation
from adms.models import User

ACTOR_ID, ACTOR_NAME = SEED_USERS[0]
OTHER_ACTOR_ID, OTHER_ACTOR_NAME = SEED_USERS[1]

TEST_LOCK_TIMEOUT = 0.2


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'adms.db'}"


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    root = tmp_path / "files"
    root.mkdir()
    return root


@pytest.fixture
def settings(database_url: str, storage_root: Path) -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=database_url,
        FILE_STORAGE_ROOT=str(storage_root),
        LOCK_TIMEOUT_SECONDS=TEST_LOCK_TIMEOUT,
        LOG_JSON=False,
    )


@pytest_asyncio.fixture
async def engine(database_url: str):
    """Engine over a fresh database with tables, catalog and two users."""
    engine = create_async_engine(database_url)
    enable_sqlite_foreign_keys(engine)
    await create_all(engine)
    async with session_scope(create_session_factory(engine)) as session:
        await seed_activity_catalog(session)
        session.add_all([
            User(id=ACTOR_ID, name=ACTOR_NAME),
            User(id=OTHER_ACTOR_ID, name=OTHER_ACTOR_NAME),
        ])
        await session.commit()
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def catalog(session_factory) -> ActivityCatalog:
    async with session_scope(session_factory) as session:
        return await ActivityCatalog.load(session)


async def _load_user(session_factory, user_id: UUID) -> User:
    async with session_scope(session_factory) as session:
        return await session.get(User, user_id)


@pytest_asyncio.fixture
async def actor(session_factory) -> User:
    """Acting user, detached from any session."""
    return await _load_user(session_factory, ACTOR_ID)


@pytest_asyncio.fixture
async def other_actor(session_factory) -> User:
    return await _load_user(session_factory, OTHER_ACTOR_ID)


@pytest.fixture
def lock_manager() -> LocalDocumentLockManager:
    return LocalDocumentLockManager(timeout=TEST_LOCK_TIMEOUT)


@pytest_asyncio.fixture
async def app(settings, engine, storage_root, catalog, lock_manager) -> AdmsApplication:
    return AdmsApplication(
        settings=settings,
        engine=engine,
        storage=StorageConfig(root=storage_root),
        catalog=catalog,
        locks=lock_manager,
    )


@pytest_asyncio.fixture
async def services(app):
    """Service bundle over one unit of work."""
    async with app.unit_of_work() as services:
        yield services


@pytest.fixture
def resolver(storage_root: Path) -> FilePlacementResolver:
    return FilePlacementResolver(storage_root)


@pytest_asyncio.fixture
async def matter(services, actor):
    return await services.matters.create_matter(MatterForCreation(description="Corporate Merger - ABC Corp"), actor)


@pytest_asyncio.fixture
async def other_matter(services, actor):
    return await services.matters.create_matter(
        MatterForCreation(description="Employment Dispute - Smith v. TechCorp"), actor
    )


@pytest_asyncio.fixture
async def document(services, matter, actor):
    return await services.documents.create_document(
        matter.id, DocumentForCreation(file_name="Merger Agreement", extension="pdf"), actor
    )


def write_revision_file(
    resolver: FilePlacementResolver,
    matter_id: UUID,
    document_id: UUID,
    revision_number: int = 1,
    extension: str = "pdf",
    content: Optional[bytes] = None,
) -> Path:
    """Put a revision file at its canonical path."""
    path = resolver.resolve(matter_id, document_id, revision_number, extension)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content if content is not None else f"{document_id}R{revision_number}".encode())
    return path


@pytest.fixture
def place_revision_file(resolver):
    """Factory writing revision files under the test storage root."""

    def _place(matter_id: UUID, document_id: UUID, revision_number: int = 1, extension: str = "pdf", content=None):
        return write_revision_file(resolver, matter_id, document_id, revision_number, extension, content)

    return _place
