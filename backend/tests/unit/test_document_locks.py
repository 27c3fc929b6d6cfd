"""Unit tests for per-document lock managers"""

import asyncio
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import LockError

from adms.config import LockBackend, Settings
from adms.domain.errors import ConcurrencyError, DocumentLockError
from adms.infrastructure.locking.document_lock import (
    LocalDocumentLockManager,
    RedisDocumentLockManager,
    build_lock_manager,
)


class TestLocalDocumentLockManager:
    """asyncio-backed locks"""

    @pytest.mark.asyncio
    async def test_hold_and_release(self):
        manager = LocalDocumentLockManager(timeout=0.1)
        document_id = uuid4()

        async with manager.hold(document_id):
            assert manager.is_locked(document_id) is True

        assert manager.is_locked(document_id) is False

    @pytest.mark.asyncio
    async def test_contention_times_out(self):
        manager = LocalDocumentLockManager(timeout=0.05)
        document_id = uuid4()

        async with manager.hold(document_id):
            with pytest.raises(DocumentLockError) as exc_info:
                async with manager.hold(document_id):
                    pass

        assert exc_info.value.document_id == document_id
        assert exc_info.value.code == "DOCUMENT_LOCKED"

    @pytest.mark.asyncio
    async def test_different_documents_do_not_block(self):
        manager = LocalDocumentLockManager(timeout=0.05)

        async with manager.hold(uuid4()):
            async with manager.hold(uuid4()):
                pass

    @pytest.mark.asyncio
    async def test_waiters_run_in_turn(self):
        manager = LocalDocumentLockManager(timeout=1.0)
        document_id = uuid4()
        order = []

        async def worker(name):
            async with manager.hold(document_id):
                order.append(f"{name}-start")
                await asyncio.sleep(0.01)
                order.append(f"{name}-end")

        await asyncio.gather(worker("a"), worker("b"))

        assert order in (["a-start", "a-end", "b-start", "b-end"], ["b-start", "b-end", "a-start", "a-end"])
        assert manager.is_locked(document_id) is False


def _redis_client(acquire_result=True, acquire_error=None, release_error=None):
    lock = MagicMock()
    lock.acquire = AsyncMock(return_value=acquire_result, side_effect=acquire_error)
    lock.release = AsyncMock(side_effect=release_error)
    client = MagicMock()
    client.lock.return_value = lock
    client.aclose = AsyncMock()
    return client, lock


class TestRedisDocumentLockManager:
    """Redis-backed locks against a mocked client"""

    @pytest.mark.asyncio
    async def test_acquires_with_ttl_and_timeout(self):
        client, lock = _redis_client()
        manager = RedisDocumentLockManager(client, timeout=2.0, ttl=60.0)
        document_id = uuid4()

        async with manager.hold(document_id):
            pass

        client.lock.assert_called_once_with(f"adms:document_lock:{document_id}", timeout=60.0, blocking_timeout=2.0)
        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_not_acquired_raises_lock_error(self):
        client, lock = _redis_client(acquire_result=False)
        manager = RedisDocumentLockManager(client, timeout=0.1, ttl=60.0)

        with pytest.raises(DocumentLockError):
            async with manager.hold(uuid4()):
                pass
        lock.release.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backend_error_raises_concurrency_error(self):
        client, _ = _redis_client(acquire_error=RedisConnectionError("down"))
        manager = RedisDocumentLockManager(client, timeout=0.1, ttl=60.0)

        with pytest.raises(ConcurrencyError) as exc_info:
            async with manager.hold(uuid4()):
                pass
        assert exc_info.value.code == "LOCK_BACKEND_UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_expired_lock_release_is_logged_not_raised(self):
        client, lock = _redis_client(release_error=LockError("expired"))
        manager = RedisDocumentLockManager(client, timeout=0.1, ttl=60.0)

        async with manager.hold(uuid4()):
            pass
        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_close_closes_client(self):
        client, _ = _redis_client()
        manager = RedisDocumentLockManager(client, timeout=0.1, ttl=60.0)

        await manager.close()

        client.aclose.assert_awaited_once()


class TestBuildLockManager:
    """Backend selection"""

    def test_local_backend(self):
        manager = build_lock_manager(Settings(_env_file=None, LOCK_BACKEND=LockBackend.LOCAL, LOCK_TIMEOUT_SECONDS=3))
        assert isinstance(manager, LocalDocumentLockManager)
        assert manager.timeout == 3

    def test_redis_backend_uses_given_client(self):
        client, _ = _redis_client()
        manager = build_lock_manager(
            Settings(_env_file=None, LOCK_BACKEND=LockBackend.REDIS, LOCK_TTL_SECONDS=30),
            redis_client=client,
        )
        assert isinstance(manager, RedisDocumentLockManager)
        assert manager.client is client
        assert manager.ttl == 30
