"""Per-document locks for cross-matter transfers.

A transfer holds its document's lock from the first read of the revisions to
the end of the file step, so two transfers of the same document never
interleave. Two backends:

- LocalDocumentLockManager: asyncio locks, one process
- RedisDocumentLockManager: Redis locks, shared across processes

Both raise DocumentLockError when the lock is not acquired within the
configured timeout.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Dict, Optional
from uuid import UUID

import redis.asyncio as redis_asyncio
from redis.exceptions import LockError, RedisError

from ...config import LockBackend, Settings, get_settings
from ...domain.errors import ConcurrencyError, DocumentLockError

logger = logging.getLogger(__name__)

DOCUMENT_LOCK_KEY_PATTERN = "adms:document_lock:{document_id}"


class DocumentLockManager(ABC):
    """Hands out exclusive per-document locks.

    Example:
        >>> async with lock_manager.hold(document_id):
        ...     await transfer_files(...)
    """

    def __init__(self, timeout: float):
        self.timeout = timeout

    @abstractmethod
    def hold(self, document_id: UUID) -> AsyncContextManager[None]:
        """Async context manager holding the document's lock.

        Raises:
            DocumentLockError: If the lock is not acquired within ``timeout``
        """

    async def close(self) -> None:
        """Release backend resources."""


class LocalDocumentLockManager(DocumentLockManager):
    """In-process lock registry keyed by document id.

    Entries are dropped when no task holds or waits for them.
    """

    def __init__(self, timeout: float):
        super().__init__(timeout)
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._users: Dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, document_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(document_id, asyncio.Lock())
        self._users[document_id] = self._users.get(document_id, 0) + 1
        try:
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning(
                    f"Document lock not acquired within {self.timeout}s",
                    extra={"document_id": str(document_id)},
                )
                raise DocumentLockError(document_id, self.timeout) from None
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[document_id] -= 1
            if self._users[document_id] == 0:
                del self._users[document_id]
                del self._locks[document_id]

    def is_locked(self, document_id: UUID) -> bool:
        lock = self._locks.get(document_id)
        return lock is not None and lock.locked()


class RedisDocumentLockManager(DocumentLockManager):
    """Redis-backed document locks.

    Locks expire after ``ttl`` seconds so a crashed holder cannot block a
    document forever.
    """

    def __init__(self, client: redis_asyncio.Redis, timeout: float, ttl: float):
        super().__init__(timeout)
        self.client = client
        self.ttl = ttl

    @asynccontextmanager
    async def hold(self, document_id: UUID) -> AsyncIterator[None]:
        key = DOCUMENT_LOCK_KEY_PATTERN.format(document_id=document_id)
        lock = self.client.lock(key, timeout=self.ttl, blocking_timeout=self.timeout)
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            logger.error(
                f"Document lock backend error: {e}",
                extra={"document_id": str(document_id), "lock_key": key},
            )
            raise ConcurrencyError(f"Lock backend unavailable: {e}", code="LOCK_BACKEND_UNAVAILABLE") from e

        if not acquired:
            logger.warning(
                f"Document lock not acquired within {self.timeout}s",
                extra={"document_id": str(document_id), "lock_key": key},
            )
            raise DocumentLockError(document_id, self.timeout)

        logger.debug("Document lock acquired", extra={"document_id": str(document_id), "lock_key": key})
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                # Lock may have expired
                logger.warning(
                    f"Document lock release failed: {e}",
                    extra={"document_id": str(document_id), "lock_key": key},
                )

    async def close(self) -> None:
        await self.client.aclose()


def build_lock_manager(
    settings: Optional[Settings] = None,
    redis_client: Optional[redis_asyncio.Redis] = None,
) -> DocumentLockManager:
    """Create the lock manager selected by LOCK_BACKEND."""
    settings = settings or get_settings()
    if settings.LOCK_BACKEND == LockBackend.REDIS:
        client = redis_client or redis_asyncio.from_url(settings.REDIS_URL, decode_responses=True)
        return RedisDocumentLockManager(
            client,
            timeout=settings.LOCK_TIMEOUT_SECONDS,
            ttl=settings.LOCK_TTL_SECONDS,
        )
    return LocalDocumentLockManager(timeout=settings.LOCK_TIMEOUT_SECONDS)
