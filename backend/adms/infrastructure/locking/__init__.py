"""Per-document locks serialising transfers."""

from .document_lock import (
    DocumentLockManager,
    LocalDocumentLockManager,
    RedisDocumentLockManager,
    build_lock_manager,
)

__all__ = [
    "DocumentLockManager",
    "LocalDocumentLockManager",
    "RedisDocumentLockManager",
    "build_lock_manager",
]
