"""Error types for the document lifecycle and transfer engine.

Expected failures (missing entities, invalid input, failed commits) are logged
and surfaced as None/False by the services. The exceptions below either carry
those failures for the validation collaborator or signal outcomes a caller has
to act on: an inconsistent transfer, lock contention, or a broken startup
configuration.
"""

from typing import Optional
from uuid import UUID


class AdmsError(Exception):
    """Base exception for the ADMS core."""

    def __init__(self, message: str, code: str = "ADMS_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(AdmsError):
    """Missing, empty or malformed input."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message, code="VALIDATION_ERROR")


class NotFoundError(AdmsError):
    """A referenced entity or catalog activity does not exist."""

    def __init__(self, entity_type: str, entity_id: object):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id} not found", code="NOT_FOUND")


class PersistenceError(AdmsError):
    """The entity store could not commit a unit of work."""

    def __init__(self, message: str):
        super().__init__(message, code="PERSISTENCE_ERROR")


class FilesystemError(AdmsError):
    """A file store operation failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message, code="FILESYSTEM_ERROR")


class TransferIncompleteError(FilesystemError):
    """The database side of a transfer committed but the file step failed.

    The journal entry identified by ``transfer_id`` is marked INCOMPLETE and can
    be retried on its own with ``TransferService.retry_file_operation``.
    """

    def __init__(
        self,
        transfer_id: UUID,
        document_id: UUID,
        reason: str,
        path: Optional[str] = None,
    ):
        self.transfer_id = transfer_id
        self.document_id = document_id
        self.reason = reason
        super().__init__(
            f"Transfer {transfer_id} for document {document_id} committed but file step failed: {reason}",
            path=path,
        )
        self.code = "TRANSFER_INCOMPLETE"


class ConcurrencyError(AdmsError):
    """Conflicting concurrent access to the same resource."""

    def __init__(self, message: str, code: str = "CONCURRENCY_ERROR"):
        super().__init__(message, code=code)


class DocumentLockError(ConcurrencyError):
    """A document lock could not be acquired in time."""

    def __init__(self, document_id: UUID, timeout: float):
        self.document_id = document_id
        self.timeout = timeout
        super().__init__(
            f"Document {document_id} is locked by another transfer (waited {timeout}s)",
            code="DOCUMENT_LOCKED",
        )


class StorageConfigurationError(AdmsError):
    """File store configuration is missing or unusable. Fatal at startup."""

    def __init__(self, message: str):
        super().__init__(message, code="STORAGE_CONFIGURATION_ERROR")
