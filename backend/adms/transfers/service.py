"""Cross-matter transfer service - move or copy a document to another matter.

Transfer flow (per document, under its lock):
1. Validate source matter, target matter and document (fail fast, no writes)
2. Pick the latest revision; a move without revisions degrades to a copy
3. Stage the database side: matter reassignment (move) or a new document
   (copy), the From record, the To record and a STAGED FileTransfer row
4. Commit all of it at once
5. Move or copy the revision file; mark the FileTransfer row COMPLETED, or
   INCOMPLETE and raise TransferIncompleteError

A file step that fails never rolls back the committed database side. The
journal row keeps what is needed to retry the file step on its own.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence
from uuid import UUID, uuid4

from ..audit.service import AuditRecorder
from ..config import CopyRevisionNumbering
from ..documents.schemas import DocumentForCreation
from ..documents.service import DocumentLifecycleService
from ..domain.activities import TransferDirection, TransferOperation
from ..domain.documents.ports.file_store_port import FileStorePort
from ..domain.errors import ConcurrencyError, TransferIncompleteError
from ..domain.validation import ValidationIssue, ValidationIssueType, ValidationService, first_issue, log_rejection
from ..infrastructure.locking.document_lock import DocumentLockManager
from ..infrastructure.repositories.entity_store import EntityStore
from ..infrastructure.storage.file_placement import FilePlacementResolver
from ..models import Document, FileTransfer, Revision, User
from ..models.base import utcnow
from ..observability.operations import logged_operation
from .status import FileTransferStatus, can_transition

logger = logging.getLogger(__name__)


def select_latest_revision(revisions: Sequence[Revision]) -> Optional[Revision]:
    """Highest revision number; among equal numbers, the last one given.

    The sort is stable, so ties keep their input order and the tie-break does
    not depend on timestamps.
    """
    if not revisions:
        return None
    return sorted(revisions, key=lambda r: r.revision_number)[-1]


@dataclass
class StagedTransfer:
    """Database side of a transfer, staged but not committed."""
    operation: TransferOperation
    target_document_id: UUID
    journal: Optional[FileTransfer]


@dataclass
class ReconciliationReport:
    """Outcome of one reconciliation pass over pending journal rows."""
    checked: int = 0
    completed: List[UUID] = field(default_factory=list)
    incomplete: List[UUID] = field(default_factory=list)
    skipped: List[UUID] = field(default_factory=list)

    @property
    def all_completed(self) -> bool:
        return not self.incomplete and not self.skipped


class TransferService:
    """Move/copy orchestrator keeping rows, audit records and files consistent."""

    def __init__(
        self,
        store: EntityStore,
        recorder: AuditRecorder,
        validator: ValidationService,
        documents: DocumentLifecycleService,
        resolver: FilePlacementResolver,
        files: FileStorePort,
        locks: DocumentLockManager,
        copy_numbering: CopyRevisionNumbering = CopyRevisionNumbering.SOURCE_SUCCESSOR,
    ):
        self.store = store
        self.recorder = recorder
        self.validator = validator
        self.documents = documents
        self.resolver = resolver
        self.files = files
        self.locks = locks
        self.copy_numbering = copy_numbering

    @logged_operation("transfer")
    async def transfer(
        self,
        source_matter_id: UUID,
        target_matter_id: UUID,
        document_id: UUID,
        operation: TransferOperation,
        actor: User,
    ) -> bool:
        """Move or copy a document from one matter to another.

        Args:
            source_matter_id: Matter the document is in now
            target_matter_id: Matter to move/copy it to
            document_id: Document to transfer
            operation: TransferOperation.MOVE or TransferOperation.COPY
            actor: Acting user

        Returns:
            True if the database side committed and the file step finished.
            False on a failed precondition or a failed commit (nothing written).

        Raises:
            DocumentLockError: If another transfer holds the document too long
            ConcurrencyError: If the lock backend is unreachable
            TransferIncompleteError: If the database side committed but the
                file step failed; retry with ``retry_file_operation``
        """
        issue = first_issue(
            await self.validator.validate_actor(actor),
            _operation_issue(operation),
            await self.validator.validate_matter_exists(source_matter_id),
            await self.validator.validate_matter_exists(target_matter_id),
            await self.validator.validate_document_exists(document_id, matter_id=source_matter_id),
        )
        if issue is None and source_matter_id == target_matter_id:
            issue = ValidationIssue(
                ValidationIssueType.INVALID_ID,
                "Source and target matter must differ",
                field="target_matter_id",
                value=target_matter_id,
            )
        if issue:
            log_rejection("transfer", issue)
            return False

        async with self.locks.hold(document_id):
            staged = await self._stage_transfer(
                source_matter_id, target_matter_id, document_id, TransferOperation(operation), actor
            )
            if staged is None:
                return False

            transfer_id = staged.journal.id if staged.journal is not None else None
            if not await self.store.commit():
                return False

            logger.info(
                f"Transfer {staged.operation.value} committed for document {document_id}",
                extra={
                    "document_id": str(document_id),
                    "target_document_id": str(staged.target_document_id),
                    "source_matter_id": str(source_matter_id),
                    "target_matter_id": str(target_matter_id),
                    "transfer_id": str(transfer_id) if transfer_id else None,
                },
            )
            if staged.journal is None:
                return True
            return await self._run_file_step(staged.journal)

    async def move(self, source_matter_id: UUID, target_matter_id: UUID, document_id: UUID, actor: User) -> bool:
        return await self.transfer(source_matter_id, target_matter_id, document_id, TransferOperation.MOVE, actor)

    async def copy(self, source_matter_id: UUID, target_matter_id: UUID, document_id: UUID, actor: User) -> bool:
        return await self.transfer(source_matter_id, target_matter_id, document_id, TransferOperation.COPY, actor)

    @logged_operation("retry_file_operation")
    async def retry_file_operation(self, transfer_id: UUID) -> bool:
        """Run the file step of a STAGED or INCOMPLETE transfer again.

        If the file is already where it should be (destination present, and
        for a move the source gone) the row is just marked COMPLETED.

        Returns:
            True once the row is COMPLETED, False if the row does not exist

        Raises:
            DocumentLockError: If the document is locked by a running transfer
            ConcurrencyError: If the lock backend is unreachable
            TransferIncompleteError: If the file step fails again
        """
        journal = await self.store.get_file_transfer(transfer_id)
        if journal is None:
            logger.warning(f"File transfer {transfer_id} not found", extra={"transfer_id": str(transfer_id)})
            return False
        if journal.status == FileTransferStatus.COMPLETED:
            return True

        async with self.locks.hold(journal.document_id):
            source, destination = Path(journal.source_path), Path(journal.destination_path)
            if await self._already_applied(journal.operation, source, destination):
                logger.info(
                    f"File transfer {transfer_id} already applied on disk",
                    extra={"transfer_id": str(transfer_id), "destination": str(destination)},
                )
                await self._mark(journal, FileTransferStatus.COMPLETED, count_attempt=False)
                return True
            return await self._run_file_step(journal)

    @logged_operation("reconcile_incomplete_transfers")
    async def reconcile_incomplete_transfers(self) -> ReconciliationReport:
        """Retry every STAGED or INCOMPLETE transfer, oldest first."""
        report = ReconciliationReport()
        pending_ids = [journal.id for journal in await self.store.pending_file_transfers()]
        for transfer_id in pending_ids:
            report.checked += 1
            try:
                await self.retry_file_operation(transfer_id)
                report.completed.append(transfer_id)
            except TransferIncompleteError:
                report.incomplete.append(transfer_id)
            except ConcurrencyError as e:
                # Held by a running transfer or lock backend down; leave the row for the next pass
                logger.warning(
                    f"Transfer {transfer_id} skipped: {e.message}",
                    extra={"transfer_id": str(transfer_id), "error_code": e.code},
                )
                report.skipped.append(transfer_id)

        logger.info(
            f"Reconciled {report.checked} pending transfers",
            extra={
                "completed": len(report.completed),
                "incomplete": len(report.incomplete),
                "skipped": len(report.skipped),
            },
        )
        return report

    async def list_pending_transfers(self) -> List[FileTransfer]:
        return await self.store.pending_file_transfers()

    # =========================================================================
    # Staging
    # =========================================================================

    async def _stage_transfer(
        self,
        source_matter_id: UUID,
        target_matter_id: UUID,
        document_id: UUID,
        operation: TransferOperation,
        actor: User,
    ) -> Optional[StagedTransfer]:
        # Re-read under the lock; a concurrent move may have relocated it
        document = await self.store.get_document_in_matter(source_matter_id, document_id)
        if document is None:
            log_rejection(
                "transfer",
                await self.validator.validate_document_exists(document_id, matter_id=source_matter_id),
            )
            return None

        latest = select_latest_revision(await self.store.list_revisions(document_id))
        degraded = False
        if latest is None:
            if operation is not TransferOperation.MOVE:
                logger.warning(
                    f"Copy rejected: document {document_id} has no revisions",
                    extra={"document_id": str(document_id)},
                )
                return None
            logger.info(
                f"Document {document_id} has no revisions, move degraded to copy",
                extra={"document_id": str(document_id)},
            )
            operation = TransferOperation.COPY
            degraded = True

        try:
            if operation is TransferOperation.MOVE:
                return await self._stage_move(document, latest, source_matter_id, target_matter_id, actor)
            return await self._stage_copy(document, latest, source_matter_id, target_matter_id, actor, degraded)
        except ValueError as e:
            # Stored extension no longer resolves to a canonical path
            logger.error(
                f"Cannot resolve file placement for document {document_id}: {e}",
                extra={"document_id": str(document_id)},
            )
            await self.store.rollback()
            return None

    async def _stage_move(
        self,
        document: Document,
        latest: Revision,
        source_matter_id: UUID,
        target_matter_id: UUID,
        actor: User,
    ) -> Optional[StagedTransfer]:
        document_id = document.id
        source = self.resolver.resolve(source_matter_id, document_id, latest.revision_number, document.extension)
        destination = self.resolver.resolve(target_matter_id, document_id, latest.revision_number, document.extension)

        if not await self._record(source_matter_id, document_id, TransferOperation.MOVE, actor, TransferDirection.FROM):
            return None
        document.matter_id = target_matter_id
        if not await self._record(target_matter_id, document_id, TransferOperation.MOVE, actor, TransferDirection.TO):
            return None

        journal = self._stage_journal(
            TransferOperation.MOVE, document_id, document_id, source_matter_id, target_matter_id, source, destination
        )
        return StagedTransfer(operation=TransferOperation.MOVE, target_document_id=document_id, journal=journal)

    async def _stage_copy(
        self,
        document: Document,
        latest: Optional[Revision],
        source_matter_id: UUID,
        target_matter_id: UUID,
        actor: User,
        degraded: bool,
    ) -> Optional[StagedTransfer]:
        document_id = document.id
        copy_input = DocumentForCreation.model_construct(
            file_name=document.file_name,
            extension=document.extension,
            is_checked_out=False,
        )
        staged = await self.documents.stage_document_creation(target_matter_id, copy_input, actor)
        if staged is None:
            return None
        new_document_id = staged.document.id

        if not await self._record(source_matter_id, document_id, TransferOperation.COPY, actor, TransferDirection.FROM):
            return None
        if not await self._record(target_matter_id, new_document_id, TransferOperation.COPY, actor, TransferDirection.TO):
            return None

        if degraded:
            # Nothing on disk to carry over
            return StagedTransfer(operation=TransferOperation.COPY, target_document_id=new_document_id, journal=None)

        source = self.resolver.resolve(source_matter_id, document_id, latest.revision_number, document.extension)
        destination = self.resolver.resolve(
            target_matter_id,
            new_document_id,
            self._copy_revision_number(latest, staged.revision),
            document.extension,
        )
        journal = self._stage_journal(
            TransferOperation.COPY, document_id, new_document_id, source_matter_id, target_matter_id, source, destination
        )
        return StagedTransfer(operation=TransferOperation.COPY, target_document_id=new_document_id, journal=journal)

    def _copy_revision_number(self, latest: Revision, new_revision: Revision) -> int:
        if self.copy_numbering == CopyRevisionNumbering.NEW_DOCUMENT:
            return new_revision.revision_number
        return latest.revision_number + 1

    def _stage_journal(
        self,
        operation: TransferOperation,
        document_id: UUID,
        target_document_id: UUID,
        source_matter_id: UUID,
        target_matter_id: UUID,
        source: Path,
        destination: Path,
    ) -> FileTransfer:
        now = utcnow()
        journal = FileTransfer(
            id=uuid4(),
            operation=operation,
            document_id=document_id,
            target_document_id=target_document_id,
            source_matter_id=source_matter_id,
            target_matter_id=target_matter_id,
            source_path=str(source),
            destination_path=str(destination),
            status=FileTransferStatus.STAGED,
            attempts=0,
            created_at=now,
            updated_at=now,
        )
        self.store.add(journal)
        return journal

    async def _record(
        self,
        matter_id: UUID,
        document_id: UUID,
        operation: TransferOperation,
        actor: User,
        direction: TransferDirection,
    ) -> bool:
        if await self.recorder.record_transfer_activity(matter_id, document_id, operation, actor, direction):
            return True
        await self.store.rollback()
        return False

    # =========================================================================
    # File step
    # =========================================================================

    async def _run_file_step(self, journal: FileTransfer) -> bool:
        transfer_id, document_id = journal.id, journal.document_id
        operation = TransferOperation(journal.operation)
        source, destination = Path(journal.source_path), Path(journal.destination_path)

        try:
            await asyncio.to_thread(self.resolver.ensure_directory, journal.target_matter_id)
            if operation is TransferOperation.MOVE:
                await self.files.move(source, destination)
            else:
                await self.files.copy(source, destination)
        except OSError as e:
            logger.error(
                f"File step of transfer {transfer_id} failed: {e}",
                extra={
                    "transfer_id": str(transfer_id),
                    "document_id": str(document_id),
                    "source": str(source),
                    "destination": str(destination),
                    "error_type": type(e).__name__,
                },
            )
            await self._mark(journal, FileTransferStatus.INCOMPLETE, error=str(e))
            raise TransferIncompleteError(transfer_id, document_id, str(e), path=str(source)) from e

        await self._mark(journal, FileTransferStatus.COMPLETED)
        return True

    async def _already_applied(self, operation: TransferOperation, source: Path, destination: Path) -> bool:
        if not await self.files.exists(destination):
            return False
        if TransferOperation(operation) is TransferOperation.COPY:
            return True
        return not await self.files.exists(source)

    async def _mark(
        self,
        journal: FileTransfer,
        status: FileTransferStatus,
        error: Optional[str] = None,
        count_attempt: bool = True,
    ) -> None:
        """Move the journal row to ``status`` and commit.

        A failed commit is logged only: the file system is already in its new
        state and a later reconciliation will bring the row in line.
        """
        transfer_id = journal.id
        if not can_transition(journal.status, status):
            logger.warning(
                f"Ignoring journal transition {journal.status.value} -> {status.value}",
                extra={"transfer_id": str(transfer_id)},
            )
            return
        journal.status = status
        journal.error = error
        journal.updated_at = utcnow()
        if count_attempt:
            journal.attempts += 1
        if not await self.store.commit():
            logger.error(
                f"Could not record {status.value} for transfer {transfer_id}",
                extra={"transfer_id": str(transfer_id), "status": status.value},
            )


def _operation_issue(operation) -> Optional[ValidationIssue]:
    try:
        TransferOperation(operation)
    except ValueError:
        return ValidationIssue(
            ValidationIssueType.NULL_VALUE if operation is None else ValidationIssueType.INVALID_ID,
            f"Unsupported transfer operation {operation!r}",
            field="operation",
            value=operation,
        )
    return None
