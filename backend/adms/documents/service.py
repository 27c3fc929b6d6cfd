"""Document lifecycle service - create, check out/in, edit, delete and revise.

Each transition mutates one document or revision and appends one audit record
(two for create) in the same unit of work. Either both are committed or
neither is. Transitions are not guarded against repetition: checking out a
checked-out document succeeds again and appends another CHECKED OUT record.

| Operation              | Audit written                       |
|------------------------|-------------------------------------|
| create_document        | Document CREATED + Revision CREATED |
| set_check_state        | Document CHECKED OUT / CHECKED IN   |
| update_document        | Document SAVED                      |
| delete_document        | Document DELETED                    |
| restore_document       | Document RESTORED                   |
| add_revision           | Revision CREATED                    |
| update_revision        | Revision SAVED                      |
| delete_revision        | Revision DELETED                    |
| store_revision_content | Revision SAVED                      |
| read_revision_content  | none                                |

Revision content is written to the file store after the commit, at the
revision's canonical path. A failed write raises FilesystemError and leaves the
committed rows in place.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from ..audit.service import AuditRecorder
from ..domain.activities import AuditableKind, DocumentActivityName, RevisionActivityName
from ..domain.documents.ports.file_store_port import FileStorePort
from ..domain.errors import FilesystemError
from ..domain.validation import ValidationService, first_issue, log_rejection
from ..infrastructure.repositories.entity_store import EntityStore
from ..infrastructure.storage.file_placement import FilePlacementResolver
from ..models import Document, Revision, User
from ..models.base import utcnow
from ..observability.operations import logged_operation
from ..schemas.mapping import apply_update
from .schemas import DocumentForCreation, DocumentForUpdate, RevisionForCreation, RevisionForUpdate

logger = logging.getLogger(__name__)

FIRST_REVISION_NUMBER = 1


@dataclass
class StagedDocument:
    """A new document and its first revision, added to the unit of work but not committed."""
    document: Document
    revision: Revision


class DocumentLifecycleService:
    """Service for document and revision lifecycle transitions."""

    def __init__(
        self,
        store: EntityStore,
        recorder: AuditRecorder,
        validator: ValidationService,
        resolver: FilePlacementResolver,
        files: FileStorePort,
    ):
        self.store = store
        self.recorder = recorder
        self.validator = validator
        self.resolver = resolver
        self.files = files

    # =========================================================================
    # Documents
    # =========================================================================

    @logged_operation("create_document")
    async def create_document(
        self,
        matter_id: UUID,
        document: DocumentForCreation,
        actor: User,
        content: Optional[bytes] = None,
    ) -> Optional[Document]:
        """Create a document with revision #1 in an existing matter.

        Args:
            matter_id: Matter to create the document in
            document: File name, extension and initial check-out state
            actor: Acting user
            content: Bytes of revision #1, written after the commit if given

        Returns:
            The new Document, or None if the matter does not exist, the input
            is invalid or the commit failed

        Raises:
            FilesystemError: If the rows committed but the content could not be written
        """
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_not_null(document, "document"),
            self.validator.validate_content(content, required=False),
            await self.validator.validate_matter_exists(matter_id),
        )
        if issue:
            return log_rejection("create_document", issue)

        staged = await self.stage_document_creation(matter_id, document, actor)
        if staged is None:
            return None

        if not await self.store.commit():
            return None
        if content is not None:
            await self._write_content(matter_id, staged.document, staged.revision, content)
        return staged.document

    async def stage_document_creation(
        self,
        matter_id: UUID,
        document: DocumentForCreation,
        actor: User,
    ) -> Optional[StagedDocument]:
        """Add a document, its first revision and both CREATED records to the unit of work.

        Does not commit. Used by ``create_document`` and by the copy path of
        cross-matter transfers, which commits it together with its transfer
        records.

        Returns:
            The staged entities, or None if an audit record could not be staged
            (the unit of work is rolled back in that case)
        """
        now = utcnow()
        new_document = Document(
            id=uuid4(),
            matter_id=matter_id,
            file_name=document.file_name,
            extension=document.extension,
            is_checked_out=document.is_checked_out,
            is_deleted=False,
            creation_date=now,
        )
        first_revision = Revision(
            id=uuid4(),
            document_id=new_document.id,
            revision_number=FIRST_REVISION_NUMBER,
            creation_date=now,
            modification_date=now,
            is_deleted=False,
        )
        self.store.add(new_document)
        # Revision rows reference the document row; no relationship orders the inserts
        if not await self.store.flush():
            return None
        self.store.add(first_revision)

        if not await self._record(AuditableKind.DOCUMENT, new_document.id, DocumentActivityName.CREATED, actor):
            return None
        if not await self._record(AuditableKind.REVISION, first_revision.id, RevisionActivityName.CREATED, actor):
            return None
        return StagedDocument(document=new_document, revision=first_revision)

    @logged_operation("set_check_state")
    async def set_check_state(self, document_id: UUID, is_checked_out: bool, actor: User) -> bool:
        """Check a document out (True) or in (False).

        Returns:
            True if the state and its CHECKED OUT/CHECKED IN record were committed
        """
        activity = DocumentActivityName.CHECKED_OUT if is_checked_out else DocumentActivityName.CHECKED_IN
        return await self._flag_transition(document_id, "is_checked_out", is_checked_out, activity, actor)

    async def check_out(self, document_id: UUID, actor: User) -> bool:
        return await self.set_check_state(document_id, True, actor)

    async def check_in(self, document_id: UUID, actor: User) -> bool:
        return await self.set_check_state(document_id, False, actor)

    @logged_operation("delete_document")
    async def delete_document(self, document_id: UUID, actor: User) -> bool:
        """Soft-delete a document. Its revisions and files are kept."""
        return await self._flag_transition(document_id, "is_deleted", True, DocumentActivityName.DELETED, actor)

    @logged_operation("restore_document")
    async def restore_document(self, document_id: UUID, actor: User) -> bool:
        """Clear a document's deleted flag."""
        return await self._flag_transition(document_id, "is_deleted", False, DocumentActivityName.RESTORED, actor)

    @logged_operation("update_document")
    async def update_document(
        self,
        document_id: UUID,
        update: DocumentForUpdate,
        actor: User,
    ) -> Optional[Document]:
        """Overwrite the fields set in ``update`` and record SAVED.

        A SAVED record is written even when no field actually changed.
        """
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_not_null(update, "update"),
            self.validator.validate_uuid(document_id, "document_id"),
        )
        if issue:
            return log_rejection("update_document", issue)

        document = await self.store.get_document(document_id)
        if document is None:
            return log_rejection("update_document", await self.validator.validate_document_exists(document_id))

        changed = apply_update(document, update)
        if not await self._record(AuditableKind.DOCUMENT, document_id, DocumentActivityName.SAVED, actor):
            return None
        if not await self.store.commit():
            return None

        logger.info(
            f"Document {document_id} saved",
            extra={"document_id": str(document_id), "changed_fields": changed},
        )
        return document

    # =========================================================================
    # Revisions
    # =========================================================================

    @logged_operation("add_revision")
    async def add_revision(
        self,
        document_id: UUID,
        actor: User,
        revision: Optional[RevisionForCreation] = None,
        content: Optional[bytes] = None,
    ) -> Optional[Revision]:
        """Append a revision numbered one above the document's current maximum.

        ``content``, if given, is written to the new revision's file after the
        commit; a failed write raises FilesystemError.
        """
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_content(content, required=False),
            await self.validator.validate_document_exists(document_id),
        )
        if issue:
            return log_rejection("add_revision", issue)

        revision = revision or RevisionForCreation()
        now = utcnow()
        next_number = await self.store.max_revision_number(document_id) + 1
        new_revision = Revision(
            id=uuid4(),
            document_id=document_id,
            revision_number=next_number,
            creation_date=revision.creation_date or now,
            modification_date=revision.modification_date or now,
            is_deleted=False,
        )
        self.store.add(new_revision)

        if not await self._record(AuditableKind.REVISION, new_revision.id, RevisionActivityName.CREATED, actor):
            return None
        if not await self.store.commit():
            return None
        if content is not None:
            document = await self.store.get_document(document_id)
            await self._write_content(document.matter_id, document, new_revision, content)
        return new_revision

    @logged_operation("update_revision")
    async def update_revision(
        self,
        matter_id: UUID,
        document_id: UUID,
        revision_id: UUID,
        update: RevisionForUpdate,
        actor: User,
    ) -> Optional[Revision]:
        """Overwrite revision timestamps and record SAVED.

        The matter, the document and the revision must exist and belong
        together. ``modification_date`` defaults to now when not given.
        """
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_not_null(update, "update"),
            await self.validator.validate_matter_exists(matter_id),
            await self.validator.validate_document_exists(document_id, matter_id=matter_id),
            await self.validator.validate_revision_exists(revision_id, document_id=document_id),
        )
        if issue:
            return log_rejection("update_revision", issue)

        revision = await self.store.get_revision(revision_id)
        apply_update(revision, update)
        if update.modification_date is None:
            revision.modification_date = utcnow()

        if not await self._record(AuditableKind.REVISION, revision_id, RevisionActivityName.SAVED, actor):
            return None
        if not await self.store.commit():
            return None
        return revision

    @logged_operation("delete_revision")
    async def delete_revision(self, document_id: UUID, revision_id: UUID, actor: User) -> bool:
        """Soft-delete one revision of a document."""
        issue = first_issue(
            await self.validator.validate_actor(actor),
            await self.validator.validate_revision_exists(revision_id, document_id=document_id),
        )
        if issue:
            log_rejection("delete_revision", issue)
            return False

        revision = await self.store.get_revision(revision_id)
        revision.is_deleted = True
        if not await self._record(AuditableKind.REVISION, revision_id, RevisionActivityName.DELETED, actor):
            return False
        return await self.store.commit()

    # =========================================================================
    # Revision content
    # =========================================================================

    @logged_operation("store_revision_content")
    async def store_revision_content(
        self,
        matter_id: UUID,
        document_id: UUID,
        revision_id: UUID,
        content: bytes,
        actor: User,
    ) -> bool:
        """Replace the file of an existing revision.

        Touches the revision's modification date and records SAVED, commits,
        then writes ``content`` to the canonical path. An existing file is
        overwritten.

        Returns:
            True once the rows committed and the file was written. False on a
            failed precondition (including empty content) or a failed commit.

        Raises:
            FilesystemError: If the rows committed but the file could not be written
        """
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_content(content),
            await self.validator.validate_matter_exists(matter_id),
            await self.validator.validate_document_exists(document_id, matter_id=matter_id),
            await self.validator.validate_revision_exists(revision_id, document_id=document_id),
        )
        if issue:
            log_rejection("store_revision_content", issue)
            return False

        document = await self.store.get_document(document_id)
        revision = await self.store.get_revision(revision_id)
        revision.modification_date = utcnow()
        if not await self._record(AuditableKind.REVISION, revision_id, RevisionActivityName.SAVED, actor):
            return False
        if not await self.store.commit():
            return False

        await self._write_content(matter_id, document, revision, content)
        return True

    async def read_revision_content(self, matter_id: UUID, document_id: UUID, revision_id: UUID) -> Optional[bytes]:
        """Bytes of one revision's file.

        Returns:
            The content, or None if the matter, document or revision is unknown
            or no file exists at the revision's canonical path

        Raises:
            FilesystemError: If the file exists but cannot be read
        """
        issue = first_issue(
            await self.validator.validate_matter_exists(matter_id),
            await self.validator.validate_document_exists(document_id, matter_id=matter_id),
            await self.validator.validate_revision_exists(revision_id, document_id=document_id),
        )
        if issue:
            return log_rejection("read_revision_content", issue)

        document = await self.store.get_document(document_id)
        revision = await self.store.get_revision(revision_id)
        path = self.content_path(matter_id, document, revision)
        try:
            return await self.files.read(path)
        except FileNotFoundError:
            logger.warning(
                f"Revision {revision_id} has no file",
                extra={"document_id": str(document_id), "revision_id": str(revision_id), "path": str(path)},
            )
            return None
        except OSError as e:
            raise FilesystemError(f"Failed to read revision {revision_id}: {e}", path=str(path)) from e

    def content_path(self, matter_id: UUID, document: Document, revision: Revision) -> Path:
        """Canonical file path of a revision of ``document`` in ``matter_id``."""
        return self.resolver.resolve(matter_id, document.id, revision.revision_number, document.extension)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_document(self, document_id: UUID) -> Optional[Document]:
        return await self.store.get_document(document_id)

    async def get_document_with_revisions(
        self,
        document_id: UUID,
        include_deleted_revisions: bool = True,
    ) -> Optional[Tuple[Document, List[Revision]]]:
        """Document plus its revisions in ascending revision-number order."""
        document = await self.store.get_document(document_id)
        if document is None:
            return None
        revisions = await self.store.list_revisions(document_id, include_deleted=include_deleted_revisions)
        return document, revisions

    async def list_documents(
        self,
        matter_id: UUID,
        file_name: Optional[str] = None,
        include_deleted: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Document], int]:
        """Page through a matter's documents, optionally filtered by file name substring."""
        return await self.store.list_documents(
            matter_id,
            file_name=file_name,
            include_deleted=include_deleted,
            limit=limit,
            offset=offset,
        )

    async def file_name_exists(self, matter_id: UUID, file_name: str) -> bool:
        """True if a non-deleted document in the matter already uses ``file_name``."""
        if self.validator.validate_string_not_empty(file_name, "file_name"):
            return False
        return await self.store.document_file_name_exists(matter_id, file_name.strip())

    async def get_revision(self, document_id: UUID, revision_id: UUID) -> Optional[Revision]:
        return await self.store.get_revision_for_document(document_id, revision_id)

    async def list_revisions(self, document_id: UUID, include_deleted: bool = True) -> List[Revision]:
        return await self.store.list_revisions(document_id, include_deleted=include_deleted)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _flag_transition(
        self,
        document_id: UUID,
        attribute: str,
        value: bool,
        activity: DocumentActivityName,
        actor: User,
    ) -> bool:
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_uuid(document_id, "document_id"),
        )
        if issue:
            log_rejection(activity.value, issue)
            return False

        document = await self.store.get_document(document_id)
        if document is None:
            log_rejection(activity.value, await self.validator.validate_document_exists(document_id))
            return False

        setattr(document, attribute, value)
        if not await self._record(AuditableKind.DOCUMENT, document_id, activity, actor):
            return False
        return await self.store.commit()

    async def _write_content(self, matter_id: UUID, document: Document, revision: Revision, content: bytes) -> None:
        path = self.content_path(matter_id, document, revision)
        try:
            await self.files.write(path, content)
        except OSError as e:
            logger.error(
                f"Content of revision {revision.id} not written: {e}",
                extra={
                    "document_id": str(document.id),
                    "revision_id": str(revision.id),
                    "path": str(path),
                    "error_type": type(e).__name__,
                },
            )
            raise FilesystemError(f"Failed to write revision {revision.id}: {e}", path=str(path)) from e

    async def _record(self, kind: AuditableKind, entity_id: UUID, activity, actor: User) -> bool:
        """Stage an audit record; roll the unit of work back if it cannot be written."""
        if await self.recorder.record_activity(kind, entity_id, activity, actor):
            return True
        await self.store.rollback()
        return False
