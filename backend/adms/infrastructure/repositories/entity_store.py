"""Entity store: the unit of work over one AsyncSession.

Services read and stage changes through this store and persist everything
with a single ``commit()``. A failed commit is logged, rolled back and
reported as ``False``; it never raises into the service layer.
"""

import logging
from typing import Any, List, Optional, Tuple, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...models import Document, FileTransfer, Matter, Revision, User
from ...transfers.status import PENDING_STATUSES

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class EntityStore:
    """Repository for matters, documents, revisions, users and the transfer journal.

    One instance wraps one AsyncSession for the lifetime of an operation.
    Reads return ``None`` for unknown ids instead of raising.
    """

    def __init__(self, session: AsyncSession):
        """Initialize store with database session.

        Args:
            session: SQLAlchemy async session owned by the caller
        """
        self.session = session

    # ------------------------------------------------------------------
    # Typed reads
    # ------------------------------------------------------------------

    async def get(self, model: Type[ModelT], entity_id: Optional[UUID]) -> Optional[ModelT]:
        """Load one row of ``model`` by primary key, or None."""
        if entity_id is None:
            return None
        return await self.session.get(model, entity_id)

    async def get_matter(self, matter_id: Optional[UUID]) -> Optional[Matter]:
        return await self.get(Matter, matter_id)

    async def get_document(self, document_id: Optional[UUID]) -> Optional[Document]:
        return await self.get(Document, document_id)

    async def get_revision(self, revision_id: Optional[UUID]) -> Optional[Revision]:
        return await self.get(Revision, revision_id)

    async def get_user(self, user_id: Optional[UUID]) -> Optional[User]:
        return await self.get(User, user_id)

    async def get_file_transfer(self, transfer_id: Optional[UUID]) -> Optional[FileTransfer]:
        return await self.get(FileTransfer, transfer_id)

    async def get_document_in_matter(self, matter_id: UUID, document_id: UUID) -> Optional[Document]:
        """Load a document only if it belongs to the given matter."""
        result = await self.session.execute(
            select(Document).where(Document.id == document_id, Document.matter_id == matter_id)
        )
        return result.scalars().first()

    async def get_revision_for_document(self, document_id: UUID, revision_id: UUID) -> Optional[Revision]:
        """Load a revision only if it belongs to the given document."""
        result = await self.session.execute(
            select(Revision).where(Revision.id == revision_id, Revision.document_id == document_id)
        )
        return result.scalars().first()

    # ------------------------------------------------------------------
    # Existence checks
    # ------------------------------------------------------------------

    async def exists(self, model: Type[Any], entity_id: Optional[UUID]) -> bool:
        if entity_id is None:
            return False
        result = await self.session.execute(select(model.id).where(model.id == entity_id))
        return result.first() is not None

    async def exists_matter(self, matter_id: Optional[UUID]) -> bool:
        return await self.exists(Matter, matter_id)

    async def exists_document(self, document_id: Optional[UUID]) -> bool:
        return await self.exists(Document, document_id)

    async def exists_revision(self, revision_id: Optional[UUID]) -> bool:
        return await self.exists(Revision, revision_id)

    async def exists_user(self, user_id: Optional[UUID]) -> bool:
        return await self.exists(User, user_id)

    async def matter_description_exists(self, description: str, exclude_matter_id: Optional[UUID] = None) -> bool:
        """Check whether another matter already uses this description (exact match)."""
        query = select(Matter.id).where(Matter.description == description)
        if exclude_matter_id is not None:
            query = query.where(Matter.id != exclude_matter_id)
        result = await self.session.execute(query)
        return result.first() is not None

    async def document_file_name_exists(self, matter_id: UUID, file_name: str) -> bool:
        """Check whether a non-deleted document in the matter has this file name."""
        result = await self.session.execute(
            select(Document.id).where(
                Document.matter_id == matter_id,
                Document.file_name == file_name,
                Document.is_deleted.is_(False),
            )
        )
        return result.first() is not None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_revisions(self, document_id: UUID, include_deleted: bool = True) -> List[Revision]:
        """Revisions of a document in ascending revision-number order."""
        query = select(Revision).where(Revision.document_id == document_id)
        if not include_deleted:
            query = query.where(Revision.is_deleted.is_(False))
        query = query.order_by(Revision.revision_number)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def max_revision_number(self, document_id: UUID) -> int:
        """Highest revision number of a document, 0 when it has none."""
        result = await self.session.execute(
            select(func.max(Revision.revision_number)).where(Revision.document_id == document_id)
        )
        return result.scalar() or 0

    async def list_documents(
        self,
        matter_id: UUID,
        file_name: Optional[str] = None,
        include_deleted: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Document], int]:
        """Page through a matter's documents ordered by file name.

        Returns:
            (documents on this page, total matching count)
        """
        query = select(Document).where(Document.matter_id == matter_id)
        if file_name:
            query = query.where(Document.file_name.ilike(f"%{file_name}%"))
        if not include_deleted:
            query = query.where(Document.is_deleted.is_(False))
        total = await self.count(query)
        query = query.order_by(Document.file_name, Document.id).limit(limit).offset(offset)
        return await self.fetch_all(query), total

    async def list_matters(
        self,
        description: Optional[str] = None,
        include_archived: bool = False,
        include_deleted: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Matter], int]:
        """Page through matters ordered by description.

        Returns:
            (matters on this page, total matching count)
        """
        query = select(Matter)
        if description:
            query = query.where(Matter.description.ilike(f"%{description}%"))
        if not include_archived:
            query = query.where(Matter.is_archived.is_(False))
        if not include_deleted:
            query = query.where(Matter.is_deleted.is_(False))
        total = await self.count(query)
        query = query.order_by(Matter.description).limit(limit).offset(offset)
        return await self.fetch_all(query), total

    async def pending_file_transfers(self) -> List[FileTransfer]:
        """Journal entries whose file step has not completed, oldest first."""
        result = await self.session.execute(
            select(FileTransfer)
            .where(FileTransfer.status.in_(PENDING_STATUSES))
            .order_by(FileTransfer.created_at)
        )
        return list(result.scalars().all())

    async def fetch_all(self, query: Select) -> List[Any]:
        result = await self.session.execute(query)
        return list(result.scalars().unique().all())

    async def count(self, query: Select) -> int:
        """Count the rows a select would return, ignoring ordering and paging."""
        count_query = select(func.count()).select_from(query.order_by(None).subquery())
        result = await self.session.execute(count_query)
        return result.scalar_one()

    # ------------------------------------------------------------------
    # Unit of work
    # ------------------------------------------------------------------

    def add(self, instance: Any) -> None:
        """Stage a new entity for insertion on the next commit."""
        self.session.add(instance)

    async def attach_existing(self, instance: ModelT) -> ModelT:
        """Attach an already-persisted entity without reloading or re-inserting it.

        Catalog activity rows are loaded once at startup and reused across
        sessions. Merging with ``load=False`` makes the
        current session treat them as persistent, so linking a new audit
        record to them never emits an INSERT for the reference row.

        Returns:
            The instance bound to this session (may be a different object)
        """
        return await self.session.merge(instance, load=False)

    async def flush(self) -> bool:
        """Send pending changes to the database without committing.

        Returns:
            False if the database rejected them; the session is rolled back.
        """
        try:
            await self.session.flush()
            return True
        except SQLAlchemyError as e:
            logger.error(
                f"Flush failed, rolling back unit of work: {e}",
                exc_info=True,
                extra={"error_type": type(e).__name__},
            )
            await self.rollback()
            return False

    async def commit(self) -> bool:
        """Persist the unit of work.

        Returns:
            True on success. False if the database rejected the changes; the
            session is rolled back so nothing from this unit of work persists.
        """
        try:
            await self.session.commit()
            return True
        except SQLAlchemyError as e:
            logger.error(
                f"Commit failed, rolling back unit of work: {e}",
                exc_info=True,
                extra={"error_type": type(e).__name__},
            )
            await self.rollback()
            return False

    async def rollback(self) -> None:
        await self.session.rollback()
