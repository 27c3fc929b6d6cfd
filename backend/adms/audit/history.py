"""Read-only audit history queries.

Answers "who did what, when" for a matter, document or revision, and traces
cross-matter transfers from either direction.
"""

from typing import Any, Optional, Type
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.orm import joinedload

from ..domain.activities import AuditableKind, TransferDirection
from ..infrastructure.repositories.entity_store import EntityStore
from ..models import (
    DocumentActivityUser,
    MatterActivityUser,
    MatterDocumentActivityUserFrom,
    MatterDocumentActivityUserTo,
    RevisionActivityUser,
)
from .schemas import AuditEntry, AuditHistoryPage

DEFAULT_PAGE_SIZE = 100


class AuditHistoryService:
    """Paged audit queries ordered oldest first."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def matter_history(self, matter_id: UUID, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> AuditHistoryPage:
        query = select(MatterActivityUser).where(MatterActivityUser.matter_id == matter_id)
        return await self._page(query, MatterActivityUser, AuditableKind.MATTER, "matter_id", limit, offset)

    async def document_history(self, document_id: UUID, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> AuditHistoryPage:
        query = select(DocumentActivityUser).where(DocumentActivityUser.document_id == document_id)
        return await self._page(query, DocumentActivityUser, AuditableKind.DOCUMENT, "document_id", limit, offset)

    async def revision_history(self, revision_id: UUID, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> AuditHistoryPage:
        query = select(RevisionActivityUser).where(RevisionActivityUser.revision_id == revision_id)
        return await self._page(query, RevisionActivityUser, AuditableKind.REVISION, "revision_id", limit, offset)

    async def transfers_from_matter(
        self, matter_id: UUID, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> AuditHistoryPage:
        """Documents that left a matter (From records)."""
        model = MatterDocumentActivityUserFrom
        query = select(model).where(model.matter_id == matter_id)
        return await self._transfer_page(query, model, TransferDirection.FROM, limit, offset)

    async def transfers_to_matter(
        self, matter_id: UUID, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> AuditHistoryPage:
        """Documents that entered a matter (To records)."""
        model = MatterDocumentActivityUserTo
        query = select(model).where(model.matter_id == matter_id)
        return await self._transfer_page(query, model, TransferDirection.TO, limit, offset)

    async def transfers_for_document(
        self, document_id: UUID, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> AuditHistoryPage:
        """From and To records for a document, merged and ordered by time.

        From records come first when both halves of a transfer share a timestamp.
        """
        entries = []
        for direction, model in (
            (TransferDirection.FROM, MatterDocumentActivityUserFrom),
            (TransferDirection.TO, MatterDocumentActivityUserTo),
        ):
            query = (
                select(model)
                .where(model.document_id == document_id)
                .options(joinedload(model.activity), joinedload(model.user))
            )
            for record in await self.store.fetch_all(query):
                entries.append(_transfer_entry(record, direction))

        entries.sort(key=lambda e: (e.created_at, e.direction != TransferDirection.FROM))
        return AuditHistoryPage(
            entries=entries[offset:offset + limit],
            total=len(entries),
            limit=limit,
            offset=offset,
        )

    async def _page(
        self,
        query: Select,
        model: Type[Any],
        kind: AuditableKind,
        subject_column: str,
        limit: int,
        offset: int,
    ) -> AuditHistoryPage:
        total = await self.store.count(query)
        query = (
            query.options(joinedload(model.activity), joinedload(model.user))
            .order_by(model.created_at, model.id)
            .limit(limit)
            .offset(offset)
        )
        records = await self.store.fetch_all(query)
        entries = [
            _entry(record, kind, getattr(record, subject_column))
            for record in records
        ]
        return AuditHistoryPage(entries=entries, total=total, limit=limit, offset=offset)

    async def _transfer_page(
        self,
        query: Select,
        model: Type[Any],
        direction: TransferDirection,
        limit: int,
        offset: int,
    ) -> AuditHistoryPage:
        total = await self.store.count(query)
        query = (
            query.options(joinedload(model.activity), joinedload(model.user))
            .order_by(model.created_at, model.id)
            .limit(limit)
            .offset(offset)
        )
        records = await self.store.fetch_all(query)
        entries = [_transfer_entry(record, direction) for record in records]
        return AuditHistoryPage(entries=entries, total=total, limit=limit, offset=offset)


def _entry(record: Any, kind: AuditableKind, entity_id: UUID, direction: Optional[TransferDirection] = None) -> AuditEntry:
    return AuditEntry(
        id=record.id,
        kind=kind,
        entity_id=entity_id,
        direction=direction,
        activity_id=record.activity.id,
        activity=record.activity.activity,
        user_id=record.user.id,
        user_name=record.user.name,
        created_at=record.created_at,
    )


def _transfer_entry(record: Any, direction: TransferDirection) -> AuditEntry:
    entry = _entry(record, AuditableKind.MATTER_DOCUMENT, record.document_id, direction)
    return entry.model_copy(update={"matter_id": record.matter_id, "document_id": record.document_id})
