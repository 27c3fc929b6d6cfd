"""Integration tests for the activity catalog and the audit recorder"""

from uuid import UUID, uuid4

import pytest
from sqlalchemy import select

from adms.audit.catalog import ActivityCatalog, seed_activity_catalog
from adms.audit.service import AuditRecorder
from adms.database import session_scope
from adms.domain.activities import (
    AuditableKind,
    DocumentActivityName,
    MatterActivityName,
    TransferDirection,
    TransferOperation,
)
from adms.domain.errors import NotFoundError
from adms.models import DocumentActivityUser, MatterDocumentActivityUserFrom

CATALOG_SIZE = 4 + 6 + 7 + 2


class TestActivityCatalog:
    """Catalog loading and lookup"""

    @pytest.mark.asyncio
    async def test_catalog_is_complete(self, catalog):
        assert len(catalog) == CATALOG_SIZE
        assert catalog.missing() == []

    @pytest.mark.asyncio
    async def test_lookup_uses_seeded_ids(self, catalog):
        checked_out = catalog.lookup(DocumentActivityName.CHECKED_OUT)
        moved = catalog.lookup(TransferOperation.MOVE)

        assert checked_out.activity == "CHECKED OUT"
        assert checked_out.id == UUID("20000000-0000-0000-0000-000000000002")
        assert moved.activity == "MOVED"

    def test_require_missing_activity_raises(self):
        empty = ActivityCatalog({})

        assert empty.lookup(MatterActivityName.VIEWED) is None
        with pytest.raises(NotFoundError):
            empty.require(MatterActivityName.VIEWED)
        assert len(empty.missing()) == CATALOG_SIZE

    @pytest.mark.asyncio
    async def test_seeding_is_idempotent(self, session_factory):
        async with session_scope(session_factory) as session:
            assert await seed_activity_catalog(session) == 0


class TestAuditRecorder:
    """record_activity / record_transfer_activity"""

    @pytest.mark.asyncio
    async def test_record_activity_stages_one_record(self, services, document, actor):
        assert await services.recorder.record_activity(
            AuditableKind.DOCUMENT, document.id, DocumentActivityName.SAVED, actor
        ) is True
        assert await services.store.commit() is True

        records = await services.store.fetch_all(
            select(DocumentActivityUser).where(DocumentActivityUser.document_id == document.id)
        )
        assert len(records) == 2

    @pytest.mark.asyncio
    async def test_missing_subject_is_soft_failure(self, services, actor):
        recorded = await services.recorder.record_activity(
            AuditableKind.DOCUMENT, uuid4(), DocumentActivityName.SAVED, actor
        )

        assert recorded is False

    @pytest.mark.asyncio
    async def test_missing_catalog_activity_is_soft_failure(self, services, document, actor):
        recorder = AuditRecorder(services.store, ActivityCatalog({}))

        assert await recorder.record_activity(
            AuditableKind.DOCUMENT, document.id, DocumentActivityName.SAVED, actor
        ) is False

    @pytest.mark.asyncio
    async def test_argument_errors_raise(self, services, document, actor):
        with pytest.raises(ValueError):
            await services.recorder.record_activity(AuditableKind.DOCUMENT, None, DocumentActivityName.SAVED, actor)
        with pytest.raises(ValueError):
            await services.recorder.record_activity(
                AuditableKind.DOCUMENT, UUID(int=0), DocumentActivityName.SAVED, actor
            )
        with pytest.raises(ValueError):
            await services.recorder.record_activity(AuditableKind.DOCUMENT, document.id, None, actor)
        with pytest.raises(ValueError):
            await services.recorder.record_activity(
                AuditableKind.DOCUMENT, document.id, DocumentActivityName.SAVED, None
            )

    @pytest.mark.asyncio
    async def test_activity_family_must_match_kind(self, services, document, actor):
        with pytest.raises(ValueError):
            await services.recorder.record_activity(
                AuditableKind.DOCUMENT, document.id, MatterActivityName.VIEWED, actor
            )
        with pytest.raises(ValueError):
            await services.recorder.record_activity(
                AuditableKind.MATTER_DOCUMENT, document.id, TransferOperation.COPY, actor
            )

    @pytest.mark.asyncio
    async def test_record_transfer_activity(self, services, matter, document, actor):
        assert await services.recorder.record_transfer_activity(
            matter.id, document.id, TransferOperation.COPY, actor, TransferDirection.FROM
        ) is True
        assert await services.store.commit() is True

        records = await services.store.fetch_all(
            select(MatterDocumentActivityUserFrom).where(
                MatterDocumentActivityUserFrom.document_id == document.id
            )
        )
        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_transfer_record_requires_transfer_activity(self, services, matter, document, actor):
        with pytest.raises(ValueError):
            await services.recorder.record_transfer_activity(
                matter.id, document.id, DocumentActivityName.SAVED, actor, TransferDirection.TO
            )

    @pytest.mark.asyncio
    async def test_transfer_record_missing_document_is_soft_failure(self, services, matter, actor):
        assert await services.recorder.record_transfer_activity(
            matter.id, uuid4(), TransferOperation.MOVE, actor, TransferDirection.TO
        ) is False
