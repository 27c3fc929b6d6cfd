"""Integration tests for acting users that have no row in the user table"""

from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.orm import make_transient_to_detached

from adms.domain.activities import AuditableKind, DocumentActivityName, TransferDirection, TransferOperation
from adms.documents.schemas import DocumentForCreation
from adms.matters.schemas import MatterForCreation
from adms.models import DocumentActivityUser, User


def ghost_user() -> User:
    """A user object that was never persisted."""
    return User(id=uuid4(), name="Ghost")


def detached_ghost_user() -> User:
    """A user that looks loaded from a session but has no stored row."""
    user = ghost_user()
    make_transient_to_detached(user)
    return user


async def _document_records(services, document_id):
    return await services.store.fetch_all(
        select(DocumentActivityUser).where(DocumentActivityUser.document_id == document_id)
    )


class TestUnknownActor:
    """Operations reject users that do not exist and persist nothing"""

    @pytest.mark.asyncio
    async def test_create_document_with_transient_ghost(self, app, services, matter):
        matter_id = matter.id

        document = await services.documents.create_document(
            matter_id, DocumentForCreation(file_name="Ghost Memo", extension="pdf"), ghost_user()
        )

        assert document is None
        async with app.unit_of_work() as fresh:
            _, total = await fresh.documents.list_documents(matter_id, include_deleted=True)
        assert total == 0

    @pytest.mark.asyncio
    async def test_create_matter_with_transient_ghost(self, services):
        created = await services.matters.create_matter(MatterForCreation(description="Ghost Matter"), ghost_user())

        assert created is None
        assert await services.matters.description_exists("Ghost Matter") is False

    @pytest.mark.asyncio
    async def test_check_out_with_detached_ghost(self, app, services, document):
        document_id = document.id

        assert await services.documents.check_out(document_id, detached_ghost_user()) is False

        async with app.unit_of_work() as fresh:
            stored = await fresh.documents.get_document(document_id)
            records = await _document_records(fresh, document_id)
        assert stored.is_checked_out is False
        assert len(records) == 1

    @pytest.mark.asyncio
    async def test_transfer_with_ghost(self, services, matter, other_matter, document):
        assert await services.transfers.move(matter.id, other_matter.id, document.id, ghost_user()) is False
        assert await services.transfers.copy(matter.id, other_matter.id, document.id, ghost_user()) is False

    @pytest.mark.asyncio
    async def test_recorder_rejects_ghost(self, services, matter, document):
        assert await services.recorder.record_activity(
            AuditableKind.DOCUMENT, document.id, DocumentActivityName.SAVED, ghost_user()
        ) is False
        assert await services.recorder.record_transfer_activity(
            matter.id, document.id, TransferOperation.COPY, ghost_user(), TransferDirection.FROM
        ) is False


class TestKnownActor:
    """Any object carrying a stored user's id is accepted"""

    @pytest.mark.asyncio
    async def test_transient_copy_of_stored_user(self, app, services, document, actor):
        stand_in = User(id=actor.id, name=actor.name)

        assert await services.documents.check_out(document.id, stand_in) is True

        async with app.unit_of_work() as fresh:
            records = await _document_records(fresh, document.id)
        assert len(records) == 2
        assert {record.user_id for record in records} == {actor.id}


class TestForeignKeys:
    """SQLite enforces the audit tables' foreign keys"""

    @pytest.mark.asyncio
    async def test_record_with_unknown_user_is_rejected(self, services, catalog, document):
        services.store.add(
            DocumentActivityUser(
                document_id=document.id,
                document_activity_id=catalog.lookup(DocumentActivityName.SAVED).id,
                user_id=uuid4(),
            )
        )

        assert await services.store.commit() is False
