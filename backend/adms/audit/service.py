"""Audit recorder for document, revision and matter activity.

Every lifecycle transition appends exactly one immutable activity-user record
through this service. Records are staged in the caller's unit of work and are
persisted by the caller's single commit, together with the mutation they
describe.

Record families:
- MATTER: MatterActivityUser
- DOCUMENT: DocumentActivityUser
- REVISION: RevisionActivityUser
- MATTER_DOCUMENT: MatterDocumentActivityUserFrom / MatterDocumentActivityUserTo
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Type
from uuid import UUID

from ..domain.activities import AuditableKind, TransferDirection, TransferOperation, kind_of
from ..infrastructure.repositories.entity_store import EntityStore
from ..models import (
    Document,
    DocumentActivityUser,
    Matter,
    MatterActivityUser,
    MatterDocumentActivityUserFrom,
    MatterDocumentActivityUserTo,
    Revision,
    RevisionActivityUser,
    User,
)
from ..models.base import utcnow
from .catalog import ActivityCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecordType:
    """How to build the activity-user record for one auditable family."""
    subject_model: Type[Any]
    record_model: Type[Any]
    subject_attr: str


AUDIT_RECORD_TYPES: Dict[AuditableKind, AuditRecordType] = {
    AuditableKind.MATTER: AuditRecordType(Matter, MatterActivityUser, "matter"),
    AuditableKind.DOCUMENT: AuditRecordType(Document, DocumentActivityUser, "document"),
    AuditableKind.REVISION: AuditRecordType(Revision, RevisionActivityUser, "revision"),
}

TRANSFER_RECORD_TYPES: Dict[TransferDirection, Type[Any]] = {
    TransferDirection.FROM: MatterDocumentActivityUserFrom,
    TransferDirection.TO: MatterDocumentActivityUserTo,
}


class AuditRecorder:
    """Stages activity-user records in the current unit of work.

    Argument errors (missing ids, wrong activity family) raise ValueError:
    they are programming errors. A subject, user or catalog activity that cannot
    be found is logged and reported as False without writing anything.
    The recorder never commits.
    """

    def __init__(self, store: EntityStore, catalog: ActivityCatalog):
        self.store = store
        self.catalog = catalog

    async def record_activity(
        self,
        kind: AuditableKind,
        entity_id: UUID,
        activity: Enum,
        user: User,
    ) -> bool:
        """Stage one audit record for a matter, document or revision.

        Args:
            kind: Auditable family of the subject (not MATTER_DOCUMENT)
            entity_id: Id of the matter/document/revision acted on
            activity: Activity enum member of the same family
            user: Acting user; resolved by id in this unit of work

        Returns:
            True if the record was staged, False if the subject, the user or the activity
            could not be resolved

        Raises:
            ValueError: On missing arguments or a family mismatch
        """
        _check_arguments(entity_id=entity_id, activity=activity, user=user)
        record_type = AUDIT_RECORD_TYPES.get(kind)
        if record_type is None:
            raise ValueError(f"{kind.value} activity must be recorded with record_transfer_activity")
        if kind_of(activity) is not kind:
            raise ValueError(f"{activity!r} is not a {kind.value} activity")

        # Pending changes must be visible to the re-fetch below
        if not await self.store.flush():
            return False

        subject = await self.store.get(record_type.subject_model, entity_id)
        if subject is None:
            logger.warning(
                f"Audit record skipped: {kind.value} {entity_id} not found",
                extra={"entity_type": kind.value, "entity_id": str(entity_id), "activity": activity.value},
            )
            return False

        activity_row = await self._attach_activity(activity, entity_id)
        actor = await self._resolve_user(user, entity_id)
        if activity_row is None or actor is None:
            return False

        record = record_type.record_model(
            activity=activity_row,
            user=actor,
            created_at=utcnow(),
        )
        setattr(record, record_type.subject_attr, subject)
        self.store.add(record)

        logger.debug(
            f"{kind.value} {activity.value} recorded",
            extra={"entity_type": kind.value, "entity_id": str(entity_id), "user_id": str(user.id)},
        )
        return True

    async def record_transfer_activity(
        self,
        matter_id: UUID,
        document_id: UUID,
        activity: TransferOperation,
        user: User,
        direction: TransferDirection,
    ) -> bool:
        """Stage the From or To half of a cross-matter transfer record.

        Both halves of one transfer are expected to use the same ``activity``,
        so they reference the same MatterDocumentActivity row.

        Returns:
            True if the record was staged, False if the matter, the document, the user
            or the activity could not be resolved
        """
        _check_arguments(entity_id=matter_id, activity=activity, user=user)
        _check_arguments(entity_id=document_id, activity=activity, user=user)
        if not isinstance(activity, TransferOperation):
            raise ValueError(f"{activity!r} is not a transfer activity")

        if not await self.store.flush():
            return False

        matter = await self.store.get_matter(matter_id)
        document = await self.store.get_document(document_id)
        if matter is None or document is None:
            logger.warning(
                f"Transfer audit record skipped: matter {matter_id} or document {document_id} not found",
                extra={
                    "matter_id": str(matter_id),
                    "document_id": str(document_id),
                    "direction": direction.value,
                },
            )
            return False

        activity_row = await self._attach_activity(activity, document_id)
        actor = await self._resolve_user(user, document_id)
        if activity_row is None or actor is None:
            return False

        record = TRANSFER_RECORD_TYPES[direction](
            matter=matter,
            document=document,
            activity=activity_row,
            user=actor,
            created_at=utcnow(),
        )
        self.store.add(record)
        return True

    async def _attach_activity(self, activity: Enum, entity_id: UUID) -> Optional[Any]:
        activity_row = self.catalog.lookup(activity)
        if activity_row is None:
            logger.warning(
                f"Audit record skipped: activity {activity.value} is not in the catalog",
                extra={"activity": activity.value, "entity_id": str(entity_id)},
            )
            return None
        return await self.store.attach_existing(activity_row)

    async def _resolve_user(self, user: User, entity_id: UUID) -> Optional[User]:
        # Callers may hold a transient or detached User; link the stored row
        actor = await self.store.get_user(user.id)
        if actor is None:
            logger.warning(
                f"Audit record skipped: user {user.id} not found",
                extra={"user_id": str(user.id), "entity_id": str(entity_id)},
            )
        return actor


NIL_UUID = UUID(int=0)


def _check_arguments(entity_id: Optional[UUID], activity: Optional[Enum], user: Optional[User]) -> None:
    if entity_id is None or entity_id == NIL_UUID:
        raise ValueError("entity_id is required")
    if activity is None:
        raise ValueError("activity is required")
    if user is None or user.id is None or user.id == NIL_UUID:
        raise ValueError("user with an id is required")
