"""Matter lifecycle service - create, edit, archive, delete, restore and view.

Matters are never hard-deleted. Each transition writes one MatterActivityUser
record in the same commit as the change; reading a single matter through
``get_matter`` writes a VIEWED record.
"""

from typing import List, Optional, Tuple
from uuid import UUID, uuid4

from ..audit.service import AuditRecorder
from ..domain.activities import AuditableKind, MatterActivityName
from ..domain.validation import ValidationIssue, ValidationIssueType, ValidationService, first_issue, log_rejection
from ..infrastructure.repositories.entity_store import EntityStore
from ..models import Matter, User
from ..models.base import utcnow
from ..observability.operations import logged_operation
from ..schemas.mapping import apply_update
from .schemas import MatterForCreation, MatterForUpdate


class MatterService:
    """Service for matter lifecycle transitions and queries."""

    def __init__(self, store: EntityStore, recorder: AuditRecorder, validator: ValidationService):
        self.store = store
        self.recorder = recorder
        self.validator = validator

    @logged_operation("create_matter")
    async def create_matter(self, matter: MatterForCreation, actor: User) -> Optional[Matter]:
        """Create a matter with a unique description.

        Returns:
            The new Matter, or None if the description is taken, the input is
            invalid or the commit failed
        """
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_not_null(matter, "matter"),
        )
        if issue is None and await self.store.matter_description_exists(matter.description):
            issue = _duplicate_description(matter.description)
        if issue:
            return log_rejection("create_matter", issue)

        new_matter = Matter(
            id=uuid4(),
            description=matter.description,
            is_archived=matter.is_archived,
            is_deleted=False,
            creation_date=utcnow(),
        )
        self.store.add(new_matter)

        if not await self._record(new_matter.id, MatterActivityName.CREATED, actor):
            return None
        if not await self.store.commit():
            return None
        return new_matter

    @logged_operation("update_matter")
    async def update_matter(self, matter_id: UUID, update: MatterForUpdate, actor: User) -> Optional[Matter]:
        """Change the description (still unique) and record SAVED."""
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_not_null(update, "update"),
            await self.validator.validate_matter_exists(matter_id),
        )
        if issue is None and update.description is not None:
            if await self.store.matter_description_exists(update.description, exclude_matter_id=matter_id):
                issue = _duplicate_description(update.description)
        if issue:
            return log_rejection("update_matter", issue)

        matter = await self.store.get_matter(matter_id)
        apply_update(matter, update)
        if not await self._record(matter_id, MatterActivityName.SAVED, actor):
            return None
        if not await self.store.commit():
            return None
        return matter

    @logged_operation("delete_matter")
    async def delete_matter(self, matter_id: UUID, actor: User) -> bool:
        """Soft-delete a matter. Its documents are left untouched."""
        return await self._flag_transition(matter_id, "is_deleted", True, MatterActivityName.DELETED, actor)

    @logged_operation("restore_matter")
    async def restore_matter(self, matter_id: UUID, actor: User) -> bool:
        """Clear a matter's deleted flag."""
        return await self._flag_transition(matter_id, "is_deleted", False, MatterActivityName.RESTORED, actor)

    @logged_operation("archive_matter")
    async def archive_matter(self, matter_id: UUID, actor: User) -> bool:
        return await self._flag_transition(matter_id, "is_archived", True, MatterActivityName.ARCHIVED, actor)

    @logged_operation("unarchive_matter")
    async def unarchive_matter(self, matter_id: UUID, actor: User) -> bool:
        return await self._flag_transition(matter_id, "is_archived", False, MatterActivityName.UNARCHIVED, actor)

    @logged_operation("get_matter")
    async def get_matter(self, matter_id: UUID, actor: User) -> Optional[Matter]:
        """Load a matter and record that ``actor`` viewed it.

        Returns:
            The Matter, or None if it does not exist or the VIEWED record
            could not be committed
        """
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_uuid(matter_id, "matter_id"),
        )
        if issue:
            return log_rejection("get_matter", issue)

        matter = await self.store.get_matter(matter_id)
        if matter is None:
            return log_rejection("get_matter", await self.validator.validate_matter_exists(matter_id))

        if not await self._record(matter_id, MatterActivityName.VIEWED, actor):
            return None
        if not await self.store.commit():
            return None
        return matter

    async def list_matters(
        self,
        description: Optional[str] = None,
        include_archived: bool = False,
        include_deleted: bool = False,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Matter], int]:
        """Page through matters, optionally filtered by description substring.

        Listing does not write VIEWED records.
        """
        return await self.store.list_matters(
            description=description,
            include_archived=include_archived,
            include_deleted=include_deleted,
            limit=limit,
            offset=offset,
        )

    async def matter_exists(self, matter_id: UUID) -> bool:
        return await self.store.exists_matter(matter_id)

    async def description_exists(self, description: str) -> bool:
        if self.validator.validate_string_not_empty(description, "description"):
            return False
        return await self.store.matter_description_exists(description.strip())

    async def _flag_transition(
        self,
        matter_id: UUID,
        attribute: str,
        value: bool,
        activity: MatterActivityName,
        actor: User,
    ) -> bool:
        issue = first_issue(
            await self.validator.validate_actor(actor),
            self.validator.validate_uuid(matter_id, "matter_id"),
        )
        if issue:
            log_rejection(activity.value, issue)
            return False

        matter = await self.store.get_matter(matter_id)
        if matter is None:
            log_rejection(activity.value, await self.validator.validate_matter_exists(matter_id))
            return False

        setattr(matter, attribute, value)
        if not await self._record(matter_id, activity, actor):
            return False
        return await self.store.commit()

    async def _record(self, matter_id: UUID, activity: MatterActivityName, actor: User) -> bool:
        if await self.recorder.record_activity(AuditableKind.MATTER, matter_id, activity, actor):
            return True
        await self.store.rollback()
        return False


def _duplicate_description(description: str) -> ValidationIssue:
    return ValidationIssue(
        ValidationIssueType.DUPLICATE_DESCRIPTION,
        f"A matter described as {description!r} already exists",
        field="description",
        value=description,
    )
