"""Validation collaborator for lifecycle and transfer operations.

Every check returns ``None`` when it passes or a ``ValidationIssue`` when it
fails. Nothing here raises for bad input; services decide how to fail.
"""

import logging
from typing import Any, Optional
from uuid import UUID

from ...infrastructure.repositories.entity_store import EntityStore
from .models import ValidationIssue, ValidationIssueType

logger = logging.getLogger(__name__)

NIL_UUID = UUID(int=0)


def first_issue(*issues: Optional[ValidationIssue]) -> Optional[ValidationIssue]:
    """Return the first failed check, or None if all passed."""
    for issue in issues:
        if issue is not None:
            return issue
    return None


class ValidationService:
    """Input and existence checks backed by the entity store."""

    def __init__(self, store: EntityStore):
        self.store = store

    # Input checks

    @staticmethod
    def validate_not_null(value: Any, field: str) -> Optional[ValidationIssue]:
        if value is None:
            return ValidationIssue(ValidationIssueType.NULL_VALUE, f"{field} is required", field=field)
        return None

    @staticmethod
    def validate_uuid(value: Any, field: str) -> Optional[ValidationIssue]:
        """Accept a UUID or its string form; reject None and the nil UUID."""
        if value is None:
            return ValidationIssue(ValidationIssueType.NULL_VALUE, f"{field} is required", field=field)
        if not isinstance(value, UUID):
            try:
                value = UUID(str(value))
            except ValueError:
                return ValidationIssue(
                    ValidationIssueType.INVALID_ID, f"{field} is not a valid id", field=field, value=value
                )
        if value == NIL_UUID:
            return ValidationIssue(ValidationIssueType.INVALID_ID, f"{field} must not be empty", field=field, value=value)
        return None

    @staticmethod
    def validate_string_not_empty(value: Optional[str], field: str) -> Optional[ValidationIssue]:
        if value is None or not value.strip():
            return ValidationIssue(ValidationIssueType.EMPTY_STRING, f"{field} must not be empty", field=field)
        return None

    @staticmethod
    def validate_max_length(value: Optional[str], field: str, max_length: int) -> Optional[ValidationIssue]:
        if value is not None and len(value) > max_length:
            return ValidationIssue(
                ValidationIssueType.VALUE_TOO_LONG,
                f"{field} must be at most {max_length} characters",
                field=field,
            )
        return None

    @staticmethod
    def validate_content(
        content: Optional[bytes], field: str = "content", required: bool = True
    ) -> Optional[ValidationIssue]:
        """Revision content must be non-empty bytes; None passes unless ``required``."""
        if content is None:
            if required:
                return ValidationIssue(ValidationIssueType.NULL_VALUE, f"{field} is required", field=field)
            return None
        if len(content) == 0:
            return ValidationIssue(ValidationIssueType.EMPTY_CONTENT, f"{field} must not be empty", field=field)
        return None

    # Existence checks

    async def validate_actor(self, actor: Any) -> Optional[ValidationIssue]:
        """The acting user must be given, carry a non-empty id and exist in the store."""
        actor_id = getattr(actor, "id", None)
        issue = self.validate_not_null(actor, "actor") or self.validate_uuid(actor_id, "actor.id")
        if issue:
            return issue
        if not await self.store.exists_user(_as_uuid(actor_id)):
            return ValidationIssue(
                ValidationIssueType.USER_NOT_FOUND, f"User {actor_id} not found", field="actor.id", value=actor_id
            )
        return None

    async def validate_matter_exists(self, matter_id: Any) -> Optional[ValidationIssue]:
        issue = self.validate_uuid(matter_id, "matter_id")
        if issue:
            return issue
        if not await self.store.exists_matter(_as_uuid(matter_id)):
            return ValidationIssue(
                ValidationIssueType.MATTER_NOT_FOUND, f"Matter {matter_id} not found", field="matter_id", value=matter_id
            )
        return None

    async def validate_document_exists(self, document_id: Any, matter_id: Any = None) -> Optional[ValidationIssue]:
        """Check the document exists and, if ``matter_id`` is given, belongs to it."""
        issue = self.validate_uuid(document_id, "document_id")
        if issue:
            return issue
        if matter_id is None:
            found = await self.store.exists_document(_as_uuid(document_id))
        else:
            found = await self.store.get_document_in_matter(_as_uuid(matter_id), _as_uuid(document_id)) is not None
        if not found:
            return ValidationIssue(
                ValidationIssueType.DOCUMENT_NOT_FOUND,
                f"Document {document_id} not found",
                field="document_id",
                value=document_id,
            )
        return None

    async def validate_revision_exists(self, revision_id: Any, document_id: Any = None) -> Optional[ValidationIssue]:
        """Check the revision exists and, if ``document_id`` is given, belongs to it."""
        issue = self.validate_uuid(revision_id, "revision_id")
        if issue:
            return issue
        if document_id is None:
            found = await self.store.exists_revision(_as_uuid(revision_id))
        else:
            found = await self.store.get_revision_for_document(_as_uuid(document_id), _as_uuid(revision_id)) is not None
        if not found:
            return ValidationIssue(
                ValidationIssueType.REVISION_NOT_FOUND,
                f"Revision {revision_id} not found",
                field="revision_id",
                value=revision_id,
            )
        return None


def _as_uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def log_rejection(operation: str, issue: Optional[ValidationIssue]) -> None:
    """Log a failed precondition at WARNING. Always returns None."""
    if issue is not None:
        logger.warning(f"{operation} rejected: {issue.message}", extra={"operation": operation, **issue.log_extra()})
    return None
