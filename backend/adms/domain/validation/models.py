"""Validation issue model returned by the validation collaborator."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..errors import AdmsError, NotFoundError, ValidationError


class ValidationIssueType(str, Enum):
    """Validation issue types"""
    # Input issues
    NULL_VALUE = "NULL_VALUE"
    INVALID_ID = "INVALID_ID"
    EMPTY_STRING = "EMPTY_STRING"
    VALUE_TOO_LONG = "VALUE_TOO_LONG"
    INVALID_EXTENSION = "INVALID_EXTENSION"
    DUPLICATE_DESCRIPTION = "DUPLICATE_DESCRIPTION"
    EMPTY_CONTENT = "EMPTY_CONTENT"

    # Lookup issues
    MATTER_NOT_FOUND = "MATTER_NOT_FOUND"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    REVISION_NOT_FOUND = "REVISION_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ACTIVITY_NOT_FOUND = "ACTIVITY_NOT_FOUND"


NOT_FOUND_TYPES = {
    ValidationIssueType.MATTER_NOT_FOUND: "Matter",
    ValidationIssueType.DOCUMENT_NOT_FOUND: "Document",
    ValidationIssueType.REVISION_NOT_FOUND: "Revision",
    ValidationIssueType.USER_NOT_FOUND: "User",
    ValidationIssueType.ACTIVITY_NOT_FOUND: "Activity",
}


@dataclass(frozen=True)
class ValidationIssue:
    """A single failed check.

    Services log the issue and return None/False; ``to_error`` converts it for
    callers that prefer to raise.
    """
    type: ValidationIssueType
    message: str
    field: Optional[str] = None
    value: Any = None

    @property
    def is_not_found(self) -> bool:
        return self.type in NOT_FOUND_TYPES

    def to_error(self) -> AdmsError:
        if self.is_not_found:
            return NotFoundError(NOT_FOUND_TYPES[self.type], self.value)
        return ValidationError(self.message, field=self.field)

    def log_extra(self) -> dict:
        return {
            "issue_type": self.type.value,
            "field": self.field,
            "value": str(self.value) if self.value is not None else None,
        }
