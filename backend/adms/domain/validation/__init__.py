"""Validation collaborator: input and existence checks returning ValidationIssue."""

from .models import ValidationIssue, ValidationIssueType
from .service import ValidationService, first_issue, log_rejection

__all__ = [
    "ValidationIssue",
    "ValidationIssueType",
    "ValidationService",
    "first_issue",
    "log_rejection",
]
