"""Pydantic schemas for audit history queries.

Audit records are read-only: these schemas only describe query results.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..domain.activities import AuditableKind, TransferDirection


class AuditEntry(BaseModel):
    """One activity-user record, flattened with its activity and user names."""
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "kind": "DOCUMENT",
                "entity_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "activity_id": "20000000-0000-0000-0000-000000000002",
                "activity": "CHECKED OUT",
                "user_id": "50000000-0000-0000-0000-000000000001",
                "user_name": "Robert Brown",
                "created_at": "2025-01-04T12:00:00Z",
            }
        },
    )

    id: UUID = Field(..., description="Audit record unique identifier")
    kind: AuditableKind = Field(..., description="Auditable family of the subject")
    entity_id: UUID = Field(..., description="Matter, document or revision acted on")
    direction: Optional[TransferDirection] = Field(None, description="FROM/TO for transfer records")
    matter_id: Optional[UUID] = Field(None, description="Matter of a transfer record")
    document_id: Optional[UUID] = Field(None, description="Document of a transfer record")
    activity_id: UUID = Field(..., description="Catalog activity id")
    activity: str = Field(..., description="Catalog activity name")
    user_id: UUID = Field(..., description="Acting user")
    user_name: str = Field(..., description="Acting user's name")
    created_at: datetime = Field(..., description="Record timestamp (UTC)")


class AuditHistoryPage(BaseModel):
    """A page of audit entries with pagination metadata."""
    entries: List[AuditEntry] = Field(default_factory=list)
    total: int = Field(..., description="Total number of entries matching the query")
    limit: int
    offset: int
