"""Pydantic schemas for document and revision input"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ..infrastructure.storage.file_placement import normalize_extension

MAX_FILE_NAME_LENGTH = 128


# =============================================================================
# Documents
# =============================================================================

class DocumentForCreation(BaseModel):
    """Schema for creating a document inside a matter"""
    file_name: str = Field(..., min_length=1, max_length=MAX_FILE_NAME_LENGTH, description="Display file name")
    extension: str = Field(..., description="File extension, with or without leading dot")
    is_checked_out: bool = Field(False, description="Create the document already checked out")

    @field_validator('file_name')
    @classmethod
    def validate_file_name_not_empty(cls, v: str) -> str:
        """Ensure file name is not whitespace-only"""
        if not v.strip():
            raise ValueError("File name cannot be empty or whitespace")
        return v.strip()

    @field_validator('extension')
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Strip the leading dot and check 1-5 letters or digits"""
        return normalize_extension(v)

    class Config:
        json_schema_extra = {
            "example": {"file_name": "Merger Agreement", "extension": "pdf", "is_checked_out": False}
        }


class DocumentForUpdate(BaseModel):
    """Schema for updating a document (all fields optional)"""
    file_name: Optional[str] = Field(None, min_length=1, max_length=MAX_FILE_NAME_LENGTH)
    extension: Optional[str] = None
    is_checked_out: Optional[bool] = None
    is_deleted: Optional[bool] = None

    @field_validator('file_name')
    @classmethod
    def validate_file_name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("File name cannot be empty or whitespace")
        return v.strip() if v is not None else v

    @field_validator('extension')
    @classmethod
    def validate_extension(cls, v: Optional[str]) -> Optional[str]:
        return normalize_extension(v) if v is not None else v


# =============================================================================
# Revisions
# =============================================================================

class RevisionForCreation(BaseModel):
    """Schema for adding a revision. The revision number is always assigned
    by the service (current maximum + 1)."""
    creation_date: Optional[datetime] = Field(None, description="Defaults to now (UTC)")
    modification_date: Optional[datetime] = Field(None, description="Defaults to now (UTC)")


class RevisionForUpdate(BaseModel):
    """Schema for updating revision timestamps"""
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None
