"""Pydantic schemas for matter input"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

MAX_DESCRIPTION_LENGTH = 128


class MatterForCreation(BaseModel):
    """Schema for creating a matter"""
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH, description="Unique matter description")
    is_archived: bool = Field(False, description="Create the matter already archived")

    @field_validator('description')
    @classmethod
    def validate_description_not_empty(cls, v: str) -> str:
        """Ensure description is not whitespace-only"""
        if not v.strip():
            raise ValueError("Matter description cannot be empty or whitespace")
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {"description": "Corporate Merger - ABC Corp", "is_archived": False}
        }


class MatterForUpdate(BaseModel):
    """Schema for updating a matter (all fields optional).

    Archive state changes through archive_matter/unarchive_matter so they get
    their own audit activity.
    """
    description: Optional[str] = Field(None, min_length=1, max_length=MAX_DESCRIPTION_LENGTH)

    @field_validator('description')
    @classmethod
    def validate_description_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Matter description cannot be empty or whitespace")
        return v.strip() if v is not None else v
