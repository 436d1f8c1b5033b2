"""
Pydantic schemas for attachment requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator


class AttachmentBase(BaseModel):
    """Base attachment schema."""
    thumbnail: str = Field(..., min_length=1, description="Data URI of the image")
    caption: str | None = Field(None, max_length=1000)
    owner_group: str = Field(..., min_length=1, max_length=255)
    access_groups: list[str] = Field(default_factory=list)


class AttachmentCreate(AttachmentBase):
    """Schema for creating an attachment; the parent is usually taken from the path."""
    sample_id: str | None = None


class AttachmentUpdate(BaseModel):
    """Schema for updating an attachment; only provided fields change."""
    thumbnail: str | None = Field(None, min_length=1)
    caption: str | None = Field(None, max_length=1000)
    access_groups: list[str] | None = None

    @field_validator("thumbnail", "access_groups")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class AttachmentResponse(AttachmentBase):
    """Schema for attachment responses."""
    id: str
    proposal_id: str | None = None
    dataset_id: str | None = None
    sample_id: str | None = None
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
