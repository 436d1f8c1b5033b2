"""
Pydantic schemas for dataset requests and responses.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Literal, Union
from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictFloat, StrictInt, StrictStr, field_validator


class DatasetBase(BaseModel):
    """Base dataset schema."""
    type: Literal["raw", "derived"]
    dataset_name: str | None = Field(None, max_length=255)
    description: str | None = None
    owner: str = Field(..., min_length=1, max_length=255)
    owner_email: EmailStr | None = None
    contact_email: EmailStr
    owner_group: str = Field(..., min_length=1, max_length=255)
    access_groups: list[str] = Field(default_factory=list)
    source_folder: str = Field(..., min_length=1, max_length=1000)
    size: int = Field(0, ge=0)
    number_of_files: int = Field(0, ge=0)
    creation_time: datetime
    is_published: bool = False
    keywords: list[str] = Field(default_factory=list)
    scientific_metadata: dict[str, Any] | None = None
    proposal_id: str | None = None


class DatasetCreate(DatasetBase):
    """Schema for creating a dataset."""
    pass


class DatasetUpdate(BaseModel):
    """Schema for updating a dataset; only provided fields change."""
    dataset_name: str | None = Field(None, max_length=255)
    description: str | None = None
    owner_email: EmailStr | None = None
    contact_email: EmailStr | None = None
    access_groups: list[str] | None = None
    size: int | None = Field(None, ge=0)
    number_of_files: int | None = Field(None, ge=0)
    is_published: bool | None = None
    keywords: list[str] | None = None
    scientific_metadata: dict[str, Any] | None = None

    @field_validator("contact_email", "access_groups", "size", "number_of_files", "is_published", "keywords")
    @classmethod
    def reject_null(cls, v):
        # Optional only so the field may be left out; the column is NOT NULL
        if v is None:
            raise ValueError("may not be null")
        return v


class DatasetResponse(DatasetBase):
    """Schema for dataset responses."""
    pid: str
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ScientificRelation(str, Enum):
    EqualTo = "EQUAL_TO"
    EqualToNumeric = "EQUAL_TO_NUMERIC"
    EqualToString = "EQUAL_TO_STRING"
    GreaterThan = "GREATER_THAN"
    LessThan = "LESS_THAN"


class ScientificFilter(BaseModel):
    """
    One condition on ``scientific_metadata``, as sent in ``fields.scientific``.

    ``lhs`` is a dotted key path into the metadata; each entry is expected
    to look like ``{"value": 20, "unit": "K"}``. ``unit``, when given, must
    match the stored unit exactly.
    """
    lhs: str = Field(..., pattern=r"^[A-Za-z0-9_\-]+(\.[A-Za-z0-9_\-]+)*$")
    relation: ScientificRelation
    rhs: Union[StrictStr, StrictInt, StrictFloat]
    unit: str | None = None

    model_config = ConfigDict(extra="forbid")
