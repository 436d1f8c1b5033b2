"""
Pydantic schemas for datablock requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class DataFile(BaseModel):
    """One file entry of a datablock."""
    path: str = Field(..., min_length=1)
    size: int = Field(..., ge=0)
    time: datetime
    chk: str | None = None
    uid: str | None = None
    gid: str | None = None
    perm: str | None = None


class DatablockBase(BaseModel):
    """Base datablock schema."""
    archive_id: str = Field(..., min_length=1, max_length=255)
    size: int = Field(..., ge=0)
    packed_size: int | None = Field(None, ge=0)
    chk_alg: str | None = Field(None, max_length=50)
    version: str = Field(..., min_length=1, max_length=50)
    owner_group: str = Field(..., min_length=1, max_length=255)
    access_groups: list[str] = Field(default_factory=list)


class DatablockContent(DatablockBase):
    """Datablock body without the owning dataset (taken from the path)."""
    data_file_list: list[DataFile] = Field(default_factory=list)

    @field_serializer("data_file_list")
    def serialize_files(self, files: list[DataFile]) -> list[dict]:
        # Stored as a JSON column
        return [data_file.model_dump(mode="json") for data_file in files]


class DatablockCreate(DatablockContent):
    """Schema for creating a datablock."""
    dataset_id: str = Field(..., min_length=1)


class DatablockUpdate(BaseModel):
    """Schema for updating a datablock; only provided fields change."""
    archive_id: str | None = Field(None, min_length=1, max_length=255)
    size: int | None = Field(None, ge=0)
    packed_size: int | None = Field(None, ge=0)
    chk_alg: str | None = Field(None, max_length=50)
    version: str | None = Field(None, min_length=1, max_length=50)
    access_groups: list[str] | None = None

    @field_validator("archive_id", "size", "version", "access_groups")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class DatablockResponse(DatablockBase):
    """Schema for datablock responses."""
    id: str
    dataset_id: str
    data_file_list: list[dict]
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
