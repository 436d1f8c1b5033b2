"""
Pydantic schemas for proposal requests and responses.
"""
from datetime import datetime
from typing import Any
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_serializer, field_validator


class MeasurementPeriod(BaseModel):
    """A scheduled measurement slot on an instrument."""
    instrument: str = Field(..., min_length=1)
    start: datetime
    end: datetime
    comment: str | None = None


class ProposalBase(BaseModel):
    """Fields shared by create and response schemas."""
    pi_email: EmailStr | None = None
    pi_firstname: str | None = None
    pi_lastname: str | None = None
    email: EmailStr
    firstname: str | None = None
    lastname: str | None = None
    title: str = Field(..., min_length=1, max_length=500)
    abstract: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    owner_group: str = Field(..., min_length=1, max_length=255)
    access_groups: list[str] = Field(default_factory=list)
    measurement_period_list: list[dict[str, Any]] = Field(default_factory=list)


class ProposalCreate(ProposalBase):
    """Schema for creating a proposal."""
    proposal_id: str = Field(..., min_length=1, max_length=255)
    measurement_period_list: list[MeasurementPeriod] = Field(default_factory=list)

    @field_serializer("measurement_period_list")
    def serialize_periods(self, periods: list[MeasurementPeriod]) -> list[dict[str, Any]]:
        # Stored as a JSON column
        return [period.model_dump(mode="json") for period in periods]


class ProposalUpdate(BaseModel):
    """Schema for updating a proposal; only provided fields change."""
    pi_email: EmailStr | None = None
    pi_firstname: str | None = None
    pi_lastname: str | None = None
    email: EmailStr | None = None
    firstname: str | None = None
    lastname: str | None = None
    title: str | None = Field(None, min_length=1, max_length=500)
    abstract: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    owner_group: str | None = Field(None, min_length=1, max_length=255)
    access_groups: list[str] | None = None

    @field_validator("email", "title", "owner_group", "access_groups")
    @classmethod
    def reject_null(cls, v):
        """These may be omitted but not cleared."""
        if v is None:
            raise ValueError("may not be null")
        return v


class ProposalResponse(ProposalBase):
    """Schema for proposal responses."""
    proposal_id: str
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
