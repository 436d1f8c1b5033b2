"""
Pydantic schemas for principal and token responses.
"""
from pydantic import BaseModel, ConfigDict


class PrincipalResponse(BaseModel):
    """The authenticated principal as seen by the API."""
    id: str
    username: str
    email: str | None = None
    roles: list[str]
    groups: list[str]

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """A freshly issued bearer token."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int
