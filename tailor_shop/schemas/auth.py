"""Authentication-related request and response schemas."""

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Payload for user login."""

    email: str
    password: str


class TokenResponse(BaseModel):
    """JWT response payload."""

    access_token: str
    token_type: str = "bearer"


class SessionUserResponse(BaseModel):
    """Descriptor of the authenticated user."""

    id: int
    name: str
    email: str
    role: str
    branch_id: int | None = None
    branch_name: str | None = None
