from uuid import UUID

from pydantic import BaseModel, ConfigDict


class SignupRequest(BaseModel):
    email: str
    password: str
    name: str


class LoginRequest(BaseModel):
    email: str
    password: str


class UserRead(BaseModel):
    """Public projection of a user (never carries credential_secret)."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str


class AuthResponse(BaseModel):
    user: UserRead
    token: str
    token_type: str = "bearer"
    expires_in: int
