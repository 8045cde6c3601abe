"""Request/response schemas for auth endpoints."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RoleName = Literal["User", "Admin", "Employer"]


class RegisterRequest(BaseModel):
    """New account; role defaults to User when omitted."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")
    role: RoleName | None = Field(default=None, description="User, Admin or Employer")


class LoginRequest(BaseModel):
    """Credentials for login."""

    username: str = Field(..., min_length=1, max_length=255, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class TokenPairResponse(BaseModel):
    """Access and refresh tokens returned after successful login."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(..., alias="accessToken", description="Signed JWT access token")
    refresh_token: str = Field(..., alias="refreshToken", description="Opaque refresh token")


class MessageResponse(BaseModel):
    message: str


class UserListItem(BaseModel):
    """User entry (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str


class UsersListResponse(BaseModel):
    """Response for GET /auth/users (admin only)."""

    users: list[UserListItem]
