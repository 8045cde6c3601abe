"""Pydantic request/response schemas."""

from hireauth.schemas.auth import (
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenPairResponse,
    UserListItem,
    UsersListResponse,
)
from hireauth.schemas.health import HealthResponse

__all__ = [
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "TokenPairResponse",
    "UserListItem",
    "UsersListResponse",
]
