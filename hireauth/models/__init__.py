"""SQLAlchemy ORM models."""

from hireauth.models.base import Base
from hireauth.models.credentials import Credentials
from hireauth.models.user import ROLE_ADMIN, ROLE_EMPLOYER, ROLE_USER, ROLES, User

__all__ = [
    "Base",
    "Credentials",
    "ROLE_ADMIN",
    "ROLE_EMPLOYER",
    "ROLE_USER",
    "ROLES",
    "User",
]
