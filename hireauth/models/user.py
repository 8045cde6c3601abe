"""ORM model for platform users (authentication and RBAC)."""

from sqlalchemy import Column, Integer, String

from hireauth.models.base import Base

ROLE_USER = "User"
ROLE_ADMIN = "Admin"
ROLE_EMPLOYER = "Employer"
ROLES = (ROLE_USER, ROLE_ADMIN, ROLE_EMPLOYER)


class User(Base):
    """
    User account for JWT authentication and role-based access control.

    role: 'User', 'Admin' or 'Employer'. Created at registration; this service never deletes users.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(32), nullable=False, default=ROLE_USER)
