"""ORM model for the single refresh-token session held per user."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from hireauth.models.base import Base


class Credentials(Base):
    """
    Current refresh token for one user. user_id is both primary and foreign key,
    so the table can hold at most one row per user; a new login overwrites it.
    """

    __tablename__ = "credentials"

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    refresh_token = Column(String(128), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", lazy="joined")
