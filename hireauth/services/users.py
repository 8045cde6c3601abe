"""User lookups and creation (the identity records behind login)."""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hireauth.core.errors import ConflictError, NotFoundError
from hireauth.models import User


class UserRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def find_by_username(self, username: str) -> User | None:
        return self._session.query(User).filter(User.username == username).first()

    def find_by_id(self, user_id: int) -> User | None:
        return self._session.get(User, user_id)

    def get(self, user_id: int) -> User:
        user = self.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def list_all(self) -> list[User]:
        return self._session.query(User).order_by(User.id).all()

    def create(self, username: str, password_hash: str, role: str) -> User:
        """Insert a user. A concurrent insert of the same username surfaces as ConflictError."""
        user = User(username=username, password_hash=password_hash, role=role)
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise ConflictError("Username already exists.") from e
        self._session.refresh(user)
        return user
