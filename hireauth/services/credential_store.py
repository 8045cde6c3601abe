"""Refresh-token persistence: one live row per user, overwritten on every login."""

import logging
from datetime import datetime, timezone

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from hireauth.core.errors import ConfigurationError
from hireauth.models import Credentials, User

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class CredentialStore:
    """Upsert, delete and look up the refresh-token row keyed by user id."""

    def __init__(self, session: Session) -> None:
        self._session = session
        dialect = session.get_bind().dialect.name
        try:
            self._insert = _UPSERT_DIALECTS[dialect]
        except KeyError:
            raise ConfigurationError(
                f"Credential store needs INSERT .. ON CONFLICT support; '{dialect}' is not supported."
            ) from None

    def save(self, user_id: int, refresh_token: str, expires_at: datetime) -> None:
        """
        Store the user's refresh token, replacing any previous one.

        Runs as a single INSERT .. ON CONFLICT (user_id) DO UPDATE, so two concurrent
        logins for the same user can never leave two rows or fail on the primary key.
        """
        stmt = self._insert(Credentials).values(
            user_id=user_id,
            refresh_token=refresh_token,
            expires_at=expires_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Credentials.user_id],
            set_={
                "refresh_token": stmt.excluded.refresh_token,
                "expires_at": stmt.excluded.expires_at,
            },
        )
        self._session.execute(stmt)
        self._session.commit()

    def delete(self, user_id: int) -> bool:
        """Remove the user's refresh token. Returns False (not an error) when there was none."""
        deleted = (
            self._session.query(Credentials)
            .filter(Credentials.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self._session.commit()
        if deleted == 0:
            logger.debug("No refresh token to delete for user_id=%s", user_id)
        return deleted > 0

    def find_by_token(self, refresh_token: str) -> User | None:
        """Return the user owning this refresh token, or None if it is unknown, superseded or expired."""
        if not refresh_token:
            return None
        now = datetime.now(timezone.utc)
        credentials = (
            self._session.query(Credentials)
            .filter(
                Credentials.refresh_token == refresh_token,
                Credentials.expires_at > now,
            )
            .first()
        )
        return credentials.user if credentials is not None else None
