"""Data retention: delete refresh-token rows whose expiry has passed."""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from hireauth.models import Credentials

logger = logging.getLogger(__name__)


def purge_expired_credentials(session: Session, now: datetime | None = None) -> int:
    """
    Delete expired refresh tokens and return how many were removed.

    Idempotent: safe to run repeatedly. Live sessions are never touched.
    """
    cutoff = now or datetime.now(timezone.utc)
    deleted_count = (
        session.query(Credentials)
        .filter(Credentials.expires_at <= cutoff)
        .delete(synchronize_session=False)
    )
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Retention run: cutoff=%s, credentials_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
