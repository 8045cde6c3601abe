"""
CLI entrypoint for purging expired refresh tokens. Run from cron, e.g.:

  python -m hireauth.retention

Or hourly: 0 * * * * cd /path/to/hireauth && .venv/bin/python -m hireauth.retention
"""

import logging
import sys

from hireauth.core.config import get_settings
from hireauth.core.database import build_engine, build_session_factory
from hireauth.services.retention import purge_expired_credentials

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete refresh-token rows past their expiry."""
    settings = get_settings()
    engine = build_engine(settings)
    db = build_session_factory(engine)()
    try:
        deleted = purge_expired_credentials(db)
        logger.info("Retention completed: credentials_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Retention job failed: %s", e)
        return 1
    finally:
        db.close()
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
