"""
CLI entrypoint for the expired-session purge. Run from cron, e.g.:

  python -m app.retention

Or hourly: 0 * * * * cd /path/to/partsbay-auth && .venv/bin/python -m app.retention
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.services.retention import purge_expired_refresh_tokens

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete refresh tokens whose expires_at has passed."""
    settings = get_settings()
    db = SessionLocal()
    try:
        tokens_deleted = purge_expired_refresh_tokens(db, settings)
        logger.info("Purge completed: tokens_deleted=%s", tokens_deleted)
        return 0
    except Exception as e:
        logger.exception("Purge job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
