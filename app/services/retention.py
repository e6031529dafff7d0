"""Session housekeeping: delete refresh tokens whose expiry has passed."""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from app.services.refresh_tokens import purge_expired

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)


def purge_expired_refresh_tokens(
    session: Session, settings: "Settings", now: datetime | None = None
) -> int:
    """
    Delete expired refresh-token rows. Returns the number deleted.
    Idempotent: safe to run repeatedly. Live sessions are never touched.
    """
    if not settings.REFRESH_TOKEN_RETENTION_ENABLED:
        logger.info(
            "Refresh token purge is disabled (REFRESH_TOKEN_RETENTION_ENABLED=false); skipping."
        )
        return 0

    cutoff = now or datetime.now(timezone.utc)
    deleted_count = purge_expired(session, cutoff)
    session.commit()

    if deleted_count > 0:
        logger.info(
            "Refresh token purge: cutoff=%s, tokens_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
