"""Role status changes. Blocking a role ends every session of accounts holding it."""

import logging

from sqlalchemy.orm import Session

from app.core.database import commit_or_raise
from app.core.errors import NotFoundError
from app.models import Role
from app.models.role import ROLE_STATUS_ACTIVE
from app.services import refresh_tokens

logger = logging.getLogger(__name__)


def require_role(db: Session, role_id: int) -> Role:
    role = db.get(Role, role_id)
    if role is None:
        raise NotFoundError("Role not found.")
    return role


def set_role_status(db: Session, role_id: int, status: int) -> tuple[Role, int, int]:
    """
    Update the role status. Returns (role, previous_status, sessions_revoked).
    Access tokens already issued stay valid until expiry, but every permission
    check re-reads the role, so a blocked role is denied immediately.
    """
    role = require_role(db, role_id)
    previous = role.status
    role.status = status
    revoked = 0
    if status != ROLE_STATUS_ACTIVE:
        revoked = refresh_tokens.revoke_all_for_role(db, role_id)
    commit_or_raise(db, "role status update")
    db.refresh(role)
    logger.info(
        "Role status changed",
        extra={
            "role_id": role_id,
            "previous_status": previous,
            "status": status,
            "sessions_revoked": revoked,
        },
    )
    return role, previous, revoked
