"""Login audit trail: one append-only LoginLog row per attempt."""

from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.models import LoginLog
from app.schemas.auth import AccountKind

# failure_reason values (internal only; never sent to clients)
REASON_UNKNOWN_EMAIL = "unknown_email"
REASON_WRONG_PASSWORD = "wrong_password"
REASON_LOCKED = "locked"
REASON_LOCKOUT_TRIGGERED = "lockout_triggered"
REASON_ROLE_BLOCKED = "role_blocked"
REASON_INACTIVE = "inactive"
REASON_APPLICATION_PENDING = "application_pending"
REASON_APPLICATION_REJECTED = "application_rejected"


@dataclass(frozen=True)
class ClientInfo:
    """Caller metadata recorded with each attempt."""

    ip_address: str | None = None
    user_agent: str | None = None


def record_attempt(
    db: Session,
    kind: AccountKind,
    email: str,
    client: ClientInfo,
    *,
    account_id: int | None = None,
    success: bool,
    failure_reason: str | None = None,
) -> None:
    """Stage a LoginLog row on the session; committed with the attempt's state change."""
    db.add(
        LoginLog(
            account_kind=kind.value,
            account_id=account_id,
            email=email[:255],
            ip_address=client.ip_address[:64] if client.ip_address else None,
            user_agent=client.user_agent[:512] if client.user_agent else None,
            success=success,
            failure_reason=failure_reason,
        )
    )
