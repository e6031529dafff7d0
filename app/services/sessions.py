"""
Login, refresh and signout flows for every account class.

Each flow is one transaction. Rejected logins still commit their lockout counter
change and audit row before the error propagates; a failed commit turns any
outcome into PersistenceError, and no token is handed out unless the session
row was committed.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import commit_or_raise
from app.core.errors import (
    AuthenticationError,
    AuthorizationError,
    LockedError,
    NotFoundError,
    PersistenceError,
    SupplierApplicationError,
)
from app.core.security import burn_password_check, create_access_token, verify_password
from app.models.supplier_application import APPLICATION_STATUS_APPROVED, APPLICATION_STATUS_REJECTED
from app.schemas.auth import AccountKind, LoginData, RefreshData, RoleInfo, build_principal
from app.services import audit, lockout, refresh_tokens
from app.services.accounts import (
    ACCOUNT_LABELS,
    Account,
    find_by_email_for_update,
    find_supplier_application,
    get_account,
    get_role,
    to_profile,
)
from app.services.audit import ClientInfo
from app.services.permissions import get_permission_matrix

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."
ROLE_BLOCKED = "Your role has been blocked. Please contact administrator."
ACCOUNT_INACTIVE = "Account is inactive."
PERMANENTLY_LOCKED = (
    "Your account has been permanently locked due to multiple failed login attempts. "
    "Please contact support to unlock your account."
)
APPLICATION_PENDING = (
    "Your registration application is still pending approval. "
    "Please contact administrator for status updates."
)
APPLICATION_REJECTED = (
    "Your registration application has been rejected. "
    "Please contact administrator for more information."
)


@dataclass(frozen=True)
class LoginResult:
    data: LoginData
    refresh_token: str
    refresh_expires_at: datetime


@dataclass(frozen=True)
class RefreshResult:
    data: RefreshData
    refresh_token: str
    refresh_expires_at: datetime


def _store_failure(db: Session, action: str) -> PersistenceError:
    db.rollback()
    logger.exception("Store error during %s", action)
    return PersistenceError(f"Error during {action}.")


def _reject(kind: AccountKind, email: str, client: ClientInfo, reason: str, account_id: int | None = None) -> None:
    logger.warning(
        "Login rejected",
        extra={
            "account_kind": kind.value,
            "account_id": account_id,
            "email": email,
            "reason": reason,
            "ip_address": client.ip_address,
        },
    )


def _locked_message(remaining_minutes: int) -> str:
    return (
        "Account is locked due to too many failed login attempts. "
        f"Please try again in {remaining_minutes} minute(s) or contact administrator."
    )


def _check_application(db: Session, email: str, password: str, client: ClientInfo) -> None:
    """
    Supplier email with no supplier row: an applicant with the right password
    learns the application's status. Approved applications already have a
    supplier row, so they fall through to the unknown-email path.
    """
    application = find_supplier_application(db, email)
    if application is None or application.status == APPLICATION_STATUS_APPROVED:
        return
    kind = AccountKind.SUPPLIER
    if not verify_password(password, application.password_hash):
        audit.record_attempt(
            db, kind, email, client, success=False, failure_reason=audit.REASON_WRONG_PASSWORD
        )
        _reject(kind, email, client, audit.REASON_WRONG_PASSWORD)
        raise AuthenticationError(INVALID_CREDENTIALS)
    if application.status == APPLICATION_STATUS_REJECTED:
        reason, message, status = audit.REASON_APPLICATION_REJECTED, APPLICATION_REJECTED, "rejected"
    else:
        reason, message, status = audit.REASON_APPLICATION_PENDING, APPLICATION_PENDING, "pending"
    audit.record_attempt(db, kind, email, client, success=False, failure_reason=reason)
    _reject(kind, email, client, reason)
    raise SupplierApplicationError(message, application_status=status)


def _check_credentials(
    db: Session,
    kind: AccountKind,
    email: str,
    password: str,
    client: ClientInfo,
    now: datetime,
) -> Account:
    """
    Run the lockout state machine and password check. Returns the account on
    success; otherwise stages the audit row (and counter change) and raises.
    """
    account = find_by_email_for_update(db, kind, email)
    if account is None and kind == AccountKind.SUPPLIER:
        _check_application(db, email, password, client)
    if account is None:
        burn_password_check(password)
        audit.record_attempt(
            db, kind, email, client, success=False, failure_reason=audit.REASON_UNKNOWN_EMAIL
        )
        _reject(kind, email, client, audit.REASON_UNKNOWN_EMAIL)
        raise AuthenticationError(INVALID_CREDENTIALS)

    policy = lockout.build_policy(kind, settings)
    status = lockout.check_lock(account, policy, now)
    if status.locked:
        audit.record_attempt(
            db, kind, email, client,
            account_id=account.id, success=False, failure_reason=audit.REASON_LOCKED,
        )
        _reject(kind, email, client, audit.REASON_LOCKED, account.id)
        if status.permanent:
            raise LockedError(PERMANENTLY_LOCKED)
        raise LockedError(
            _locked_message(status.remaining_minutes),
            remaining_minutes=status.remaining_minutes,
        )

    if not verify_password(password, account.password_hash):
        outcome = lockout.record_failure(account, policy, now)
        reason = audit.REASON_LOCKOUT_TRIGGERED if outcome.locked else audit.REASON_WRONG_PASSWORD
        audit.record_attempt(
            db, kind, email, client, account_id=account.id, success=False, failure_reason=reason
        )
        _reject(kind, email, client, reason, account.id)
        if outcome.permanent:
            raise LockedError(PERMANENTLY_LOCKED)
        if outcome.locked:
            raise LockedError(
                "Account has been locked due to too many failed login attempts. "
                f"Please try again in {outcome.lockout_minutes} minute(s) or contact administrator.",
                remaining_minutes=outcome.lockout_minutes,
            )
        raise AuthenticationError(
            f"{INVALID_CREDENTIALS} {outcome.remaining_attempts} attempt(s) remaining."
        )

    role = get_role(account)
    if role is not None and role.is_blocked:
        audit.record_attempt(
            db, kind, email, client,
            account_id=account.id, success=False, failure_reason=audit.REASON_ROLE_BLOCKED,
        )
        _reject(kind, email, client, audit.REASON_ROLE_BLOCKED, account.id)
        raise AuthorizationError(ROLE_BLOCKED)
    if not account.is_active:
        audit.record_attempt(
            db, kind, email, client,
            account_id=account.id, success=False, failure_reason=audit.REASON_INACTIVE,
        )
        _reject(kind, email, client, audit.REASON_INACTIVE, account.id)
        raise AuthorizationError(ACCOUNT_INACTIVE)
    return account


def login(
    db: Session,
    kind: AccountKind,
    email: str,
    password: str,
    client: ClientInfo,
    *,
    now: datetime | None = None,
) -> LoginResult:
    """Authenticate, open a refresh-token session and mint an access token."""
    now = now or datetime.now(UTC)
    try:
        account = _check_credentials(db, kind, email, password, client, now)
    except (AuthenticationError, AuthorizationError, LockedError):
        commit_or_raise(db, "login")
        raise
    except SQLAlchemyError as e:
        raise _store_failure(db, "login") from e

    try:
        lockout.record_success(account)
        role = get_role(account)
        permissions = get_permission_matrix(db, role.id if role is not None else None)
        token, expires_at = refresh_tokens.issue(db, kind, account.id, now)
        audit.record_attempt(db, kind, account.email, client, account_id=account.id, success=True)
        principal = build_principal(kind, account.id, account.email)
        profile = to_profile(account)
        role_info = RoleInfo.model_validate(role) if role is not None else None
    except SQLAlchemyError as e:
        raise _store_failure(db, "login") from e
    commit_or_raise(db, "login")

    access_token = create_access_token(principal, now=now)
    logger.info(
        "Login succeeded",
        extra={"account_kind": kind.value, "account_id": principal.id, "ip_address": client.ip_address},
    )
    return LoginResult(
        data=LoginData(
            access_token=access_token,
            token_type="Bearer",
            expires_in=int(settings.access_token_ttl.total_seconds()),
            user=profile,
            role=role_info,
            permissions=permissions,
        ),
        refresh_token=token,
        refresh_expires_at=expires_at,
    )


def refresh(
    db: Session,
    kind: AccountKind,
    token: str | None,
    *,
    now: datetime | None = None,
) -> RefreshResult:
    """Exchange a live refresh token for a new access token and rotate it."""
    if not token:
        raise AuthenticationError("Refresh token not found.")
    now = now or datetime.now(UTC)
    try:
        row = refresh_tokens.validate(db, kind, token, now)
        if row is None:
            logger.warning(
                "Invalid or expired refresh token",
                extra={"account_kind": kind.value, "token_preview": refresh_tokens.token_preview(token)},
            )
            raise AuthenticationError(refresh_tokens.INVALID_REFRESH_TOKEN)

        account = get_account(db, kind, row.account_id)
        if account is None:
            refresh_tokens.revoke(db, kind, token)
            raise NotFoundError(f"{ACCOUNT_LABELS[kind]} not found.")
        role = get_role(account)
        if not account.is_active or (role is not None and role.is_blocked):
            refresh_tokens.revoke(db, kind, token)
            logger.warning(
                "Token refresh attempt for disabled account",
                extra={"account_kind": kind.value, "account_id": account.id},
            )
            raise AuthorizationError(ACCOUNT_INACTIVE if not account.is_active else ROLE_BLOCKED)

        new_token, new_expiry = refresh_tokens.rotate(db, row, token, now)
        principal = build_principal(kind, account.id, account.email)
    except (NotFoundError, AuthorizationError):
        commit_or_raise(db, "token refresh")
        raise
    except AuthenticationError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        raise _store_failure(db, "token refresh") from e
    commit_or_raise(db, "token refresh")

    access_token = create_access_token(principal, now=now)
    return RefreshResult(
        data=RefreshData(
            access_token=access_token,
            token_type="Bearer",
            expires_in=int(settings.access_token_ttl.total_seconds()),
            refresh_expires_in=max(0, int((new_expiry - now).total_seconds())),
        ),
        refresh_token=new_token,
        refresh_expires_at=new_expiry,
    )


def signout(db: Session, kind: AccountKind, token: str | None) -> None:
    """Delete the session row if there is one. Idempotent."""
    if not token:
        return
    try:
        revoked = refresh_tokens.revoke(db, kind, token)
    except SQLAlchemyError as e:
        raise _store_failure(db, "signout") from e
    commit_or_raise(db, "signout")
    logger.info("Signed out", extra={"account_kind": kind.value, "sessions_revoked": revoked})
