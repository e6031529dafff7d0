"""
Refresh token store: issue, validate, rotate (compare-and-swap) and revoke.

Functions only stage changes on the session; the caller commits so that token
writes land in the same transaction as the rest of the login/refresh flow.
"""

import logging
from datetime import datetime

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthenticationError
from app.core.security import generate_refresh_token
from app.models import Admin, RefreshToken, Supplier
from app.schemas.auth import AccountKind

logger = logging.getLogger(__name__)

INVALID_REFRESH_TOKEN = "Invalid or expired refresh token."


def token_preview(token: str) -> str:
    """First characters of a token, safe for logs."""
    return f"{token[:10]}..."


def issue(db: Session, kind: AccountKind, account_id: int, now: datetime) -> tuple[str, datetime]:
    """Insert a new session row; returns (token, expires_at)."""
    token = generate_refresh_token()
    expires_at = now + settings.refresh_token_ttl
    db.add(
        RefreshToken(
            account_kind=kind.value,
            account_id=account_id,
            token=token,
            expires_at=expires_at,
        )
    )
    db.flush()
    return token, expires_at


def validate(db: Session, kind: AccountKind, token: str, now: datetime) -> RefreshToken | None:
    """Return the live row for this exact token and account class, or None."""
    return db.execute(
        select(RefreshToken).where(
            RefreshToken.token == token,
            RefreshToken.account_kind == kind.value,
            RefreshToken.expires_at > now,
        )
    ).scalar_one_or_none()


def rotate(db: Session, row: RefreshToken, old_token: str, now: datetime) -> tuple[str, datetime]:
    """
    Replace the token value and expiry in place, only if the row still holds
    `old_token`. A concurrent rotation or revocation makes this raise 401.
    """
    new_token = generate_refresh_token()
    new_expiry = now + settings.refresh_token_ttl
    result = db.execute(
        update(RefreshToken)
        .where(
            RefreshToken.id == row.id,
            RefreshToken.token == old_token,
            RefreshToken.expires_at > now,
        )
        .values(token=new_token, expires_at=new_expiry)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        logger.warning(
            "Refresh token rotation lost a race",
            extra={"token_id": row.id, "token_preview": token_preview(old_token)},
        )
        raise AuthenticationError(INVALID_REFRESH_TOKEN)
    return new_token, new_expiry


def revoke(db: Session, kind: AccountKind, token: str) -> int:
    """Delete the session row holding this token. Returns rows deleted (0 or 1)."""
    result = db.execute(
        delete(RefreshToken)
        .where(RefreshToken.token == token, RefreshToken.account_kind == kind.value)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def revoke_all_for_account(db: Session, kind: AccountKind, account_id: int) -> int:
    """Delete every session of one account (deactivation, password reset)."""
    result = db.execute(
        delete(RefreshToken)
        .where(
            RefreshToken.account_kind == kind.value,
            RefreshToken.account_id == account_id,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def revoke_all_for_role(db: Session, role_id: int) -> int:
    """Delete the sessions of every admin and supplier holding the role."""
    admin_ids = select(Admin.id).where(Admin.role_id == role_id)
    supplier_ids = select(Supplier.id).where(Supplier.role_id == role_id)
    result = db.execute(
        delete(RefreshToken)
        .where(
            or_(
                and_(
                    RefreshToken.account_kind == AccountKind.ADMIN.value,
                    RefreshToken.account_id.in_(admin_ids),
                ),
                and_(
                    RefreshToken.account_kind == AccountKind.SUPPLIER.value,
                    RefreshToken.account_id.in_(supplier_ids),
                ),
            )
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def purge_expired(db: Session, now: datetime) -> int:
    """Delete rows whose expiry has passed. Caller commits."""
    result = db.execute(
        delete(RefreshToken)
        .where(RefreshToken.expires_at <= now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount
