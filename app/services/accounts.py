"""Credential store access and administrative account operations."""

import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.core.database import commit_or_raise
from app.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password, verify_password
from app.models import Admin, MobileUser, Role, Supplier, SupplierApplication
from app.schemas.admin import AdminPatch
from app.schemas.auth import AccountKind, Principal, UserProfile
from app.services import lockout, refresh_tokens

logger = logging.getLogger(__name__)

Account = Admin | Supplier | MobileUser

ACCOUNT_MODELS: dict[AccountKind, type[Account]] = {
    AccountKind.ADMIN: Admin,
    AccountKind.SUPPLIER: Supplier,
    AccountKind.MOBILE_USER: MobileUser,
}

ACCOUNT_LABELS = {
    AccountKind.ADMIN: "Admin",
    AccountKind.SUPPLIER: "Supplier",
    AccountKind.MOBILE_USER: "User",
}


def get_account(db: Session, kind: AccountKind, account_id: int) -> Account | None:
    return db.get(ACCOUNT_MODELS[kind], account_id)


def require_account(db: Session, kind: AccountKind, account_id: int) -> Account:
    """Load an account or raise NotFoundError ("Admin not found.")."""
    account = get_account(db, kind, account_id)
    if account is None:
        raise NotFoundError(f"{ACCOUNT_LABELS[kind]} not found.")
    return account


def find_by_email_for_update(db: Session, kind: AccountKind, email: str) -> Account | None:
    """
    Case-insensitive email lookup that locks the row until the transaction ends,
    so concurrent login attempts on one account are applied one after another.
    """
    model = ACCOUNT_MODELS[kind]
    return db.execute(
        select(model)
        .where(func.lower(model.email) == email.strip().lower())
        .with_for_update()
    ).scalar_one_or_none()


def find_supplier_application(db: Session, email: str) -> SupplierApplication | None:
    return db.execute(
        select(SupplierApplication).where(
            func.lower(SupplierApplication.email) == email.strip().lower()
        )
    ).scalar_one_or_none()


def get_role(account: Account) -> Role | None:
    return getattr(account, "role", None)


def to_profile(account: Account) -> UserProfile:
    phone = getattr(account, "cellphone", None) or getattr(account, "cell", None)
    return UserProfile(
        id=account.id,
        email=account.email,
        name=getattr(account, "name", None),
        surname=getattr(account, "surname", None),
        phone=phone,
    )


def _validate_new_password(password: str, confirmation: str) -> None:
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise ValidationError(
            f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters."
        )
    if password != confirmation:
        raise ValidationError("Password confirmation does not match.")


def unlock_account(db: Session, kind: AccountKind, account_id: int) -> Account:
    """Administrative unlock: clear counters, lock and lockout stage."""
    account = require_account(db, kind, account_id)
    lockout.unlock(account)
    commit_or_raise(db, "account unlock")
    db.refresh(account)
    logger.info(
        "Account unlocked",
        extra={"account_kind": kind.value, "account_id": account_id},
    )
    return account


def reset_password(
    db: Session,
    kind: AccountKind,
    account_id: int,
    password: str,
    password_confirmation: str,
) -> Account:
    """Set a new password on behalf of the account; also unlocks it and ends its sessions."""
    _validate_new_password(password, password_confirmation)
    account = require_account(db, kind, account_id)
    account.password_hash = hash_password(password)
    lockout.unlock(account)
    revoked = refresh_tokens.revoke_all_for_account(db, kind, account_id)
    commit_or_raise(db, "password reset")
    db.refresh(account)
    logger.info(
        "Password reset",
        extra={"account_kind": kind.value, "account_id": account_id, "sessions_revoked": revoked},
    )
    return account


def change_own_password(
    db: Session,
    principal: Principal,
    current_password: str,
    new_password: str,
    confirm_password: str,
) -> None:
    """Authenticated password change; requires the current password."""
    _validate_new_password(new_password, confirm_password)
    if current_password == new_password:
        raise ValidationError("New password must be different from the current password.")
    account = require_account(db, principal.kind, principal.id)
    if not account.is_active:
        raise AuthorizationError("Account is not active.")
    if not verify_password(current_password, account.password_hash):
        raise AuthenticationError("Current password is incorrect.")
    account.password_hash = hash_password(new_password)
    lockout.record_success(account)
    commit_or_raise(db, "password change")


def apply_admin_patch(db: Session, admin_id: int, patch: AdminPatch) -> Admin:
    """
    Update only the fields present in the request body. Deactivating an admin
    revokes all of its refresh tokens in the same transaction.
    """
    fields = patch.model_dump(exclude_unset=True)
    if not fields:
        raise ValidationError("No fields to update.")
    admin = require_account(db, AccountKind.ADMIN, admin_id)

    if "email" in fields:
        email = fields["email"].strip().lower()
        taken = db.execute(
            select(Admin.id).where(func.lower(Admin.email) == email, Admin.id != admin_id)
        ).first()
        if taken:
            raise ConflictError("Email is already in use.")
        fields["email"] = email
    if fields.get("role_id") is not None and db.get(Role, fields["role_id"]) is None:
        raise NotFoundError("Role not found.")

    db.execute(
        update(Admin)
        .where(Admin.id == admin_id)
        .values(**fields)
        .execution_options(synchronize_session=False)
    )
    if fields.get("is_active") is False:
        _end_sessions_on_deactivation(db, AccountKind.ADMIN, admin_id)
    commit_or_raise(db, "admin update")
    db.refresh(admin)
    return admin


def _end_sessions_on_deactivation(db: Session, kind: AccountKind, account_id: int) -> int:
    revoked = refresh_tokens.revoke_all_for_account(db, kind, account_id)
    logger.info(
        "Account deactivated",
        extra={"account_kind": kind.value, "account_id": account_id, "sessions_revoked": revoked},
    )
    return revoked


def set_account_active(db: Session, kind: AccountKind, account_id: int, is_active: bool) -> Account:
    """Activate or deactivate a supplier or mobile user; deactivation signs it out everywhere."""
    account = require_account(db, kind, account_id)
    account.is_active = is_active
    if not is_active:
        _end_sessions_on_deactivation(db, kind, account_id)
    commit_or_raise(db, "account status update")
    db.refresh(account)
    return account
