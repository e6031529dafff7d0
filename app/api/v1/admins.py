"""Administrator account management: patch, unlock, password reset, own password change."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_admin, require_permission
from app.core.database import get_db
from app.schemas.admin import (
    AccountState,
    AccountStateResponse,
    AdminPatch,
    PasswordChangeRequest,
    PasswordResetRequest,
)
from app.schemas.auth import AccountKind, AdminPrincipal, MessageResponse
from app.services.accounts import apply_admin_patch, change_own_password, reset_password, unlock_account
from app.services.permissions import MODULE_ADMINISTRATION

router = APIRouter()

CanUpdateAdmins = Annotated[AdminPrincipal, Depends(require_permission(MODULE_ADMINISTRATION, "update"))]


@router.put("/me/password", response_model=MessageResponse)
def change_password(
    body: PasswordChangeRequest,
    principal: Annotated[AdminPrincipal, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    """Change the caller's own password; the current password is required."""
    change_own_password(db, principal, body.current_password, body.new_password, body.confirm_password)
    return MessageResponse(message="Password changed successfully.")


@router.patch("/{admin_id}", response_model=AccountStateResponse)
def update_admin(
    admin_id: int,
    body: AdminPatch,
    _principal: CanUpdateAdmins,
    db: Annotated[Session, Depends(get_db)],
) -> AccountStateResponse:
    """Partial update. Setting is_active=false also ends the admin's sessions."""
    admin = apply_admin_patch(db, admin_id, body)
    return AccountStateResponse(
        message="Admin updated successfully.",
        data=AccountState.model_validate(admin),
    )


@router.post("/{admin_id}/unlock", response_model=AccountStateResponse)
def unlock_admin(
    admin_id: int,
    _principal: CanUpdateAdmins,
    db: Annotated[Session, Depends(get_db)],
) -> AccountStateResponse:
    admin = unlock_account(db, AccountKind.ADMIN, admin_id)
    return AccountStateResponse(
        message="Admin account unlocked successfully.",
        data=AccountState.model_validate(admin),
    )


@router.post("/{admin_id}/password-reset", response_model=AccountStateResponse)
def reset_admin_password(
    admin_id: int,
    body: PasswordResetRequest,
    _principal: CanUpdateAdmins,
    db: Annotated[Session, Depends(get_db)],
) -> AccountStateResponse:
    admin = reset_password(db, AccountKind.ADMIN, admin_id, body.password, body.password_confirmation)
    return AccountStateResponse(
        message="Password reset successfully.",
        data=AccountState.model_validate(admin),
    )
