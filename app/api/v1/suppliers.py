"""Supplier account administration (status, unlock, password reset)."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_permission
from app.core.database import get_db
from app.schemas.admin import (
    AccountState,
    AccountStateResponse,
    AccountStatusUpdate,
    PasswordResetRequest,
)
from app.schemas.auth import AccountKind, AdminPrincipal
from app.services.accounts import reset_password, set_account_active, unlock_account
from app.services.permissions import MODULE_SUPPLIERS

router = APIRouter()

CanUpdateSuppliers = Annotated[AdminPrincipal, Depends(require_permission(MODULE_SUPPLIERS, "update"))]


@router.put("/{supplier_id}/status", response_model=AccountStateResponse)
def update_supplier_status(
    supplier_id: int,
    body: AccountStatusUpdate,
    _principal: CanUpdateSuppliers,
    db: Annotated[Session, Depends(get_db)],
) -> AccountStateResponse:
    """Deactivating a supplier also ends all of its sessions."""
    supplier = set_account_active(db, AccountKind.SUPPLIER, supplier_id, body.is_active)
    return AccountStateResponse(
        message="Supplier status updated successfully.",
        data=AccountState.model_validate(supplier),
    )


@router.post("/{supplier_id}/unlock", response_model=AccountStateResponse)
def unlock_supplier(
    supplier_id: int,
    _principal: CanUpdateSuppliers,
    db: Annotated[Session, Depends(get_db)],
) -> AccountStateResponse:
    supplier = unlock_account(db, AccountKind.SUPPLIER, supplier_id)
    return AccountStateResponse(
        message="Supplier account unlocked successfully.",
        data=AccountState.model_validate(supplier),
    )


@router.post("/{supplier_id}/password-reset", response_model=AccountStateResponse)
def reset_supplier_password(
    supplier_id: int,
    body: PasswordResetRequest,
    _principal: CanUpdateSuppliers,
    db: Annotated[Session, Depends(get_db)],
) -> AccountStateResponse:
    """Set a new password; also unlocks the supplier and signs it out everywhere."""
    supplier = reset_password(
        db, AccountKind.SUPPLIER, supplier_id, body.password, body.password_confirmation
    )
    return AccountStateResponse(
        message="Password reset successfully.",
        data=AccountState.model_validate(supplier),
    )
