"""Mobile user administration."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_permission
from app.core.database import get_db
from app.schemas.admin import AccountState, AccountStateResponse, AccountStatusUpdate
from app.schemas.auth import AccountKind, AdminPrincipal
from app.services.accounts import set_account_active, unlock_account
from app.services.permissions import MODULE_USERS

router = APIRouter()

CanUpdateUsers = Annotated[AdminPrincipal, Depends(require_permission(MODULE_USERS, "update"))]


@router.put("/{user_id}/status", response_model=AccountStateResponse)
def update_user_status(
    user_id: int,
    body: AccountStatusUpdate,
    _principal: CanUpdateUsers,
    db: Annotated[Session, Depends(get_db)],
) -> AccountStateResponse:
    user = set_account_active(db, AccountKind.MOBILE_USER, user_id, body.is_active)
    return AccountStateResponse(
        message="User status updated successfully.",
        data=AccountState.model_validate(user),
    )


@router.post("/{user_id}/unlock", response_model=AccountStateResponse)
def unlock_user(
    user_id: int,
    _principal: CanUpdateUsers,
    db: Annotated[Session, Depends(get_db)],
) -> AccountStateResponse:
    """Clear a temporary or permanent lock, including the progressive lockout stage."""
    user = unlock_account(db, AccountKind.MOBILE_USER, user_id)
    return AccountStateResponse(
        message="User account unlocked successfully.",
        data=AccountState.model_validate(user),
    )
