"""Role status and permission matrix routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import require_permission
from app.core.database import get_db
from app.schemas.admin import (
    RolePermissionsData,
    RolePermissionsResponse,
    RoleStatusData,
    RoleStatusResponse,
    RoleStatusUpdate,
)
from app.schemas.auth import AdminPrincipal, RoleInfo
from app.services.permissions import MODULE_ROLES, get_permission_matrix
from app.services.roles import require_role, set_role_status

router = APIRouter()


@router.put("/{role_id}/status", response_model=RoleStatusResponse)
def update_role_status(
    role_id: int,
    body: RoleStatusUpdate,
    _principal: Annotated[AdminPrincipal, Depends(require_permission(MODULE_ROLES, "update"))],
    db: Annotated[Session, Depends(get_db)],
) -> RoleStatusResponse:
    """
    Activate (1) or block (any other value) a role. Blocking signs out every
    admin and supplier holding the role.
    """
    role, previous, revoked = set_role_status(db, role_id, body.status)
    return RoleStatusResponse(
        data=RoleStatusData(
            role=RoleInfo.model_validate(role),
            previous_status=previous,
            sessions_revoked=revoked,
        )
    )


@router.get("/{role_id}/permissions", response_model=RolePermissionsResponse)
def get_role_permissions(
    role_id: int,
    _principal: Annotated[AdminPrincipal, Depends(require_permission(MODULE_ROLES, "read"))],
    db: Annotated[Session, Depends(get_db)],
) -> RolePermissionsResponse:
    role = require_role(db, role_id)
    return RolePermissionsResponse(
        data=RolePermissionsData(
            role=RoleInfo.model_validate(role),
            permissions=get_permission_matrix(db, role.id),
        )
    )
