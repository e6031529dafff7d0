"""Role-based permission evaluation: role × module × CRUD action."""

import logging
from typing import Literal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models import Module, Role, RolePermission
from app.schemas.auth import PermissionEntry, Principal
from app.services.accounts import get_account

logger = logging.getLogger(__name__)

Action = Literal["read", "create", "update", "delete"]
VALID_ACTIONS: frozenset[str] = frozenset({"read", "create", "update", "delete"})

# Module names used by the endpoints in this service.
MODULE_ADMINISTRATION = "administration"
MODULE_SUPPLIERS = "suppliers"
MODULE_USERS = "users"
MODULE_ROLES = "roles & permissions"


def _deny(principal: Principal, module: str, action: str, reason: str) -> bool:
    logger.info(
        "Permission denied",
        extra={
            "account_kind": principal.kind.value,
            "account_id": principal.id,
            "module": module,
            "action": action,
            "reason": reason,
        },
    )
    return False


def can_perform(db: Session, principal: Principal, module: str, action: str) -> bool:
    """
    True only if the principal's account is active, holds an active role, and that
    role has a grant row for `module` with the column for `action` set.
    Read-only: never mutates state.
    """
    action = (action or "").strip().lower()
    module = (module or "").strip()
    if action not in VALID_ACTIONS:
        return _deny(principal, module, action, "invalid_action")
    if not module:
        return _deny(principal, module, action, "invalid_module")

    account = get_account(db, principal.kind, principal.id)
    if account is None or not account.is_active:
        return _deny(principal, module, action, "account_unavailable")
    role_id = getattr(account, "role_id", None)
    if role_id is None:
        return _deny(principal, module, action, "no_role")
    role = db.get(Role, role_id)
    if role is None:
        return _deny(principal, module, action, "no_role")
    if role.is_blocked:
        return _deny(principal, module, action, "role_blocked")

    grant = db.execute(
        select(RolePermission)
        .join(Module, RolePermission.module_id == Module.id)
        .where(
            RolePermission.role_id == role.id,
            func.lower(func.trim(Module.module_name)) == module.lower(),
        )
    ).scalar_one_or_none()
    if grant is None:
        return _deny(principal, module, action, "no_grant")
    if not getattr(grant, f"can_{action}"):
        return _deny(principal, module, action, "flag_false")
    return True


def get_permission_matrix(db: Session, role_id: int | None) -> list[PermissionEntry]:
    """All grants of a role ordered by module name; empty for no role."""
    if role_id is None:
        return []
    rows = db.execute(
        select(RolePermission, Module.module_name)
        .join(Module, RolePermission.module_id == Module.id)
        .where(RolePermission.role_id == role_id)
        .order_by(Module.module_name.asc())
    ).all()
    return [
        PermissionEntry(
            module_id=grant.module_id,
            module_name=module_name,
            can_read=bool(grant.can_read),
            can_create=bool(grant.can_create),
            can_update=bool(grant.can_update),
            can_delete=bool(grant.can_delete),
        )
        for grant, module_name in rows
    ]
