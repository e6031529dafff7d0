"""SQLAlchemy ORM models."""

from app.models.account import Admin, MobileUser, Supplier
from app.models.base import Base
from app.models.login_log import LoginLog
from app.models.refresh_token import RefreshToken
from app.models.role import Module, Role, RolePermission
from app.models.supplier_application import SupplierApplication

__all__ = [
    "Admin",
    "Base",
    "LoginLog",
    "MobileUser",
    "Module",
    "RefreshToken",
    "Role",
    "RolePermission",
    "Supplier",
    "SupplierApplication",
]
