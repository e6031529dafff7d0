"""Pydantic request/response schemas."""

from app.schemas.admin import (
    AccountState,
    AccountStateResponse,
    AccountStatusUpdate,
    AdminPatch,
    PasswordChangeRequest,
    PasswordResetRequest,
)
from app.schemas.auth import (
    AccountKind,
    AdminPrincipal,
    LoginRequest,
    LoginResponse,
    MobileUserPrincipal,
    Principal,
    RefreshResponse,
    SupplierPrincipal,
)
from app.schemas.health import HealthResponse

__all__ = [
    "AccountKind",
    "AccountState",
    "AccountStateResponse",
    "AccountStatusUpdate",
    "AdminPatch",
    "AdminPrincipal",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MobileUserPrincipal",
    "PasswordChangeRequest",
    "PasswordResetRequest",
    "Principal",
    "RefreshResponse",
    "SupplierPrincipal",
]
