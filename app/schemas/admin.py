"""Request/response schemas for administrative auth operations."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from app.schemas.auth import PermissionEntry, RoleInfo

# Columns that must not be set to NULL through a patch.
_NON_NULLABLE_PATCH_FIELDS = ("name", "surname", "email", "is_active")


class AdminPatch(BaseModel):
    """
    Partial update of an admin. Only fields present in the body are written;
    an explicit null is allowed for role_id only.
    """

    name: str | None = Field(default=None, max_length=255)
    surname: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    role_id: int | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def reject_null_for_required_columns(self) -> "AdminPatch":
        for field in _NON_NULLABLE_PATCH_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class PasswordResetRequest(BaseModel):
    """New password set by an administrator."""

    password: str = Field(..., min_length=1, max_length=128)
    password_confirmation: str = Field(..., min_length=1, max_length=128)


class PasswordChangeRequest(BaseModel):
    """Own password change (requires the current password)."""

    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)
    confirm_password: str = Field(..., min_length=1, max_length=128)


class AccountStatusUpdate(BaseModel):
    """Activate or deactivate a supplier or mobile user."""

    is_active: bool


class AccountState(BaseModel):
    """Account identity plus its lockout state."""

    id: int
    email: str
    is_active: bool
    failed_attempts: int
    locked_until: datetime | None = None
    lockout_stage: int

    class Config:
        from_attributes = True


class AccountStateResponse(BaseModel):
    """Envelope for unlock, password reset and admin patch."""

    success: Literal[True] = True
    message: str
    data: AccountState


class RoleStatusUpdate(BaseModel):
    """New role status: 1 = active, anything else = blocked."""

    status: int


class RoleStatusData(BaseModel):
    role: RoleInfo
    previous_status: int
    sessions_revoked: int


class RoleStatusResponse(BaseModel):
    success: Literal[True] = True
    message: str = "Role status updated successfully."
    data: RoleStatusData


class RolePermissionsData(BaseModel):
    role: RoleInfo
    permissions: list[PermissionEntry]


class RolePermissionsResponse(BaseModel):
    success: Literal[True] = True
    message: str = "Permissions retrieved successfully."
    data: RolePermissionsData
