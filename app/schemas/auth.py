"""Request/response schemas for auth endpoints and the request-scoped principal."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class AccountKind(str, Enum):
    """Account class a principal or refresh token belongs to."""

    ADMIN = "admin"
    SUPPLIER = "supplier"
    MOBILE_USER = "mobile_user"

    @property
    def claim_key(self) -> str:
        """Semantic id claim carried next to `sub` in access tokens."""
        return _CLAIM_KEYS[self]


_CLAIM_KEYS = {
    AccountKind.ADMIN: "admin_id",
    AccountKind.SUPPLIER: "supplier_id",
    AccountKind.MOBILE_USER: "user_id",
}


class AdminPrincipal(BaseModel):
    """Authenticated control-panel administrator."""

    kind: Literal[AccountKind.ADMIN] = AccountKind.ADMIN
    id: int
    email: str


class SupplierPrincipal(BaseModel):
    """Authenticated supplier-portal account."""

    kind: Literal[AccountKind.SUPPLIER] = AccountKind.SUPPLIER
    id: int
    email: str


class MobileUserPrincipal(BaseModel):
    """Authenticated mobile app user."""

    kind: Literal[AccountKind.MOBILE_USER] = AccountKind.MOBILE_USER
    id: int
    email: str


AnyPrincipal = Union[AdminPrincipal, SupplierPrincipal, MobileUserPrincipal]

# Discriminated on `kind` when validated from data (e.g. inside response models).
Principal = Annotated[AnyPrincipal, Field(discriminator="kind")]

PRINCIPAL_TYPES: dict[AccountKind, type[BaseModel]] = {
    AccountKind.ADMIN: AdminPrincipal,
    AccountKind.SUPPLIER: SupplierPrincipal,
    AccountKind.MOBILE_USER: MobileUserPrincipal,
}


def build_principal(kind: AccountKind, account_id: int, email: str) -> Principal:
    """Instantiate the principal variant for an account class."""
    return PRINCIPAL_TYPES[kind](id=account_id, email=email)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: str = Field(..., min_length=1, max_length=255, description="Account email")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


class PermissionEntry(BaseModel):
    """One role × module grant."""

    module_id: int
    module_name: str
    can_read: bool
    can_create: bool
    can_update: bool
    can_delete: bool


class RoleInfo(BaseModel):
    """Role attached to an account."""

    id: int
    role_name: str
    description: str | None = None
    status: int

    class Config:
        from_attributes = True


class UserProfile(BaseModel):
    """Public account fields returned after login (never the password hash)."""

    id: int
    email: str
    name: str | None = None
    surname: str | None = None
    phone: str | None = None


class LoginData(BaseModel):
    """Successful login payload."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserProfile
    role: RoleInfo | None = None
    permissions: list[PermissionEntry] = Field(default_factory=list)


class LoginResponse(BaseModel):
    """Envelope for POST /auth/login."""

    success: Literal[True] = True
    message: str = "Login successful."
    data: LoginData


class RefreshData(BaseModel):
    """New access token issued from a rotated refresh token."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_expires_in: int = Field(..., description="Seconds until the new refresh token expires")


class RefreshResponse(BaseModel):
    """Envelope for POST /auth/refresh."""

    success: Literal[True] = True
    message: str = "Token refreshed successfully."
    data: RefreshData


class MessageResponse(BaseModel):
    """Envelope for operations without a payload."""

    success: Literal[True] = True
    message: str


class MeData(BaseModel):
    """Current principal with its role and effective permissions."""

    principal: Principal
    role: RoleInfo | None = None
    permissions: list[PermissionEntry] = Field(default_factory=list)


class MeResponse(BaseModel):
    """Envelope for GET /auth/me."""

    success: Literal[True] = True
    message: str = "Authenticated."
    data: MeData
