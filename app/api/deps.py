"""
Request dependencies shared by the v1 routers: bearer-token authentication,
account-class gates and the RBAC permission gate.

Token verification is pure computation (signature + expiry); only the
permission gate reads the database.
"""

import logging
from collections.abc import Callable
from typing import Annotated

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.errors import AuthenticationError, AuthorizationError
from app.core.security import decode_access_token, principal_from_claims
from app.schemas.auth import AccountKind, AdminPrincipal, AnyPrincipal
from app.services.audit import ClientInfo
from app.services.permissions import Action, can_perform

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

HEADER_MISSING = "Authorization header missing."
INVALID_TOKEN = "Invalid or expired token."


def get_current_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AnyPrincipal:
    """Require a valid Bearer JWT. Raises 401 if missing, invalid or expired."""
    if credentials is None:
        raise AuthenticationError(HEADER_MISSING)
    try:
        claims = decode_access_token(credentials.credentials)
        principal = principal_from_claims(claims)
    except jwt.PyJWTError as e:
        logger.info("Rejected access token", extra={"reason": type(e).__name__})
        raise AuthenticationError(INVALID_TOKEN) from None
    request.state.principal = principal
    return principal


def require_kind(kind: AccountKind) -> Callable[..., AnyPrincipal]:
    """Dependency factory: the principal must belong to `kind`."""

    def dependency(
        principal: Annotated[AnyPrincipal, Depends(get_current_principal)],
    ) -> AnyPrincipal:
        if principal.kind != kind:
            raise AuthenticationError(INVALID_TOKEN)
        return principal

    return dependency


require_admin = require_kind(AccountKind.ADMIN)


def require_permission(module: str, action: Action) -> Callable[..., AdminPrincipal]:
    """Dependency factory: admin principal whose role grants `action` on `module`."""

    def dependency(
        principal: Annotated[AdminPrincipal, Depends(require_admin)],
        db: Annotated[Session, Depends(get_db)],
    ) -> AdminPrincipal:
        if not can_perform(db, principal, module, action):
            raise AuthorizationError(f"You do not have permission to {action} {module}.")
        return principal

    return dependency


def client_info(request: Request) -> ClientInfo:
    """Client address (first X-Forwarded-For hop when behind a proxy) and user agent."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip() or None
    else:
        ip_address = request.client.host if request.client else None
    return ClientInfo(ip_address=ip_address, user_agent=request.headers.get("user-agent"))
