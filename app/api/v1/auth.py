"""
Login, refresh, signout and /me routes. One router per account class, built by
build_router(kind); they differ only in the refresh cookie name and the bearer
class accepted by /me.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from app.api.deps import client_info, require_kind
from app.core.config import settings
from app.core.database import get_db
from app.schemas.auth import (
    AccountKind,
    AnyPrincipal,
    LoginRequest,
    LoginResponse,
    MeData,
    MeResponse,
    MessageResponse,
    RefreshResponse,
    RoleInfo,
)
from app.services import sessions
from app.services.accounts import get_role, require_account
from app.services.permissions import get_permission_matrix

REFRESH_COOKIE_NAMES = {
    AccountKind.ADMIN: "refresh_token",
    AccountKind.SUPPLIER: "supplier_refresh_token",
    AccountKind.MOBILE_USER: "mobile_refresh_token",
}


def _cookie_attributes() -> dict:
    if settings.APP_ENV == "prod":
        return {"domain": settings.COOKIE_DOMAIN, "secure": True, "samesite": "none"}
    return {"domain": None, "secure": False, "samesite": "lax"}


def set_refresh_cookie(response: Response, kind: AccountKind, token: str) -> None:
    """HTTP-only refresh cookie valid for the full refresh-token lifetime."""
    response.set_cookie(
        key=REFRESH_COOKIE_NAMES[kind],
        value=token,
        max_age=int(settings.refresh_token_ttl.total_seconds()),
        path="/",
        httponly=True,
        **_cookie_attributes(),
    )


def clear_refresh_cookie(response: Response, kind: AccountKind) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE_NAMES[kind],
        path="/",
        httponly=True,
        **_cookie_attributes(),
    )


def build_router(kind: AccountKind) -> APIRouter:
    router = APIRouter()
    cookie_name = REFRESH_COOKIE_NAMES[kind]
    current_principal = require_kind(kind)

    @router.post("/login", response_model=LoginResponse)
    def login(
        body: LoginRequest,
        request: Request,
        response: Response,
        db: Annotated[Session, Depends(get_db)],
    ) -> LoginResponse:
        """
        Authenticate with email and password. Returns a short-lived access token
        in the body and sets the refresh token as an HTTP-only cookie.
        """
        result = sessions.login(db, kind, body.email, body.password, client_info(request))
        set_refresh_cookie(response, kind, result.refresh_token)
        return LoginResponse(data=result.data)

    @router.post("/refresh", response_model=RefreshResponse)
    def refresh(
        request: Request,
        response: Response,
        db: Annotated[Session, Depends(get_db)],
    ) -> RefreshResponse:
        """Rotate the refresh cookie and return a new access token."""
        result = sessions.refresh(db, kind, request.cookies.get(cookie_name))
        set_refresh_cookie(response, kind, result.refresh_token)
        return RefreshResponse(data=result.data)

    @router.post("/signout", response_model=MessageResponse)
    def signout(
        request: Request,
        response: Response,
        db: Annotated[Session, Depends(get_db)],
    ) -> MessageResponse:
        sessions.signout(db, kind, request.cookies.get(cookie_name))
        clear_refresh_cookie(response, kind)
        return MessageResponse(message="Signed out successfully.")

    @router.get("/me", response_model=MeResponse)
    def me(
        principal: Annotated[AnyPrincipal, Depends(current_principal)],
        db: Annotated[Session, Depends(get_db)],
    ) -> MeResponse:
        """Current principal with its role and permission matrix."""
        account = require_account(db, kind, principal.id)
        role = get_role(account)
        return MeResponse(
            data=MeData(
                principal=principal,
                role=RoleInfo.model_validate(role) if role is not None else None,
                permissions=get_permission_matrix(db, role.id if role is not None else None),
            )
        )

    return router
