"""Error taxonomy for the auth core and the JSON error envelope handlers."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base for errors that map to a client-visible status and message."""

    status_code = 500
    error_type = "error"

    def __init__(self, message: str, headers: dict[str, str] | None = None) -> None:
        self.message = message
        self.headers = headers
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        """Extra fields merged into the error body."""
        return {}


class ValidationError(AppError):
    """Missing or malformed input."""

    status_code = 400
    error_type = "validation_error"


class AuthenticationError(AppError):
    """Bad credentials, or a missing/invalid/expired token."""

    status_code = 401
    error_type = "authentication_error"

    def __init__(self, message: str) -> None:
        super().__init__(message, headers={"WWW-Authenticate": "Bearer"})


class AuthorizationError(AppError):
    """Inactive account, blocked role or missing permission."""

    status_code = 403
    error_type = "authorization_error"


class SupplierApplicationError(AuthorizationError):
    """Supplier login matched a registration that has not been approved."""

    def __init__(self, message: str, application_status: str) -> None:
        self.application_status = application_status
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {"application_status": self.application_status}


class NotFoundError(AppError):
    """Account, role or token absent."""

    status_code = 404
    error_type = "not_found"


class ConflictError(AppError):
    """Unique constraint would be violated (e.g. email already taken)."""

    status_code = 409
    error_type = "conflict"


class LockedError(AppError):
    """Account temporarily or permanently locked after failed logins."""

    status_code = 423
    error_type = "account_locked"

    def __init__(self, message: str, remaining_minutes: int | None = None) -> None:
        self.remaining_minutes = remaining_minutes
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        if self.remaining_minutes is None:
            return {}
        return {"remaining_minutes": self.remaining_minutes}


class PersistenceError(AppError):
    """Data-store failure during a security-relevant mutation."""

    status_code = 500
    error_type = "persistence_error"


def _payload(*, message: str, typ: str) -> dict[str, Any]:
    return {"success": False, "error": typ, "message": message}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request."
    first = errors[0]
    # json_invalid locates the error by character offset, not by field
    if first.get("type") == "json_invalid":
        return "Request body must be valid JSON."
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = loc[-1] if loc else None
    if first.get("type") == "missing" and field:
        return f"Field '{field}' is required."
    if field:
        return f"Field '{field}' is invalid: {first.get('msg', 'invalid value')}."
    if first.get("type") in ("model_attributes_type", "dict_type", "missing"):
        return "Request body must be a JSON object."
    return f"Invalid request body: {first.get('msg', 'invalid value')}."


def register_exception_handlers(app: FastAPI) -> None:
    """Render every error as {"success": false, "error": <type>, "message": <text>}."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %s (%s)",
            request.method,
            request.url.path,
            exc.status_code,
            exc.error_type,
        )
        return JSONResponse(
            status_code=exc.status_code,
            headers=exc.headers,
            content={**_payload(message=exc.message, typ=exc.error_type), **exc.details()},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info(
            "%s %s -> 400 (validation_error) errors=%s",
            request.method,
            request.url.path,
            exc.errors(),
        )
        return JSONResponse(
            status_code=400,
            content=_payload(message=_validation_message(exc), typ=ValidationError.error_type),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return JSONResponse(
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
            content=_payload(message=message, typ="http_error"),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        # Full traceback to server logs; generic message to client
        logger.exception("Unhandled exception %s %s -> 500", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_payload(message="Internal server error.", typ="internal_error"),
        )
