"""Password hashing, JWT access tokens and opaque refresh token generation."""

import secrets
from datetime import UTC, datetime
from functools import lru_cache
from typing import Any

import bcrypt
import jwt

from app.core.config import settings
from app.schemas.auth import AccountKind, Principal, build_principal

# Min/max lengths for password validation on reset/change (input validation).
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# 32 random bytes, hex encoded.
REFRESH_TOKEN_BYTES = 32


class InvalidTokenClaims(jwt.PyJWTError):
    """Token is correctly signed but its claims do not describe a principal."""


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(pw_bytes, salt).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify a plain password against a stored hash. Malformed hashes never match."""
    if not hashed:
        return False
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password(secrets.token_hex(16))


def burn_password_check(plain_password: str) -> None:
    """Spend one hash comparison so unknown emails cost as much as wrong passwords."""
    verify_password(plain_password, _dummy_hash())


def create_access_token(principal: Principal, now: datetime | None = None) -> str:
    """Create a signed JWT for the principal: sub, semantic id key, email, type, iat, exp."""
    issued_at = now or datetime.now(UTC)
    expire = issued_at + settings.access_token_ttl
    payload: dict[str, Any] = {
        "sub": str(principal.id),
        principal.kind.claim_key: principal.id,
        "email": principal.email,
        "type": principal.kind.value,
        "iat": issued_at,
        "exp": expire,
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and validate JWT; return payload.
    Raises jwt.PyJWTError on bad signature, expiry or missing required claims.
    """
    return jwt.decode(
        token,
        settings.JWT_SECRET.get_secret_value(),
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["sub", "iat", "exp"]},
    )


def principal_from_claims(claims: dict[str, Any]) -> Principal:
    """
    Rebuild the tagged principal from decoded claims.
    The semantic id key must be present and agree with `sub`.
    """
    try:
        kind = AccountKind(claims.get("type"))
    except ValueError:
        raise InvalidTokenClaims("Unknown account type") from None
    try:
        account_id = int(claims["sub"])
        semantic_id = int(claims[kind.claim_key])
    except (KeyError, TypeError, ValueError):
        raise InvalidTokenClaims("Missing account id") from None
    if account_id != semantic_id:
        raise InvalidTokenClaims("Account id mismatch")
    email = claims.get("email")
    if not isinstance(email, str) or not email:
        raise InvalidTokenClaims("Missing email")
    return build_principal(kind, account_id, email)


def generate_refresh_token() -> str:
    """Opaque, cryptographically random refresh token (not a JWT)."""
    return secrets.token_hex(REFRESH_TOKEN_BYTES)
