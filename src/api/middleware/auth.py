"""Verification of Supabase-issued access tokens."""

import json
from enum import Enum
from functools import lru_cache
from typing import Any

import jwt
from jwt import PyJWK

from src.core.config import get_settings
from src.schemas.auth import TokenPayload

REQUIRED_CLAIMS = ["exp", "iat", "sub"]


class AuthErrorCode(str, Enum):
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"


class AuthError(Exception):
    """A token could not be accepted; ``code`` says why."""

    def __init__(self, message: str, code: AuthErrorCode = AuthErrorCode.INVALID_TOKEN) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


# Checked in order: subclasses before their bases.
_JWT_FAILURES: list[tuple[type[jwt.PyJWTError], str, AuthErrorCode]] = [
    (jwt.ExpiredSignatureError, "Token has expired", AuthErrorCode.TOKEN_EXPIRED),
    (jwt.InvalidSignatureError, "Invalid token signature", AuthErrorCode.INVALID_SIGNATURE),
    (jwt.InvalidAudienceError, "Invalid token audience", AuthErrorCode.INVALID_TOKEN),
    (jwt.MissingRequiredClaimError, "Token missing required claim", AuthErrorCode.INVALID_TOKEN),
    (jwt.DecodeError, "Invalid token format", AuthErrorCode.INVALID_TOKEN),
]


@lru_cache
def _load_jwk(jwk_json: str) -> Any:
    """Parse the configured JWK once per distinct value."""
    try:
        return PyJWK.from_dict(json.loads(jwk_json)).key
    except (json.JSONDecodeError, jwt.PyJWTError) as e:
        raise AuthError(f"Invalid signing key JWK format: {e}") from e


def get_verification_key() -> tuple[Any, list[str]]:
    """Return the key and algorithms access tokens are verified with.

    An ES256 JWK takes precedence over the legacy HS256 shared secret.

    Raises:
        AuthError: If neither is configured.
    """
    settings = get_settings()

    if settings.supabase_signing_key_jwk:
        return _load_jwk(settings.supabase_signing_key_jwk), ["ES256"]
    if settings.supabase_jwt_secret:
        return settings.supabase_jwt_secret, ["HS256"]

    raise AuthError("Signing key not configured")


def _as_auth_error(error: Exception) -> AuthError:
    for failure, message, code in _JWT_FAILURES:
        if isinstance(error, failure):
            return AuthError(message, code)
    return AuthError(f"Token validation failed: {error}")


def decode_jwt(token: str) -> TokenPayload:
    """Verify a bearer token's signature, expiry and audience.

    Raises:
        AuthError: If the token cannot be accepted.
    """
    key, algorithms = get_verification_key()

    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=get_settings().jwt_audience,
            options={"require": REQUIRED_CLAIMS},
        )
    except (jwt.PyJWTError, ValueError, TypeError) as e:
        raise _as_auth_error(e) from e

    return TokenPayload(
        sub=claims["sub"],
        email=claims.get("email"),
        role=claims.get("role"),
        exp=claims["exp"],
        iat=claims["iat"],
        aud=claims.get("aud"),
        iss=claims.get("iss"),
    )
