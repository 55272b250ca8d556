"""FastAPI dependency injection functions."""

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Depends, Header, HTTPException, Request, status

from src.api.middleware.auth import AuthError, decode_jwt
from src.api.middleware.error_handler import AuthorizationError
from src.models.profile import UserRole
from src.schemas.auth import UserContext
from src.services.profile_service import ProfileService


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(authorization: str) -> str | None:
    """Return the token of a ``Bearer <token>`` header, else None."""
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


async def get_current_user(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> UserContext:
    """Resolve the caller's identity from their Supabase access token.

    Raises:
        HTTPException: 401 if the header is missing or malformed, or the
            token is invalid or expired.
    """
    if not authorization:
        raise _unauthorized("Authorization header required")

    token = _bearer_token(authorization)
    if token is None:
        raise _unauthorized("Invalid authorization header format. Expected: Bearer <token>")

    try:
        return decode_jwt(token).to_user_context()
    except AuthError as e:
        raise _unauthorized(e.message) from e


def get_access_token(
    authorization: Annotated[str, Header(description="Bearer token")] = "",
) -> str:
    """Return the raw bearer token, or an empty string when absent."""
    return _bearer_token(authorization) or ""


# Type aliases for cleaner dependency injection
CurrentUser = Annotated[UserContext, Depends(get_current_user)]
AccessToken = Annotated[str, Depends(get_access_token)]


async def get_current_profile(user: CurrentUser) -> dict[str, Any]:
    """Load the active portal profile of the authenticated user.

    Raises:
        AuthorizationError: If no profile is linked to the token, or it is deactivated.
    """
    profile = await ProfileService().get_by_auth_user_id(user.user_id)

    if not profile:
        raise AuthorizationError("No portal profile is linked to this account")
    if not profile.get("is_active", True):
        raise AuthorizationError("This account has been deactivated")

    return profile


CurrentProfile = Annotated[dict[str, Any], Depends(get_current_profile)]


def require_roles(*roles: UserRole):
    """Build a dependency that only admits profiles with one of the given roles."""
    allowed = {role.value for role in roles}

    async def dependency(profile: CurrentProfile) -> dict[str, Any]:
        if profile.get("role") not in allowed:
            raise AuthorizationError("You do not have permission to perform this action")
        return profile

    return dependency


AdminProfile = Annotated[dict[str, Any], Depends(require_roles(UserRole.ADMIN, UserRole.SYSTEM_ADMIN))]
SystemAdminProfile = Annotated[dict[str, Any], Depends(require_roles(UserRole.SYSTEM_ADMIN))]


@dataclass
class ClientInfo:
    """Origin of a request, recorded with user activities."""

    ip_address: str | None
    user_agent: str | None


def get_client_info(request: Request) -> ClientInfo:
    """Extract the client IP (honouring X-Forwarded-For) and user agent."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip_address = forwarded.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None

    return ClientInfo(ip_address=ip_address, user_agent=request.headers.get("user-agent"))


Client = Annotated[ClientInfo, Depends(get_client_info)]
