"""Authentication API routes."""

from fastapi import APIRouter, status

from src.api.deps import AccessToken, Client, CurrentProfile
from src.schemas.auth import (
    LoginRequest,
    LoginResponse,
    PortalUser,
    RefreshTokenRequest,
    RefreshTokenResponse,
    RegisterRequest,
    RegisterResponse,
)
from src.schemas.common import MessageResponse
from src.services.auth_service import AuthService
from src.services.profile_service import ProfileService

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in",
    description="Authenticate with login ID and password. Attempts are rate limited per login ID.",
    responses={
        401: {"description": "Invalid login ID or password"},
        429: {"description": "Too many login attempts"},
    },
)
async def login(data: LoginRequest, client: Client) -> LoginResponse:
    """Log in with login ID and password.

    Args:
        data: Login request with login ID and password.
        client: Caller IP and user agent, stored with the login activity.

    Returns:
        LoginResponse: Tokens and the signed-in portal user.
    """
    service = AuthService()
    result = await service.login(
        login_id=data.login_id,
        password=data.password,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return LoginResponse(**result)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register an account",
    description="Self-service sign-up. Creates a general user that can log in immediately.",
    responses={409: {"description": "Login ID or email already in use"}},
)
async def register(data: RegisterRequest) -> RegisterResponse:
    """Register a new general user.

    Args:
        data: Registration request.

    Returns:
        RegisterResponse: The created portal user.
    """
    service = AuthService()
    profile = await service.register(
        login_id=data.login_id,
        email=data.email,
        full_name=data.full_name,
        password=data.password,
    )
    return RegisterResponse(
        user=ProfileService.to_portal_user(profile),
        message="Registration complete. You can now log in.",
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Invalidate the current session. Always succeeds.",
)
async def logout(profile: CurrentProfile, token: AccessToken) -> MessageResponse:
    """Log out the current user."""
    service = AuthService()
    result = await service.logout(token, profile_id=profile["id"])
    return MessageResponse(**result)


@router.post(
    "/refresh",
    response_model=RefreshTokenResponse,
    summary="Refresh access token",
    description="Exchange a refresh token for a new access token.",
)
async def refresh_token(data: RefreshTokenRequest) -> RefreshTokenResponse:
    """Refresh the access token.

    Args:
        data: Request with the refresh token.

    Returns:
        RefreshTokenResponse: New tokens.
    """
    service = AuthService()
    result = await service.refresh_token(data.refresh_token)
    return RefreshTokenResponse(**result)


@router.get(
    "/me",
    response_model=PortalUser,
    summary="Get current user",
    description="Return the portal identity of the authenticated user.",
)
async def get_me(profile: CurrentProfile) -> PortalUser:
    """Return the caller's portal user."""
    return ProfileService.to_portal_user(profile)
