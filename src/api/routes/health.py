"""Liveness, readiness and token check endpoints."""

from fastapi import APIRouter, Response, status

from src.api.deps import CurrentUser
from src.core.supabase import ping_database
from src.schemas.auth import AuthenticatedResponse
from src.schemas.common import CheckResult, HealthResponse, HealthStatus, ReadinessResponse

router = APIRouter(tags=["health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness check",
    description="Answers 200 while the process is up. Touches no dependencies.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status=HealthStatus.HEALTHY)


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Database unreachable"}},
    summary="Readiness check",
    description="Checks that Supabase answers a query.",
)
async def readiness_check(response: Response) -> ReadinessResponse:
    """Ping the database; 503 when it does not answer."""
    readiness = ReadinessResponse.from_checks([CheckResult(name="database", **await ping_database())])
    if readiness.status is HealthStatus.UNHEALTHY:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return readiness


@router.get(
    "/health/auth",
    response_model=AuthenticatedResponse,
    summary="Token check",
    description="Echoes the identity carried by a valid bearer token.",
    responses={401: {"description": "Missing, expired or invalid token"}},
)
async def authenticated_check(user: CurrentUser) -> AuthenticatedResponse:
    return AuthenticatedResponse(
        authenticated=True,
        user_id=str(user.user_id),
        email=user.email,
        role=user.role,
    )
