"""System administration API routes."""

from fastapi import APIRouter, Query

from src.api.deps import SystemAdminProfile
from src.schemas.system import EngagementResponse, SystemStats
from src.services.system_service import SystemService

router = APIRouter(prefix="/system", tags=["system"])


@router.get(
    "/stats",
    response_model=SystemStats,
    summary="Portal statistics",
    description="User, corporation and notification counts, today's logins, growth and latency.",
)
async def get_stats(actor: SystemAdminProfile) -> SystemStats:
    """Return dashboard statistics."""
    return await SystemService().get_stats()


@router.get(
    "/engagement",
    response_model=EngagementResponse,
    summary="User engagement",
    description="Recent activities, daily logins and per-user activity counts.",
)
async def get_engagement(
    actor: SystemAdminProfile,
    days: int = Query(default=7, ge=1, le=90, description="Days of daily login counts"),
) -> EngagementResponse:
    """Return engagement analytics."""
    return await SystemService().get_engagement(days=days)
