"""User activity tracking service."""

import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from src.core.supabase import get_supabase_client

logger = logging.getLogger(__name__)


class ActivityService:
    """Service for recording and querying user activities."""

    def __init__(self) -> None:
        """Initialize activity service with Supabase client."""
        self.client = get_supabase_client()

    async def record_activity(
        self,
        user_id: UUID | str,
        activity_type: str,
        activity_data: dict[str, Any] | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Record an activity for a user.

        Failures are logged and swallowed so that tracking never breaks
        the operation being tracked.
        """
        row = {
            "user_id": str(user_id),
            "activity_type": activity_type,
            "activity_data": activity_data,
            "ip_address": ip_address,
            "user_agent": user_agent,
        }

        try:
            self.client.table("user_activities").insert(row).execute()
        except Exception as e:
            logger.warning("Could not record %s activity for %s: %s", activity_type, user_id, str(e))

    async def get_recent_activities(self, limit: int = 100) -> list[dict[str, Any]]:
        """Get the most recent activities with the acting profile embedded."""
        response = (
            self.client.table("user_activities")
            .select("*, profiles(id, login_id, full_name, email, role)")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )

        return response.data or []

    async def get_activities_since(self, activity_type: str, since: datetime) -> list[dict[str, Any]]:
        """Get activities of one type created at or after a point in time."""
        response = (
            self.client.table("user_activities")
            .select("id, user_id, created_at")
            .eq("activity_type", activity_type)
            .gte("created_at", since.isoformat())
            .execute()
        )

        return response.data or []

    async def count_since(self, activity_type: str, since: datetime) -> int:
        """Count activities of one type created at or after a point in time."""
        response = (
            self.client.table("user_activities")
            .select("id", count="exact")
            .eq("activity_type", activity_type)
            .gte("created_at", since.isoformat())
            .execute()
        )

        return response.count or 0
