"""System administrator statistics and engagement analytics."""

import logging
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from src.api.middleware.latency_logging import get_latency_stats
from src.core.supabase import get_supabase_client
from src.schemas.system import (
    ActivityResponse,
    DailyLoginCount,
    EngagementResponse,
    SystemStats,
    UserEngagement,
)
from src.services.activity_service import ActivityService

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 100


def _start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def month_over_month_growth(this_month: int, last_month: int) -> float:
    """Percentage change of new users this month against last month.

    Returns 100.0 when last month had no new users but this month does,
    and 0.0 when both months are empty.
    """
    if last_month == 0:
        return 100.0 if this_month else 0.0
    return round((this_month - last_month) / last_month * 100, 1)


class SystemService:
    """Service computing portal-wide statistics."""

    def __init__(self) -> None:
        """Initialize system service with Supabase client."""
        self.client = get_supabase_client()
        self.activities = ActivityService()

    def _count(self, table: str, **filters: Any) -> int:
        query = self.client.table(table).select("id", count="exact")
        for column, value in filters.items():
            query = query.eq(column, value)
        return query.execute().count or 0

    def _count_profiles_created(self, start: datetime, end: datetime) -> int:
        response = (
            self.client.table("profiles")
            .select("id", count="exact")
            .gte("created_at", start.isoformat())
            .lt("created_at", end.isoformat())
            .execute()
        )
        return response.count or 0

    async def get_stats(self, now: datetime | None = None) -> SystemStats:
        """Collect dashboard statistics."""
        now = now or datetime.now(timezone.utc)
        today = _start_of_day(now.date())
        this_month = today.replace(day=1)
        last_month = (this_month - timedelta(days=1)).replace(day=1)

        growth = month_over_month_growth(
            self._count_profiles_created(this_month, now),
            self._count_profiles_created(last_month, this_month),
        )
        latency = get_latency_stats()

        return SystemStats(
            total_users=self._count("profiles"),
            active_users=self._count("profiles", is_active=True),
            total_corporations=self._count("corporations"),
            total_notifications=self._count("notifications"),
            today_logins=await self.activities.count_since("login", today),
            monthly_growth=growth,
            latency={**latency.get_stats(), "routes": latency.get_stats_by_path()},
        )

    async def get_engagement(self, days: int = 7, now: datetime | None = None) -> EngagementResponse:
        """Collect recent activity, daily logins and per-user stats.

        Args:
            days: Number of days of daily login counts, ending today.
        """
        now = now or datetime.now(timezone.utc)
        first_day = now.date() - timedelta(days=days - 1)

        recent = await self.activities.get_recent_activities(RECENT_ACTIVITY_LIMIT)
        logins = await self.activities.get_activities_since("login", _start_of_day(first_day))

        per_day = Counter(datetime.fromisoformat(row["created_at"].replace("Z", "+00:00")).date() for row in logins)
        window = [first_day + timedelta(days=offset) for offset in range(days)]
        daily_logins = [DailyLoginCount(day=day, count=per_day.get(day, 0)) for day in window]

        activities = []
        users: dict[str, dict[str, Any]] = {}
        for row in recent:
            profile = row.get("profiles")
            activities.append(ActivityResponse(**{k: v for k, v in row.items() if k != "profiles"}, profile=profile))

            stats = users.setdefault(
                row["user_id"],
                {
                    "user_id": row["user_id"],
                    "full_name": (profile or {}).get("full_name"),
                    "email": (profile or {}).get("email"),
                    "login_count": 0,
                    "total_activities": 0,
                },
            )
            stats["total_activities"] += 1
            if row["activity_type"] == "login":
                stats["login_count"] += 1

        user_stats = sorted(
            (UserEngagement(**stats) for stats in users.values()),
            key=lambda s: s.total_activities,
            reverse=True,
        )

        return EngagementResponse(
            activities=activities,
            total_activities=len(activities),
            daily_logins=daily_logins,
            by_type=dict(Counter(row["activity_type"] for row in recent)),
            user_stats=user_stats,
        )
