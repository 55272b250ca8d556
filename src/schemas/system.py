"""System administration Pydantic schemas."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.schemas.corporation import MemberProfile


class SystemStats(BaseModel):
    """Portal-wide statistics for the system administrator dashboard."""

    model_config = ConfigDict(from_attributes=True)

    total_users: int = Field(description="Number of profiles")
    active_users: int = Field(description="Number of active profiles")
    total_corporations: int = Field(description="Number of registered corporations")
    total_notifications: int = Field(description="Number of notifications")
    today_logins: int = Field(description="Logins since UTC midnight")
    monthly_growth: float = Field(description="User growth this month vs last month, in percent")
    latency: dict[str, Any] = Field(default_factory=dict, description="Request latency statistics")


class ActivityResponse(BaseModel):
    """A single tracked user activity."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Activity ID")
    user_id: UUID = Field(description="Profile ID")
    activity_type: str = Field(description="Activity type")
    activity_data: dict[str, Any] | None = Field(default=None, description="Extra activity data")
    ip_address: str | None = Field(default=None, description="Client IP address")
    user_agent: str | None = Field(default=None, description="Client user agent")
    created_at: datetime = Field(description="When the activity happened")
    profile: MemberProfile | None = Field(default=None, description="Acting user")


class DailyLoginCount(BaseModel):
    """Number of logins on one day."""

    day: date = Field(description="Calendar day (UTC)")
    count: int = Field(description="Logins on that day")


class UserEngagement(BaseModel):
    """Aggregated activity for one user."""

    user_id: UUID = Field(description="Profile ID")
    full_name: str | None = Field(default=None, description="User full name")
    email: str | None = Field(default=None, description="User email")
    login_count: int = Field(description="Number of logins")
    total_activities: int = Field(description="Number of activities")


class EngagementResponse(BaseModel):
    """Engagement analytics for the system administrator."""

    model_config = ConfigDict(from_attributes=True)

    activities: list[ActivityResponse] = Field(default_factory=list, description="Recent activities")
    total_activities: int = Field(description="Number of activities returned")
    daily_logins: list[DailyLoginCount] = Field(default_factory=list, description="Logins per day")
    by_type: dict[str, int] = Field(default_factory=dict, description="Recent activity counts per activity type")
    user_stats: list[UserEngagement] = Field(default_factory=list, description="Per-user activity")
