"""Profile model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict
from uuid import UUID


class UserRole(str, Enum):
    """Portal-wide user roles matching the profiles.role column."""

    SYSTEM_ADMIN = "system_admin"
    ADMIN = "admin"
    GENERAL = "general"


class Profile(TypedDict):
    """Profile table row representation.

    Represents a portal user stored in the profiles table.
    Credentials live in Supabase Auth, linked through auth_user_id.
    """

    id: UUID
    auth_user_id: UUID
    login_id: str
    email: str
    full_name: str
    role: UserRole
    is_active: bool
    contract_id: UUID | None
    last_login_at: datetime | None
    created_at: datetime
    updated_at: datetime


class UserActivity(TypedDict):
    """User activity table row representation.

    One row per tracked event (login, logout, initial setup, ...).
    """

    id: UUID
    user_id: UUID
    activity_type: str
    activity_data: dict | None
    ip_address: str | None
    user_agent: str | None
    created_at: datetime
