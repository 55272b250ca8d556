"""Corporation model type definitions for database operations."""

from datetime import date, datetime
from enum import Enum
from typing import TypedDict
from uuid import UUID


class CorporateRole(str, Enum):
    """Role of a user inside a single corporation."""

    ADMIN = "admin"
    GENERAL = "general"


class CorporateUserStatus(str, Enum):
    """Corporate membership status values."""

    ACTIVE = "active"
    INVITED = "invited"
    PENDING = "pending"


class InvitationStatus(str, Enum):
    """Invitation status values matching database enum."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class Corporation(TypedDict):
    """Corporation table row representation.

    Identified by the 13-digit corporate number issued by the National Tax Agency.
    """

    id: UUID
    corporate_number: str
    name: str
    furigana: str | None
    type: str
    prefecture: str | None
    city: str | None
    address: str | None
    overseas_location: str | None
    closure_date: date | None
    closure_reason: str | None
    successor_number: str | None
    english_name: str | None
    english_prefecture: str | None
    english_city: str | None
    english_overseas_location: str | None
    created_at: datetime
    updated_at: datetime


class CorporateUser(TypedDict):
    """Corporate user table row representation.

    Represents a membership relationship between a profile and a corporation.
    """

    id: UUID
    corporate_id: UUID
    user_id: UUID
    role: CorporateRole
    status: CorporateUserStatus
    contract_id: UUID | None
    invited_by: UUID | None
    invited_at: datetime | None
    joined_at: datetime | None
    created_at: datetime


class CorporatePermission(TypedDict):
    """Corporate permission table row representation."""

    id: UUID
    user_id: UUID
    corporate_id: UUID
    view_permission: bool
    create_permission: bool
    approve_permission: bool


class Invitation(TypedDict):
    """Invitation table row representation.

    Represents an invitation to join a corporation.
    """

    id: UUID
    corporate_id: UUID
    email: str
    invited_by: UUID
    status: InvitationStatus
    expires_at: datetime
    responded_at: datetime | None
    created_at: datetime
