"""Database model type definitions."""

from src.models.contract import Contract, ContractStatus, SettlementRobot
from src.models.corporation import (
    CorporatePermission,
    CorporateRole,
    CorporateUser,
    CorporateUserStatus,
    Corporation,
    Invitation,
    InvitationStatus,
)
from src.models.notification import Notification, NotificationType
from src.models.profile import Profile, UserActivity, UserRole

__all__ = [
    "Profile",
    "UserActivity",
    "UserRole",
    "Corporation",
    "CorporateUser",
    "CorporatePermission",
    "CorporateRole",
    "CorporateUserStatus",
    "Invitation",
    "InvitationStatus",
    "Notification",
    "NotificationType",
    "Contract",
    "ContractStatus",
    "SettlementRobot",
]
