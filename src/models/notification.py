"""Notification model type definitions for database operations."""

from datetime import datetime
from enum import Enum
from typing import TypedDict
from uuid import UUID


class NotificationType(str, Enum):
    """Notification severity values."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class Notification(TypedDict):
    """Notification table row representation."""

    id: UUID
    title: str
    content: str | None
    type: NotificationType
    is_active: bool
    created_at: datetime
    updated_at: datetime
