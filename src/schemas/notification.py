"""Notification Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from src.models.notification import NotificationType


def _require_text(value: str | None) -> str | None:
    """Reject titles that are empty after trimming."""
    if value is not None and not value.strip():
        raise ValueError("Title is required")
    return value.strip() if value is not None else None


class NotificationCreate(BaseModel):
    """Schema for publishing a notification."""

    model_config = ConfigDict(from_attributes=True)

    title: str = Field(..., max_length=255, description="Notification title")
    content: str | None = Field(default=None, description="Notification body")
    type: NotificationType = Field(default=NotificationType.INFO, description="Notification type")

    _check_title = field_validator("title")(_require_text)


class NotificationUpdate(BaseModel):
    """Schema for editing a notification.

    All fields are optional for partial updates.
    """

    model_config = ConfigDict(from_attributes=True)

    title: str | None = Field(default=None, max_length=255, description="Notification title")
    content: str | None = Field(default=None, description="Notification body")
    type: NotificationType | None = Field(default=None, description="Notification type")
    is_active: bool | None = Field(default=None, description="Whether the notification is shown")

    _check_title = field_validator("title")(_require_text)

    @field_validator("title", "type", "is_active", mode="before")
    @classmethod
    def not_null(cls, value: Any, info: ValidationInfo) -> Any:
        """Omit a field to keep it; only content may be cleared."""
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value


class NotificationResponse(BaseModel):
    """Schema for notification API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID = Field(description="Notification unique identifier")
    title: str = Field(description="Notification title")
    content: str | None = Field(default=None, description="Notification body")
    type: NotificationType = Field(description="Notification type")
    is_active: bool = Field(description="Whether the notification is shown")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime | None = Field(default=None, description="Last update timestamp")
