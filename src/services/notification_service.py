"""Notification business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import NotFoundError
from src.core.supabase import get_supabase_client
from src.schemas.notification import NotificationCreate, NotificationUpdate

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for portal-wide notifications."""

    def __init__(self) -> None:
        """Initialize notification service with Supabase client."""
        self.client = get_supabase_client()

    async def list_active(self, limit: int | None = None) -> list[dict[str, Any]]:
        """List active notifications, newest first."""
        query = (
            self.client.table("notifications")
            .select("*")
            .eq("is_active", True)
            .order("created_at", desc=True)
        )
        if limit:
            query = query.limit(limit)

        response = query.execute()
        return response.data or []

    async def list_all(self) -> list[dict[str, Any]]:
        """List every notification, newest first."""
        response = (
            self.client.table("notifications")
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )

        return response.data or []

    async def get_notification(self, notification_id: UUID) -> dict[str, Any]:
        """Get a notification by ID.

        Raises:
            NotFoundError: If the notification does not exist.
        """
        response = (
            self.client.table("notifications")
            .select("*")
            .eq("id", str(notification_id))
            .maybe_single()
            .execute()
        )

        if not response or not response.data:
            raise NotFoundError("Notification not found")
        return response.data

    async def create(self, data: NotificationCreate) -> dict[str, Any]:
        """Publish a notification."""
        payload = {**data.model_dump(mode="json"), "is_active": True}

        response = self.client.table("notifications").insert(payload).execute()

        notification = response.data[0]
        logger.info("Notification created: %s", notification["id"])
        return notification

    async def update(self, notification_id: UUID, data: NotificationUpdate) -> dict[str, Any]:
        """Apply a partial update to a notification."""
        current = await self.get_notification(notification_id)

        changes = data.model_dump(mode="json", exclude_unset=True)
        if not changes:
            return current

        return await self._write(notification_id, changes)

    async def toggle(self, notification_id: UUID) -> dict[str, Any]:
        """Flip a notification between active and inactive."""
        current = await self.get_notification(notification_id)
        return await self._write(notification_id, {"is_active": not current["is_active"]})

    async def delete(self, notification_id: UUID) -> None:
        """Delete a notification."""
        await self.get_notification(notification_id)
        self.client.table("notifications").delete().eq("id", str(notification_id)).execute()
        logger.info("Notification deleted: %s", notification_id)

    async def _write(self, notification_id: UUID, changes: dict[str, Any]) -> dict[str, Any]:
        changes = {**changes, "updated_at": datetime.now(timezone.utc).isoformat()}
        response = (
            self.client.table("notifications")
            .update(changes)
            .eq("id", str(notification_id))
            .execute()
        )

        if not response.data:
            raise NotFoundError("Notification not found")
        return response.data[0]
