"""Notification API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from src.api.deps import CurrentProfile, SystemAdminProfile
from src.schemas.notification import NotificationCreate, NotificationResponse, NotificationUpdate
from src.services.notification_service import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "",
    response_model=list[NotificationResponse],
    summary="List active notifications",
    description="Active notifications for every signed-in user, newest first.",
)
async def list_active_notifications(
    profile: CurrentProfile,
    limit: int | None = Query(default=None, ge=1, le=100, description="Maximum number of notifications"),
) -> list[NotificationResponse]:
    """List active notifications."""
    notifications = await NotificationService().list_active(limit)
    return [NotificationResponse(**n) for n in notifications]


@router.get(
    "/all",
    response_model=list[NotificationResponse],
    summary="List all notifications",
    description="System administrators only. Includes inactive notifications.",
)
async def list_all_notifications(actor: SystemAdminProfile) -> list[NotificationResponse]:
    """List every notification."""
    notifications = await NotificationService().list_all()
    return [NotificationResponse(**n) for n in notifications]


@router.post(
    "",
    response_model=NotificationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a notification",
)
async def create_notification(data: NotificationCreate, actor: SystemAdminProfile) -> NotificationResponse:
    """Publish a notification. It is active immediately."""
    notification = await NotificationService().create(data)
    return NotificationResponse(**notification)


@router.put(
    "/{notification_id}",
    response_model=NotificationResponse,
    summary="Update a notification",
)
async def update_notification(
    notification_id: UUID,
    data: NotificationUpdate,
    actor: SystemAdminProfile,
) -> NotificationResponse:
    """Edit a notification."""
    notification = await NotificationService().update(notification_id, data)
    return NotificationResponse(**notification)


@router.post(
    "/{notification_id}/toggle",
    response_model=NotificationResponse,
    summary="Toggle a notification",
    description="Flip a notification between active and inactive.",
)
async def toggle_notification(notification_id: UUID, actor: SystemAdminProfile) -> NotificationResponse:
    """Activate or deactivate a notification."""
    notification = await NotificationService().toggle(notification_id)
    return NotificationResponse(**notification)


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a notification",
)
async def delete_notification(notification_id: UUID, actor: SystemAdminProfile) -> None:
    """Delete a notification."""
    await NotificationService().delete(notification_id)
