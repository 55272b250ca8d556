"""User management API routes for administrators."""

from uuid import UUID

from fastapi import APIRouter, status

from src.api.deps import AdminProfile, SystemAdminProfile
from src.schemas.common import MessageResponse
from src.schemas.permission import SaveUserPermissionsRequest, UserPermissionResponse
from src.schemas.profile import (
    BulkAssignRequest,
    BulkUserRequest,
    CreateUserRequest,
    CreateUserResponse,
    ProfileResponse,
    UpdateRoleRequest,
)
from src.services.email_service import EmailService
from src.services.permission_service import PermissionService
from src.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "",
    response_model=list[ProfileResponse],
    summary="List users",
    description="Admins see the users of their contract; system admins see everyone.",
)
async def list_users(actor: AdminProfile) -> list[ProfileResponse]:
    """List managed users, newest first."""
    users = await UserService().list_users(actor)
    return [ProfileResponse(**user) for user in users]


@router.post(
    "",
    response_model=CreateUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    description="Create a general user in the admin's contract with temporary credentials.",
    responses={409: {"description": "Email already registered"}},
)
async def create_user(data: CreateUserRequest, actor: AdminProfile) -> CreateUserResponse:
    """Create a user and email them their temporary credentials.

    A failed email does not fail the request; the credentials are returned
    so the admin can pass them on.
    """
    user, temp_login_id, temp_password = await UserService().create_user(actor, data.email, data.full_name)

    email_result = await EmailService().send_welcome_email(
        to_email=user["email"],
        full_name=user["full_name"],
        temp_login_id=temp_login_id,
        temp_password=temp_password,
    )

    return CreateUserResponse(
        temp_login_id=temp_login_id,
        temp_password=temp_password,
        user=ProfileResponse(**user),
        email_sent=email_result["success"],
    )


@router.post(
    "/bulk-deactivate",
    response_model=MessageResponse,
    summary="Deactivate users",
    description="Deactivate several users at once. The caller cannot include themselves.",
)
async def bulk_deactivate(data: BulkUserRequest, actor: AdminProfile) -> MessageResponse:
    """Deactivate several users."""
    count = await UserService().bulk_deactivate(actor, data.user_ids)
    return MessageResponse(message=f"{count} users deactivated")


@router.post(
    "/bulk-assign",
    response_model=MessageResponse,
    summary="Assign corporations",
    description="Make every user an active member with view permission of every corporation.",
)
async def bulk_assign(data: BulkAssignRequest, actor: AdminProfile) -> MessageResponse:
    """Assign corporations to users in bulk."""
    pairs = await PermissionService().bulk_assign(data.user_ids, data.corporate_ids, actor)
    return MessageResponse(message=f"{pairs} assignments processed")


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Deactivate a user",
    description="Soft-delete a user. The caller cannot deactivate themselves.",
)
async def deactivate_user(user_id: UUID, actor: AdminProfile) -> None:
    """Deactivate one user."""
    await UserService().deactivate_user(actor, user_id)


@router.put(
    "/{user_id}/role",
    response_model=ProfileResponse,
    summary="Change a user's role",
    description="System administrators only. The caller cannot change their own role.",
)
async def update_role(user_id: UUID, data: UpdateRoleRequest, actor: SystemAdminProfile) -> ProfileResponse:
    """Change a user's portal role."""
    user = await UserService().update_role(actor, user_id, data.role)
    return ProfileResponse(**user)


@router.get(
    "/{user_id}/assignments",
    response_model=list[UUID],
    summary="Get a user's corporations",
    description="IDs of corporations the user is actively assigned to.",
)
async def get_assignments(user_id: UUID, actor: AdminProfile) -> list[UUID]:
    """List the corporations a user is assigned to."""
    await UserService().get_managed_user(actor, user_id)
    ids = await PermissionService().get_assigned_corporate_ids(user_id)
    return [UUID(cid) for cid in ids]


@router.get(
    "/{user_id}/permissions",
    response_model=list[UserPermissionResponse],
    summary="Get a user's permissions",
)
async def get_user_permissions(user_id: UUID, actor: AdminProfile) -> list[UserPermissionResponse]:
    """List a user's per-corporation permissions."""
    await UserService().get_managed_user(actor, user_id)
    return await PermissionService().get_user_permissions(user_id)


@router.put(
    "/{user_id}/permissions",
    response_model=list[UserPermissionResponse],
    summary="Replace a user's permissions",
    description="Every corporation in the rows must be one the user is assigned to.",
)
async def save_user_permissions(
    user_id: UUID,
    data: SaveUserPermissionsRequest,
    actor: AdminProfile,
) -> list[UserPermissionResponse]:
    """Replace all permission rows of a user."""
    await UserService().get_managed_user(actor, user_id)
    return await PermissionService().save_user_permissions(user_id, data.permissions)
