"""Profile and account settings API routes."""

from fastapi import APIRouter

from src.api.deps import Client, CurrentProfile
from src.api.middleware.error_handler import NotFoundError
from src.schemas.auth import PortalUser
from src.schemas.common import MessageResponse
from src.schemas.contract import ContractResponse
from src.schemas.permission import UserPermissionResponse
from src.schemas.profile import (
    ChangePasswordRequest,
    DeleteAccountRequest,
    InitialSetupRequest,
    ProfileResponse,
    ProfileUpdate,
    UserCorporation,
)
from src.services.account_service import AccountService
from src.services.permission_service import PermissionService
from src.services.profile_service import ProfileService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get(
    "/me",
    response_model=ProfileResponse,
    summary="Get current user's profile",
    description="Returns the authenticated user's profile information.",
)
async def get_my_profile(profile: CurrentProfile) -> ProfileResponse:
    """Get the authenticated user's profile."""
    return ProfileResponse(**profile)


@router.put(
    "/me",
    response_model=ProfileResponse,
    summary="Update current user's profile",
    description="Updates the name and/or email of the authenticated user. The sign-in email follows the profile.",
    responses={409: {"description": "Email already in use"}},
)
async def update_my_profile(data: ProfileUpdate, profile: CurrentProfile) -> ProfileResponse:
    """Update the authenticated user's profile.

    Args:
        data: Fields to update.
        profile: The caller's profile.

    Returns:
        ProfileResponse: The updated profile.
    """
    updated = await AccountService().update_settings(profile, data)
    return ProfileResponse(**updated)


@router.post(
    "/me/password",
    response_model=MessageResponse,
    summary="Change password",
    description="Change the password after verifying the current one.",
)
async def change_password(data: ChangePasswordRequest, profile: CurrentProfile) -> MessageResponse:
    """Change the authenticated user's password."""
    await AccountService().change_password(profile, data.current_password, data.new_password)
    return MessageResponse(message="Password changed successfully")


@router.delete(
    "/me",
    response_model=MessageResponse,
    summary="Delete account",
    description="Permanently delete the caller's account. The body must confirm with DELETE.",
)
async def delete_my_account(data: DeleteAccountRequest, profile: CurrentProfile) -> MessageResponse:
    """Delete the authenticated user's account."""
    await AccountService().delete_account(profile, data.confirmation)
    return MessageResponse(message="Account deleted")


@router.post(
    "/me/initial-setup",
    response_model=PortalUser,
    summary="Complete initial setup",
    description="Replace generated temporary credentials with the user's own login ID and password.",
    responses={403: {"description": "Initial setup already completed"}},
)
async def complete_initial_setup(
    data: InitialSetupRequest,
    profile: CurrentProfile,
    client: Client,
) -> PortalUser:
    """Complete the first-login setup.

    Returns:
        PortalUser: The updated identity, no longer requiring setup.
    """
    updated = await AccountService().complete_initial_setup(
        profile,
        data,
        ip_address=client.ip_address,
        user_agent=client.user_agent,
    )
    return ProfileService.to_portal_user(updated)


@router.get(
    "/me/corporations",
    response_model=list[UserCorporation],
    summary="Get my corporations",
    description="Corporations the caller is actively assigned to, with their role in each.",
)
async def get_my_corporations(profile: CurrentProfile) -> list[UserCorporation]:
    """List the caller's corporations."""
    return await ProfileService().get_user_corporations(profile["id"])


@router.get(
    "/me/contract",
    response_model=ContractResponse,
    summary="Get my contract",
    description="The contract the caller's account belongs to.",
    responses={404: {"description": "No contract"}},
)
async def get_my_contract(profile: CurrentProfile) -> ContractResponse:
    """Get the caller's contract."""
    contract = await ProfileService().get_user_contract(profile)
    if not contract:
        raise NotFoundError("No contract is linked to your account")
    return ContractResponse(**contract)


@router.get(
    "/me/permissions",
    response_model=list[UserPermissionResponse],
    summary="Get my corporate permissions",
    description="The caller's view/create/approve permissions per corporation.",
)
async def get_my_permissions(profile: CurrentProfile) -> list[UserPermissionResponse]:
    """List the caller's permission rows."""
    return await PermissionService().get_user_permissions(profile["id"])
