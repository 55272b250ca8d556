"""Corporation API routes, including members, invitations, robots and permissions."""

from uuid import UUID

from fastapi import APIRouter, status

from src.api.deps import AdminProfile, CurrentProfile
from src.api.middleware.error_handler import NotFoundError
from src.schemas.contract import SettlementRobotCreate, SettlementRobotResponse
from src.schemas.corporation import (
    AddCorporateUserRequest,
    CorporateUserResponse,
    CorporationCreate,
    CorporationResponse,
    CorporationUpdate,
    InvitationCreate,
    InvitationCreatedResponse,
    InvitationResponse,
    UpdateCorporateUserRoleRequest,
)
from src.schemas.permission import MatrixEntryResponse, SaveMatrixRequest
from src.services.corporation_service import CorporationService
from src.services.email_service import EmailService
from src.services.invitation_service import InvitationService
from src.services.permission_service import PermissionService
from src.services.profile_service import ProfileService
from src.services.robot_service import RobotService

router = APIRouter(prefix="/corporations", tags=["corporations"])


async def _get_corporation_or_404(corporate_id: UUID) -> dict:
    corporation = await CorporationService().get_corporation(corporate_id)
    if not corporation:
        raise NotFoundError("Corporation not found")
    return corporation


@router.get(
    "",
    response_model=list[CorporationResponse],
    summary="List corporations",
    description="Corporations visible to the caller, newest first.",
)
async def list_corporations(profile: CurrentProfile) -> list[CorporationResponse]:
    """List the corporations the caller can see."""
    corporations = await CorporationService().list_for_actor(profile)
    return [CorporationResponse(**c) for c in corporations]


@router.get(
    "/lookup/{corporate_number}",
    response_model=CorporationResponse,
    summary="Look up a corporation by number",
    description="Find an already registered corporation by its 13-digit corporate number.",
    responses={404: {"description": "Not registered"}, 422: {"description": "Malformed number"}},
)
async def lookup_corporation(corporate_number: str, profile: AdminProfile) -> CorporationResponse:
    """Look up a corporation to prefill the registration form."""
    corporation = await CorporationService().get_by_number(corporate_number)
    if not corporation:
        raise NotFoundError("Corporation not registered")
    return CorporationResponse(**corporation)


@router.post(
    "",
    response_model=CorporationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a corporation",
    description="Admins become the new corporation's administrator within their contract.",
    responses={409: {"description": "Corporate number already registered"}},
)
async def register_corporation(data: CorporationCreate, actor: AdminProfile) -> CorporationResponse:
    """Register a corporation."""
    corporation = await CorporationService().register(data, actor)
    return CorporationResponse(**corporation)


@router.get(
    "/{corporate_id}",
    response_model=CorporationResponse,
    summary="Get a corporation",
)
async def get_corporation(corporate_id: UUID, profile: CurrentProfile) -> CorporationResponse:
    """Get a corporation the caller can view."""
    corporation = await _get_corporation_or_404(corporate_id)
    await PermissionService().require_view(profile, corporate_id)
    return CorporationResponse(**corporation)


@router.put(
    "/{corporate_id}",
    response_model=CorporationResponse,
    summary="Update a corporation",
    description="Corporation admins and system admins only. Rejects updates that change nothing.",
)
async def update_corporation(
    corporate_id: UUID,
    data: CorporationUpdate,
    profile: CurrentProfile,
) -> CorporationResponse:
    """Update a corporation."""
    await PermissionService().require_manage(profile, corporate_id)
    corporation = await CorporationService().update(corporate_id, data)
    return CorporationResponse(**corporation)


# Corporate users


@router.get(
    "/{corporate_id}/users",
    response_model=list[CorporateUserResponse],
    summary="List corporate users",
)
async def list_corporate_users(corporate_id: UUID, profile: CurrentProfile) -> list[CorporateUserResponse]:
    """List a corporation's users with their profiles."""
    await _get_corporation_or_404(corporate_id)
    await PermissionService().require_view(profile, corporate_id)
    return await CorporationService().list_users(corporate_id)


@router.post(
    "/{corporate_id}/users",
    status_code=status.HTTP_201_CREATED,
    response_model=CorporateUserResponse,
    summary="Add a corporate user",
)
async def add_corporate_user(
    corporate_id: UUID,
    data: AddCorporateUserRequest,
    profile: CurrentProfile,
) -> CorporateUserResponse:
    """Add a profile to a corporation."""
    await _get_corporation_or_404(corporate_id)
    await PermissionService().require_manage(profile, corporate_id)

    if not await ProfileService().get_profile(data.user_id):
        raise NotFoundError("User not found")

    membership = await CorporationService().add_user(
        corporate_id,
        data.user_id,
        data.role,
        contract_id=data.contract_id or profile.get("contract_id"),
        invited_by=profile["id"],
    )
    return CorporateUserResponse(**membership)


@router.put(
    "/{corporate_id}/users/{user_id}",
    response_model=CorporateUserResponse,
    summary="Change a corporate user's role",
    description="The last corporate administrator cannot be demoted.",
)
async def update_corporate_user_role(
    corporate_id: UUID,
    user_id: UUID,
    data: UpdateCorporateUserRoleRequest,
    profile: CurrentProfile,
) -> CorporateUserResponse:
    """Change a member's role."""
    await PermissionService().require_manage(profile, corporate_id)
    membership = await CorporationService().update_user_role(corporate_id, user_id, data.role)
    return CorporateUserResponse(**membership)


@router.delete(
    "/{corporate_id}/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a corporate user",
    description="The last corporate administrator cannot be removed.",
)
async def remove_corporate_user(corporate_id: UUID, user_id: UUID, profile: CurrentProfile) -> None:
    """Remove a member from a corporation."""
    await PermissionService().require_manage(profile, corporate_id)
    await CorporationService().remove_user(corporate_id, user_id)


# Invitations


@router.post(
    "/{corporate_id}/invitations",
    response_model=InvitationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite by email",
    description="Sends an invitation email. Rejects members and emails with a pending invitation.",
)
async def create_invitation(
    corporate_id: UUID,
    data: InvitationCreate,
    profile: CurrentProfile,
) -> InvitationCreatedResponse:
    """Invite an email address to join the corporation."""
    corporation = await _get_corporation_or_404(corporate_id)
    await PermissionService().require_manage(profile, corporate_id)

    invitation = await InvitationService().create_invitation(corporate_id, data.email, profile["id"])
    invitee = await ProfileService().get_by_email(data.email)

    email_result = await EmailService().send_invitation_email(
        to_email=invitation["email"],
        inviter_name=profile["full_name"],
        corporation_name=corporation["name"],
        invitation_id=invitation["id"],
    )

    return InvitationCreatedResponse(
        invitation=InvitationResponse(**invitation),
        invitee_name=invitee["full_name"] if invitee else None,
        email_sent=email_result["success"],
    )


@router.get(
    "/{corporate_id}/invitations",
    response_model=list[InvitationResponse],
    summary="List a corporation's invitations",
)
async def list_invitations(corporate_id: UUID, profile: CurrentProfile) -> list[InvitationResponse]:
    """List every invitation sent for a corporation."""
    await PermissionService().require_manage(profile, corporate_id)
    invitations = await InvitationService().list_corporation_invitations(corporate_id)
    return [InvitationResponse(**inv) for inv in invitations]


# Settlement robots


@router.get(
    "/{corporate_id}/robots",
    response_model=list[SettlementRobotResponse],
    summary="List settlement robots",
)
async def list_robots(corporate_id: UUID, profile: CurrentProfile) -> list[SettlementRobotResponse]:
    """List a corporation's settlement robots, newest first."""
    await PermissionService().require_view(profile, corporate_id)
    robots = await RobotService().list_robots(corporate_id)
    return [SettlementRobotResponse(**robot) for robot in robots]


@router.post(
    "/{corporate_id}/robots",
    response_model=SettlementRobotResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a settlement robot",
    description="Requires create permission on the corporation.",
)
async def create_robot(
    corporate_id: UUID,
    data: SettlementRobotCreate,
    profile: CurrentProfile,
) -> SettlementRobotResponse:
    """Create a settlement robot for one business year."""
    await _get_corporation_or_404(corporate_id)
    await PermissionService().require_create(profile, corporate_id)
    robot = await RobotService().create_robot(corporate_id, data, profile["id"])
    return SettlementRobotResponse(**robot)


# Permission matrix


@router.get(
    "/{corporate_id}/permissions",
    response_model=list[MatrixEntryResponse],
    summary="Get the permission matrix",
)
async def get_permission_matrix(corporate_id: UUID, profile: CurrentProfile) -> list[MatrixEntryResponse]:
    """Get view/create/approve flags of every manageable user on this corporation."""
    service = PermissionService()
    await service.require_manage(profile, corporate_id)
    return await service.get_matrix(corporate_id, profile)


@router.put(
    "/{corporate_id}/permissions",
    response_model=list[MatrixEntryResponse],
    summary="Replace the permission matrix",
    description="Rows without any flag are dropped; users with a permission become members.",
)
async def save_permission_matrix(
    corporate_id: UUID,
    data: SaveMatrixRequest,
    profile: CurrentProfile,
) -> list[MatrixEntryResponse]:
    """Replace the corporation's permission matrix."""
    service = PermissionService()
    await service.require_manage(profile, corporate_id)
    return await service.save_matrix(corporate_id, data.permissions, profile)
