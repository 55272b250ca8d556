"""Invitation API routes for accepting/declining invitations."""

from uuid import UUID

from fastapi import APIRouter

from src.api.deps import CurrentProfile
from src.schemas.corporation import InvitationResponse, InvitationWithCorporation
from src.services.invitation_service import InvitationService

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.get(
    "",
    response_model=list[InvitationWithCorporation],
    summary="List my invitations",
    description="Returns pending, unexpired invitations for the authenticated user's email.",
)
async def list_my_invitations(profile: CurrentProfile) -> list[InvitationWithCorporation]:
    """List all pending invitations for the current user.

    Args:
        profile: The caller's profile.

    Returns:
        list[InvitationWithCorporation]: Pending invitations with corporation info.
    """
    service = InvitationService()
    invitations = await service.list_user_invitations(profile["email"])

    result = []
    for inv in invitations:
        corporation = inv.pop("corporations", None) or {}
        result.append(
            InvitationWithCorporation(
                **inv,
                corporation_name=corporation.get("name", "Unknown"),
                corporate_number=corporation.get("corporate_number"),
            )
        )

    return result


@router.post(
    "/{invitation_id}/accept",
    response_model=InvitationResponse,
    summary="Accept invitation",
    description="Accept an invitation and become an active member of the corporation.",
)
async def accept_invitation(invitation_id: UUID, profile: CurrentProfile) -> InvitationResponse:
    """Accept an invitation.

    Args:
        invitation_id: The invitation's UUID.
        profile: The caller's profile.

    Returns:
        InvitationResponse: The accepted invitation.
    """
    service = InvitationService()
    invitation = await service.accept_invitation(
        invitation_id=invitation_id,
        profile_id=profile["id"],
        user_email=profile["email"],
    )
    return InvitationResponse(**invitation)


@router.post(
    "/{invitation_id}/decline",
    response_model=InvitationResponse,
    summary="Decline invitation",
    description="Decline an invitation to join a corporation.",
)
async def decline_invitation(invitation_id: UUID, profile: CurrentProfile) -> InvitationResponse:
    """Decline an invitation.

    Args:
        invitation_id: The invitation's UUID.
        profile: The caller's profile.

    Returns:
        InvitationResponse: The declined invitation.
    """
    service = InvitationService()
    invitation = await service.decline_invitation(
        invitation_id=invitation_id,
        user_email=profile["email"],
    )
    return InvitationResponse(**invitation)
