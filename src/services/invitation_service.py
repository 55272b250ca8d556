"""Corporation invitations: issuing, listing and answering them."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.core.config import get_settings
from src.core.supabase import get_supabase_client
from src.models.corporation import CorporateRole, CorporateUserStatus, InvitationStatus

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str) -> datetime:
    """Parse a PostgREST timestamp into an aware datetime."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expired(invitation: dict[str, Any]) -> bool:
    """Check whether an invitation's expiry time has passed."""
    return _parse_timestamp(invitation["expires_at"]) < datetime.now(timezone.utc)


class InvitationService:
    """Service for managing corporation invitations."""

    def __init__(self) -> None:
        """Bind to the shared client and the configured invitation lifetime."""
        self.client = get_supabase_client()
        self.expiration_days = get_settings().invitation_expiry_days

    async def create_invitation(
        self,
        corporate_id: UUID,
        email: str,
        invited_by: UUID,
    ) -> dict[str, Any]:
        """Create a new invitation to join a corporation.

        Args:
            corporate_id: The corporation's UUID.
            email: Email address to invite.
            invited_by: Profile ID of the inviter.

        Returns:
            dict: The created invitation data.

        Raises:
            ConflictError: If the email already belongs to an active member,
                or a pending invitation for it is still valid.
        """
        email = email.lower()

        if await self._is_active_member(corporate_id, email):
            raise ConflictError(f"{email} is already a member of this corporation")

        if await self._has_open_invitation(corporate_id, email):
            raise ConflictError(f"A pending invitation for {email} already exists")

        expires_at = datetime.now(timezone.utc) + timedelta(days=self.expiration_days)

        invitation_data = {
            "corporate_id": str(corporate_id),
            "email": email,
            "invited_by": str(invited_by),
            "status": InvitationStatus.PENDING.value,
            "expires_at": expires_at.isoformat(),
        }

        response = (
            self.client.table("invitations")
            .insert(invitation_data)
            .execute()
        )

        invitation = response.data[0]
        logger.info("Invitation %s created for %s to %s", invitation["id"], email, corporate_id)
        return invitation

    async def _is_active_member(self, corporate_id: UUID, email: str) -> bool:
        response = (
            self.client.table("corporate_users")
            .select("id, profiles!inner(email)")
            .eq("corporate_id", str(corporate_id))
            .eq("status", CorporateUserStatus.ACTIVE.value)
            .eq("profiles.email", email)
            .execute()
        )
        return bool(response.data)

    async def _has_open_invitation(self, corporate_id: UUID, email: str) -> bool:
        response = (
            self.client.table("invitations")
            .select("id")
            .eq("corporate_id", str(corporate_id))
            .eq("email", email)
            .eq("status", InvitationStatus.PENDING.value)
            .gt("expires_at", datetime.now(timezone.utc).isoformat())
            .execute()
        )
        return bool(response.data)

    async def get_invitation(self, invitation_id: UUID) -> dict[str, Any] | None:
        """Invitation with its corporation's name and number, or None."""
        response = (
            self.client.table("invitations")
            .select("*, corporations(name, corporate_number)")
            .eq("id", str(invitation_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def list_corporation_invitations(
        self,
        corporate_id: UUID,
        status: InvitationStatus | None = None,
    ) -> list[dict[str, Any]]:
        """List all invitations for a corporation, newest first.

        Args:
            corporate_id: The corporation's UUID.
            status: Optional filter by invitation status.
        """
        query = (
            self.client.table("invitations")
            .select("*")
            .eq("corporate_id", str(corporate_id))
        )

        if status:
            query = query.eq("status", status.value)

        response = query.order("created_at", desc=True).execute()

        return response.data or []

    async def list_user_invitations(self, email: str) -> list[dict[str, Any]]:
        """List pending, unexpired invitations for a user's email.

        Args:
            email: The user's email address.

        Returns:
            list[dict]: Invitations with corporation name and number.
        """
        response = (
            self.client.table("invitations")
            .select("*, corporations(name, corporate_number)")
            .eq("email", email.lower())
            .eq("status", InvitationStatus.PENDING.value)
            .gt("expires_at", datetime.now(timezone.utc).isoformat())
            .order("created_at", desc=True)
            .execute()
        )

        return response.data or []

    async def _get_answerable(self, invitation_id: UUID, user_email: str) -> dict[str, Any]:
        """Load an invitation the caller may answer.

        Raises:
            NotFoundError: If invitation not found.
            AuthorizationError: If it was sent to another email.
            ValidationError: If it is no longer pending or has expired.
        """
        invitation = await self.get_invitation(invitation_id)

        if not invitation:
            raise NotFoundError("Invitation not found")

        if invitation["email"].lower() != user_email.lower():
            raise AuthorizationError("This invitation was sent to a different email address")

        if invitation["status"] != InvitationStatus.PENDING.value:
            raise ValidationError(f"Invitation has already been {invitation['status']}")

        if is_expired(invitation):
            await self._set_status(invitation, InvitationStatus.EXPIRED)
            raise ValidationError("Invitation has expired")

        return invitation

    async def _set_status(self, invitation: dict[str, Any], status: InvitationStatus) -> dict[str, Any]:
        """Update the invitation status and return the full row."""
        update_data: dict[str, Any] = {"status": status.value}
        if status != InvitationStatus.EXPIRED:
            update_data["responded_at"] = datetime.now(timezone.utc).isoformat()

        response = (
            self.client.table("invitations")
            .update(update_data)
            .eq("id", str(invitation["id"]))
            .execute()
        )

        return response.data[0] if response.data else {**invitation, **update_data}

    async def accept_invitation(
        self,
        invitation_id: UUID,
        profile_id: UUID,
        user_email: str,
    ) -> dict[str, Any]:
        """Join the corporation as an active general member and mark the invitation accepted.

        Callers who are already members are not inserted again.
        """
        invitation = await self._get_answerable(invitation_id, user_email)
        corporate_id = invitation["corporate_id"]

        existing = (
            self.client.table("corporate_users")
            .select("id")
            .eq("corporate_id", corporate_id)
            .eq("user_id", str(profile_id))
            .execute()
        )

        if not existing.data:
            self.client.table("corporate_users").insert(
                {
                    "corporate_id": corporate_id,
                    "user_id": str(profile_id),
                    "role": CorporateRole.GENERAL.value,
                    "status": CorporateUserStatus.ACTIVE.value,
                    "invited_by": invitation.get("invited_by"),
                    "invited_at": invitation.get("created_at"),
                    "joined_at": datetime.now(timezone.utc).isoformat(),
                }
            ).execute()

        updated = await self._set_status(invitation, InvitationStatus.ACCEPTED)
        logger.info("Invitation %s accepted by %s", invitation_id, profile_id)
        return updated

    async def decline_invitation(
        self,
        invitation_id: UUID,
        user_email: str,
    ) -> dict[str, Any]:
        """Mark an invitation declined."""
        invitation = await self._get_answerable(invitation_id, user_email)

        updated = await self._set_status(invitation, InvitationStatus.DECLINED)
        logger.info("Invitation %s declined", invitation_id)
        return updated
