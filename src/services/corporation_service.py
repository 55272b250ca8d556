"""Corporation business logic service."""

import logging
import re
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import ConflictError, NotFoundError, ValidationError
from src.core.supabase import get_supabase_client, is_unique_violation
from src.models.corporation import CorporateRole, CorporateUserStatus
from src.models.profile import UserRole
from src.schemas.corporation import (
    CorporateUserResponse,
    CorporationCreate,
    CorporationUpdate,
    MemberProfile,
)

logger = logging.getLogger(__name__)

CORPORATE_NUMBER_RE = re.compile(r"^\d{13}$")


def validate_corporate_number(corporate_number: str) -> str:
    """Check that a corporate number is exactly 13 digits.

    Raises:
        ValidationError: If the number is malformed.
    """
    if not CORPORATE_NUMBER_RE.match(corporate_number or ""):
        raise ValidationError("Corporate number must be exactly 13 digits")
    return corporate_number


class CorporationService:
    """Service for managing corporations and their users."""

    def __init__(self) -> None:
        """Initialize corporation service with Supabase client."""
        self.client = get_supabase_client()

    # Corporations

    async def list_for_actor(self, actor: dict[str, Any]) -> list[dict[str, Any]]:
        """List the corporations visible to a profile, newest first.

        System admins see every corporation. Admins see the corporations
        linked to their contract. General users see their active assignments.
        """
        role = actor.get("role")
        query = self.client.table("corporations").select("*")

        if role != UserRole.SYSTEM_ADMIN.value:
            corporate_ids = await self._linked_corporate_ids(actor)
            if not corporate_ids:
                return []
            query = query.in_("id", corporate_ids)

        response = query.order("created_at", desc=True).execute()
        return response.data or []

    async def _linked_corporate_ids(self, actor: dict[str, Any]) -> list[str]:
        query = self.client.table("corporate_users").select("corporate_id")

        if actor.get("role") == UserRole.ADMIN.value:
            if not actor.get("contract_id"):
                return []
            query = query.eq("contract_id", str(actor["contract_id"]))
        else:
            query = query.eq("user_id", str(actor["id"])).eq("status", CorporateUserStatus.ACTIVE.value)

        response = query.execute()
        return sorted({row["corporate_id"] for row in response.data or []})

    async def get_corporation(self, corporate_id: UUID | str) -> dict[str, Any] | None:
        """Get a corporation by ID.

        Returns:
            dict | None: The corporation data or None if not found.
        """
        response = (
            self.client.table("corporations")
            .select("*")
            .eq("id", str(corporate_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def get_by_number(self, corporate_number: str) -> dict[str, Any] | None:
        """Get a corporation by its 13-digit corporate number.

        Raises:
            ValidationError: If the number is malformed.
        """
        validate_corporate_number(corporate_number)

        response = (
            self.client.table("corporations")
            .select("*")
            .eq("corporate_number", corporate_number)
            .execute()
        )

        return response.data[0] if response.data else None

    async def register(self, data: CorporationCreate, actor: dict[str, Any]) -> dict[str, Any]:
        """Register a corporation.

        When the actor is a contract admin they become the corporation's
        first admin member, bound to their contract.

        Raises:
            ConflictError: If the corporate number is already registered.
        """
        if await self.get_by_number(data.corporate_number):
            raise ConflictError(f"Corporate number {data.corporate_number} is already registered")

        try:
            response = (
                self.client.table("corporations")
                .insert(data.model_dump(mode="json"))
                .execute()
            )
        except Exception as e:
            if is_unique_violation(e):
                raise ConflictError(f"Corporate number {data.corporate_number} is already registered") from e
            raise

        corporation = response.data[0]

        if actor.get("role") == UserRole.ADMIN.value:
            await self.add_user(
                corporation["id"],
                actor["id"],
                CorporateRole.ADMIN,
                contract_id=actor.get("contract_id"),
                invited_by=actor["id"],
            )

        logger.info("Corporation registered: %s (%s)", corporation["id"], data.corporate_number)
        return corporation

    async def update(self, corporate_id: UUID, data: CorporationUpdate) -> dict[str, Any]:
        """Apply a partial update to a corporation.

        Raises:
            NotFoundError: If the corporation does not exist.
            ValidationError: If no supplied field differs from the stored value.
        """
        current = await self.get_corporation(corporate_id)
        if not current:
            raise NotFoundError("Corporation not found")

        supplied = data.model_dump(mode="json", exclude_unset=True)
        changes = {key: value for key, value in supplied.items() if current.get(key) != value}
        if not changes:
            raise ValidationError("No changes to update")

        changes["updated_at"] = datetime.now(timezone.utc).isoformat()
        response = (
            self.client.table("corporations")
            .update(changes)
            .eq("id", str(corporate_id))
            .execute()
        )

        logger.info("Corporation updated: %s (%s)", corporate_id, ", ".join(sorted(supplied)))
        return response.data[0] if response.data else {**current, **changes}

    # Corporate users

    async def list_users(self, corporate_id: UUID) -> list[CorporateUserResponse]:
        """List a corporation's users with embedded profiles."""
        response = (
            self.client.table("corporate_users")
            .select("*, profiles(id, login_id, full_name, email, role)")
            .eq("corporate_id", str(corporate_id))
            .order("created_at")
            .execute()
        )

        users = []
        for row in response.data or []:
            profile = row.get("profiles")
            users.append(
                CorporateUserResponse(
                    id=row["id"],
                    corporate_id=row["corporate_id"],
                    user_id=row["user_id"],
                    role=row["role"],
                    status=row["status"],
                    contract_id=row.get("contract_id"),
                    joined_at=row.get("joined_at"),
                    profile=MemberProfile(**profile) if profile else None,
                )
            )

        return users

    async def get_corporate_user(self, corporate_id: UUID | str, user_id: UUID | str) -> dict[str, Any] | None:
        """Get a membership row regardless of status."""
        response = (
            self.client.table("corporate_users")
            .select("*")
            .eq("corporate_id", str(corporate_id))
            .eq("user_id", str(user_id))
            .execute()
        )

        return response.data[0] if response.data else None

    async def add_user(
        self,
        corporate_id: UUID | str,
        user_id: UUID | str,
        role: CorporateRole = CorporateRole.GENERAL,
        contract_id: UUID | str | None = None,
        invited_by: UUID | str | None = None,
    ) -> dict[str, Any]:
        """Add a profile to a corporation as an active member.

        Raises:
            ConflictError: If the profile is already a member.
        """
        if await self.get_corporate_user(corporate_id, user_id):
            raise ConflictError("User is already a member of this corporation")

        row = {
            "corporate_id": str(corporate_id),
            "user_id": str(user_id),
            "role": role.value,
            "status": CorporateUserStatus.ACTIVE.value,
            "contract_id": str(contract_id) if contract_id else None,
            "invited_by": str(invited_by) if invited_by else None,
            "joined_at": datetime.now(timezone.utc).isoformat(),
        }

        try:
            response = self.client.table("corporate_users").insert(row).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise ConflictError("User is already a member of this corporation") from e
            raise

        logger.info("User %s added to corporation %s as %s", user_id, corporate_id, role.value)
        return response.data[0]

    async def count_admins(self, corporate_id: UUID | str) -> int:
        """Count the active admins of a corporation."""
        response = (
            self.client.table("corporate_users")
            .select("id", count="exact")
            .eq("corporate_id", str(corporate_id))
            .eq("role", CorporateRole.ADMIN.value)
            .eq("status", CorporateUserStatus.ACTIVE.value)
            .execute()
        )

        return response.count or 0

    async def _require_member(self, corporate_id: UUID, user_id: UUID) -> dict[str, Any]:
        membership = await self.get_corporate_user(corporate_id, user_id)
        if not membership:
            raise NotFoundError("User is not a member of this corporation")
        return membership

    async def remove_user(self, corporate_id: UUID, user_id: UUID) -> None:
        """Remove a member from a corporation.

        Raises:
            NotFoundError: If the profile is not a member.
            ValidationError: If the member is the last admin.
        """
        membership = await self._require_member(corporate_id, user_id)

        if membership["role"] == CorporateRole.ADMIN.value and await self.count_admins(corporate_id) <= 1:
            raise ValidationError("Cannot remove the last administrator of a corporation")

        (
            self.client.table("corporate_users")
            .delete()
            .eq("corporate_id", str(corporate_id))
            .eq("user_id", str(user_id))
            .execute()
        )

        logger.info("User %s removed from corporation %s", user_id, corporate_id)

    async def update_user_role(self, corporate_id: UUID, user_id: UUID, role: CorporateRole) -> dict[str, Any]:
        """Change a member's corporate role.

        Raises:
            NotFoundError: If the profile is not a member.
            ValidationError: If the change would demote the last admin.
        """
        membership = await self._require_member(corporate_id, user_id)

        if (
            membership["role"] == CorporateRole.ADMIN.value
            and role != CorporateRole.ADMIN
            and await self.count_admins(corporate_id) <= 1
        ):
            raise ValidationError("Cannot demote the last administrator of a corporation")

        response = (
            self.client.table("corporate_users")
            .update({"role": role.value})
            .eq("corporate_id", str(corporate_id))
            .eq("user_id", str(user_id))
            .execute()
        )

        logger.info("User %s role in corporation %s set to %s", user_id, corporate_id, role.value)
        return response.data[0] if response.data else {**membership, "role": role.value}
