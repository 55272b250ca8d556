"""Corporate permission business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import AuthorizationError, ValidationError
from src.core.supabase import get_supabase_client
from src.models.corporation import CorporateRole, CorporateUserStatus
from src.models.profile import UserRole
from src.schemas.permission import (
    MatrixEntryInput,
    MatrixEntryResponse,
    UserPermissionInput,
    UserPermissionResponse,
)

logger = logging.getLogger(__name__)


def is_system_admin(profile: dict[str, Any]) -> bool:
    """Check whether a profile has the system administrator role."""
    return profile.get("role") == UserRole.SYSTEM_ADMIN.value


class PermissionService:
    """Service deciding and storing what users may do per corporation."""

    def __init__(self) -> None:
        """Initialize permission service with Supabase client."""
        self.client = get_supabase_client()

    # Lookups

    async def get_membership(self, profile_id: UUID | str, corporate_id: UUID | str) -> dict[str, Any] | None:
        """Get a profile's active membership in a corporation."""
        response = (
            self.client.table("corporate_users")
            .select("*")
            .eq("user_id", str(profile_id))
            .eq("corporate_id", str(corporate_id))
            .eq("status", CorporateUserStatus.ACTIVE.value)
            .execute()
        )

        return response.data[0] if response.data else None

    async def get_permission_row(self, profile_id: UUID | str, corporate_id: UUID | str) -> dict[str, Any] | None:
        """Get the explicit permission row of a profile on a corporation."""
        response = (
            self.client.table("corporate_permissions")
            .select("*")
            .eq("user_id", str(profile_id))
            .eq("corporate_id", str(corporate_id))
            .execute()
        )

        return response.data[0] if response.data else None

    async def get_assigned_corporate_ids(self, profile_id: UUID | str) -> list[str]:
        """Get the IDs of corporations a profile is actively assigned to."""
        response = (
            self.client.table("corporate_users")
            .select("corporate_id")
            .eq("user_id", str(profile_id))
            .eq("status", CorporateUserStatus.ACTIVE.value)
            .execute()
        )

        return [row["corporate_id"] for row in response.data or []]

    # Checks

    async def can_view(self, profile: dict[str, Any], corporate_id: UUID | str) -> bool:
        """Check whether a profile may see a corporation and its robots."""
        if is_system_admin(profile):
            return True

        if await self.get_membership(profile["id"], corporate_id):
            return True

        row = await self.get_permission_row(profile["id"], corporate_id)
        return bool(row and row.get("view_permission"))

    async def can_create(self, profile: dict[str, Any], corporate_id: UUID | str) -> bool:
        """Check whether a profile may create settlement robots for a corporation."""
        return await self._has_flag(profile, corporate_id, "create_permission")

    async def can_approve(self, profile: dict[str, Any], corporate_id: UUID | str) -> bool:
        """Check whether a profile may approve settlement robots for a corporation."""
        return await self._has_flag(profile, corporate_id, "approve_permission")

    async def can_manage(self, profile: dict[str, Any], corporate_id: UUID | str) -> bool:
        """Check whether a profile may manage a corporation's members and settings."""
        if is_system_admin(profile):
            return True

        membership = await self.get_membership(profile["id"], corporate_id)
        return bool(membership and membership.get("role") == CorporateRole.ADMIN.value)

    async def _has_flag(self, profile: dict[str, Any], corporate_id: UUID | str, flag: str) -> bool:
        if await self.can_manage(profile, corporate_id):
            return True

        row = await self.get_permission_row(profile["id"], corporate_id)
        return bool(row and row.get(flag))

    async def require_view(self, profile: dict[str, Any], corporate_id: UUID | str) -> None:
        """Raise AuthorizationError unless the profile can view the corporation."""
        if not await self.can_view(profile, corporate_id):
            raise AuthorizationError("You do not have access to this corporation")

    async def require_create(self, profile: dict[str, Any], corporate_id: UUID | str) -> None:
        """Raise AuthorizationError unless the profile can create robots."""
        if not await self.can_create(profile, corporate_id):
            raise AuthorizationError("You do not have permission to create settlement robots here")

    async def require_manage(self, profile: dict[str, Any], corporate_id: UUID | str) -> None:
        """Raise AuthorizationError unless the profile can manage the corporation."""
        if not await self.can_manage(profile, corporate_id):
            raise AuthorizationError("Only corporation administrators can perform this action")

    # Per-user permissions

    async def get_user_permissions(self, user_id: UUID | str) -> list[UserPermissionResponse]:
        """Get a user's permission rows with corporation names."""
        response = (
            self.client.table("corporate_permissions")
            .select("*, corporations(name)")
            .eq("user_id", str(user_id))
            .execute()
        )

        permissions = []
        for row in response.data or []:
            corporation = row.get("corporations") or {}
            permissions.append(
                UserPermissionResponse(
                    id=row.get("id"),
                    corporate_id=row["corporate_id"],
                    corporate_name=corporation.get("name") or "Unknown",
                    view=bool(row.get("view_permission")),
                    create=bool(row.get("create_permission")),
                    approve=bool(row.get("approve_permission")),
                )
            )

        return permissions

    async def save_user_permissions(
        self,
        user_id: UUID | str,
        permissions: list[UserPermissionInput],
    ) -> list[UserPermissionResponse]:
        """Replace every permission row of a user.

        Raises:
            ValidationError: If the user has no assignments, or a row names a
                corporation the user is not assigned to.
        """
        assigned = set(await self.get_assigned_corporate_ids(user_id))
        if not assigned:
            raise ValidationError("This user has no assigned corporations. Assign corporations first.")

        unassigned = sorted({str(p.corporate_id) for p in permissions} - assigned)
        if unassigned:
            raise ValidationError(
                "Permissions can only be set for assigned corporations",
                details=[{"loc": ["permissions"], "msg": cid, "type": "not_assigned"} for cid in unassigned],
            )

        self.client.table("corporate_permissions").delete().eq("user_id", str(user_id)).execute()

        rows = [
            {
                "user_id": str(user_id),
                "corporate_id": str(p.corporate_id),
                "view_permission": p.view,
                "create_permission": p.create,
                "approve_permission": p.approve,
            }
            for p in permissions
        ]
        if rows:
            self.client.table("corporate_permissions").insert(rows).execute()

        logger.info("Saved %d permission rows for user %s", len(rows), user_id)
        return await self.get_user_permissions(user_id)

    # Corporation permission matrix

    async def get_matrix(self, corporate_id: UUID | str, actor: dict[str, Any]) -> list[MatrixEntryResponse]:
        """Build the permission matrix of a corporation.

        Lists every active profile (only the actor's contract for admins)
        with its flags on the corporation, false where no row exists.
        """
        query = (
            self.client.table("profiles")
            .select("id, full_name, email, contract_id")
            .eq("is_active", True)
        )
        if not is_system_admin(actor):
            if not actor.get("contract_id"):
                return []
            query = query.eq("contract_id", str(actor["contract_id"]))

        profiles = query.order("full_name").execute().data or []

        rows_response = (
            self.client.table("corporate_permissions")
            .select("*")
            .eq("corporate_id", str(corporate_id))
            .execute()
        )
        by_user = {row["user_id"]: row for row in rows_response.data or []}

        matrix = []
        for profile in profiles:
            row = by_user.get(profile["id"], {})
            matrix.append(
                MatrixEntryResponse(
                    user_id=profile["id"],
                    user_name=profile.get("full_name"),
                    email=profile.get("email"),
                    view=bool(row.get("view_permission")),
                    create=bool(row.get("create_permission")),
                    approve=bool(row.get("approve_permission")),
                )
            )

        return matrix

    async def save_matrix(
        self,
        corporate_id: UUID | str,
        entries: list[MatrixEntryInput],
        actor: dict[str, Any],
    ) -> list[MatrixEntryResponse]:
        """Replace the permission matrix of a corporation.

        Rows without any flag are dropped. Every user left with a permission
        becomes an active member of the corporation.

        Raises:
            AuthorizationError: If an admin submits users outside their contract.
        """
        granted = [entry for entry in entries if entry.any_granted]

        if not is_system_admin(actor):
            await self._check_contract_users(actor, [entry.user_id for entry in granted])

        self.client.table("corporate_permissions").delete().eq("corporate_id", str(corporate_id)).execute()

        if granted:
            self.client.table("corporate_permissions").insert(
                [
                    {
                        "user_id": str(entry.user_id),
                        "corporate_id": str(corporate_id),
                        "view_permission": entry.view,
                        "create_permission": entry.create,
                        "approve_permission": entry.approve,
                    }
                    for entry in granted
                ]
            ).execute()

            await self.ensure_memberships(
                [entry.user_id for entry in granted],
                [corporate_id],
                actor,
            )

        logger.info("Saved permission matrix for corporation %s (%d rows)", corporate_id, len(granted))
        return await self.get_matrix(corporate_id, actor)

    # Assignment

    async def ensure_memberships(
        self,
        user_ids: list[UUID | str],
        corporate_ids: list[UUID | str],
        actor: dict[str, Any],
    ) -> None:
        """Make every user an active general member of every corporation.

        Existing memberships are left untouched.
        """
        now = datetime.now(timezone.utc).isoformat()
        rows = [
            {
                "user_id": str(user_id),
                "corporate_id": str(corporate_id),
                "role": CorporateRole.GENERAL.value,
                "status": CorporateUserStatus.ACTIVE.value,
                "contract_id": str(actor["contract_id"]) if actor.get("contract_id") else None,
                "invited_by": str(actor["id"]),
                "joined_at": now,
            }
            for user_id in user_ids
            for corporate_id in corporate_ids
        ]

        self.client.table("corporate_users").upsert(
            rows,
            on_conflict="corporate_id,user_id",
            ignore_duplicates=True,
        ).execute()

    async def bulk_assign(
        self,
        user_ids: list[UUID],
        corporate_ids: list[UUID],
        actor: dict[str, Any],
    ) -> int:
        """Assign every user to every corporation with view-only permission.

        Returns:
            int: Number of (user, corporation) pairs processed.

        Raises:
            ValidationError: If either list is empty.
            AuthorizationError: If an admin targets users or corporations
                outside their contract.
        """
        if not user_ids or not corporate_ids:
            raise ValidationError("Select at least one user and one corporation")

        if not is_system_admin(actor):
            await self._check_contract_users(actor, user_ids)
            await self._check_contract_corporations(actor, corporate_ids)

        await self.ensure_memberships(user_ids, corporate_ids, actor)

        self.client.table("corporate_permissions").upsert(
            [
                {
                    "user_id": str(user_id),
                    "corporate_id": str(corporate_id),
                    "view_permission": True,
                    "create_permission": False,
                    "approve_permission": False,
                }
                for user_id in user_ids
                for corporate_id in corporate_ids
            ],
            on_conflict="user_id,corporate_id",
            ignore_duplicates=True,
        ).execute()

        pairs = len(user_ids) * len(corporate_ids)
        logger.info("Bulk assigned %d users to %d corporations", len(user_ids), len(corporate_ids))
        return pairs

    async def _check_contract_users(self, actor: dict[str, Any], user_ids: list[UUID | str]) -> None:
        """Raise AuthorizationError unless every user belongs to the actor's contract."""
        if not user_ids:
            return

        contract_id = actor.get("contract_id")
        if not contract_id:
            raise AuthorizationError("You can only manage users in your own contract")

        response = (
            self.client.table("profiles")
            .select("id")
            .in_("id", [str(uid) for uid in user_ids])
            .eq("contract_id", str(contract_id))
            .execute()
        )
        found = {row["id"] for row in response.data or []}

        if {str(uid) for uid in user_ids} - found:
            raise AuthorizationError("You can only manage users in your own contract")

    async def _check_contract_corporations(self, actor: dict[str, Any], corporate_ids: list[UUID | str]) -> None:
        """Raise AuthorizationError unless every corporation is linked to the actor's contract."""
        contract_id = actor.get("contract_id")
        if not contract_id:
            raise AuthorizationError("You can only assign corporations linked to your contract")

        response = (
            self.client.table("corporate_users")
            .select("corporate_id")
            .eq("contract_id", str(contract_id))
            .in_("corporate_id", [str(cid) for cid in corporate_ids])
            .execute()
        )
        linked = {row["corporate_id"] for row in response.data or []}

        if {str(cid) for cid in corporate_ids} - linked:
            raise AuthorizationError("You can only assign corporations linked to your contract")
