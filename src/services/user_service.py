"""User management service for administrators."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.core.credentials import generate_temp_login_id, generate_temp_password
from src.core.supabase import get_supabase_client
from src.models.profile import UserRole
from src.services.auth_service import AuthService
from src.services.permission_service import is_system_admin
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


class UserService:
    """Service for administrators creating and managing portal users."""

    def __init__(self) -> None:
        """Initialize user service with Supabase client."""
        self.client = get_supabase_client()
        self.profiles = ProfileService()

    async def list_users(self, actor: dict[str, Any]) -> list[dict[str, Any]]:
        """List the profiles an administrator manages, newest first.

        System admins see every profile; admins see their own contract.
        """
        query = self.client.table("profiles").select("*")

        if not is_system_admin(actor):
            if not actor.get("contract_id"):
                return []
            query = query.eq("contract_id", str(actor["contract_id"]))

        response = query.order("created_at", desc=True).execute()
        return response.data or []

    async def get_managed_user(self, actor: dict[str, Any], user_id: UUID) -> dict[str, Any]:
        """Get a profile the actor is allowed to manage.

        Raises:
            NotFoundError: If the profile does not exist.
            AuthorizationError: If an admin targets a user outside their contract.
        """
        user = await self.profiles.get_profile(user_id)
        if not user:
            raise NotFoundError("User not found")

        if not is_system_admin(actor):
            if not actor.get("contract_id") or user.get("contract_id") != actor["contract_id"]:
                raise AuthorizationError("You can only manage users in your own contract")

        return user

    async def create_managed_user(
        self,
        email: str,
        full_name: str,
        role: UserRole,
        contract_id: UUID | str | None,
    ) -> tuple[dict[str, Any], str, str]:
        """Create a user with generated temporary credentials.

        Args:
            email: The new user's email.
            full_name: The new user's name.
            role: Portal role of the new user.
            contract_id: Contract the user is bound to.

        Returns:
            tuple: (profile, temp login ID, temp password).

        Raises:
            ConflictError: If the email is already registered.
        """
        email = email.lower()
        if await self.profiles.email_exists(email):
            raise ConflictError(f"Email address '{email}' is already registered")

        temp_login_id = generate_temp_login_id()
        temp_password = generate_temp_password()

        auth = AuthService()
        auth_user_id = await auth.create_auth_user(email, temp_password, full_name)

        try:
            profile = await self.profiles.create_profile(
                {
                    "auth_user_id": auth_user_id,
                    "login_id": temp_login_id,
                    "email": email,
                    "full_name": full_name,
                    "role": role.value,
                    "contract_id": str(contract_id) if contract_id else None,
                }
            )
        except Exception:
            await auth.delete_auth_user(auth_user_id)
            raise

        logger.info("Managed user created: %s (%s)", profile["id"], role.value)
        return profile, temp_login_id, temp_password

    async def create_user(
        self,
        actor: dict[str, Any],
        email: str,
        full_name: str,
    ) -> tuple[dict[str, Any], str, str]:
        """Create a general user in the actor's contract.

        Raises:
            AuthorizationError: If the actor is not a contract admin.
            ValidationError: If the admin has no contract.
        """
        if actor.get("role") != UserRole.ADMIN.value:
            raise AuthorizationError("Only contract administrators can create users")
        if not actor.get("contract_id"):
            raise ValidationError("Your account is not linked to a contract")

        return await self.create_managed_user(email, full_name, UserRole.GENERAL, actor["contract_id"])

    async def deactivate_user(self, actor: dict[str, Any], user_id: UUID) -> None:
        """Soft-delete a user.

        Raises:
            ValidationError: If the actor targets themselves.
        """
        await self.bulk_deactivate(actor, [user_id])

    async def bulk_deactivate(self, actor: dict[str, Any], user_ids: list[UUID]) -> int:
        """Soft-delete several users.

        Returns:
            int: Number of users deactivated.

        Raises:
            ValidationError: If the actor is among the targets.
        """
        ids = sorted({str(uid) for uid in user_ids})
        if str(actor["id"]) in ids:
            raise ValidationError("You cannot deactivate your own account")

        for user_id in ids:
            await self.get_managed_user(actor, UUID(user_id))

        (
            self.client.table("profiles")
            .update({"is_active": False, "updated_at": datetime.now(timezone.utc).isoformat()})
            .in_("id", ids)
            .execute()
        )

        logger.info("Deactivated %d users by %s", len(ids), actor["id"])
        return len(ids)

    async def update_role(self, actor: dict[str, Any], user_id: UUID, role: UserRole) -> dict[str, Any]:
        """Change a user's portal role.

        Raises:
            ValidationError: If the actor targets themselves.
            NotFoundError: If the user does not exist.
        """
        if str(user_id) == str(actor["id"]):
            raise ValidationError("You cannot change your own role")

        user = await self.get_managed_user(actor, user_id)
        updated = await self.profiles.update_profile(user_id, {"role": role.value})

        logger.info("Role of %s changed from %s to %s", user_id, user["role"], role.value)
        return updated or {**user, "role": role.value}
