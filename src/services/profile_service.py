"""Profile business logic service."""

import logging
from datetime import datetime, timezone
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import ConflictError
from src.core.credentials import is_temporary
from src.core.supabase import get_supabase_client, is_unique_violation
from src.models.corporation import CorporateUserStatus
from src.models.profile import UserRole
from src.schemas.auth import PortalUser
from src.schemas.profile import UserCorporation

logger = logging.getLogger(__name__)


class ProfileService:
    """Service for reading and writing portal user profiles."""

    def __init__(self) -> None:
        """Initialize profile service with Supabase client."""
        self.client = get_supabase_client()

    @staticmethod
    def requires_initial_setup(profile: dict[str, Any]) -> bool:
        """Check whether a profile still uses generated temporary credentials."""
        return is_temporary(profile.get("login_id"))

    @classmethod
    def to_portal_user(cls, profile: dict[str, Any]) -> PortalUser:
        """Build the portal identity returned to clients from a profile row."""
        return PortalUser(
            id=profile["id"],
            login_id=profile["login_id"],
            email=profile["email"],
            full_name=profile["full_name"],
            role=profile["role"],
            contract_id=profile.get("contract_id"),
            requires_initial_setup=cls.requires_initial_setup(profile),
        )

    async def get_profile(self, profile_id: UUID) -> dict[str, Any] | None:
        """Get a profile by profile ID.

        Args:
            profile_id: The profile's UUID.

        Returns:
            dict | None: The profile data or None if not found.
        """
        response = (
            self.client.table("profiles")
            .select("*")
            .eq("id", str(profile_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None

    async def get_by_auth_user_id(self, auth_user_id: UUID) -> dict[str, Any] | None:
        """Get the profile linked to a Supabase Auth user.

        Args:
            auth_user_id: The auth user ID (JWT sub claim).

        Returns:
            dict | None: The profile data or None if not found.
        """
        response = (
            self.client.table("profiles")
            .select("*")
            .eq("auth_user_id", str(auth_user_id))
            .execute()
        )

        return response.data[0] if response.data else None

    async def get_by_login_id(self, login_id: str, active_only: bool = True) -> dict[str, Any] | None:
        """Get a profile by login ID.

        Args:
            login_id: The login ID typed on the login screen.
            active_only: Ignore deactivated profiles.

        Returns:
            dict | None: The profile data or None if not found.
        """
        query = self.client.table("profiles").select("*").eq("login_id", login_id)
        if active_only:
            query = query.eq("is_active", True)

        response = query.execute()
        return response.data[0] if response.data else None

    async def get_by_email(self, email: str) -> dict[str, Any] | None:
        """Get a profile by email address.

        Emails are stored lowercased, so the lookup is case-insensitive.
        """
        response = (
            self.client.table("profiles")
            .select("*")
            .eq("email", email.lower())
            .execute()
        )

        return response.data[0] if response.data else None

    async def email_exists(self, email: str, exclude_profile_id: UUID | None = None) -> bool:
        """Check whether an email address is already used by another profile."""
        profile = await self.get_by_email(email)
        if not profile:
            return False
        return exclude_profile_id is None or profile["id"] != str(exclude_profile_id)

    async def login_id_exists(self, login_id: str) -> bool:
        """Check whether a login ID is taken, including by inactive profiles."""
        return await self.get_by_login_id(login_id, active_only=False) is not None

    async def create_profile(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a profile row.

        Args:
            data: Column values for the new profile.

        Returns:
            dict: The created profile data.

        Raises:
            ConflictError: If the login ID or email is already registered.
        """
        profile_data = {"is_active": True, "role": UserRole.GENERAL.value, **data}

        try:
            response = self.client.table("profiles").insert(profile_data).execute()
        except Exception as e:
            if is_unique_violation(e):
                raise ConflictError(
                    f"Email address '{data.get('email')}' or login ID is already in use"
                ) from e
            raise

        return response.data[0]

    async def update_profile(self, profile_id: UUID, data: dict[str, Any]) -> dict[str, Any] | None:
        """Update columns of a profile.

        Args:
            profile_id: The profile's UUID.
            data: The columns to update.

        Returns:
            dict | None: The updated profile data or None if not found.
        """
        if not data:
            return await self.get_profile(profile_id)

        update_data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}

        try:
            response = (
                self.client.table("profiles")
                .update(update_data)
                .eq("id", str(profile_id))
                .execute()
            )
        except Exception as e:
            if is_unique_violation(e):
                raise ConflictError("Email address or login ID is already in use") from e
            raise

        return response.data[0] if response.data else None

    async def touch_last_login(self, profile_id: UUID) -> None:
        """Record the time of a successful login."""
        try:
            self.client.table("profiles").update(
                {"last_login_at": datetime.now(timezone.utc).isoformat()}
            ).eq("id", str(profile_id)).execute()
        except Exception as e:
            logger.error("Failed to update last login for %s: %s", profile_id, str(e))

    async def delete_profile(self, profile_id: UUID) -> None:
        """Hard-delete a profile row."""
        self.client.table("profiles").delete().eq("id", str(profile_id)).execute()

    async def get_user_corporations(self, profile_id: UUID) -> list[UserCorporation]:
        """Get the corporations a user is actively assigned to.

        Args:
            profile_id: The profile's UUID.

        Returns:
            list[UserCorporation]: Corporations with the user's role and status.
        """
        response = (
            self.client.table("corporate_users")
            .select("role, status, corporations(*)")
            .eq("user_id", str(profile_id))
            .eq("status", CorporateUserStatus.ACTIVE.value)
            .execute()
        )

        corporations = []
        for membership in response.data or []:
            corporation = membership.get("corporations")
            if corporation:
                corporations.append(
                    UserCorporation(
                        id=corporation["id"],
                        corporate_number=corporation["corporate_number"],
                        name=corporation["name"],
                        type=corporation.get("type"),
                        prefecture=corporation.get("prefecture"),
                        city=corporation.get("city"),
                        user_role=membership["role"],
                        user_status=membership["status"],
                    )
                )

        return corporations

    async def get_user_contract(self, profile: dict[str, Any]) -> dict[str, Any] | None:
        """Get the contract a profile is bound to.

        Args:
            profile: The profile row.

        Returns:
            dict | None: The contract data or None if the profile has no contract.
        """
        contract_id = profile.get("contract_id")
        if not contract_id:
            return None

        response = (
            self.client.table("contracts")
            .select("*")
            .eq("id", str(contract_id))
            .maybe_single()
            .execute()
        )

        return response.data if response and response.data else None
