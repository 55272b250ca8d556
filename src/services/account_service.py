"""Account settings service for the signed-in user."""

import logging
from typing import Any

from src.api.middleware.error_handler import AuthorizationError, ConflictError, ValidationError
from src.core.credentials import is_temporary
from src.schemas.profile import InitialSetupRequest, ProfileUpdate
from src.services.activity_service import ActivityService
from src.services.auth_service import AuthService
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

DELETE_CONFIRMATION = "DELETE"


class AccountService:
    """Service for users managing their own account."""

    def __init__(self) -> None:
        """Initialize account service."""
        self.profiles = ProfileService()
        self.auth = AuthService()

    async def update_settings(self, profile: dict[str, Any], data: ProfileUpdate) -> dict[str, Any]:
        """Update the caller's name and/or email.

        The Supabase Auth email is changed first so a rejected email never
        leaves the profile out of sync.

        Raises:
            ConflictError: If the new email belongs to another profile.
        """
        update_data = data.model_dump(exclude_unset=True, exclude_none=True)

        new_email = update_data.get("email")
        if new_email is not None:
            new_email = new_email.lower()
            update_data["email"] = new_email
            if new_email == profile["email"]:
                update_data.pop("email")
            else:
                if await self.profiles.email_exists(new_email, exclude_profile_id=profile["id"]):
                    raise ConflictError(f"Email address '{new_email}' is already in use")
                await self.auth.update_auth_user(profile["auth_user_id"], email=new_email)

        if not update_data:
            return profile

        updated = await self.profiles.update_profile(profile["id"], update_data)
        logger.info("Account settings updated: %s", profile["id"])
        return updated or profile

    async def change_password(
        self,
        profile: dict[str, Any],
        current_password: str,
        new_password: str,
    ) -> None:
        """Change the caller's password after verifying the current one.

        Raises:
            ValidationError: If the new password is too short, unchanged, or
                the current password is wrong.
        """
        self.auth.check_password_policy(new_password)

        if new_password == current_password:
            raise ValidationError("New password must be different from the current password")

        if not await self.auth.verify_password(profile["email"], current_password):
            raise ValidationError("Current password is incorrect")

        await self.auth.update_auth_user(profile["auth_user_id"], password=new_password)
        logger.info("Password changed: %s", profile["id"])

    async def delete_account(self, profile: dict[str, Any], confirmation: str) -> None:
        """Delete the caller's profile and their Supabase Auth user.

        Raises:
            ValidationError: If the confirmation text is not DELETE.
        """
        if confirmation != DELETE_CONFIRMATION:
            raise ValidationError(f"Type {DELETE_CONFIRMATION} to confirm account deletion")

        await self.profiles.delete_profile(profile["id"])
        if profile.get("auth_user_id"):
            await self.auth.delete_auth_user(profile["auth_user_id"])

        logger.info("Account deleted: %s", profile["id"])

    async def complete_initial_setup(
        self,
        profile: dict[str, Any],
        data: InitialSetupRequest,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> dict[str, Any]:
        """Replace temporary credentials with the user's own.

        Raises:
            AuthorizationError: If the account has already been set up.
            ValidationError: If the new credentials are invalid.
            ConflictError: If the login ID or email is taken.
        """
        if not ProfileService.requires_initial_setup(profile):
            raise AuthorizationError("Initial setup has already been completed")

        self.auth.check_password_policy(data.new_password)
        if is_temporary(data.new_password):
            raise ValidationError("Password must not start with the temporary prefix")
        if is_temporary(data.new_login_id):
            raise ValidationError("Login ID must not start with the temporary prefix")

        email = str(data.email).lower()

        if await self.profiles.login_id_exists(data.new_login_id):
            raise ConflictError(f"Login ID '{data.new_login_id}' is already in use")
        if await self.profiles.email_exists(email, exclude_profile_id=profile["id"]):
            raise ConflictError(f"Email address '{email}' is already in use")

        await self.auth.update_auth_user(
            profile["auth_user_id"],
            email=email if email != profile["email"] else None,
            password=data.new_password,
        )

        updated = await self.profiles.update_profile(
            profile["id"],
            {
                "login_id": data.new_login_id,
                "full_name": data.full_name,
                "email": email,
            },
        )

        await ActivityService().record_activity(
            profile["id"],
            "initial_setup",
            activity_data={"new_login_id": data.new_login_id},
            ip_address=ip_address,
            user_agent=user_agent,
        )

        logger.info("Initial setup completed: %s", profile["id"])
        return updated or profile
