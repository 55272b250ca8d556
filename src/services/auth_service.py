"""Authentication business logic service."""

import logging
from typing import Any
from uuid import UUID

from src.api.middleware.error_handler import (
    AuthenticationError,
    ConflictError,
    RateLimitError,
    ValidationError,
)
from src.core.config import get_settings
from src.core.rate_limiter import get_login_throttle
from src.core.supabase import create_auth_client
from src.models.profile import UserRole
from src.services.activity_service import ActivityService
from src.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid login ID or password"


class AuthService:
    """Service for login, registration and Supabase Auth user management."""

    def __init__(self) -> None:
        """Initialize auth service with isolated Supabase client.

        Uses create_auth_client() instead of get_supabase_client() so
        sign-in calls never touch the singleton client's Authorization header.
        """
        self.client = create_auth_client()
        self.settings = get_settings()
        self.profiles = ProfileService()

    def check_password_policy(self, password: str) -> None:
        """Validate a new password against the configured policy.

        Raises:
            ValidationError: If the password is too short.
        """
        minimum = self.settings.min_password_length
        if len(password) < minimum:
            raise ValidationError(f"Password must be at least {minimum} characters")

    # Supabase Auth user management

    async def create_auth_user(self, email: str, password: str, full_name: str) -> str:
        """Create a confirmed Supabase Auth user.

        Args:
            email: The user's email address.
            password: The initial password.
            full_name: Stored in user metadata.

        Returns:
            str: The new auth user ID.

        Raises:
            ConflictError: If the email is already registered in Supabase Auth.
            ValidationError: If Supabase rejects the user.
        """
        try:
            response = self.client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": {"full_name": full_name},
                }
            )
        except Exception as e:
            error_msg = str(e)
            logger.error("Auth user creation failed for %s: %s", email, error_msg)

            if "already" in error_msg.lower():
                raise ConflictError(f"Email address '{email}' is already in use") from e
            if "password" in error_msg.lower():
                raise ValidationError("Password is too weak. Please use a stronger password.") from e

            raise ValidationError(f"Failed to create user account: {error_msg}") from e

        if not response.user:
            raise ValidationError("Failed to create user account")

        return str(response.user.id)

    async def update_auth_user(
        self,
        auth_user_id: UUID | str,
        email: str | None = None,
        password: str | None = None,
    ) -> None:
        """Update the email and/or password of a Supabase Auth user.

        Raises:
            ValidationError: If Supabase rejects the update.
        """
        attributes: dict[str, Any] = {}
        if email is not None:
            attributes["email"] = email
            attributes["email_confirm"] = True
        if password is not None:
            attributes["password"] = password

        if not attributes:
            return

        try:
            self.client.auth.admin.update_user_by_id(str(auth_user_id), attributes)
        except Exception as e:
            error_msg = str(e)
            logger.error("Auth user update failed for %s: %s", auth_user_id, error_msg)

            if "weak" in error_msg.lower() and "password" in error_msg.lower():
                raise ValidationError("New password is too weak. Please use a stronger password.") from e
            if "already" in error_msg.lower():
                raise ConflictError("Email address is already in use") from e

            raise ValidationError(f"Failed to update credentials: {error_msg}") from e

    async def delete_auth_user(self, auth_user_id: UUID | str) -> None:
        """Delete a Supabase Auth user."""
        self.client.auth.admin.delete_user(str(auth_user_id))
        logger.info("Auth user deleted: %s", auth_user_id)

    async def verify_password(self, email: str, password: str) -> dict[str, Any] | None:
        """Check a password by signing in with it.

        Returns:
            dict | None: Session tokens when the password is correct, otherwise None.
        """
        try:
            response = self.client.auth.sign_in_with_password(
                {
                    "email": email,
                    "password": password,
                }
            )
        except Exception as e:
            error_msg = str(e).lower()
            if "invalid" in error_msg or "credentials" in error_msg:
                return None
            logger.error("Password verification failed: %s", str(e))
            raise AuthenticationError("Failed to verify credentials") from e

        if not response.user or not response.session:
            return None

        session = response.session
        return {
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "expires_in": session.expires_in or 3600,
        }

    # Login / logout

    async def login(
        self,
        login_id: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> dict[str, Any]:
        """Login with login ID and password.

        Resolves the login ID to an active profile, verifies the password
        against Supabase Auth with the profile's email, and records the login.

        Args:
            login_id: The user's login ID.
            password: The user's password.
            ip_address: Client IP for the activity log.
            user_agent: Client user agent for the activity log.

        Returns:
            dict: Tokens and the portal user.

        Raises:
            RateLimitError: If too many attempts were made for this login ID.
            AuthenticationError: If the login ID or password is wrong.
        """
        throttle = get_login_throttle()
        throttle_key = f"login:{login_id.lower()}"
        decision = await throttle.hit(throttle_key)
        if not decision.allowed:
            raise RateLimitError(
                message="Too many login attempts. Please wait before trying again.",
                retry_after=decision.retry_after,
                limit=throttle.policy.max_attempts,
            )

        profile = await self.profiles.get_by_login_id(login_id)
        if not profile:
            logger.info("Login rejected for unknown or inactive login ID: %s", login_id)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        tokens = await self.verify_password(profile["email"], password)
        if not tokens:
            logger.info("Login rejected for %s: wrong password", login_id)
            raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

        await throttle.reset(throttle_key)
        await self.profiles.touch_last_login(profile["id"])
        await ActivityService().record_activity(
            profile["id"],
            "login",
            ip_address=ip_address,
            user_agent=user_agent,
        )

        logger.info("User logged in: %s", profile["id"])

        return {
            **tokens,
            "user": ProfileService.to_portal_user(profile),
        }

    async def logout(self, access_token: str, profile_id: UUID | None = None) -> dict[str, Any]:
        """Logout user by invalidating their session.

        Args:
            access_token: User's access token.
            profile_id: Profile to record the logout activity for.

        Returns:
            dict: Logout response.
        """
        try:
            self.client.auth.admin.sign_out(access_token)
            logger.info("User logged out")
        except Exception as e:
            # The client drops its tokens regardless
            logger.error("Logout failed: %s", str(e))

        if profile_id:
            await ActivityService().record_activity(profile_id, "logout")

        return {"message": "Logged out successfully"}

    async def refresh_token(self, refresh_token: str) -> dict[str, Any]:
        """Refresh access token using refresh token.

        Args:
            refresh_token: The refresh token.

        Returns:
            dict: New access token, refresh token, and expiration.

        Raises:
            AuthenticationError: If refresh fails.
        """
        try:
            response = self.client.auth.refresh_session(refresh_token)
        except Exception as e:
            logger.error("Token refresh failed: %s", str(e))
            raise AuthenticationError("Invalid or expired refresh token") from e

        if not response.session:
            raise AuthenticationError("Failed to refresh token")

        session = response.session
        return {
            "access_token": session.access_token,
            "refresh_token": session.refresh_token,
            "expires_in": session.expires_in or 3600,
        }

    # Registration

    async def register(
        self,
        login_id: str,
        email: str,
        full_name: str,
        password: str,
    ) -> dict[str, Any]:
        """Register a new general user.

        Args:
            login_id: Desired login ID.
            email: User's email address.
            full_name: User's full name.
            password: User's password (confirmation already checked).

        Returns:
            dict: The created profile.

        Raises:
            ValidationError: If the password policy is violated.
            ConflictError: If the login ID or email is already in use.
        """
        email = email.lower()
        self.check_password_policy(password)

        if await self.profiles.login_id_exists(login_id):
            raise ConflictError(f"Login ID '{login_id}' is already in use")
        if await self.profiles.email_exists(email):
            raise ConflictError(f"Email address '{email}' is already in use")

        auth_user_id = await self.create_auth_user(email, password, full_name)

        try:
            profile = await self.profiles.create_profile(
                {
                    "auth_user_id": auth_user_id,
                    "login_id": login_id,
                    "email": email,
                    "full_name": full_name,
                    "role": UserRole.GENERAL.value,
                }
            )
        except Exception:
            await self.delete_auth_user(auth_user_id)
            raise

        logger.info("User registered: %s", profile["id"])
        return profile
