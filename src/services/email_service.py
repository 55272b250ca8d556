"""Email service using Resend for transactional emails."""

import logging
from html import escape
from typing import Any

import resend

from src.core.config import get_settings

logger = logging.getLogger(__name__)

PRODUCT_NAME = "Settlement Robot"


class EmailService:
    """Service for sending transactional emails via Resend."""

    def __init__(self) -> None:
        """Initialize email service with Resend API key."""
        settings = get_settings()
        resend.api_key = settings.resend_api_key
        self.enabled = settings.email_enabled
        self.from_email = settings.email_from_address
        self.frontend_url = settings.frontend_url
        self.expiry_days = settings.invitation_expiry_days

    def _send(self, to_email: str, subject: str, html: str, text: str, kind: str) -> dict[str, Any]:
        """Send one email, never raising.

        Returns:
            dict: ``success`` flag plus the Resend email ID or the error.
        """
        if not self.enabled:
            logger.info("Email disabled, skipping %s email to %s", kind, to_email)
            return {"success": False, "error": "Email is not configured"}

        try:
            response = resend.Emails.send({
                "from": self.from_email,
                "to": [to_email],
                "subject": subject,
                "html": html,
                "text": text,
            })

            logger.info("%s email sent to %s, id: %s", kind.capitalize(), to_email, response.get("id"))
            return {"success": True, "email_id": response.get("id")}

        except Exception as e:
            logger.error("Failed to send %s email to %s: %s", kind, to_email, str(e))
            return {"success": False, "error": str(e)}

    async def send_invitation_email(
        self,
        to_email: str,
        inviter_name: str,
        corporation_name: str,
        invitation_id: str,
    ) -> dict[str, Any]:
        """Send a corporation invitation email.

        Args:
            to_email: Recipient email address.
            inviter_name: Name of the person who sent the invite.
            corporation_name: Name of the corporation being invited to.
            invitation_id: UUID of the invitation for the accept link.

        Returns:
            dict: Send result with the Resend email ID.
        """
        accept_url = f"{self.frontend_url}/invitations/{invitation_id}"
        inviter = escape(inviter_name)
        corporation = escape(corporation_name)

        html_content = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Invitation to {corporation}</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #1e3a8a; font-size: 22px;">Invitation to {corporation}</h1>
    <p><strong>{inviter}</strong> has invited you to work on the settlement of <strong>{corporation}</strong> in {PRODUCT_NAME}.</p>
    <p style="text-align: center; margin: 30px 0;">
        <a href="{accept_url}" style="background: #1e3a8a; color: white; padding: 12px 28px; text-decoration: none; border-radius: 6px; font-weight: 600;">
            View invitation
        </a>
    </p>
    <p style="font-size: 12px; color: #9ca3af;">
        This invitation expires in {self.expiry_days} days. If you did not expect it, you can ignore this email.<br>
        <a href="{accept_url}" style="color: #1e3a8a; word-break: break-all;">{accept_url}</a>
    </p>
</body>
</html>
"""

        text_content = f"""
{inviter_name} has invited you to work on the settlement of {corporation_name} in {PRODUCT_NAME}.

View the invitation here:
{accept_url}

This invitation expires in {self.expiry_days} days. If you did not expect it, you can ignore this email.
"""

        return self._send(
            to_email,
            f"Invitation to {corporation_name} on {PRODUCT_NAME}",
            html_content,
            text_content,
            "invitation",
        )

    async def send_welcome_email(
        self,
        to_email: str,
        full_name: str,
        temp_login_id: str,
        temp_password: str,
    ) -> dict[str, Any]:
        """Send a welcome email carrying temporary credentials.

        Args:
            to_email: Recipient email address.
            full_name: The new user's name.
            temp_login_id: Generated login ID.
            temp_password: Generated password.

        Returns:
            dict: Send result with the Resend email ID.
        """
        login_url = f"{self.frontend_url}/login"
        name = escape(full_name)

        html_content = f"""
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Welcome to {PRODUCT_NAME}</title>
</head>
<body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <h1 style="color: #1e3a8a; font-size: 22px;">Welcome to {PRODUCT_NAME}</h1>
    <p>Hi {name}, an account has been created for you.</p>
    <div style="background: #f9fafb; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <p style="margin: 0;">Login ID: <code>{escape(temp_login_id)}</code></p>
        <p style="margin: 0;">Temporary password: <code>{escape(temp_password)}</code></p>
    </div>
    <p>You will be asked to choose your own login ID and password when you first sign in.</p>
    <p style="text-align: center; margin: 30px 0;">
        <a href="{login_url}" style="background: #1e3a8a; color: white; padding: 12px 28px; text-decoration: none; border-radius: 6px; font-weight: 600;">
            Sign in
        </a>
    </p>
</body>
</html>
"""

        text_content = f"""
Hi {full_name}, an account has been created for you in {PRODUCT_NAME}.

Login ID: {temp_login_id}
Temporary password: {temp_password}

You will be asked to choose your own login ID and password when you first sign in:
{login_url}
"""

        return self._send(
            to_email,
            f"Your {PRODUCT_NAME} account",
            html_content,
            text_content,
            "welcome",
        )
