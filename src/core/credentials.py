"""Temporary credential generation for administrator-created accounts."""

import secrets
import time

from src.core.config import get_settings

TEMP_PASSWORD_BYTES = 9


def _prefix() -> str:
    return get_settings().temp_credential_prefix


def generate_temp_login_id() -> str:
    """Generate a temporary login ID such as ``temp_1718000000000042``.

    Millisecond timestamp plus a random suffix so accounts created in the
    same millisecond do not collide.
    """
    return f"{_prefix()}{int(time.time() * 1000)}{secrets.randbelow(1000):03d}"


def generate_temp_password() -> str:
    """Generate a random temporary password carrying the temp prefix."""
    return f"{_prefix()}{secrets.token_urlsafe(TEMP_PASSWORD_BYTES)}"


def is_temporary(value: str | None) -> bool:
    """Check whether a login ID or password is a generated temporary value."""
    return bool(value) and value.startswith(_prefix())
