"""Shared test data builders."""

import time
from typing import Any
from unittest.mock import MagicMock

from jose import jwt

TEST_JWT_SECRET = "test-jwt-secret-for-unit-tests"

AUTH_USER_ID = "550e8400-e29b-41d4-a716-446655440000"
PROFILE_ID = "660e8400-e29b-41d4-a716-446655440000"
OTHER_PROFILE_ID = "660e8400-e29b-41d4-a716-446655440001"
CONTRACT_ID = "880e8400-e29b-41d4-a716-446655440000"
CORPORATE_ID = "770e8400-e29b-41d4-a716-446655440000"


def create_test_token(
    sub: str = AUTH_USER_ID,
    email: str | None = "taro@example.com",
    role: str | None = "authenticated",
    exp_offset: int = 3600,
    secret: str = TEST_JWT_SECRET,
    audience: str | None = "authenticated",
) -> str:
    """Create an HS256 test JWT shaped like a Supabase access token."""
    now = int(time.time())
    payload: dict[str, Any] = {
        "sub": sub,
        "email": email,
        "role": role,
        "exp": now + exp_offset,
        "iat": now,
        "iss": "https://test-project.supabase.co/auth/v1",
    }
    if audience is not None:
        payload["aud"] = audience
    return jwt.encode(payload, secret, algorithm="HS256")


def configure_hs256(mock_settings: MagicMock) -> None:
    """Point a patched get_settings at the HS256 test secret."""
    mock_settings.return_value.supabase_signing_key_jwk = ""
    mock_settings.return_value.supabase_jwt_secret = TEST_JWT_SECRET
    mock_settings.return_value.jwt_audience = "authenticated"


def make_profile(**overrides: Any) -> dict[str, Any]:
    """Build a profile row as returned by PostgREST."""
    profile = {
        "id": PROFILE_ID,
        "auth_user_id": AUTH_USER_ID,
        "login_id": "yamada",
        "email": "taro@example.com",
        "full_name": "Yamada Taro",
        "role": "general",
        "is_active": True,
        "contract_id": None,
        "last_login_at": None,
        "created_at": "2024-04-01T00:00:00+00:00",
        "updated_at": "2024-04-01T00:00:00+00:00",
    }
    profile.update(overrides)
    return profile


def make_corporation(**overrides: Any) -> dict[str, Any]:
    """Build a corporation row as returned by PostgREST."""
    corporation = {
        "id": CORPORATE_ID,
        "corporate_number": "1234567890123",
        "name": "Sakura Trading",
        "furigana": None,
        "type": "株式会社",
        "prefecture": "Tokyo",
        "city": "Chiyoda",
        "address": None,
        "created_at": "2024-04-01T00:00:00+00:00",
        "updated_at": "2024-04-01T00:00:00+00:00",
    }
    corporation.update(overrides)
    return corporation


def response_with(data: Any = None, count: int | None = None) -> MagicMock:
    """Build a PostgREST-style response object."""
    response = MagicMock()
    response.data = data
    response.count = count
    return response


def route_tables(client: MagicMock, **tables: MagicMock) -> MagicMock:
    """Make ``client.table(name)`` return a dedicated mock per table name.

    Tables not listed get a fresh MagicMock each call.
    """
    client.table.side_effect = lambda name: tables.get(name, MagicMock())
    return client
