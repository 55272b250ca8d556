"""Pytest configuration and fixtures."""

import os
from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing application modules
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SECRET_KEY", "test-secret-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SUPABASE_SIGNING_KEY_JWK", "")
os.environ.setdefault("RESEND_API_KEY", "")


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Start every test with a fresh login throttle and settings cache."""
    import src.core.rate_limiter as rate_limiter
    from src.core.config import get_settings

    rate_limiter._throttle = None
    get_settings.cache_clear()
    yield
    rate_limiter._throttle = None
    get_settings.cache_clear()


@pytest.fixture
def mock_supabase_client() -> Generator[MagicMock, None, None]:
    """Provide a mocked Supabase client for the shared database helpers.

    Yields:
        MagicMock: Mocked Supabase client for testing.
    """
    mock_client = MagicMock()

    mock_response = MagicMock()
    mock_response.data = []
    mock_client.table.return_value.select.return_value.limit.return_value.execute.return_value = (
        mock_response
    )

    with patch("src.core.supabase.get_supabase_client", return_value=mock_client):
        yield mock_client


@pytest.fixture
def client(mock_supabase_client: MagicMock) -> Generator[TestClient, None, None]:
    """Provide a test client for the FastAPI application.

    Args:
        mock_supabase_client: Mocked Supabase client fixture.

    Yields:
        TestClient: FastAPI test client.
    """
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def as_profile(client: TestClient):
    """Authenticate requests as the given profile row.

    Usage: ``as_profile(make_profile(role="admin"))``.
    """
    from src.api.deps import get_current_profile
    from src.main import app

    def _login(profile: dict[str, Any]) -> dict[str, Any]:
        app.dependency_overrides[get_current_profile] = lambda: profile
        return profile

    yield _login
    app.dependency_overrides.clear()
