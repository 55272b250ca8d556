"""Supabase clients: a shared one for data access and throwaway ones for auth."""

import time
from functools import lru_cache
from typing import Any

from supabase import Client, create_client
from supabase.lib.client_options import SyncClientOptions
from supabase_auth import SyncMemoryStorage

from src.core.config import get_settings

UNIQUE_VIOLATION = "23505"
NO_ROWS_FOUND = "PGRST116"


@lru_cache
def get_supabase_client() -> Client:
    """Shared client authenticated with the secret key.

    The secret key bypasses row level security, so every service checks
    the caller's role before querying. Never sign a user in on this
    client: the session would replace its Authorization header.
    """
    settings = get_settings()
    return create_client(settings.supabase_url, settings.supabase_secret_key)


def create_auth_client() -> Client:
    """Fresh client with in-memory session storage for one auth operation."""
    settings = get_settings()
    options = SyncClientOptions(
        storage=SyncMemoryStorage(),
        auto_refresh_token=False,
        persist_session=False,
    )
    return create_client(settings.supabase_url, settings.supabase_secret_key, options=options)


def is_unique_violation(error: Exception) -> bool:
    return getattr(error, "code", None) == UNIQUE_VIOLATION


async def ping_database() -> dict[str, Any]:
    """Run a one-row query against ``profiles`` and time it.

    Returns:
        dict: ``healthy``, ``latency_ms`` and, on failure, ``error``.
    """
    started = time.perf_counter()
    try:
        get_supabase_client().table("profiles").select("id").limit(1).execute()
        result: dict[str, Any] = {"healthy": True}
    except Exception as e:
        result = {"healthy": False, "error": str(e)}
    result["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)
    return result
