"""Service wiring for route handlers.

Routes depend on these providers through ``Depends`` so tests can swap in
in-memory stores with ``app.dependency_overrides``. The application lifespan
builds the service at startup and releases the shared HTTP client on shutdown.
"""

from __future__ import annotations

from functools import lru_cache

from app.adapters.factory import (
    create_app_settings_provider,
    create_profile_store,
    create_supabase_client,
    uses_supabase,
)
from app.adapters.supabase.client import SupabaseRestClient
from app.services.network_capacity_service import NetworkCapacityService


@lru_cache(maxsize=1)
def get_supabase_client() -> SupabaseRestClient | None:
    """Return the PostgREST client shared by all adapters (None for memory)."""
    if not uses_supabase():
        return None
    return create_supabase_client()


@lru_cache(maxsize=1)
def get_network_capacity_service() -> NetworkCapacityService:
    """Return the process-wide capacity service built from settings."""
    client = get_supabase_client()
    return NetworkCapacityService(
        profiles=create_profile_store(client=client),
        settings_provider=create_app_settings_provider(client=client),
    )


async def close_network_capacity_service() -> None:
    """Close the shared client (if one was opened) and drop cached instances."""
    if get_supabase_client.cache_info().currsize:
        client = get_supabase_client()
        if client is not None:
            await client.aclose()
    get_supabase_client.cache_clear()
    get_network_capacity_service.cache_clear()
