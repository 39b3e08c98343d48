"""Factory functions for the data backends used by the capacity gate."""

from __future__ import annotations

import logging

from app.adapters.app_settings.base import AbstractAppSettingsProvider
from app.adapters.app_settings.cached import CachedAppSettingsProvider
from app.adapters.app_settings.static import StaticAppSettingsProvider
from app.adapters.app_settings.supabase import SupabaseAppSettingsProvider
from app.adapters.profiles.base import AbstractProfileStore
from app.adapters.profiles.in_memory import InMemoryProfileStore
from app.adapters.profiles.supabase import SupabaseProfileStore
from app.adapters.supabase.client import SupabaseRestClient
from app.core.config import Settings, settings as global_settings
from app.core.errors import ValidationAppError

logger = logging.getLogger(__name__)

SUPPORTED_BACKENDS = ("memory", "supabase")


def _backend(cfg: Settings) -> str:
    backend = cfg.app.data_backend.lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ValidationAppError(
            code="data_backend_unknown",
            message=(
                f"Unknown data backend: '{backend}'. "
                f"Supported backends: {', '.join(SUPPORTED_BACKENDS)}"
            ),
        )
    return backend


def uses_supabase(cfg: Settings | None = None) -> bool:
    return _backend(cfg or global_settings) == "supabase"


def create_supabase_client(cfg: Settings | None = None) -> SupabaseRestClient:
    """Build the PostgREST client from SUPABASE_* settings.

    Raises:
        ValidationAppError: If the URL or service role key is missing.
    """
    cfg = cfg or global_settings
    if not cfg.supabase.url or not cfg.supabase.service_role_key:
        raise ValidationAppError(
            code="supabase_not_configured",
            message="Supabase backend requires SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY",
            details={"hint": "Set both variables; APP_DATA_BACKEND=memory is for local development only"},
        )
    return SupabaseRestClient(
        cfg.supabase.url,
        cfg.supabase.service_role_key,
        timeout_seconds=cfg.supabase.timeout_seconds,
    )


def create_profile_store(
    cfg: Settings | None = None,
    *,
    client: SupabaseRestClient | None = None,
) -> AbstractProfileStore:
    """Instantiate the profile store selected by APP_DATA_BACKEND."""
    cfg = cfg or global_settings
    if _backend(cfg) == "memory":
        logger.warning(
            "data_backend.memory",
            extra={
                "backend": "memory",
                "hint": "Profiles start empty; set APP_DATA_BACKEND=supabase in deployments",
            },
        )
        return InMemoryProfileStore()

    return SupabaseProfileStore(
        client or create_supabase_client(cfg),
        table=cfg.supabase.profiles_table,
    )


def create_app_settings_provider(
    cfg: Settings | None = None,
    *,
    client: SupabaseRestClient | None = None,
) -> AbstractAppSettingsProvider:
    """Instantiate the settings provider selected by APP_DATA_BACKEND.

    The Supabase provider is wrapped in a TTL cache unless
    APP_APP_SETTINGS_CACHE_TTL_SECONDS is 0.
    """
    cfg = cfg or global_settings
    if _backend(cfg) == "memory":
        return StaticAppSettingsProvider(cfg.app.max_members_per_level)

    provider: AbstractAppSettingsProvider = SupabaseAppSettingsProvider(
        client or create_supabase_client(cfg),
        table=cfg.supabase.app_settings_table,
    )
    if cfg.app.app_settings_cache_ttl_seconds > 0:
        provider = CachedAppSettingsProvider(
            provider, ttl_seconds=cfg.app.app_settings_cache_ttl_seconds
        )
    return provider
