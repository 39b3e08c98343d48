"""Network settings providers (per-level capacity configuration)."""

from app.adapters.app_settings.base import AbstractAppSettingsProvider
from app.adapters.app_settings.cached import CachedAppSettingsProvider
from app.adapters.app_settings.static import StaticAppSettingsProvider
from app.adapters.app_settings.supabase import SupabaseAppSettingsProvider

__all__ = [
    "AbstractAppSettingsProvider",
    "CachedAppSettingsProvider",
    "StaticAppSettingsProvider",
    "SupabaseAppSettingsProvider",
]
