"""Settings provider interface for network capacity configuration."""

from __future__ import annotations

from abc import ABC, abstractmethod

from app.schemas.network import NetworkAppSettings


class AbstractAppSettingsProvider(ABC):
    """Read-only source of the platform's network settings."""

    @abstractmethod
    async def get_app_settings(self) -> NetworkAppSettings:
        """Return the current settings.

        Providers may cache; callers must not assume freshness beyond the
        provider's own policy.
        """
        ...
