"""Caching decorator for settings providers."""

from __future__ import annotations

import logging

from app.adapters.app_settings.base import AbstractAppSettingsProvider
from app.schemas.network import NetworkAppSettings
from app.utils.simple_cache import SimpleTTLCache

logger = logging.getLogger(__name__)

_CACHE_KEY = "app_settings:network"


class CachedAppSettingsProvider(AbstractAppSettingsProvider):
    """Wraps another provider and caches its answer for ``ttl_seconds``.

    Errors from the wrapped provider are not cached and propagate unchanged.
    """

    def __init__(self, inner: AbstractAppSettingsProvider, *, ttl_seconds: int = 300) -> None:
        self._inner = inner
        self._cache = SimpleTTLCache(ttl_seconds=ttl_seconds, max_entries=1)

    async def get_app_settings(self) -> NetworkAppSettings:
        cached = self._cache.get(_CACHE_KEY)
        if cached is not None:
            return cached

        fresh = await self._inner.get_app_settings()
        self._cache.set(_CACHE_KEY, fresh)
        return fresh

    def invalidate(self) -> None:
        """Drop the cached value; call after settings are updated."""
        self._cache.delete(_CACHE_KEY)
        logger.info("app_settings.cache_invalidated")

    def stats(self) -> dict[str, int | float | None]:
        return self._cache.stats()
