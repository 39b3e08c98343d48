"""Rate limiting dependency for FastAPI routes.

Wires the rate limiting adapter into the HTTP layer. Routes depend on the
``rate_limit(scope, preset)`` factory only; the registry keeps one limiter per
scope so each endpoint family has its own budget.

Strategy:
- Fixed-window limit per anonymized caller fingerprint (IP + user agent).
- Presets: strict (login-style endpoints), standard (capacity check), generous (status reads).
"""

from __future__ import annotations

import hashlib
import logging
import threading
from enum import Enum
from typing import Awaitable, Callable

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from app.core.config import settings
from app.services.rate_limit_service import RateLimitService

logger = logging.getLogger(__name__)


class RateLimitPreset(str, Enum):
    """Which configured limit a scope is held to.

    STANDARD guards the capacity check and GENEROUS the status read. STRICT
    (APP_RATE_LIMIT_STRICT_REQUESTS) has no route in this service; it is meant
    for sensitive endpoints such as login or password reset mounted by apps
    that reuse ``rate_limit``.
    """

    STRICT = "strict"
    STANDARD = "standard"
    GENEROUS = "generous"


def _preset_limit(preset: RateLimitPreset) -> int:
    if preset is RateLimitPreset.STRICT:
        return settings.app.rate_limit_strict_requests
    if preset is RateLimitPreset.GENEROUS:
        return settings.app.rate_limit_generous_requests
    return settings.app.rate_limit_standard_requests


class RateLimiterRegistry:
    """Owns one limiter per scope.

    A limiter is rebuilt when its configuration changes (primarily in tests).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._limiters: dict[str, tuple[tuple[int, int], AbstractRateLimiter]] = {}

    def get(self, scope: str, preset: RateLimitPreset) -> AbstractRateLimiter:
        config = (_preset_limit(preset), settings.app.rate_limit_window_ms)
        with self._lock:
            entry = self._limiters.get(scope)
            if entry is None or entry[0] != config:
                limiter = InMemoryFixedWindowRateLimiter(limit=config[0], window_ms=config[1])
                self._limiters[scope] = (config, limiter)
                return limiter
            return entry[1]

    def reset(self) -> None:
        with self._lock:
            self._limiters.clear()


_registry = RateLimiterRegistry()


def get_rate_limiter_registry() -> RateLimiterRegistry:
    """Return the process-wide registry (state persists across requests)."""
    return _registry


def get_rate_limiter(
    scope: str,
    preset: RateLimitPreset = RateLimitPreset.STANDARD,
) -> AbstractRateLimiter:
    return _registry.get(scope, preset)


def _hash_limiter_key(key: str) -> str:
    """Hash the rate limit key for logging without exposing caller details."""
    return hashlib.sha256(key.encode()).hexdigest()[:16]


def rate_limit(
    scope: str,
    preset: RateLimitPreset = RateLimitPreset.STANDARD,
) -> Callable[[Request], Awaitable[None]]:
    """Build a FastAPI dependency enforcing the ``preset`` limit for ``scope``.

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limit("api:login", RateLimitPreset.STRICT))])

    Args:
        scope: Key prefix identifying the endpoint family.
        preset: Which configured limit applies.

    Returns:
        Async dependency that raises RateLimitExceededError (HTTP 429) when
        the caller exhausted its window.
    """

    async def enforce_rate_limit(request: Request) -> None:
        if not settings.app.rate_limit_enabled:
            return

        service = RateLimitService(get_rate_limiter(scope, preset))
        guarded = service.guard(request, scope)
        result = guarded.result
        key_hash = _hash_limiter_key(guarded.key)

        if result.allowed:
            logger.info(
                "rate_limit.allowed",
                extra={
                    "scope": scope,
                    "key_hash": key_hash,
                    "limit": result.limit,
                    "remaining": result.remaining,
                    "window_ms": settings.app.rate_limit_window_ms,
                },
            )
            return

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "scope": scope,
                "key_hash": key_hash,
                "limit": result.limit,
                "remaining": result.remaining,
                "window_ms": settings.app.rate_limit_window_ms,
                "retry_after_s": result.retry_after_seconds,
            },
        )
        service.ensure_allowed(result, locale=guarded.locale)

    return enforce_rate_limit
