"""Request-level rate limiting on top of a limiter adapter.

Scopes keys per endpoint family (``api:login``, ``network:validate``...),
turns a blocked result into a ``RateLimitExceededError`` and builds the
standard ``X-RateLimit-*`` response headers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from fastapi import Request

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.core.errors import RateLimitExceededError
from app.utils.request_fingerprint import DEFAULT_LOCALE, get_request_fingerprint

EXCEEDED_MESSAGES = {
    "en": "Too many requests. Please try again in {seconds} seconds.",
    "es": "Demasiadas solicitudes. Inténtalo de nuevo en {seconds} segundos.",
}


@dataclass(frozen=True)
class RateLimitGuardResult:
    result: RateLimitResult
    locale: str
    key: str


class RateLimitService:
    """Applies a limiter to HTTP requests."""

    def __init__(self, limiter: AbstractRateLimiter) -> None:
        self._limiter = limiter

    @property
    def limiter(self) -> AbstractRateLimiter:
        return self._limiter

    def guard(self, request: Request, scope: str) -> RateLimitGuardResult:
        """Consume one unit for the caller of ``request`` within ``scope``.

        Args:
            request: Incoming request (used for the caller fingerprint).
            scope: Endpoint family prefix, e.g. ``"api:login"``.

        Returns:
            RateLimitGuardResult with the limiter decision and caller locale.
        """
        fingerprint = get_request_fingerprint(request)
        key = f"{scope}:{fingerprint.fingerprint}"
        result = self._limiter.consume(key)
        return RateLimitGuardResult(result=result, locale=fingerprint.locale, key=key)

    def ensure_allowed(self, result: RateLimitResult, *, locale: str = DEFAULT_LOCALE) -> None:
        """Raise when ``result`` is a rejection.

        Raises:
            RateLimitExceededError: If ``result.allowed`` is False.
        """
        if result.allowed:
            return
        template = EXCEEDED_MESSAGES.get(locale, EXCEEDED_MESSAGES[DEFAULT_LOCALE])
        raise RateLimitExceededError(
            result,
            message=template.format(seconds=max(0, result.retry_after_seconds)),
        )

    @staticmethod
    def build_headers(result: RateLimitResult) -> dict[str, str]:
        """Standard rate limit headers; ``Retry-After`` only when blocked."""
        headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(max(0, result.remaining)),
            "X-RateLimit-Reset": str(math.ceil(result.reset_at / 1000)),
        }
        if not result.allowed:
            headers["Retry-After"] = str(max(0, result.retry_after_seconds))
        return headers
