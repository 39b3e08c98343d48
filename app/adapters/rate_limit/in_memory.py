"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: uses a lock around shared state.
- Windows roll over lazily on the next access, so idle keys cost nothing
  beyond their stored state.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult


def _now_ms() -> float:
    return time.time() * 1000


@dataclass
class _WindowState:
    window_start: float
    count: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    Each key gets its own window, opened by the first request seen for that
    key and reopened by the first request after it elapses (e.g. 5 requests
    per 60_000 ms).

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits. It is a defense-in-depth throttle, not the
        authoritative limiter for critical flows.
    """

    def __init__(
        self,
        *,
        limit: int,
        window_ms: int,
        clock: Callable[[], float] = _now_ms,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            limit: Maximum number of allowed units per window.
            window_ms: Size of the fixed window in milliseconds.
            clock: Time source function returning UNIX time in milliseconds.

        Raises:
            ValueError: If limit or window_ms are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_ms < 1:
            raise ValueError("window_ms must be >= 1")

        self._limit = limit
        self._window_ms = window_ms
        self._clock = clock
        self._lock = threading.RLock()
        self._state_by_key: dict[str, _WindowState] = {}

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_ms(self) -> int:
        return self._window_ms

    def _get_or_roll_state(self, key: str, now: float) -> _WindowState:
        """Get the current state for key, opening a new window when elapsed.

        Args:
            key: Rate limit key.
            now: Current UNIX time in milliseconds.

        Returns:
            The active window state for this key.
        """
        state = self._state_by_key.get(key)
        if state is None:
            state = _WindowState(window_start=now, count=0)
            self._state_by_key[key] = state
        elif now - state.window_start >= self._window_ms:
            state.window_start = now
            state.count = 0
        return state

    def _build_result(self, *, allowed: bool, state: _WindowState, now: float) -> RateLimitResult:
        reset_at = state.window_start + self._window_ms
        retry_after = 0
        if not allowed:
            retry_after = max(0, int(math.ceil((reset_at - now) / 1000)))
        return RateLimitResult(
            allowed=allowed,
            limit=self._limit,
            remaining=max(0, self._limit - state.count),
            reset_at=int(reset_at),
            retry_after_seconds=retry_after,
        )

    def consume(self, key: str, *, cost: int = 1) -> RateLimitResult:
        """Consume rate limit budget for the provided key.

        This method both checks the current window usage and mutates the state
        if the request is allowed.

        Args:
            key: Unique identifier for rate limiting.
            cost: Units to consume (default 1).

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty or cost is invalid.
        """
        if cost < 1:
            raise ValueError("cost must be >= 1")
        if not key:
            raise ValueError("key must be a non-empty string")

        with self._lock:
            now = self._clock()
            state = self._get_or_roll_state(key, now)

            if state.count + cost <= self._limit:
                state.count += cost
                return self._build_result(allowed=True, state=state, now=now)

            return self._build_result(allowed=False, state=state, now=now)
