"""Application-level exception types.

This module defines domain errors used across services/adapters, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NotRequired, TypedDict

if TYPE_CHECKING:
    from app.adapters.rate_limit.base import RateLimitResult


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    http_status: int
    sponsor_id: str
    current_count: int
    max_allowed: int
    limit: int
    remaining: int
    reset_at: int
    retry_after: int
    backend: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class DataStoreAppError(AppError):
    """Raised when the profile or settings store cannot be read."""


class NetworkCapacityError(AppError):
    """Raised when a sponsor has no room left for another direct referral.

    This is an expected, user-facing rejection. Callers can use
    ``sponsor_id``, ``current_count`` and ``max_allowed`` to render a precise
    message or offer the independent signup path instead.
    """

    CODE = "sponsor_capacity_reached"

    def __init__(
        self,
        *,
        sponsor_id: str,
        current_count: int,
        max_allowed: int,
        message: str | None = None,
    ) -> None:
        self.sponsor_id = sponsor_id
        self.current_count = current_count
        self.max_allowed = max_allowed
        super().__init__(
            code=self.CODE,
            message=message
            or (
                "Your sponsor has reached the maximum number of direct members "
                f"({current_count}/{max_allowed})"
            ),
            details={
                "sponsor_id": sponsor_id,
                "current_count": current_count,
                "max_allowed": max_allowed,
            },
        )


class RateLimitExceededError(AppError):
    """Raised by HTTP guards when a caller exhausted its window quota."""

    CODE = "rate_limit_exceeded"

    def __init__(self, result: "RateLimitResult", *, message: str | None = None) -> None:
        self.result = result
        super().__init__(
            code=self.CODE,
            message=message or "Rate limit exceeded. Try again later.",
            details={
                "limit": result.limit,
                "remaining": max(0, result.remaining),
                "retry_after": max(0, result.retry_after_seconds),
            },
        )
