"""Sponsor network capacity gate.

Checks, before a subscription is created, whether the subscriber's sponsor
still has room for one more direct referral under the configured level-1 cap.

The gate is a fast pre-check for UX purposes, not the authoritative
enforcement: it performs two sequential reads (sponsor lookup, then count)
without a transaction, so two concurrent signups under the same sponsor can
both pass. The persistence layer must enforce the cap (constraint, trigger or
serializable transaction) when a hard guarantee is needed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from app.adapters.app_settings.base import AbstractAppSettingsProvider
from app.adapters.profiles.base import AbstractProfileStore
from app.core.errors import NetworkCapacityError
from app.schemas.network import SponsorCapacityStatus

logger = logging.getLogger(__name__)

DIRECT_LEVEL = 1


def _percent_half_up(part: int, whole: int) -> int:
    # Halves round up: 12.5 -> 13.
    return math.floor(part * 100 / whole + 0.5)


@dataclass(frozen=True)
class SponsorCapacityCheck:
    """Outcome of a capacity check.

    Attributes:
        allowed: Whether the user may be attached under their sponsor.
        sponsor_id: Sponsor found for the user (None for independents).
        current_count: Sponsor's direct referrals excluding the user
            (None when the check stopped before counting).
        max_allowed: Level-1 cap (None when uncapped or not reached).
        error: The rejection, set exactly when ``allowed`` is False.
    """

    allowed: bool
    sponsor_id: str | None = None
    current_count: int | None = None
    max_allowed: int | None = None
    error: NetworkCapacityError | None = None


class NetworkCapacityService:
    """Validates sponsor fan-out against the level-1 capacity setting."""

    def __init__(
        self,
        profiles: AbstractProfileStore,
        settings_provider: AbstractAppSettingsProvider,
    ) -> None:
        self._profiles = profiles
        self._settings_provider = settings_provider

    async def check_sponsor_capacity(self, user_id: str) -> SponsorCapacityCheck:
        """Evaluate whether ``user_id`` can join its sponsor's first level.

        Independent users (no ``referred_by``) and sponsors without a level-1
        cap are always allowed. The user's own profile is excluded from the
        count so re-validating an already attached user is idempotent.

        Args:
            user_id: Prospective subscriber.

        Returns:
            SponsorCapacityCheck; rejections carry a NetworkCapacityError.
        """
        sponsor_id = await self._profiles.get_sponsor_id(user_id)
        if not sponsor_id:
            logger.debug(
                "network_capacity.independent",
                extra={"user_id": user_id},
            )
            return SponsorCapacityCheck(allowed=True)

        app_settings = await self._settings_provider.get_app_settings()
        capacity = app_settings.capacity_for_level(DIRECT_LEVEL)
        if capacity is None:
            logger.debug(
                "network_capacity.uncapped",
                extra={"user_id": user_id, "sponsor_id": sponsor_id},
            )
            return SponsorCapacityCheck(allowed=True, sponsor_id=sponsor_id)

        current_count = await self._profiles.count_direct_referrals(
            sponsor_id, exclude_id=user_id
        )
        max_allowed = capacity.max_members

        if current_count >= max_allowed:
            logger.warning(
                "network_capacity.rejected",
                extra={
                    "user_id": user_id,
                    "sponsor_id": sponsor_id,
                    "current_count": current_count,
                    "max_allowed": max_allowed,
                },
            )
            return SponsorCapacityCheck(
                allowed=False,
                sponsor_id=sponsor_id,
                current_count=current_count,
                max_allowed=max_allowed,
                error=NetworkCapacityError(
                    sponsor_id=sponsor_id,
                    current_count=current_count,
                    max_allowed=max_allowed,
                ),
            )

        logger.info(
            "network_capacity.allowed",
            extra={
                "user_id": user_id,
                "sponsor_id": sponsor_id,
                "current_count": current_count,
                "max_allowed": max_allowed,
            },
        )
        return SponsorCapacityCheck(
            allowed=True,
            sponsor_id=sponsor_id,
            current_count=current_count,
            max_allowed=max_allowed,
        )

    async def validate_sponsor_capacity(self, user_id: str) -> None:
        """Raise when the user's sponsor is full.

        Raises:
            NetworkCapacityError: If the sponsor reached its level-1 cap.
        """
        check = await self.check_sponsor_capacity(user_id)
        if check.error is not None:
            raise check.error

    async def get_sponsor_capacity_status(self, sponsor_id: str) -> SponsorCapacityStatus:
        """Summarize how full a sponsor's first level is.

        Unlike the validation path, a missing level-1 entry reports
        ``max_allowed=0`` here rather than "unlimited".
        """
        current_count = await self._profiles.count_direct_referrals(sponsor_id)
        app_settings = await self._settings_provider.get_app_settings()
        capacity = app_settings.capacity_for_level(DIRECT_LEVEL)
        max_allowed = capacity.max_members if capacity else 0

        available = max(0, max_allowed - current_count)
        percentage = _percent_half_up(current_count, max_allowed) if max_allowed > 0 else 0

        return SponsorCapacityStatus(
            sponsor_id=sponsor_id,
            current_count=current_count,
            max_allowed=max_allowed,
            available=available,
            percentage=percentage,
        )
