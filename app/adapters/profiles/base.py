"""Profile store interface read by the network capacity gate."""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractProfileStore(ABC):
    """Read-only access to the referral edges stored on user profiles."""

    @abstractmethod
    async def get_sponsor_id(self, user_id: str) -> str | None:
        """Return the ``referred_by`` value of a profile.

        Args:
            user_id: Profile id.

        Returns:
            The sponsor id, or None for independent users and unknown ids.
        """
        ...

    @abstractmethod
    async def count_direct_referrals(
        self,
        sponsor_id: str,
        *,
        exclude_id: str | None = None,
    ) -> int:
        """Count profiles whose ``referred_by`` equals ``sponsor_id``.

        Args:
            sponsor_id: Sponsor whose direct referrals are counted.
            exclude_id: Profile id left out of the count, if any.

        Returns:
            Exact number of matching profiles.
        """
        ...
