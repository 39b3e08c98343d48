"""Dict-backed profile store for local development and tests."""

from __future__ import annotations

import threading

from app.adapters.profiles.base import AbstractProfileStore


class InMemoryProfileStore(AbstractProfileStore):
    """Keeps ``id -> referred_by`` pairs in process memory.

    Not shared across workers; use the Supabase store for real deployments.
    """

    def __init__(self, referrals: dict[str, str | None] | None = None) -> None:
        self._lock = threading.RLock()
        self._referred_by: dict[str, str | None] = dict(referrals or {})

    def attach(self, user_id: str, sponsor_id: str | None) -> None:
        """Record (or overwrite) the sponsor of ``user_id``."""
        with self._lock:
            self._referred_by[user_id] = sponsor_id

    def remove(self, user_id: str) -> None:
        with self._lock:
            self._referred_by.pop(user_id, None)

    async def get_sponsor_id(self, user_id: str) -> str | None:
        with self._lock:
            return self._referred_by.get(user_id)

    async def count_direct_referrals(
        self,
        sponsor_id: str,
        *,
        exclude_id: str | None = None,
    ) -> int:
        with self._lock:
            return sum(
                1
                for user_id, referred_by in self._referred_by.items()
                if referred_by == sponsor_id and user_id != exclude_id
            )
