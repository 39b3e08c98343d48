"""Supabase-backed profile store."""

from __future__ import annotations

import logging

from app.adapters.profiles.base import AbstractProfileStore
from app.adapters.supabase.client import SupabaseRestClient, eq, neq

logger = logging.getLogger(__name__)


class SupabaseProfileStore(AbstractProfileStore):
    """Reads ``referred_by`` edges from the ``profiles`` table.

    Equivalent SQL:
        SELECT referred_by FROM profiles WHERE id = ?
        SELECT COUNT(*) FROM profiles WHERE referred_by = ? AND id <> ?
    """

    def __init__(self, client: SupabaseRestClient, *, table: str = "profiles") -> None:
        self._client = client
        self._table = table

    async def get_sponsor_id(self, user_id: str) -> str | None:
        rows = await self._client.select(
            self._table,
            {"select": "referred_by", "id": eq(user_id), "limit": "1"},
        )
        if not rows:
            logger.debug("profiles.not_found", extra={"user_id": user_id})
            return None
        return rows[0].get("referred_by") or None

    async def count_direct_referrals(
        self,
        sponsor_id: str,
        *,
        exclude_id: str | None = None,
    ) -> int:
        params = {"select": "id", "referred_by": eq(sponsor_id)}
        if exclude_id:
            params["id"] = neq(exclude_id)
        return await self._client.count(self._table, params)
