"""Supabase-backed settings provider.

Reads the singleton row of the ``app_settings`` table and normalizes its
``max_members_per_level`` JSON column, which has been written by several
generations of the admin UI (camelCase and snake_case keys, string levels).
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from app.adapters.app_settings.base import AbstractAppSettingsProvider
from app.adapters.supabase.client import SupabaseRestClient
from app.core.config import DEFAULT_MAX_MEMBERS_PER_LEVEL
from app.schemas.network import LevelCapacity, NetworkAppSettings

logger = logging.getLogger(__name__)


def _default_capacities() -> list[LevelCapacity]:
    return [
        LevelCapacity(level=entry.level, max_members=entry.max_members)
        for entry in DEFAULT_MAX_MEMBERS_PER_LEVEL
    ]


def _coerce_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def normalize_level_capacities(
    raw: Any,
    fallback: Iterable[LevelCapacity] | None = None,
) -> list[LevelCapacity]:
    """Turn the stored JSON column into validated, level-sorted entries.

    - Non-list values fall back to the defaults.
    - Non-object entries and entries without a positive integer level are dropped.
    - ``maxMembers`` and ``max_members`` are both accepted; missing or invalid
      values become 0.

    Args:
        raw: Decoded ``max_members_per_level`` column.
        fallback: Entries used when ``raw`` is not a list.

    Returns:
        Sorted list of level capacities.
    """
    if not isinstance(raw, list):
        return list(fallback) if fallback is not None else _default_capacities()

    normalized: list[LevelCapacity] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        level = _coerce_int(entry.get("level"))
        if level is None or level < 1:
            continue
        max_members = _coerce_int(entry.get("maxMembers", entry.get("max_members")))
        normalized.append(LevelCapacity(level=level, max_members=max(0, max_members or 0)))

    return sorted(normalized, key=lambda entry: entry.level)


class SupabaseAppSettingsProvider(AbstractAppSettingsProvider):
    """Loads ``max_members_per_level`` from the ``app_settings`` table."""

    def __init__(self, client: SupabaseRestClient, *, table: str = "app_settings") -> None:
        self._client = client
        self._table = table

    async def get_app_settings(self) -> NetworkAppSettings:
        rows = await self._client.select(
            self._table,
            {"select": "max_members_per_level", "limit": "1"},
        )
        if not rows:
            logger.warning("app_settings.row_missing", extra={"table": self._table})
            return NetworkAppSettings(max_members_per_level=_default_capacities())

        capacities = normalize_level_capacities(rows[0].get("max_members_per_level"))
        return NetworkAppSettings(max_members_per_level=capacities)
