"""Settings provider backed by environment configuration."""

from __future__ import annotations

from typing import Iterable

from app.adapters.app_settings.base import AbstractAppSettingsProvider
from app.core.config import LevelCapacitySetting
from app.schemas.network import LevelCapacity, NetworkAppSettings


class StaticAppSettingsProvider(AbstractAppSettingsProvider):
    """Serves a fixed ``max_members_per_level`` list (APP_MAX_MEMBERS_PER_LEVEL)."""

    def __init__(self, capacities: Iterable[LevelCapacitySetting | LevelCapacity]) -> None:
        self._settings = NetworkAppSettings(
            max_members_per_level=sorted(
                (
                    LevelCapacity(level=entry.level, max_members=entry.max_members)
                    for entry in capacities
                ),
                key=lambda entry: entry.level,
            )
        )

    async def get_app_settings(self) -> NetworkAppSettings:
        return self._settings
