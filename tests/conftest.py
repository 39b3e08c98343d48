"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
Environment defaults are set before any app import so the global settings
object is built with the memory backend and known API keys.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_DATA_BACKEND", "memory")
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from app.adapters.app_settings.static import StaticAppSettingsProvider
from app.adapters.profiles.in_memory import InMemoryProfileStore
from app.core.rate_limit import get_rate_limiter_registry
from app.schemas.network import LevelCapacity


@pytest.fixture(autouse=True)
def _reset_rate_limiters():
    """Give every test fresh limiter state."""
    get_rate_limiter_registry().reset()
    yield
    get_rate_limiter_registry().reset()


@pytest.fixture
def profile_store() -> InMemoryProfileStore:
    return InMemoryProfileStore()


@pytest.fixture
def capped_settings() -> StaticAppSettingsProvider:
    """Level 1 capped at 3 direct members, level 2 at 9."""
    return StaticAppSettingsProvider(
        [LevelCapacity(level=1, max_members=3), LevelCapacity(level=2, max_members=9)]
    )


@pytest.fixture
def api_key_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key-123"}
