"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_log_settings() -> "LogSettings":
    """Build log settings from environment."""

    return LogSettings()


def _build_app_settings() -> "AppSettings":
    """Build app settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return AppSettings()  # type: ignore[call-arg]


def _build_supabase_settings() -> "SupabaseSettings":
    """Build Supabase settings from environment."""

    return SupabaseSettings()


class LevelCapacitySetting(BaseModel):
    """Static per-level capacity entry (``{"level": 1, "max_members": 5}``)."""

    level: int = Field(..., ge=1)
    max_members: int = Field(..., ge=0)


# Mirrors the platform defaults: each level is five times wider than the last.
DEFAULT_MAX_MEMBERS_PER_LEVEL: list[LevelCapacitySetting] = [
    LevelCapacitySetting(level=1, max_members=5),
    LevelCapacitySetting(level=2, max_members=25),
    LevelCapacitySetting(level=3, max_members=125),
    LevelCapacitySetting(level=4, max_members=625),
    LevelCapacitySetting(level=5, max_members=3125),
]


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field(
        "json",
        description="Log format: 'json' (structured) or 'plain'",
    )
    output: str = Field(
        "stdout",
        description="Log destination: 'stdout' or 'file'",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output=file (default logs/app.log)",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read/propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    api_key_required: bool = Field(
        True,
        description="Whether API key authentication is required",
    )
    api_keys: str | None = Field(
        None,
        description="Comma-separated list of valid API keys for authentication",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on API routes",
    )
    rate_limit_window_ms: int = Field(
        60_000,
        description="Rate limit window size in milliseconds (shared by all presets)",
        ge=1,
    )
    rate_limit_strict_requests: int = Field(
        5,
        description="Requests per window for sensitive operations (login, password reset)",
        ge=1,
    )
    rate_limit_standard_requests: int = Field(
        60,
        description="Requests per window for regular API endpoints",
        ge=1,
    )
    rate_limit_generous_requests: int = Field(
        100,
        description="Requests per window for read-only/public endpoints",
        ge=1,
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )

    data_backend: str = Field(
        "supabase",
        description=(
            "Profile/settings backend: 'supabase', or 'memory' for local development "
            "and tests (starts empty, so every user is treated as independent)"
        ),
    )
    app_settings_cache_ttl_seconds: int = Field(
        300,
        description="How long network settings are cached by the provider",
        ge=0,
    )
    max_members_per_level: list[LevelCapacitySetting] = Field(
        default_factory=lambda: list(DEFAULT_MAX_MEMBERS_PER_LEVEL),
        description=(
            "Static capacity per network level as JSON, used by the memory backend "
            '(e.g. [{"level": 1, "max_members": 5}])'
        ),
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class SupabaseSettings(BaseSettings):
    """Supabase (PostgREST) connection used by the supabase data backend."""

    url: str | None = Field(
        None,
        description="Project URL, e.g. https://xyz.supabase.co",
    )
    service_role_key: str | None = Field(
        None,
        description="Service role key used for server-side reads",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Request timeout in seconds",
    )
    profiles_table: str = Field("profiles", description="Table holding referred_by")
    app_settings_table: str = Field(
        "app_settings",
        description="Table holding max_members_per_level",
    )

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=_build_log_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)
    supabase: SupabaseSettings = Field(default_factory=_build_supabase_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
