"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what the tracker depends on and
ensures all configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_STORAGE_KEY = "expense-tracker:expenses"


class StorageSettings(BaseSettings):
    """Persistence backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_STORAGE_",
        extra="ignore"
    )

    backend: Literal["file", "memory"] = Field(
        default="file",
        description="Storage backend: shared JSON file or per-process memory"
    )
    path: str = Field(
        default="expenses.json",
        description="Path of the JSON file used by the file backend"
    )
    key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        min_length=1,
        description="Key under which the expense collection is stored"
    )
    # Browsers typically allow ~5 MiB of local storage per origin
    quota_bytes: Optional[int] = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Maximum total size of stored values (None = unlimited)"
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Warn if the parent directory doesn't exist (but don't fail - might be mounted later)."""
        parent = Path(v).expanduser().resolve().parent
        if not parent.exists():
            import warnings
            warnings.warn(
                f"Storage directory not found at {parent}. "
                "Make sure it exists before running the application."
            )
        return v


class DisplaySettings(BaseSettings):
    """Formatting of amounts and labels."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSE_DISPLAY_",
        extra="ignore"
    )

    currency_symbol: str = Field(
        default="$",
        description="Symbol prefixed to formatted amounts"
    )
    uncategorized_label: str = Field(
        default="Uncategorized",
        min_length=1,
        description="Bucket for expenses with a blank category"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for diagnostic output"
    )

    # Chart capability
    chart_enabled: bool = Field(
        default=True,
        description="Render the category pie chart (False behaves like a missing chart library)"
    )

    # Diagnostics
    recent_events_limit: int = Field(
        default=200,
        ge=1,
        le=10000,
        description="How many diagnostic events to keep in memory"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def display(self) -> DisplaySettings:
        return DisplaySettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "display", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
