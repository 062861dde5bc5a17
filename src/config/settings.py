"""
Configuration Management for Control Financiero

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage location, notification thresholds and display defaults are all
validated at startup instead of being scattered as literals.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Backing medium: a JSON file on disk or process memory"
    )
    data_path: str = Field(
        default=".finance/finance_data.json",
        description="Path of the JSON document used by the file backend"
    )

    # Keys inside the key-value medium
    data_key: str = Field(
        default="finance_data",
        description="Key holding the month -> month record mapping"
    )
    bills_key: str = Field(
        default="finance_bills",
        description="Key holding the global bill list"
    )
    namespace: Optional[str] = Field(
        default=None,
        description="Optional per-user prefix for every storage key"
    )

    audit_log_path: Optional[str] = Field(
        default=None,
        description="JSON-lines file for the audit trail (local logging only if unset)"
    )

    @field_validator('namespace')
    @classmethod
    def empty_namespace_is_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank namespace as no namespace."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def data_file(self) -> Path:
        return Path(self.data_path)


class NotificationSettings(BaseSettings):
    """Thresholds for the dashboard notification rules."""

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_NOTIFY_",
        extra="ignore"
    )

    fixed_expense_ratio: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Warn when fixed expenses exceed this share of income"
    )
    tax_ratio: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Warn when taxes exceed this share of income"
    )
    pending_bills_ratio: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Warn when unpaid bills exceed this share of income"
    )
    month_end_days: int = Field(
        default=5,
        ge=0,
        le=31,
        description="Remind when this many days or fewer remain in the month"
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

    # Display
    currency: str = Field(
        default="EUR",
        min_length=3,
        max_length=3,
        description="ISO currency code used when formatting amounts"
    )
    default_description: str = Field(
        default="Sin descripción",
        description="Description used when the user leaves it empty"
    )

    # Validation thresholds
    max_amount: float = Field(
        default=1000000.0,
        gt=0,
        description="Amounts above this are accepted but flagged for review"
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

    # Note: These are loaded lazily to allow partial configuration

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def notifications(self) -> NotificationSettings:
        return NotificationSettings()

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

    for name in ("storage", "notifications", "app"):
        try:
            _ = getattr(settings, name)
            results[name] = True
        except ValidationError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
