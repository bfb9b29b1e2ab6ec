"""
Configuration Management for HomeLedger

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The engine itself never reads settings: values are pulled here by the
orchestrator and passed down as explicit arguments, so every engine
function stays testable with plain inputs.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LedgerSettings(BaseSettings):
    """
    Numeric conventions of the ledger engine.

    The base currency is fixed (`BASE_CURRENCY`): stored rates and frozen
    transaction rates are all expressed in it.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOMELEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    reconciliation_tolerance: float = Field(
        default=1.0,
        ge=0.0,
        description="Allowed gap between expected and entered transfer amounts"
    )
    zero_epsilon: float = Field(
        default=0.005,
        gt=0.0,
        le=1.0,
        description="Balances smaller than this in magnitude display as zero"
    )
    transfer_category_id: str = Field(
        default="transfer",
        min_length=1,
        description="Sentinel category stored on transfer transactions"
    )


class StorageSettings(BaseSettings):
    """Local JSON snapshot storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HOMELEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_path: Path = Field(
        default=Path("homeledger_data.json"),
        description="File holding the full application snapshot"
    )
    backup_prefix: str = Field(
        default="budget_backup_",
        description="Prefix of exported backup file names"
    )
    save_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed snapshot write is attempted"
    )

    @field_validator('data_path')
    @classmethod
    def expand_data_path(cls, v: Path) -> Path:
        """Allow ~ in the configured path."""
        return v.expanduser()


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
        description="Minimum level for the structured logger"
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

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    `<name>_error` entry for every group that failed to load.
    """
    results = {}

    settings = get_settings()

    for name in ("ledger", "storage", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except ValueError as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
