"""
Configuration Management for FinTrack

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here. Each section reads its own
environment prefix so the storage location, export format and app
defaults can be changed independently.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Snapshot storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="file",
        pattern="^(file|memory)$",
        description="Storage backend: 'file' for durable JSON files, 'memory' for ephemeral sessions"
    )
    directory: Path = Field(
        default=Path(".fintrack"),
        description="Directory holding one JSON file per storage key"
    )
    key: str = Field(
        default="fintrack-data",
        min_length=1,
        description="Storage key the snapshot is written under"
    )


class ExportSettings(BaseSettings):
    """CSV export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FINTRACK_EXPORT_",
        extra="ignore"
    )

    filename: str = Field(
        default="fintrack_transacoes.csv",
        description="File name offered for the exported CSV"
    )
    date_format: str = Field(
        default="%d/%m/%Y",
        description="strftime format for the date column"
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
        description="Root log level for the stdlib logging backend"
    )

    # Domain defaults
    default_categories: str = Field(
        default="Salário,Alimentação,Transporte,Lazer",
        description="Comma-separated starter categories used when no snapshot exists"
    )
    currency_symbol: str = Field(
        default="R$",
        description="Currency symbol shown next to amounts"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept any case, reject unknown level names."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def default_categories_list(self) -> list[str]:
        """Get starter categories as a list."""
        return [c.strip() for c in self.default_categories.split(",") if c.strip()]


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
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def export(self) -> ExportSettings:
        return ExportSettings()

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
    '<name>_error' entry for each section that failed to load.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "export", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
