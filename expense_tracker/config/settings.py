"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Remote availability is derived from this configuration once per process
and never changes during a session.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Remote backend (Google Sheets) configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the spreadsheet holding the expense tables"
    )

    # One worksheet per logical table
    expenses_sheet_name: str = Field(
        default="expenses",
        description="Name of the sheet for expenses"
    )
    categories_sheet_name: str = Field(
        default="categories",
        description="Name of the sheet for categories"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """Warn if credentials file doesn't exist (but don't fail - might be mounted later)."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Google credentials file not found at {v}. "
                "Remote storage will be unavailable until it exists."
            )
        return v

    @property
    def is_placeholder(self) -> bool:
        return not self.spreadsheet_id.strip() or "placeholder" in self.spreadsheet_id


class LocalStorageSettings(BaseSettings):
    """Device-local storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOCAL_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("./data"),
        description="Directory holding the local JSON documents"
    )
    expenses_key: str = Field(
        default="expense-tracker-data",
        description="Storage key of the expense document"
    )
    categories_key: str = Field(
        default="expense-tracker-categories",
        description="Storage key of the category document"
    )
    mode_key: str = Field(
        default="expense-tracker-storage-mode",
        description="Storage key of the storage mode preference"
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

    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for the structured log"
    )

    # Opaque id of the signed-in user, if the host already knows it
    user_id: Optional[str] = Field(
        default=None,
        description="User whose remote data is in scope"
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug_mode else self.log_level


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

    # Note: sub-settings are loaded lazily so the app runs with only local
    # storage configured

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def local_storage(self) -> LocalStorageSettings:
        return LocalStorageSettings()

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


def is_remote_configured() -> bool:
    """
    Whether the remote backend can be used at all.

    Requires valid Google Sheets settings, a credentials file that exists
    and a real (non-placeholder) spreadsheet id.
    """
    try:
        sheets = get_settings().google_sheets
    except ValidationError:
        return False
    return Path(sheets.credentials_path).exists() and not sheets.is_placeholder


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.google_sheets
        results["google_sheets"] = True
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.local_storage
        results["local_storage"] = True
    except Exception as e:
        results["local_storage"] = False
        results["local_storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    results["remote_available"] = is_remote_configured()

    return results
