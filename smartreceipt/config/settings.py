"""
Configuration Management for SmartReceipt

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.

Only the Gemini key is a secret, and it is optional: without it the
app still works, receipt scanning is simply unavailable.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class GeminiSettings(BaseSettings):
    """Gemini receipt interpreter configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: Optional[str] = Field(
        default=None,
        description="Gemini API key (receipt scanning is disabled without it)"
    )
    model_name: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=512,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )
    scan_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="Give up on a receipt scan after this many seconds"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class StorageSettings(BaseSettings):
    """Local record store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SMARTRECEIPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".smartreceipt",
        description="Directory holding the JSON documents"
    )

    # Keys of the two persisted documents
    expenses_key: str = Field(
        default="smartreceipt_expenses",
        min_length=1,
        description="Key of the expense collection document"
    )
    settings_key: str = Field(
        default="smartreceipt_settings",
        min_length=1,
        description="Key of the settings document"
    )

    @field_validator('data_dir')
    @classmethod
    def expand_data_dir(cls, v: Path) -> Path:
        return v.expanduser()


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMARTRECEIPT_",
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

    # File upload limits
    max_upload_size_mb: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Maximum receipt image size in MB"
    )
    supported_image_formats: str = Field(
        default="jpg,jpeg,png,webp",
        description="Comma-separated list of supported image formats"
    )

    # Budget calendar
    week_start: str = Field(
        default="sunday",
        description="First day of the week used for the weekly total"
    )

    # Validation thresholds
    max_expense_amount: float = Field(
        default=10000.0,
        gt=0,
        description="Amounts above this are flagged for review (not rejected)"
    )
    future_date_tolerance_days: int = Field(
        default=1,
        ge=0,
        description="How many days in the future an expense date can be"
    )

    @field_validator('week_start')
    @classmethod
    def validate_week_start(cls, v: str) -> str:
        name = v.strip().lower()
        if name not in WEEKDAY_NAMES:
            raise ValueError(
                f"Unknown week start: {v}. Use one of {', '.join(WEEKDAY_NAMES)}"
            )
        return name

    @property
    def week_start_weekday(self) -> int:
        """Week start as a `date.weekday()` number (Monday is 0)."""
        return WEEKDAY_NAMES.index(self.week_start)

    @property
    def supported_formats_list(self) -> list[str]:
        """Get supported formats as a list."""
        return [fmt.strip().lower() for fmt in self.supported_image_formats.split(",")]

    @property
    def supported_mime_types(self) -> set[str]:
        """MIME types accepted for receipt images."""
        types = set()
        for fmt in self.supported_formats_list:
            types.add("image/jpeg" if fmt in ("jpg", "jpeg") else f"image/{fmt}")
        return types

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024


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
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()

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

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks and the settings page.
    """
    results = {}

    settings = get_settings()

    try:
        gemini = settings.gemini
        results["gemini"] = gemini.is_configured
        if not gemini.is_configured:
            results["gemini_error"] = "GEMINI_API_KEY is not set"
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
