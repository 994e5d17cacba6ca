"""
Configuration Management for Splitcalc

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The calculator core itself never reads the environment - it receives a
CalculatorConfig built from these settings when a session is opened.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CalculatorSettings(BaseSettings):
    """Calculator behaviour configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SPLITCALC_",
        extra="ignore"
    )

    max_digits: int = Field(
        default=14,
        ge=1,
        le=15,
        description="Maximum digits in a single number (input and result)"
    )
    thousands_separator: bool = Field(
        default=True,
        description="Group thousands in the live preview"
    )
    fraction_digits: int = Field(
        default=10,
        ge=0,
        le=10,
        description="Maximum fraction digits shown in the live preview"
    )
    touch_threshold_px: float = Field(
        default=10.0,
        ge=0.0,
        description="Pointer travel (px) above which a touch counts as a scroll"
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
        description="Minimum level for session logs"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return v.upper()

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

    @property
    def calculator(self) -> CalculatorSettings:
        return CalculatorSettings()

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

    try:
        _ = settings.calculator
        results["calculator"] = True
    except ValueError as e:
        results["calculator"] = False
        results["calculator_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except ValueError as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
