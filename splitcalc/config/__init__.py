"""Configuration package."""

from splitcalc.config.settings import (
    AppSettings,
    CalculatorSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "CalculatorSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
