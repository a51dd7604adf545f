"""Configuration module for js-to-ts."""

from js_to_ts.config.settings import (
    INDENTATION_TEXTS,
    FileSettings,
    LoggingSettings,
    OutputSettings,
    Settings,
    get_settings,
)

__all__ = [
    "INDENTATION_TEXTS",
    "FileSettings",
    "LoggingSettings",
    "OutputSettings",
    "Settings",
    "get_settings",
]
