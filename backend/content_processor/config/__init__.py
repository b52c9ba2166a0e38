"""Configuration package."""

from content_processor.config.processing import (
    ProcessingSettings,
    get_processing_settings,
    processing_settings,
)
from content_processor.config.settings import Settings, get_settings, settings

__all__ = [
    # Processing settings
    "processing_settings",
    "ProcessingSettings",
    "get_processing_settings",
    # Application settings
    "Settings",
    "get_settings",
    "settings",
]
