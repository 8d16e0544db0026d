"""Core configuration, settings, and exception modules."""

from gemini_studio.core.config import StudioSettings, get_settings, reset_settings
from gemini_studio.core.exceptions import (
    AuthRequiredError,
    ConfigurationError,
    EmptyResultError,
    GenerationInProgressError,
    ImageDecodeError,
    StudioError,
    ValidationError,
)

__all__ = [
    # Exceptions (sorted alphabetically)
    "AuthRequiredError",
    "ConfigurationError",
    "EmptyResultError",
    "GenerationInProgressError",
    "ImageDecodeError",
    "StudioError",
    # Configuration
    "StudioSettings",
    "ValidationError",
    "get_settings",
    "reset_settings",
]
