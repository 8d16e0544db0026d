"""Gemini Studio configuration settings.

Environment-based configuration for the provider credential and the
defaults a fresh session starts from.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from gemini_studio.core.exceptions import ConfigurationError
from gemini_studio.models import (
    ASPECT_RATIOS,
    DEFAULT_MODEL,
    IMAGE_SIZES,
    AspectRatio,
    GenerationModel,
    ImageSize,
    OutputFormat,
)


class StudioSettings(BaseSettings):
    """Configuration for Gemini Studio.

    All settings can be configured via environment variables or .env file.

    Attributes:
        api_key: Environment-provided Gemini API key. A key set on the
            generation config takes precedence over this one.
        default_model: Engine a new session starts with.
        default_aspect_ratio: Aspect ratio a new session starts with.
        default_image_size: Resolution tier a new session starts with.
        default_output_format: Output encoding a new session starts with.
        log_level: Log level used by the command-line interface.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "api_key", "GEMINI_API_KEY", "API_KEY", "VITE_API_KEY"
        ),
        description="Gemini API key used when the session supplies none",
    )
    default_model: GenerationModel = Field(
        default=DEFAULT_MODEL,
        alias="STUDIO_DEFAULT_MODEL",
        description="Engine selected when a session starts",
    )
    default_aspect_ratio: AspectRatio = Field(
        default="1:1",
        alias="STUDIO_DEFAULT_ASPECT_RATIO",
        description=f"One of {', '.join(ASPECT_RATIOS)}",
    )
    default_image_size: ImageSize = Field(
        default="1K",
        alias="STUDIO_DEFAULT_IMAGE_SIZE",
        description=f"One of {', '.join(IMAGE_SIZES)} (pro model only)",
    )
    default_output_format: OutputFormat = Field(
        default="image/png",
        alias="STUDIO_DEFAULT_OUTPUT_FORMAT",
        description="image/png or image/jpeg",
    )
    log_level: str = Field(
        default="WARNING",
        alias="STUDIO_LOG_LEVEL",
        description="Logging level for the CLI",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            msg = f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            raise ValueError(msg)
        return v.upper()

    def get_api_key_value(self) -> str | None:
        """Get the environment API key as a plain string.

        Returns:
            The API key, or None when no non-empty key is configured.
        """
        if self.api_key is None:
            return None
        return self.api_key.get_secret_value() or None


_settings_instance: StudioSettings | None = None


def get_settings() -> StudioSettings:
    """Get default settings (singleton, reads from environment).

    Returns:
        StudioSettings instance.

    Raises:
        ConfigurationError: If an environment variable holds an invalid value.
    """
    global _settings_instance
    if _settings_instance is None:
        try:
            _settings_instance = StudioSettings()
        except PydanticValidationError as e:
            msg = "Invalid Gemini Studio configuration"
            raise ConfigurationError(
                msg, details={"errors": [err["msg"] for err in e.errors()]}
            ) from e
    return _settings_instance


def reset_settings() -> None:
    """Reset singleton (for testing)."""
    global _settings_instance
    _settings_instance = None
