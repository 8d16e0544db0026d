"""Centralized exception hierarchy for Gemini Studio.

All studio-specific exceptions inherit from StudioError so the session
controller can convert any of them into a single user-facing message.
Provider failures that are not recognised are NOT wrapped: they propagate
unchanged and their text is shown verbatim.

Exception Hierarchy:
    StudioError (base for all studio exceptions)
    ├── ConfigurationError (configuration/settings issues)
    ├── ValidationError (local input validation failures)
    ├── AuthRequiredError (no usable credential, or credential rejected)
    ├── EmptyResultError (provider succeeded but returned no image)
    ├── GenerationInProgressError (a generation is already outstanding)
    └── ImageDecodeError (a reference image file could not be read)

Usage:
    from gemini_studio.core.exceptions import AuthRequiredError, StudioError

    try:
        images = generate_images(config)
    except AuthRequiredError:
        open_key_selector()
    except StudioError as e:
        show_banner(e.message)
"""

from __future__ import annotations

from typing import Any

AUTH_REQUIRED_MESSAGE = (
    "Please select a valid API key from a paid GCP project to use the Pro model."
)
EMPTY_RESULT_MESSAGE = "The model did not return any image. Try adjusting your prompt."
EMPTY_PROMPT_MESSAGE = "Enter a prompt to create your artwork."


class StudioError(Exception):
    """Base exception for all Gemini Studio errors.

    Attributes:
        message: Human-readable error message.
        details: Additional context about the error (optional).
        error_code: Machine-readable error code (optional).

    Example:
        >>> raise StudioError("Something went wrong", error_code="ERR001")
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Additional context as key-value pairs.
            error_code: Machine-readable error code.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.error_code = error_code

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for display or logging.

        Returns:
            Dictionary with error details suitable for JSON serialization.
        """
        result: dict[str, Any] = {
            "error": self.__class__.__name__,
            "message": self.message,
        }
        if self.error_code:
            result["code"] = self.error_code
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(StudioError):
    """Configuration-related errors.

    Raised when environment variables or settings cannot be used.
    """

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(
            message, details=details, error_code=error_code or "CONFIGURATION_ERROR"
        )


class ValidationError(StudioError):
    """Local input validation errors.

    Raised before any network call, e.g. when an empty prompt is submitted
    with no active edit context.

    Example:
        >>> raise ValidationError("Enter a prompt", field="prompt", value="")
    """

    def __init__(
        self,
        message: str = EMPTY_PROMPT_MESSAGE,
        *,
        field: str | None = None,
        value: Any = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Description of the validation failure.
            field: Name of the field that failed validation.
            value: The invalid value (truncated in details).
            details: Additional validation context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        if field:
            details["field"] = field
        if value is not None:
            # Truncate long values to avoid log bloat
            str_value = str(value)
            details["value"] = (
                str_value[:100] + "..." if len(str_value) > 100 else str_value
            )
        super().__init__(
            message, details=details, error_code=error_code or "VALIDATION_ERROR"
        )


class AuthRequiredError(StudioError):
    """No usable credential for the requested model.

    Raised both when no credential exists before a call and when the
    provider reports that the requested entity was not found, which in
    practice means the key has no access to the model tier.
    """

    def __init__(
        self,
        message: str = AUTH_REQUIRED_MESSAGE,
        *,
        model: str | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize credential error.

        Args:
            message: Instruction shown to the user.
            model: Model identifier the credential was needed for.
            details: Additional context (never the credential itself).
            error_code: Machine-readable error code.
        """
        details = details or {}
        if model:
            details["model"] = model
        super().__init__(
            message, details=details, error_code=error_code or "BYOK_REQUIRED"
        )


class EmptyResultError(StudioError):
    """The provider answered successfully but produced no image payload."""

    def __init__(
        self,
        message: str = EMPTY_RESULT_MESSAGE,
        *,
        model: str | None = None,
        requests: int | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        """Initialize empty result error.

        Args:
            message: Guidance shown to the user.
            model: Model identifier that returned nothing.
            requests: Number of provider requests issued.
            details: Additional context.
            error_code: Machine-readable error code.
        """
        details = details or {}
        if model:
            details["model"] = model
        if requests is not None:
            details["requests"] = requests
        super().__init__(
            message, details=details, error_code=error_code or "EMPTY_RESULT"
        )


class GenerationInProgressError(StudioError):
    """A generation was requested while another one is still outstanding."""

    def __init__(
        self,
        message: str = "A generation is already in progress.",
        *,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(
            message, details=details, error_code=error_code or "GENERATION_IN_PROGRESS"
        )


class ImageDecodeError(StudioError):
    """An image file could not be read or encoded.

    Example:
        >>> raise ImageDecodeError("Image file not found", path="missing.png")
    """

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        details = details or {}
        if path:
            details["path"] = path
        super().__init__(
            message, details=details, error_code=error_code or "IMAGE_DECODE_ERROR"
        )


__all__ = [
    "AUTH_REQUIRED_MESSAGE",
    "EMPTY_PROMPT_MESSAGE",
    "EMPTY_RESULT_MESSAGE",
    "AuthRequiredError",
    "ConfigurationError",
    "EmptyResultError",
    "GenerationInProgressError",
    "ImageDecodeError",
    "StudioError",
    "ValidationError",
]
