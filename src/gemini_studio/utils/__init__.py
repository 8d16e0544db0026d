"""Utility modules for logging and image files."""

from gemini_studio.utils.images import (
    decode_base64_image,
    get_file_extension,
    load_image_as_base64,
    load_reference_image,
    save_generated_image,
)
from gemini_studio.utils.logging import get_logger, setup_logging

__all__ = [
    "decode_base64_image",
    "get_file_extension",
    "get_logger",
    "load_image_as_base64",
    "load_reference_image",
    "save_generated_image",
    "setup_logging",
]
