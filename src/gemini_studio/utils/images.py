"""Image file helpers for reference uploads and saving results."""

from __future__ import annotations

import base64
import binascii
import secrets
from pathlib import Path

from gemini_studio.core.exceptions import ImageDecodeError
from gemini_studio.models import GeneratedImage, ReferenceImage

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".webp": "image/webp",
}

EXTENSIONS = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


def new_reference_id() -> str:
    """Random identifier for a reference image."""
    return secrets.token_hex(4)


def load_image_as_base64(image_path: Path) -> tuple[str, str]:
    """Load an image file and return base64 data and mime type.

    Args:
        image_path: Path to the image file.

    Returns:
        Tuple of (base64_encoded_data, mime_type).

    Raises:
        ImageDecodeError: If the file doesn't exist, isn't a supported
            image type, or can't be read.

    """
    if not image_path.is_file():
        msg = f"Image file not found: {image_path}"
        raise ImageDecodeError(msg, path=str(image_path))

    mime_type = MIME_TYPES.get(image_path.suffix.lower())
    if mime_type is None:
        msg = f"Unsupported image type: {image_path.suffix or image_path.name}"
        raise ImageDecodeError(msg, path=str(image_path))

    try:
        with open(image_path, "rb") as f:
            data = base64.standard_b64encode(f.read()).decode("utf-8")
    except OSError as e:
        msg = f"Could not read image file: {image_path}"
        raise ImageDecodeError(msg, path=str(image_path)) from e

    return data, mime_type


def load_reference_image(image_path: Path) -> ReferenceImage:
    """Read an image file into a reference image.

    Args:
        image_path: Path to the image file.

    Returns:
        ReferenceImage with a ``file://`` preview locator.

    Raises:
        ImageDecodeError: If the file can't be read.

    """
    data, mime_type = load_image_as_base64(image_path)
    return ReferenceImage(
        id=new_reference_id(),
        base64_data=data,
        mime_type=mime_type,
        preview_url=image_path.resolve().as_uri(),
    )


def decode_base64_image(base64_data: str) -> bytes:
    """Decode base64 image data to bytes.

    Raises:
        ImageDecodeError: If the data isn't valid base64.

    """
    try:
        return base64.b64decode(base64_data, validate=True)
    except (binascii.Error, ValueError) as e:
        msg = "Invalid base64 image data"
        raise ImageDecodeError(msg) from e


def get_file_extension(mime_type: str) -> str:
    """Get file extension for a given MIME type.

    Args:
        mime_type: MIME type string (e.g., "image/png").

    Returns:
        File extension including the dot (e.g., ".png").

    """
    return EXTENSIONS.get(mime_type, ".png")


def save_generated_image(image: GeneratedImage, output_dir: Path | None = None) -> Path:
    """Write a generated image to ``gemini-art-<id><ext>``.

    Args:
        image: Image to save. Must carry its payload.
        output_dir: Target directory. Defaults to the current directory.

    Returns:
        Path of the written file.

    Raises:
        ImageDecodeError: If the image has no payload.

    """
    if not image.base64_data:
        msg = f"Image {image.id} has no payload to save"
        raise ImageDecodeError(msg)

    if output_dir is None:
        output_dir = Path.cwd()

    ext = get_file_extension(image.mime_type or "image/png")
    output_path = output_dir / f"gemini-art-{image.id}{ext}"
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "wb") as f:
        f.write(decode_base64_image(image.base64_data))

    return output_path
