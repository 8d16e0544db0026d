"""Response normalization into GeneratedImage records.

Both engine families end up as the same record type: a ``data:`` URL for
display plus the raw base64 payload kept for reuse as edit context.
"""

from __future__ import annotations

import base64
import logging
import secrets
from collections.abc import Iterable, Mapping
from typing import Any

from gemini_studio.models import GeneratedImage

logger = logging.getLogger(__name__)


def new_image_id() -> str:
    """Random identifier for a generated image."""
    return secrets.token_hex(5)


def encode_payload(data: bytes | str) -> str:
    """Return a base64 text payload.

    google-genai hands out decoded bytes; text is assumed to be base64 already.
    """
    if isinstance(data, bytes | bytearray):
        return base64.standard_b64encode(data).decode("utf-8")
    return data


def to_data_url(mime_type: str, payload: str) -> str:
    """Build a self-contained ``data:`` URL."""
    return f"data:{mime_type};base64,{payload}"


def _make_image(payload: bytes | str, mime_type: str, prompt: str, model: str) -> GeneratedImage:
    encoded = encode_payload(payload)
    return GeneratedImage(
        id=new_image_id(),
        url=to_data_url(mime_type, encoded),
        base64_data=encoded,
        mime_type=mime_type,
        prompt=prompt,
        model=model,
    )


def extract_batch_images(
    response: Any,
    *,
    prompt: str,
    model: str,
    output_format: str,
) -> list[GeneratedImage]:
    """Extract images from a ``generate_images`` response.

    Args:
        response: Provider response with ``generated_images`` entries.
        prompt: Prompt text used for the request.
        model: Model identifier used for the request.
        output_format: Requested MIME type, used for every entry.

    Returns:
        One record per entry carrying image bytes, in provider order.
    """
    images: list[GeneratedImage] = []

    for entry in getattr(response, "generated_images", None) or []:
        image = getattr(entry, "image", None)
        data = getattr(image, "image_bytes", None) if image is not None else None
        if data is None:
            logger.debug("Skipping generated image entry without bytes")
            continue
        images.append(_make_image(data, output_format, prompt, model))

    logger.debug("Batch response yielded %d image(s)", len(images))
    return images


def extract_content_images(
    response: Any,
    *,
    prompt: str,
    model: str,
) -> list[GeneratedImage]:
    """Extract images from a ``generate_content`` response.

    Only the first candidate is scanned. Every non-thought part carrying
    inline data yields one record, typed with the MIME type that part
    reports.

    Args:
        response: Provider response with ``candidates``.
        prompt: Prompt text used for the request.
        model: Model identifier used for the request.

    Returns:
        Records in part order. Empty when nothing usable came back.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        feedback = getattr(response, "prompt_feedback", None)
        logger.warning("No response candidates returned (feedback: %s)", feedback)
        return []

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []

    images: list[GeneratedImage] = []
    for part in parts:
        # Thought parts are intermediate renders, not results
        if getattr(part, "thought", None) is True:
            logger.debug("Skipping thought part")
            continue

        inline_data = getattr(part, "inline_data", None)
        if inline_data is None or getattr(inline_data, "data", None) is None:
            text = getattr(part, "text", None)
            if isinstance(text, str):
                logger.debug("Model response text: %s", text[:200])
            continue

        mime_type = getattr(inline_data, "mime_type", None) or "image/png"
        images.append(_make_image(inline_data.data, mime_type, prompt, model))

    logger.debug("Content response yielded %d image(s)", len(images))
    return images


def normalize_images(
    items: Iterable[GeneratedImage | Mapping[str, Any]],
) -> list[GeneratedImage]:
    """Coerce already-normalized records into GeneratedImage instances.

    Records pass through untouched; their dict dumps are re-validated without
    changing id, payload or prompt.
    """
    return [
        item if isinstance(item, GeneratedImage) else GeneratedImage.model_validate(item)
        for item in items
    ]
