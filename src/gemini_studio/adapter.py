"""Request construction for both engine families.

The builders only produce request objects, so this module imports without
the SDK. Dicts use the snake_case field names of ``google.genai.types``;
the service builds the SDK objects from them when sending.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from gemini_studio.core.exceptions import ValidationError
from gemini_studio.models import (
    MODELS,
    ContextImage,
    GenerationConfig,
    GenerationModel,
)
from gemini_studio.utils.images import decode_base64_image

VARIATION_PROMPT = (
    "Create a slight artistic variation of this image, maintaining the core "
    "theme and style but with different details."
)


class ImageBatchRequest(BaseModel):
    """Arguments for ``client.models.generate_images``."""

    model: str
    prompt: str
    config: dict[str, Any] = Field(default_factory=dict)


class ContentRequest(BaseModel):
    """Arguments for ``client.models.generate_content``."""

    model: str
    contents: dict[str, Any]
    config: dict[str, Any] = Field(default_factory=dict)


def effective_prompt(
    prompt: str,
    *,
    has_context: bool = False,
    variation: bool = False,
) -> str:
    """Resolve the prompt text actually sent to the provider.

    Args:
        prompt: Prompt typed by the user.
        has_context: Whether an edit-context image accompanies the request.
        variation: Whether a variation of the context image was requested.

    Returns:
        The user's prompt, or the variation instruction in edit mode.

    Raises:
        ValidationError: If the prompt is blank outside edit mode.

    """
    if variation:
        return VARIATION_PROMPT
    if prompt.strip():
        return prompt
    if has_context:
        return VARIATION_PROMPT
    raise ValidationError(field="prompt", value=prompt)


def build_batch_request(
    config: GenerationConfig,
    prompt: str,
    context: ContextImage | None = None,
) -> list[ImageBatchRequest]:
    """Build the single batch-engine request.

    Context, references, resolution tier and grounding do not apply to this
    family and are left out.
    """
    del context
    return [
        ImageBatchRequest(
            model=config.model.value,
            prompt=prompt,
            config={
                "number_of_images": config.number_of_images,
                "output_mime_type": config.output_format,
                "aspect_ratio": config.aspect_ratio,
            },
        )
    ]


def _inline_part(base64_data: str, mime_type: str) -> dict[str, Any]:
    return {
        "inline_data": {
            "data": decode_base64_image(base64_data),
            "mime_type": mime_type,
        }
    }


def build_content_parts(
    prompt: str,
    context: ContextImage | None = None,
    config: GenerationConfig | None = None,
) -> list[dict[str, Any]]:
    """Order the parts of a conversational request.

    Context image first, then reference images in list order, prompt last.
    """
    parts: list[dict[str, Any]] = []

    if context is not None:
        parts.append(_inline_part(context.base64_data, context.mime_type))

    if config is not None:
        for ref in config.reference_images:
            parts.append(_inline_part(ref.base64_data, ref.mime_type))

    parts.append({"text": prompt})
    return parts


def build_content_config(config: GenerationConfig) -> dict[str, Any]:
    """Generation config for a conversational request."""
    model_config = MODELS[config.model]

    image_config: dict[str, Any] = {"aspect_ratio": config.aspect_ratio}
    if model_config["supports_image_size"]:
        image_config["image_size"] = config.image_size

    config_kwargs: dict[str, Any] = {
        "response_modalities": ["TEXT", "IMAGE"],
        "image_config": image_config,
    }

    # Grounding is silently dropped for models that don't support it
    if config.google_search and model_config["supports_search"]:
        config_kwargs["tools"] = [{"google_search": {}}]

    return config_kwargs


def build_content_requests(
    config: GenerationConfig,
    prompt: str,
    context: ContextImage | None = None,
) -> list[ContentRequest]:
    """Build one conversational request per requested image.

    The family has no batch parameter, so every request is identical.
    """
    parts = build_content_parts(prompt, context, config)
    generate_config = build_content_config(config)

    return [
        ContentRequest(
            model=config.model.value,
            contents={"role": "user", "parts": parts},
            config=generate_config,
        )
        for _ in range(config.number_of_images)
    ]


def supports_search(model: GenerationModel) -> bool:
    """Whether Google Search grounding is forwarded for a model."""
    return MODELS[model]["supports_search"]
