"""Image generation against the Gemini and Imagen APIs.

Each engine family is a (build, send, extract) triple registered in
``ENGINES``; ``generate_images`` only resolves the credential, dispatches
on the family and aggregates the results.
"""
# ruff: noqa: PLC0415

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from gemini_studio.adapter import (
    ContentRequest,
    ImageBatchRequest,
    build_batch_request,
    build_content_requests,
    effective_prompt,
)
from gemini_studio.core.config import StudioSettings, get_settings
from gemini_studio.core.exceptions import AuthRequiredError, EmptyResultError
from gemini_studio.models import (
    ContextImage,
    EngineFamily,
    GeneratedImage,
    GenerationConfig,
)
from gemini_studio.normalizer import extract_batch_images, extract_content_images

logger = logging.getLogger(__name__)

ENTITY_NOT_FOUND = "requested entity was not found"

# Lazy import for google.genai
_genai = None
_types = None


def _get_genai() -> tuple[Any, Any]:
    """Lazy import google.genai so the models and adapter import without it."""
    global _genai, _types  # noqa: PLW0603
    if _genai is None:
        try:
            from google import genai
            from google.genai import types

            _genai = genai
            _types = types
        except ImportError as e:
            msg = (
                "google-genai package not installed. "
                "Install with: pip install google-genai"
            )
            raise ImportError(msg) from e
    return _genai, _types


def create_client(api_key: str) -> Any:
    """Create a Gemini API client for the given key."""
    genai, _ = _get_genai()
    return genai.Client(api_key=api_key)


def resolve_api_key(
    config: GenerationConfig,
    settings: StudioSettings | None = None,
) -> str:
    """Pick the credential for a request.

    The key on the config wins over the environment key.

    Raises:
        AuthRequiredError: If neither is set.
    """
    if config.api_key is not None and config.api_key.get_secret_value():
        return config.api_key.get_secret_value()

    settings = settings or get_settings()
    api_key = settings.get_api_key_value()
    if api_key:
        return api_key

    raise AuthRequiredError(model=config.model.value)


def is_entity_not_found(error: BaseException) -> bool:
    """Whether a provider error means the key can't reach the model."""
    if ENTITY_NOT_FOUND in str(error).lower():
        return True
    return getattr(error, "status", None) == "NOT_FOUND" or getattr(error, "code", None) == 404


@dataclass(frozen=True)
class Engine:
    """Request builder, transport call and response extractor for a family."""

    build: Callable[[GenerationConfig, str, ContextImage | None], list[Any]]
    send: Callable[[Any, Any], Any]
    extract: Callable[[Any, GenerationConfig, str], list[GeneratedImage]]


def _send_batch(client: Any, request: ImageBatchRequest) -> Any:
    _, types = _get_genai()
    return client.models.generate_images(
        model=request.model,
        prompt=request.prompt,
        config=types.GenerateImagesConfig(**request.config),
    )


def _send_content(client: Any, request: ContentRequest) -> Any:
    _, types = _get_genai()
    return client.models.generate_content(
        model=request.model,
        contents=types.Content(**request.contents),
        config=types.GenerateContentConfig(**request.config),
    )


def _extract_batch(response: Any, config: GenerationConfig, prompt: str) -> list[GeneratedImage]:
    return extract_batch_images(
        response,
        prompt=prompt,
        model=config.model.value,
        output_format=config.output_format,
    )


def _extract_content(response: Any, config: GenerationConfig, prompt: str) -> list[GeneratedImage]:
    return extract_content_images(response, prompt=prompt, model=config.model.value)


ENGINES: dict[EngineFamily, Engine] = {
    EngineFamily.BATCH: Engine(
        build=build_batch_request,
        send=_send_batch,
        extract=_extract_batch,
    ),
    EngineFamily.CONVERSATIONAL: Engine(
        build=build_content_requests,
        send=_send_content,
        extract=_extract_content,
    ),
}


def generate_images(
    config: GenerationConfig,
    context: ContextImage | None = None,
    *,
    variation: bool = False,
    settings: StudioSettings | None = None,
    client: Any = None,
) -> list[GeneratedImage]:
    """Generate images for a configuration.

    Args:
        config: Generation configuration.
        context: Previously generated image to edit, if any.
        variation: Request a variation of the context image instead of
            applying the prompt.
        settings: Settings used for the environment credential.
        client: Pre-built Gemini client. Created from the resolved key
            when omitted.

    Returns:
        All images produced, in request issuance order.

    Raises:
        AuthRequiredError: If no credential is available, or the provider
            reports the model as not found for this key.
        ValidationError: If the prompt is blank outside edit mode.
        EmptyResultError: If the provider returned no image at all.
        Exception: Any other provider error, unchanged.

    """
    api_key = resolve_api_key(config, settings)
    prompt = effective_prompt(
        config.prompt, has_context=context is not None, variation=variation
    )

    engine = ENGINES[config.family]
    requests = engine.build(config, prompt, context)

    logger.info(
        "Generating %d image(s) with %s in %d request(s)",
        config.number_of_images,
        config.model.value,
        len(requests),
    )

    if client is None:
        client = create_client(api_key)

    results: list[GeneratedImage] = []
    try:
        # One request at a time; results keep issuance order
        for request in requests:
            response = engine.send(client, request)
            results.extend(engine.extract(response, config, prompt))
    except Exception as e:
        logger.error("Image generation failed: %s", e)
        if is_entity_not_found(e):
            raise AuthRequiredError(model=config.model.value) from e
        raise

    if not results:
        raise EmptyResultError(model=config.model.value, requests=len(requests))

    logger.info("Generated %d image(s)", len(results))
    return results
