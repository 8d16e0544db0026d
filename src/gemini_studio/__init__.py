"""Gemini Studio.

Prompt-driven image generation and conversational editing on Google's
Gemini image models and Imagen.

Features:
    - Text-to-image generation with aspect ratio, resolution and count
    - Up to 14 reference images per request
    - Multi-turn editing: each result becomes the context for the next prompt
    - One-click variations of any gallery image
    - Google Search grounding (pro model)

Models:
    - flash: Gemini 2.5 Flash Image (fast generation and editing)
    - pro: Gemini 3 Pro Image (4K, grounding, thinking mode)
    - imagen: Imagen 4 (native batches of up to 4 images)

Example:
    >>> from gemini_studio import StudioSession
    >>> session = StudioSession()
    >>> session.set_prompt("A futuristic city at sunset")
    >>> images = session.generate()

"""

from gemini_studio.core.exceptions import (
    AuthRequiredError,
    EmptyResultError,
    GenerationInProgressError,
    StudioError,
    ValidationError,
)
from gemini_studio.models import (
    ASPECT_RATIOS,
    DEFAULT_MODEL,
    IMAGE_SIZES,
    MAX_REFERENCE_IMAGES,
    MODELS,
    OUTPUT_FORMATS,
    ContextImage,
    EngineFamily,
    GeneratedImage,
    GenerationConfig,
    GenerationModel,
    ReferenceImage,
    SafetySettings,
)
from gemini_studio.presets import STYLE_PRESETS, StylePreset
from gemini_studio.service import generate_images
from gemini_studio.session import StudioSession

__all__ = [
    "ASPECT_RATIOS",
    "DEFAULT_MODEL",
    "IMAGE_SIZES",
    "MAX_REFERENCE_IMAGES",
    "MODELS",
    "OUTPUT_FORMATS",
    "STYLE_PRESETS",
    "AuthRequiredError",
    "ContextImage",
    "EmptyResultError",
    "EngineFamily",
    "GeneratedImage",
    "GenerationConfig",
    "GenerationInProgressError",
    "GenerationModel",
    "ReferenceImage",
    "SafetySettings",
    "StudioError",
    "StudioSession",
    "StylePreset",
    "ValidationError",
    "generate_images",
]

__version__ = "0.1.0"
