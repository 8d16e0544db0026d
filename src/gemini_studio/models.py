"""Model catalogue and data records for Gemini Studio.

Two engine families are supported:
    - conversational: Gemini image models driven by ``generate_content``;
      one request per image, inline-data parts in the response.
    - batch: Imagen driven by ``generate_images``; native image count,
      ``generated_images`` entries in the response.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Literal, TypedDict

from pydantic import BaseModel, ConfigDict, Field, SecretStr

# Type aliases for generation parameters
ModelKey = Literal["flash", "pro", "imagen"]
AspectRatio = Literal["1:1", "3:4", "4:3", "9:16", "16:9"]
ImageSize = Literal["1K", "2K", "4K"]
OutputFormat = Literal["image/png", "image/jpeg"]


class GenerationModel(str, Enum):
    """Supported generation engines, valued by provider model ID."""

    FLASH_IMAGE = "gemini-2.5-flash-image"
    PRO_IMAGE = "gemini-3-pro-image-preview"
    IMAGEN_4 = "imagen-4.0-generate-001"


class EngineFamily(str, Enum):
    """Request/response family an engine belongs to."""

    BATCH = "batch"
    CONVERSATIONAL = "conversational"


class ModelConfig(TypedDict):
    """Configuration for an image generation engine."""

    key: ModelKey
    id: GenerationModel
    name: str
    label: str
    description: str
    family: EngineFamily
    supports_image_size: bool
    supports_search: bool


MODELS: dict[GenerationModel, ModelConfig] = {
    GenerationModel.FLASH_IMAGE: {
        "key": "flash",
        "id": GenerationModel.FLASH_IMAGE,
        "name": "Nano Banana (Gemini 2.5 Flash)",
        "label": "FLASH 2.5",
        "description": "Fast conversational image generation and editing",
        "family": EngineFamily.CONVERSATIONAL,
        "supports_image_size": False,
        "supports_search": False,
    },
    GenerationModel.PRO_IMAGE: {
        "key": "pro",
        "id": GenerationModel.PRO_IMAGE,
        "name": "Nano Banana Pro (Gemini 3 Pro)",
        "label": "PRO 3.0",
        "description": "4K resolution, up to 14 references, Google Search grounding",
        "family": EngineFamily.CONVERSATIONAL,
        "supports_image_size": True,
        "supports_search": True,
    },
    GenerationModel.IMAGEN_4: {
        "key": "imagen",
        "id": GenerationModel.IMAGEN_4,
        "name": "Imagen 4",
        "label": "IMAGEN 4",
        "description": "Batch text-to-image generation, up to 4 images per request",
        "family": EngineFamily.BATCH,
        "supports_image_size": False,
        "supports_search": False,
    },
}

MODEL_KEYS: dict[ModelKey, GenerationModel] = {
    config["key"]: model for model, config in MODELS.items()
}

DEFAULT_MODEL = GenerationModel.PRO_IMAGE

ASPECT_RATIOS: list[AspectRatio] = ["1:1", "3:4", "4:3", "9:16", "16:9"]
IMAGE_SIZES: list[ImageSize] = ["1K", "2K", "4K"]
OUTPUT_FORMATS: list[OutputFormat] = ["image/png", "image/jpeg"]

MAX_REFERENCE_IMAGES = 14
MIN_IMAGES = 1
MAX_IMAGES = 4


def engine_family(model: GenerationModel | str) -> EngineFamily:
    """Return the request/response family for a model."""
    return MODELS[GenerationModel(model)]["family"]


def model_label(model: str) -> str:
    """Short gallery badge for a model identifier."""
    if "pro" in model:
        return MODELS[GenerationModel.PRO_IMAGE]["label"]
    if "flash" in model:
        return MODELS[GenerationModel.FLASH_IMAGE]["label"]
    return MODELS[GenerationModel.IMAGEN_4]["label"]


class SafetySettings(BaseModel):
    """Safety filter toggles.

    Collected with the configuration but not forwarded to any request.
    """

    harassment: bool = False
    hate_speech: bool = False
    sexually_explicit: bool = False
    dangerous_content: bool = False


class ReferenceImage(BaseModel):
    """A user-supplied image attached as generation input.

    Attributes:
        id: Random identifier generated by the caller.
        base64_data: Base64-encoded image payload.
        mime_type: MIME type of the payload.
        preview_url: Locally displayable locator for the image.
    """

    id: str
    base64_data: str
    mime_type: str
    preview_url: str


class GeneratedImage(BaseModel):
    """A single synthesized or edited image.

    Attributes:
        id: Random identifier.
        url: ``data:`` URL embedding the MIME type and payload.
        base64_data: Raw payload, kept so the image can become edit context.
        mime_type: MIME type of the payload.
        prompt: Prompt text that produced the image.
        model: Model identifier that produced the image.
        timestamp: Creation time (UTC).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    base64_data: str | None = None
    mime_type: str | None = None
    prompt: str
    model: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def label(self) -> str:
        """Gallery badge for the producing model."""
        return model_label(self.model)


class ContextImage(BaseModel):
    """Image payload reused as conditioning input for the next request."""

    base64_data: str
    mime_type: str = "image/png"

    @classmethod
    def from_generated(cls, image: GeneratedImage | None) -> ContextImage | None:
        """Build a context from a gallery image.

        Returns None when there is no image or it carries no payload.
        """
        if image is None or not image.base64_data:
            return None
        return cls(base64_data=image.base64_data, mime_type=image.mime_type or "image/png")


class GenerationConfig(BaseModel):
    """Complete specification of a generation request.

    Attributes:
        model: Engine to use.
        prompt: Free-text prompt.
        aspect_ratio: Output aspect ratio.
        image_size: Resolution tier (pro model only).
        number_of_images: Images to generate, 1 to 4.
        output_format: Output encoding (batch engine only).
        google_search: Enable Google Search grounding (pro model only).
        reference_images: Ordered reference images, at most 14.
        safety_settings: Safety filter toggles (not forwarded).
        api_key: Credential overriding the environment one.
    """

    model: GenerationModel = DEFAULT_MODEL
    prompt: str = ""
    aspect_ratio: AspectRatio = "1:1"
    image_size: ImageSize = "1K"
    number_of_images: int = Field(default=1, ge=MIN_IMAGES, le=MAX_IMAGES)
    output_format: OutputFormat = "image/png"
    google_search: bool = False
    reference_images: list[ReferenceImage] = Field(default_factory=list)
    safety_settings: SafetySettings = Field(default_factory=SafetySettings)
    api_key: SecretStr | None = None

    @property
    def family(self) -> EngineFamily:
        """Request/response family of the selected model."""
        return engine_family(self.model)

    @property
    def remaining_reference_slots(self) -> int:
        """How many more reference images can be attached."""
        return max(0, MAX_REFERENCE_IMAGES - len(self.reference_images))
