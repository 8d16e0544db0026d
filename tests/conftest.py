"""Pytest configuration and fixtures for gemini-studio tests."""

from __future__ import annotations

import base64
import os
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock, patch

import pytest

from gemini_studio.core.config import StudioSettings, reset_settings
from gemini_studio.models import GeneratedImage

if TYPE_CHECKING:
    from pathlib import Path

TEST_API_KEY = "test-api-key-secret"

# Minimal valid PNG: 1x1 red pixel
SAMPLE_PNG_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8z8DwHwAFBQIA"
    "X8jx0gAAAABJRU5ErkJggg=="
)


@pytest.fixture(autouse=True)
def reset_settings_after_test():
    """Reset settings singleton after each test."""
    yield
    reset_settings()


@pytest.fixture
def settings() -> StudioSettings:
    """Settings with an environment credential."""
    with patch.dict(os.environ, {}, clear=True):
        return StudioSettings(_env_file=None, api_key=TEST_API_KEY)


@pytest.fixture
def keyless_settings() -> StudioSettings:
    """Settings with no credential at all."""
    with patch.dict(os.environ, {}, clear=True):
        return StudioSettings(_env_file=None)


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Return sample PNG image bytes (1x1 red pixel)."""
    return base64.b64decode(SAMPLE_PNG_B64)


@pytest.fixture
def sample_image_path(tmp_path: Path, sample_image_bytes: bytes) -> Path:
    """Create a temporary sample image file."""
    image_path = tmp_path / "sample.png"
    image_path.write_bytes(sample_image_bytes)
    return image_path


def make_image_part(data: bytes, mime_type: str = "image/png", *, thought: bool = False) -> Any:
    """A response part carrying inline image data."""
    return SimpleNamespace(
        thought=thought,
        text=None,
        inline_data=SimpleNamespace(data=data, mime_type=mime_type),
    )


def make_text_part(text: str) -> Any:
    """A response part carrying only text."""
    return SimpleNamespace(thought=None, text=text, inline_data=None)


def make_content_response(*parts: Any) -> Any:
    """A generate_content response with one candidate."""
    candidate = SimpleNamespace(content=SimpleNamespace(parts=list(parts)))
    return SimpleNamespace(candidates=[candidate], prompt_feedback=None)


def make_batch_response(*payloads: bytes) -> Any:
    """A generate_images response with one entry per payload."""
    return SimpleNamespace(
        generated_images=[
            SimpleNamespace(image=SimpleNamespace(image_bytes=payload))
            for payload in payloads
        ]
    )


@pytest.fixture
def mock_content_response(sample_image_bytes: bytes) -> Any:
    """Gemini response with a single image part."""
    return make_content_response(make_image_part(sample_image_bytes))


@pytest.fixture
def mock_genai_client(mock_content_response: Any, sample_image_bytes: bytes) -> MagicMock:
    """Mock Gemini client answering both engine families."""
    mock_client = MagicMock()
    mock_client.models.generate_content.return_value = mock_content_response
    mock_client.models.generate_images.return_value = make_batch_response(
        sample_image_bytes, sample_image_bytes
    )
    return mock_client


@pytest.fixture
def generated_image() -> GeneratedImage:
    """A previously generated gallery image."""
    return GeneratedImage(
        id="prior01",
        url=f"data:image/png;base64,{SAMPLE_PNG_B64}",
        base64_data=SAMPLE_PNG_B64,
        mime_type="image/png",
        prompt="a lighthouse at dusk",
        model="gemini-3-pro-image-preview",
    )
