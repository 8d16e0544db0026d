"""Session state for the studio.

StudioSession owns everything a user interacts with between generations:
the current configuration, the gallery (newest first), the active edit
context, the in-flight flag and the last error message. All generation
errors are converted into ``error`` here; nothing raised by the provider
escapes ``generate``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from itertools import islice
from pathlib import Path
from threading import Lock
from typing import Any, Protocol

from pydantic import SecretStr

from gemini_studio.adapter import effective_prompt
from gemini_studio.core.config import StudioSettings, get_settings
from gemini_studio.core.exceptions import (
    AuthRequiredError,
    GenerationInProgressError,
    ImageDecodeError,
    StudioError,
)
from gemini_studio.models import (
    AspectRatio,
    ContextImage,
    GeneratedImage,
    GenerationConfig,
    GenerationModel,
    ImageSize,
    OutputFormat,
    ReferenceImage,
    SafetySettings,
)
from gemini_studio.normalizer import normalize_images
from gemini_studio.presets import StylePreset, get_preset
from gemini_studio.service import generate_images
from gemini_studio.utils.images import load_reference_image

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An error occurred while generating images."

Generator = Callable[..., list[GeneratedImage]]


class CredentialSelector(Protocol):
    """Host capability for picking an API key.

    Both methods are optional; a host may implement either, both or neither.
    """

    def open_select_key(self) -> Any: ...

    def has_selected_api_key(self) -> bool: ...


class StudioSession:
    """Mutable studio state and its transitions.

    Example:
        ```python
        session = StudioSession()
        session.set_prompt("A red fox in snow")
        session.generate()

        # Continue editing the newest result
        session.set_prompt("Make it night time")
        session.generate()
        ```
    """

    def __init__(
        self,
        settings: StudioSettings | None = None,
        *,
        client: Any = None,
        generator: Generator | None = None,
        credential_selector: CredentialSelector | None = None,
    ) -> None:
        """Initialize an empty session.

        Args:
            settings: Optional settings. If not provided, reads from environment.
            client: Optional pre-built Gemini client passed to the generator.
            generator: Replacement for ``generate_images``.
            credential_selector: Host key-selection capability, if any.
        """
        self.settings = settings or get_settings()
        self.config = GenerationConfig(
            model=self.settings.default_model,
            aspect_ratio=self.settings.default_aspect_ratio,
            image_size=self.settings.default_image_size,
            output_format=self.settings.default_output_format,
        )
        self.gallery: list[GeneratedImage] = []
        self.active_context: GeneratedImage | None = None
        self.is_generating = False
        self.error: str | None = None

        self._client = client
        self._generator = generator or generate_images
        self._credential_selector = credential_selector
        self._lock = Lock()

    # =========================================================================
    # Configuration
    # =========================================================================

    def update_config(self, **changes: Any) -> GenerationConfig:
        """Replace the configuration with a copy carrying ``changes``.

        Raises:
            pydantic.ValidationError: If a value is outside its allowed set.
        """
        self.config = GenerationConfig(**{**dict(self.config), **changes})
        return self.config

    def set_model(self, model: GenerationModel | str) -> None:
        self.update_config(model=GenerationModel(model))

    def set_prompt(self, prompt: str) -> None:
        self.update_config(prompt=prompt)

    def set_aspect_ratio(self, aspect_ratio: AspectRatio) -> None:
        self.update_config(aspect_ratio=aspect_ratio)

    def set_image_size(self, image_size: ImageSize) -> None:
        self.update_config(image_size=image_size)

    def set_number_of_images(self, count: int) -> None:
        self.update_config(number_of_images=count)

    def set_output_format(self, output_format: OutputFormat) -> None:
        self.update_config(output_format=output_format)

    def set_google_search(self, enabled: bool) -> None:
        self.update_config(google_search=enabled)

    def set_safety_setting(self, name: str, enabled: bool) -> None:
        """Toggle one safety filter flag.

        Raises:
            ValueError: If ``name`` isn't a safety flag.
        """
        if name not in SafetySettings.model_fields:
            msg = f"Unknown safety setting: {name}"
            raise ValueError(msg)
        self.update_config(
            safety_settings=self.config.safety_settings.model_copy(update={name: enabled})
        )

    def set_api_key(self, api_key: str | None) -> None:
        self.update_config(api_key=SecretStr(api_key) if api_key else None)

    def apply_preset(self, preset: StylePreset | str) -> None:
        """Overwrite the prompt with a preset's prompt. Nothing else changes."""
        if isinstance(preset, str):
            preset = get_preset(preset)
        self.set_prompt(preset.prompt)

    # =========================================================================
    # Reference images
    # =========================================================================

    def add_reference_images(self, files: Iterable[Path | str]) -> list[ReferenceImage]:
        """Attach image files as references.

        Files beyond the remaining capacity are dropped before being read.
        A file that can't be read is skipped.

        Returns:
            The reference images actually added.
        """
        capacity = self.config.remaining_reference_slots
        added: list[ReferenceImage] = []

        for file in islice(files, capacity):
            try:
                added.append(load_reference_image(Path(file)))
            except ImageDecodeError as e:
                logger.warning("Skipping reference image %s: %s", file, e.message)

        if added:
            self.update_config(reference_images=[*self.config.reference_images, *added])
            logger.debug(
                "Added %d reference image(s), %d slot(s) left",
                len(added),
                self.config.remaining_reference_slots,
            )
        return added

    def remove_reference_image(self, reference_id: str) -> None:
        self.update_config(
            reference_images=[
                ref for ref in self.config.reference_images if ref.id != reference_id
            ]
        )

    def clear_reference_images(self) -> None:
        self.update_config(reference_images=[])

    # =========================================================================
    # Gallery and edit context
    # =========================================================================

    def set_active_context(self, image: GeneratedImage | None) -> None:
        self.active_context = image

    def clear_active_context(self) -> None:
        self.active_context = None

    def adopt_latest_result(self, images: list[GeneratedImage]) -> None:
        """Make the first new image the edit context for the next request."""
        if images:
            self.active_context = images[0]

    def clear_gallery(self) -> None:
        """Discard all generated images."""
        self.gallery = []

    def dismiss_error(self) -> None:
        self.error = None

    # =========================================================================
    # Credential selection
    # =========================================================================

    def open_credential_selector(self) -> None:
        """Ask the host to open its key selector. Failures are only logged."""
        open_select_key = getattr(self._credential_selector, "open_select_key", None)
        if open_select_key is None:
            return
        try:
            open_select_key()
        except Exception:
            logger.exception("Failed to open key selector")

    def _has_selected_key(self) -> bool | None:
        has_selected = getattr(self._credential_selector, "has_selected_api_key", None)
        if has_selected is None:
            return None
        try:
            return bool(has_selected())
        except Exception:
            logger.exception("Failed to query selected key")
            return None

    # =========================================================================
    # Generation
    # =========================================================================

    def generate(self, variation_target: GeneratedImage | None = None) -> list[GeneratedImage]:
        """Run one generation and record its outcome.

        Args:
            variation_target: Image to make a variation of. When omitted the
                active context, if any, is edited with the current prompt.

        Returns:
            The new images, or an empty list when the attempt failed (see
            ``error``).

        Raises:
            GenerationInProgressError: If another generation is outstanding.

        """
        if not self._lock.acquire(blocking=False):
            raise GenerationInProgressError
        try:
            return self._generate(variation_target)
        finally:
            self._lock.release()

    def _generate(self, variation_target: GeneratedImage | None) -> list[GeneratedImage]:
        variation = variation_target is not None
        context = ContextImage.from_generated(variation_target or self.active_context)

        try:
            effective_prompt(
                self.config.prompt, has_context=context is not None, variation=variation
            )
        except StudioError as e:
            self.error = e.message
            return []

        selector_opened = False
        if (
            self.config.model is GenerationModel.PRO_IMAGE
            and self._has_selected_key() is False
        ):
            self.open_credential_selector()
            selector_opened = True

        self.is_generating = True
        self.error = None
        try:
            images = self._generator(
                self.config,
                context,
                variation=variation,
                settings=self.settings,
                client=self._client,
            )
        except AuthRequiredError as e:
            self.error = e.message
            if not selector_opened:
                self.open_credential_selector()
            return []
        except StudioError as e:
            self.error = e.message
            return []
        except Exception as e:
            self.error = str(e) or GENERIC_ERROR_MESSAGE
            return []
        finally:
            self.is_generating = False

        images = normalize_images(images)
        self.gallery = [*images, *self.gallery]
        self.adopt_latest_result(images)
        return images
