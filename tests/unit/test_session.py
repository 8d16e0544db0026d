"""Tests for the session state controller."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock, patch

import pytest
from conftest import make_content_response, make_image_part, make_text_part
from pydantic import ValidationError as PydanticValidationError

from gemini_studio import service
from gemini_studio import session as session_module
from gemini_studio.adapter import VARIATION_PROMPT
from gemini_studio.core.exceptions import (
    AUTH_REQUIRED_MESSAGE,
    EMPTY_PROMPT_MESSAGE,
    EMPTY_RESULT_MESSAGE,
    GenerationInProgressError,
)
from gemini_studio.models import GeneratedImage, GenerationModel
from gemini_studio.presets import STYLE_PRESETS
from gemini_studio.session import GENERIC_ERROR_MESSAGE, StudioSession

if TYPE_CHECKING:
    from pathlib import Path

    from gemini_studio.core.config import StudioSettings


class HostSelector:
    """Credential selector recording its calls."""

    def __init__(self, *, has_key: bool = True, fail: bool = False) -> None:
        self.has_key = has_key
        self.fail = fail
        self.opened = 0

    def open_select_key(self) -> None:
        self.opened += 1
        if self.fail:
            msg = "selector unavailable"
            raise RuntimeError(msg)

    def has_selected_api_key(self) -> bool:
        return self.has_key


@pytest.fixture
def session(settings: StudioSettings, mock_genai_client: MagicMock) -> StudioSession:
    """Session wired to the mock Gemini client."""
    return StudioSession(settings, client=mock_genai_client)


def _write_images(tmp_path: Path, count: int, data: bytes) -> list[Path]:
    paths = []
    for i in range(count):
        path = tmp_path / f"ref{i}.png"
        path.write_bytes(data)
        paths.append(path)
    return paths


class TestConfiguration:
    """Tests for configuration setters."""

    @pytest.mark.unit
    def test_initial_config_from_settings(self, session: StudioSession) -> None:
        """Test a new session starts from the settings defaults."""
        assert session.config.model is GenerationModel.PRO_IMAGE
        assert session.config.aspect_ratio == "1:1"
        assert session.gallery == []
        assert session.active_context is None
        assert session.is_generating is False
        assert session.error is None

    @pytest.mark.unit
    def test_setters_replace_config(self, session: StudioSession) -> None:
        """Test each setter swaps in a new config object."""
        before = session.config

        session.set_model("imagen-4.0-generate-001")
        session.set_prompt("a red fox in snow")
        session.set_aspect_ratio("16:9")
        session.set_image_size("4K")
        session.set_number_of_images(4)
        session.set_output_format("image/jpeg")
        session.set_google_search(True)
        session.set_safety_setting("hate_speech", True)
        session.set_api_key("caller-key")

        config = session.config
        assert config is not before
        assert before.prompt == ""
        assert config.model is GenerationModel.IMAGEN_4
        assert config.prompt == "a red fox in snow"
        assert config.aspect_ratio == "16:9"
        assert config.image_size == "4K"
        assert config.number_of_images == 4
        assert config.output_format == "image/jpeg"
        assert config.google_search is True
        assert config.safety_settings.hate_speech is True
        assert config.safety_settings.harassment is False
        assert config.api_key is not None
        assert config.api_key.get_secret_value() == "caller-key"

    @pytest.mark.unit
    def test_count_out_of_range(self, session: StudioSession) -> None:
        """Test counts outside 1-4 are rejected."""
        with pytest.raises(PydanticValidationError):
            session.set_number_of_images(5)

    @pytest.mark.unit
    def test_unknown_safety_setting(self, session: StudioSession) -> None:
        """Test unknown safety flags are rejected."""
        with pytest.raises(ValueError, match="Unknown safety setting"):
            session.set_safety_setting("violence", True)

    @pytest.mark.unit
    def test_clear_api_key(self, session: StudioSession) -> None:
        """Test an empty key clears the override."""
        session.set_api_key("caller-key")
        session.set_api_key(None)

        assert session.config.api_key is None

    @pytest.mark.unit
    def test_apply_preset_only_changes_prompt(self, session: StudioSession) -> None:
        """Test presets overwrite the prompt and nothing else."""
        session.set_aspect_ratio("3:4")
        session.set_number_of_images(2)

        session.apply_preset("noir cinema")

        assert session.config.prompt == STYLE_PRESETS[3].prompt
        assert session.config.aspect_ratio == "3:4"
        assert session.config.number_of_images == 2

    @pytest.mark.unit
    def test_apply_preset_object(self, session: StudioSession) -> None:
        """Test presets can be applied directly."""
        session.apply_preset(STYLE_PRESETS[0])

        assert session.config.prompt.startswith("A neon-lit cyberpunk")

    @pytest.mark.unit
    def test_unknown_preset(self, session: StudioSession) -> None:
        """Test unknown preset names raise KeyError."""
        with pytest.raises(KeyError):
            session.apply_preset("Vaporwave")


class TestReferenceImages:
    """Tests for reference image management."""

    @pytest.mark.unit
    def test_add_reference_images(
        self, session: StudioSession, sample_image_path: Path
    ) -> None:
        """Test files are decoded into reference images."""
        added = session.add_reference_images([sample_image_path])

        assert len(added) == 1
        assert session.config.reference_images == added
        assert added[0].mime_type == "image/png"
        assert added[0].preview_url.startswith("file://")

    @pytest.mark.unit
    def test_fifteen_files_with_fourteen_slots(
        self, session: StudioSession, tmp_path: Path, sample_image_bytes: bytes
    ) -> None:
        """Test the 15th file is silently dropped."""
        files = _write_images(tmp_path, 15, sample_image_bytes)

        added = session.add_reference_images(files)

        assert len(added) == 14
        assert len(session.config.reference_images) == 14
        assert session.error is None

    @pytest.mark.unit
    def test_full_capacity_adds_nothing(
        self, session: StudioSession, tmp_path: Path, sample_image_bytes: bytes
    ) -> None:
        """Test no entry is added once 14 references are attached."""
        session.add_reference_images(_write_images(tmp_path, 14, sample_image_bytes))
        extra = tmp_path / "extra.png"
        extra.write_bytes(sample_image_bytes)

        added = session.add_reference_images([extra])

        assert added == []
        assert len(session.config.reference_images) == 14

    @pytest.mark.unit
    def test_partial_capacity(
        self, session: StudioSession, tmp_path: Path, sample_image_bytes: bytes
    ) -> None:
        """Test only the remaining slots are filled."""
        session.add_reference_images(_write_images(tmp_path, 13, sample_image_bytes))

        added = session.add_reference_images(_write_images(tmp_path, 3, sample_image_bytes))

        assert len(added) == 1
        assert len(session.config.reference_images) == 14

    @pytest.mark.unit
    def test_unreadable_file_skipped(
        self, session: StudioSession, tmp_path: Path, sample_image_path: Path
    ) -> None:
        """Test a decode failure skips that file only."""
        added = session.add_reference_images([tmp_path / "missing.png", sample_image_path])

        assert len(added) == 1
        assert session.error is None

    @pytest.mark.unit
    def test_non_image_file_skipped(
        self, session: StudioSession, tmp_path: Path, sample_image_path: Path
    ) -> None:
        """Test a file that isn't a known image type doesn't take a slot."""
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        added = session.add_reference_images([notes, sample_image_path])

        assert [ref.mime_type for ref in added] == ["image/png"]
        assert session.config.reference_images == added
        assert session.config.remaining_reference_slots == 13

    @pytest.mark.unit
    def test_remove_and_clear(
        self, session: StudioSession, tmp_path: Path, sample_image_bytes: bytes
    ) -> None:
        """Test references can be removed by id or all at once."""
        first, second = session.add_reference_images(
            _write_images(tmp_path, 2, sample_image_bytes)
        )

        session.remove_reference_image(first.id)
        assert session.config.reference_images == [second]

        session.clear_reference_images()
        assert session.config.reference_images == []


class TestGenerate:
    """Tests for the generate transition."""

    @pytest.mark.unit
    def test_success_prepends_and_adopts_context(
        self, session: StudioSession, mock_genai_client: MagicMock
    ) -> None:
        """Test results go to the head of the gallery and become context."""
        session.set_prompt("a red fox in snow")
        first = session.generate()

        session.set_number_of_images(2)
        session.set_prompt("make it night")
        second = session.generate()

        assert session.gallery == [*second, *first]
        assert session.active_context == second[0]
        assert session.is_generating is False
        assert session.error is None

    @pytest.mark.unit
    def test_batch_engine_scenario(self, session: StudioSession) -> None:
        """Test an Imagen request yields the provider-reported images."""
        session.set_model(GenerationModel.IMAGEN_4)
        session.set_prompt("a red fox in snow")
        session.set_number_of_images(2)

        images = session.generate()

        assert len(images) == 2
        assert all(img.model == "imagen-4.0-generate-001" for img in images)
        assert all(img.prompt == "a red fox in snow" for img in images)

    @pytest.mark.unit
    def test_second_turn_sends_previous_result(
        self, session: StudioSession, mock_genai_client: MagicMock
    ) -> None:
        """Test the newest result is sent as context on the next turn."""
        session.set_prompt("a lighthouse")
        (first,) = session.generate()

        session.set_prompt("add a storm")
        session.generate()

        contents = mock_genai_client.models.generate_content.call_args.kwargs["contents"]
        assert contents.parts[0].inline_data.mime_type == first.mime_type
        assert contents.parts[-1].text == "add a storm"

    @pytest.mark.unit
    def test_empty_prompt_without_context(
        self, session: StudioSession, mock_genai_client: MagicMock
    ) -> None:
        """Test validation error is surfaced with no network call."""
        images = session.generate()

        assert images == []
        assert session.error == EMPTY_PROMPT_MESSAGE
        mock_genai_client.models.generate_content.assert_not_called()

    @pytest.mark.unit
    def test_empty_prompt_with_context(
        self,
        session: StudioSession,
        generated_image: GeneratedImage,
        mock_genai_client: MagicMock,
    ) -> None:
        """Test edit mode bypasses the empty-prompt check."""
        session.set_active_context(generated_image)

        images = session.generate()

        assert len(images) == 1
        assert images[0].prompt == VARIATION_PROMPT
        assert session.error is None

    @pytest.mark.unit
    def test_variation_target(
        self,
        session: StudioSession,
        generated_image: GeneratedImage,
        mock_genai_client: MagicMock,
    ) -> None:
        """Test variations use the target image and the variation prompt."""
        session.set_prompt("ignored prompt")

        (image,) = session.generate(generated_image)

        contents = mock_genai_client.models.generate_content.call_args.kwargs["contents"]
        assert len(contents.parts) == 2
        assert contents.parts[-1].text == VARIATION_PROMPT
        assert image.prompt == VARIATION_PROMPT
        assert session.active_context == image

    @pytest.mark.unit
    def test_missing_credential(
        self, keyless_settings: StudioSettings, mock_genai_client: MagicMock
    ) -> None:
        """Test AuthRequired surfaces the message and opens the selector once."""
        selector = HostSelector()
        session = StudioSession(
            keyless_settings, client=mock_genai_client, credential_selector=selector
        )
        session.set_prompt("a red fox in snow")

        images = session.generate()

        assert images == []
        assert session.error == AUTH_REQUIRED_MESSAGE
        assert selector.opened == 1
        mock_genai_client.models.generate_content.assert_not_called()

    @pytest.mark.unit
    def test_missing_credential_pro_preflight(
        self, keyless_settings: StudioSettings, mock_genai_client: MagicMock
    ) -> None:
        """Test the selector still opens only once when pre-flight already opened it."""
        selector = HostSelector(has_key=False)
        session = StudioSession(
            keyless_settings, client=mock_genai_client, credential_selector=selector
        )
        session.set_prompt("a red fox in snow")

        session.generate()

        assert selector.opened == 1
        assert session.error == AUTH_REQUIRED_MESSAGE

    @pytest.mark.unit
    def test_preflight_only_for_pro(
        self, session: StudioSession, mock_genai_client: MagicMock
    ) -> None:
        """Test the selected-key check only applies to the pro model."""
        selector = HostSelector(has_key=False)
        session._credential_selector = selector
        session.set_model(GenerationModel.FLASH_IMAGE)
        session.set_prompt("p")

        session.generate()

        assert selector.opened == 0

    @pytest.mark.unit
    def test_not_found_opens_selector(self, settings: StudioSettings) -> None:
        """Test a provider not-found error routes through the same prompt."""
        client = MagicMock()
        client.models.generate_content.side_effect = Exception(
            "Requested entity was not found."
        )
        selector = HostSelector()
        session = StudioSession(settings, client=client, credential_selector=selector)
        session.set_prompt("p")

        session.generate()

        assert session.error == AUTH_REQUIRED_MESSAGE
        assert selector.opened == 1

    @pytest.mark.unit
    def test_selector_failure_swallowed(self, keyless_settings: StudioSettings) -> None:
        """Test a failing selector never becomes the user-facing error."""
        selector = HostSelector(fail=True)
        session = StudioSession(keyless_settings, credential_selector=selector)
        session.set_prompt("p")

        session.generate()

        assert selector.opened == 1
        assert session.error == AUTH_REQUIRED_MESSAGE

    @pytest.mark.unit
    def test_selector_capability_optional(self, keyless_settings: StudioSettings) -> None:
        """Test hosts without a selector are fine."""
        session = StudioSession(keyless_settings, credential_selector=object())  # type: ignore[arg-type]
        session.set_prompt("p")

        session.generate()

        assert session.error == AUTH_REQUIRED_MESSAGE

    @pytest.mark.unit
    def test_empty_result(self, settings: StudioSettings) -> None:
        """Test an imageless answer surfaces prompt guidance."""
        client = MagicMock()
        client.models.generate_content.return_value = make_content_response(
            make_text_part("no")
        )
        session = StudioSession(settings, client=client)
        session.set_prompt("p")

        assert session.generate() == []
        assert session.error == EMPTY_RESULT_MESSAGE
        assert session.gallery == []

    @pytest.mark.unit
    def test_provider_error_verbatim(self, settings: StudioSettings) -> None:
        """Test other provider errors are shown as-is."""
        client = MagicMock()
        client.models.generate_content.side_effect = RuntimeError("503 UNAVAILABLE")
        session = StudioSession(settings, client=client)
        session.set_prompt("p")

        session.generate()

        assert session.error == "503 UNAVAILABLE"
        assert session.is_generating is False

    @pytest.mark.unit
    def test_provider_error_without_message(self, settings: StudioSettings) -> None:
        """Test a blank provider error falls back to a generic message."""
        client = MagicMock()
        client.models.generate_content.side_effect = RuntimeError()
        session = StudioSession(settings, client=client)
        session.set_prompt("p")

        session.generate()

        assert session.error == GENERIC_ERROR_MESSAGE

    @pytest.mark.unit
    def test_provider_error_logged_once(self, settings: StudioSettings) -> None:
        """Test a provider failure is logged by the service only."""
        client = MagicMock()
        client.models.generate_content.side_effect = RuntimeError("503 UNAVAILABLE")
        session = StudioSession(settings, client=client)
        session.set_prompt("p")

        with (
            patch.object(service, "logger") as service_logger,
            patch.object(session_module, "logger") as session_logger,
        ):
            session.generate()

        service_logger.error.assert_called_once()
        session_logger.error.assert_not_called()
        session_logger.exception.assert_not_called()

    @pytest.mark.unit
    def test_failure_keeps_gallery_and_context(
        self, session: StudioSession, generated_image: GeneratedImage
    ) -> None:
        """Test a failed attempt leaves gallery and context untouched."""
        session.gallery = [generated_image]
        session.set_active_context(generated_image)
        session._generator = MagicMock(side_effect=RuntimeError("boom"))
        session.set_prompt("p")

        session.generate()

        assert session.gallery == [generated_image]
        assert session.active_context is generated_image

    @pytest.mark.unit
    def test_new_attempt_clears_error(self, session: StudioSession) -> None:
        """Test entering generation clears the previous error."""
        session.generate()
        assert session.error == EMPTY_PROMPT_MESSAGE

        session.set_prompt("p")
        session.generate()

        assert session.error is None

    @pytest.mark.unit
    def test_in_flight_flag_set_during_call(self, session: StudioSession) -> None:
        """Test is_generating is true while the provider is working."""
        seen: list[bool] = []

        def fake_generator(*args: Any, **kwargs: Any) -> list[GeneratedImage]:
            seen.append(session.is_generating)
            return []

        session._generator = fake_generator
        session.set_prompt("p")
        session.generate()

        assert seen == [True]
        assert session.is_generating is False

    @pytest.mark.unit
    def test_concurrent_generation_rejected(self, session: StudioSession) -> None:
        """Test a second call while one is outstanding is rejected."""
        session.set_prompt("p")
        errors: list[Exception] = []

        def reentrant_generator(*args: Any, **kwargs: Any) -> list[GeneratedImage]:
            try:
                session.generate()
            except GenerationInProgressError as e:
                errors.append(e)
            return [
                GeneratedImage(id="a", url="data:,", prompt="p", model="m")
            ]

        session._generator = reentrant_generator
        images = session.generate()

        assert len(errors) == 1
        assert len(images) == 1
        assert session.error is None


class TestGalleryTransitions:
    """Tests for transitions outside the generate state machine."""

    @pytest.mark.unit
    def test_clear_gallery(
        self, session: StudioSession, generated_image: GeneratedImage
    ) -> None:
        """Test clearing discards all history."""
        session.gallery = [generated_image]

        session.clear_gallery()

        assert session.gallery == []

    @pytest.mark.unit
    def test_set_and_clear_context(
        self, session: StudioSession, generated_image: GeneratedImage
    ) -> None:
        """Test the active context can be set and cleared."""
        session.set_active_context(generated_image)
        assert session.active_context is generated_image

        session.clear_active_context()
        assert session.active_context is None

    @pytest.mark.unit
    def test_adopt_latest_result(
        self, session: StudioSession, generated_image: GeneratedImage
    ) -> None:
        """Test adoption picks the first image and ignores empty batches."""
        session.adopt_latest_result([generated_image])
        assert session.active_context is generated_image

        session.adopt_latest_result([])
        assert session.active_context is generated_image

    @pytest.mark.unit
    def test_dismiss_error(self, session: StudioSession) -> None:
        """Test the error banner can be dismissed."""
        session.generate()

        session.dismiss_error()

        assert session.error is None


class TestOrdering:
    """Tests for gallery ordering across generations."""

    @pytest.mark.unit
    def test_batches_newest_first(self, settings: StudioSettings) -> None:
        """Test the latest batch heads the gallery in issuance order."""
        client = MagicMock()
        client.models.generate_content.side_effect = [
            make_content_response(make_image_part(b"a1")),
            make_content_response(make_image_part(b"b1")),
            make_content_response(make_image_part(b"b2")),
        ]
        session = StudioSession(settings, client=client)
        session.set_prompt("p")

        batch_a = session.generate()
        session.set_number_of_images(2)
        batch_b = session.generate()

        assert session.gallery == [batch_b[0], batch_b[1], batch_a[0]]
        assert [img.base64_data for img in batch_b] == ["YjE=", "YjI="]
