"""Style presets offered as prompt starting points."""

from __future__ import annotations

from typing import NamedTuple


class StylePreset(NamedTuple):
    """A named prompt with a short style summary."""

    name: str
    style: str
    prompt: str


STYLE_PRESETS: list[StylePreset] = [
    StylePreset(
        name="Cyberpunk",
        style="Neon, Rainy, High-Tech",
        prompt=(
            "A neon-lit cyberpunk metropolis in a heavy downpour, vibrant signs, "
            "chrome reflections, cinematic 8k."
        ),
    ),
    StylePreset(
        name="Liquid Glass",
        style="Refractive, Crystal, Clean",
        prompt=(
            "Abstract sculpture made of liquid glass flowing through a snowy "
            "mountain range, intricate refraction, 8k photorealistic."
        ),
    ),
    StylePreset(
        name="Ethereal Dream",
        style="Soft, Magical, Pastel",
        prompt=(
            "Floating cloud kingdom at sunset, bioluminescent petals falling, "
            "dreamlike atmosphere, soft lighting, fantasy art."
        ),
    ),
    StylePreset(
        name="Noir Cinema",
        style="Moody, Sharp, Monochrome",
        prompt=(
            "Film noir detective standing in a misty alleyway, dramatic "
            "high-contrast lighting, black and white, 35mm film style."
        ),
    ),
]


def get_preset(name: str) -> StylePreset:
    """Look up a preset by name, ignoring case.

    Raises:
        KeyError: If no preset has that name.
    """
    for preset in STYLE_PRESETS:
        if preset.name.lower() == name.lower():
            return preset
    raise KeyError(name)
