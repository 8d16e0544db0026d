"""Command-line interface for Gemini Studio."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from gemini_studio.adapter import supports_search
from gemini_studio.core.config import get_settings
from gemini_studio.core.exceptions import ConfigurationError
from gemini_studio.models import (
    ASPECT_RATIOS,
    IMAGE_SIZES,
    MAX_IMAGES,
    MIN_IMAGES,
    MODEL_KEYS,
    MODELS,
    OUTPUT_FORMATS,
)
from gemini_studio.presets import STYLE_PRESETS
from gemini_studio.session import StudioSession
from gemini_studio.utils.images import save_generated_image
from gemini_studio.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

INTERACTIVE_HELP = """\
Enter a prompt to edit the latest image. Commands:
  :variation  generate a variation of the latest image
  :clear      stop editing, next prompt starts fresh
  :quit       exit
"""


def list_models() -> None:
    """Print available models."""
    print("Available models:\n")
    for config in MODELS.values():
        print(f"  {config['key']}:")
        print(f"    Name: {config['name']}")
        print(f"    ID: {config['id'].value}")
        print(f"    Description: {config['description']}")
        print()


def list_presets() -> None:
    """Print available style presets."""
    print("Style presets:\n")
    for preset in STYLE_PRESETS:
        print(f"  {preset.name} ({preset.style})")
        print(f"    {preset.prompt}")
        print()


def _image_count(value: str) -> int:
    count = int(value)
    if not MIN_IMAGES <= count <= MAX_IMAGES:
        msg = f"must be between {MIN_IMAGES} and {MAX_IMAGES}"
        raise argparse.ArgumentTypeError(msg)
    return count


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="gemini-studio",
        description="Generate and iteratively edit images with Gemini and Imagen",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s "A serene mountain landscape at dawn"
  %(prog)s "A red fox in snow" -m imagen -n 2 --aspect 1:1
  %(prog)s "Restyle as a watercolor" -r photo.png -r palette.png
  %(prog)s "Current weather in Tokyo as a poster" --search --size 2K
  %(prog)s --preset "Noir Cinema" -i
        """,
    )

    parser.add_argument("prompt", nargs="?", help="Text prompt describing the image")
    parser.add_argument(
        "-m",
        "--model",
        choices=list(MODEL_KEYS),
        help="Model to use (default: from STUDIO_DEFAULT_MODEL, else pro)",
    )
    parser.add_argument("--aspect", choices=ASPECT_RATIOS, help="Aspect ratio")
    parser.add_argument(
        "--size", choices=IMAGE_SIZES, help="Image size (pro model only)"
    )
    parser.add_argument(
        "-n",
        "--count",
        type=_image_count,
        default=1,
        help=f"Number of images, {MIN_IMAGES}-{MAX_IMAGES} (default: 1)",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        dest="output_format",
        help="Output encoding (imagen model only)",
    )
    parser.add_argument(
        "--search",
        action="store_true",
        help="Enable Google Search grounding (pro model only)",
    )
    parser.add_argument(
        "-r",
        "--reference",
        type=Path,
        action="append",
        dest="references",
        help="Reference image (repeatable, up to 14)",
    )
    parser.add_argument("--preset", help="Start from a named style preset")
    parser.add_argument("--api-key", help="API key (default: GEMINI_API_KEY)")
    parser.add_argument(
        "-d",
        "--output-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory for saved images (default: current directory)",
    )
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        help="Keep editing the latest result with follow-up prompts",
    )
    parser.add_argument("--list-models", action="store_true", help="List models and exit")
    parser.add_argument("--list-presets", action="store_true", help="List presets and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser


def configure_session(session: StudioSession, args: argparse.Namespace) -> None:
    """Apply command-line options to a session."""
    if args.model:
        session.set_model(MODEL_KEYS[args.model])
    if args.aspect:
        session.set_aspect_ratio(args.aspect)
    if args.size:
        session.set_image_size(args.size)
    if args.output_format:
        session.set_output_format(args.output_format)
    session.set_number_of_images(args.count)
    if args.api_key:
        session.set_api_key(args.api_key)

    if args.search:
        if not supports_search(session.config.model):
            print("Warning: --search is ignored for this model")
        session.set_google_search(True)

    if args.preset:
        session.apply_preset(args.preset)
    if args.prompt:
        session.set_prompt(args.prompt)

    if args.references:
        added = session.add_reference_images(args.references)
        if len(added) < len(args.references):
            print(
                f"Warning: {len(args.references) - len(added)} reference image(s) "
                "skipped"
            )


def run_generation(session: StudioSession, output_dir: Path, *, variation: bool = False) -> bool:
    """Generate once, save results, and report the outcome."""
    target = session.active_context if variation else None
    logger.info("Prompt: %s", session.config.prompt[:100] or "(edit context)")
    images = session.generate(target)
    if session.error:
        print(f"Error: {session.error}")
        session.dismiss_error()
        return False

    for image in images:
        path = save_generated_image(image, output_dir)
        print(f"[{image.label}] saved to: {path}")
    return True


def interactive_loop(session: StudioSession, output_dir: Path) -> None:
    """Read follow-up prompts from stdin until EOF or ``:quit``."""
    print(INTERACTIVE_HELP)
    while True:
        try:
            line = input("edit> ").strip()
        except EOFError:
            print()
            return

        if not line:
            continue
        if line == ":quit":
            return
        if line == ":clear":
            session.clear_active_context()
            print("Edit context cleared")
            continue
        if line == ":variation":
            if session.active_context is None:
                print("Nothing to vary yet")
                continue
            run_generation(session, output_dir, variation=True)
            continue

        session.set_prompt(line)
        run_generation(session, output_dir)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list_models:
        list_models()
        return
    if args.list_presets:
        list_presets()
        return

    try:
        settings = get_settings()
    except ConfigurationError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    setup_logging("DEBUG" if args.verbose else settings.log_level)

    if not args.prompt and not args.preset and not args.interactive:
        parser.print_help()
        sys.exit(1)

    session = StudioSession(settings)
    try:
        configure_session(session, args)
    except KeyError:
        print(f"Error: Unknown preset '{args.preset}'")
        sys.exit(1)

    ok = True
    if session.config.prompt:
        ok = run_generation(session, args.output_dir)

    if args.interactive:
        interactive_loop(session, args.output_dir)
        return

    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
