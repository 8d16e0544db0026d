"""Logging setup for the command-line interface."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def setup_logging(level: str | int = "WARNING") -> None:
    """Configure the ``gemini_studio`` logger hierarchy.

    Args:
        level: Level name or number applied to the package logger.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger("gemini_studio")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``gemini_studio`` namespace."""
    if name == "gemini_studio" or name.startswith("gemini_studio."):
        return logging.getLogger(name)
    return logging.getLogger(f"gemini_studio.{name}")
