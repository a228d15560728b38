"""Terminal colors for log messages and `aliaskit validate`.

Colors are only used on terminals: the output of `aliaskit init` is read
through a pipe by `eval`.
"""

import logging
import os
import sys
from typing import TextIO

__all__ = [
    "GREEN",
    "LEVEL_COLORS",
    "RED",
    "RESET",
    "YELLOW",
    "colorize",
    "should_colorize",
]

RESET = "\x1b[0m"

RED = "31"
GREEN = "32"
YELLOW = "33"

LEVEL_COLORS = {
    logging.WARNING: YELLOW,
    logging.ERROR: RED,
    logging.CRITICAL: f"{RED};1",
}


def should_colorize(stream: TextIO | None = None) -> bool:
    """Tell if `stream` (stderr by default) gets colors.

    NO_COLOR wins over FORCE_COLOR, which wins over TTY detection.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    if stream is None:
        stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def colorize(text: str, code: str) -> str:
    """Wrap text in an ANSI color code."""
    return f"\x1b[{code}m{text}{RESET}"
