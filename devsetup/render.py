"""
Console output for the setup run.

Every progress line goes through these helpers so the colour and symbol
conventions stay in one place.
"""

import os
import sys
from typing import Optional, TextIO


# ANSI color codes
RED = "\033[0;31m"
GREEN = "\033[0;32m"
YELLOW = "\033[1;33m"
BLUE = "\033[0;34m"
RESET = "\033[0m"

HEADER_RULE = "=" * 60


def use_color(stream: Optional[TextIO] = None) -> bool:
    """Decide whether ANSI colors should be emitted on a stream.

    Args:
        stream: Target stream (default: stdout)

    Returns:
        True unless disabled via NO_COLOR / DEVSETUP_COLOR=0 or not a TTY
    """
    if os.environ.get("NO_COLOR") or os.environ.get("DEVSETUP_COLOR", "1") == "0":
        return False
    stream = stream or sys.stdout
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def colorize(text: str, color: str, stream: Optional[TextIO] = None) -> str:
    """Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code
        stream: Stream the text is destined for

    Returns:
        Colored text or plain text if colors disabled
    """
    if not text or not use_color(stream):
        return text
    return f"{color}{text}{RESET}"


def _emit(text: str, color: str = "", stream: Optional[TextIO] = None) -> None:
    stream = stream or sys.stdout
    print(colorize(text, color, stream) if color else text, file=stream)


def print_header(title: str) -> None:
    _emit("")
    _emit(HEADER_RULE)
    _emit(title)
    _emit(HEADER_RULE)


def print_step(msg: str) -> None:
    _emit(f"▶ {msg}", BLUE)


def print_success(msg: str) -> None:
    _emit(f"✅ {msg}", GREEN)


def print_warning(msg: str) -> None:
    _emit(f"⚠️  {msg}", YELLOW)


def print_error(msg: str, stream: Optional[TextIO] = None) -> None:
    _emit(f"❌ {msg}", RED, stream)


def print_info(msg: str) -> None:
    _emit(f"💡 {msg}", BLUE)


def print_plain(msg: str = "", color: str = "") -> None:
    _emit(msg, color)
