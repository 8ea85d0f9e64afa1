"""
Common utilities shared across devsetup modules.
"""

from __future__ import annotations

import os
import platform
import sys


def is_debug_enabled() -> bool:
    """Check whether debug tracing was requested through the environment."""
    return os.environ.get("DEVSETUP_DEBUG", "0") == "1"


def machine_architecture() -> str:
    """
    Get the CPU architecture of the running machine.

    Returns:
        Architecture string as reported by the OS (e.g. "arm64", "x86_64")
    """
    return platform.machine()


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or is_debug_enabled():
        try:
            from .logging_config import get_logger
            logger = get_logger()
            logger.debug(msg)
        except Exception:
            # Fallback to stderr if logging fails
            try:
                print(f"[devsetup] {msg}", file=sys.stderr)
            except Exception:
                pass
