"""
Command line entry point.

Usage:
    devsetup             # Install missing tools only
    devsetup --upgrade   # Upgrade existing tools to latest versions
    devsetup --help      # Show help message
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from .config import load_config
from .ensure import run_ensure_phase
from .environment import MODE_INSTALL, MODE_UPGRADE, RunContext
from .logging_config import get_logger, setup_logging_from_env
from .render import YELLOW, print_error, print_header, print_info, print_plain
from .runner import InstallError
from .summary import EXIT_FAILURE, EXIT_OK, print_summary
from .validate import run_validation_phase


PROG = "devsetup"

HELP_TEXT = f"""Usage: {PROG} [OPTIONS]

Options:
  --upgrade    Upgrade existing tools to latest versions
  --help, -h   Show this help message

This script installs and validates Python development tools:
  - Python 3
  - pip
  - UV (Python package manager)
  - Ruff (linter/formatter)
  - VS Code
  - VS Code extensions (Python, Ruff)"""


class UsageError(Exception):
    """Raised for any command line token outside the supported forms."""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


UPGRADE_FLAGS = ("--upgrade",)
HELP_FLAGS = ("--help", "-h")


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=PROG, add_help=False, allow_abbrev=False)
    parser.add_argument(*UPGRADE_FLAGS, dest="upgrade", action="store_true")
    parser.add_argument(*HELP_FLAGS, dest="help", action="store_true")
    return parser


def _first_unrecognized(argv: Sequence[str]) -> str | None:
    """Return the first token that is not exactly one of the supported flags."""
    for token in argv:
        if token not in UPGRADE_FLAGS + HELP_FLAGS:
            return token
    return None


def parse_mode(argv: Sequence[str]) -> str | None:
    """
    Resolve the run mode from command line arguments.

    Args:
        argv: Arguments without the program name

    Returns:
        'install' or 'upgrade', or None when help was requested

    Raises:
        UsageError: On any unrecognized token (the message names the token)
    """
    try:
        args, unknown = _build_parser().parse_known_args(list(argv))
    except UsageError as e:
        # argparse messages describe the problem, not the token
        raise UsageError(_first_unrecognized(argv) or str(e)) from None
    if unknown:
        raise UsageError(unknown[0])
    if args.help:
        return None
    return MODE_UPGRADE if args.upgrade else MODE_INSTALL


def _print_mode_banner(ctx: RunContext) -> None:
    if ctx.upgrade:
        print_plain("Running in UPGRADE mode - will update existing tools", YELLOW)
    else:
        print_plain("Running in INSTALL mode - will only install missing tools")
        print_plain("Use --upgrade flag to upgrade existing tools")
    print_plain()


def run_setup(ctx: RunContext) -> int:
    """
    Run both phases and the summary.

    Returns:
        Process exit code

    Raises:
        InstallError: If a mandatory install fails during the ensure phase
    """
    print_header("🚀 Python Development Environment Setup")
    _print_mode_banner(ctx)

    print_header("📦 Installation Phase")
    run_ensure_phase(ctx)

    print_header("✅ Validation Phase")
    run_validation_phase(ctx)

    return print_summary(ctx.tally)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the devsetup command."""
    argv = sys.argv[1:] if argv is None else argv

    try:
        mode = parse_mode(argv)
    except UsageError as e:
        print_error(f"Unknown option: {e}", stream=sys.stderr)
        print("Use --help for usage information", file=sys.stderr)
        return EXIT_FAILURE

    if mode is None:
        print(HELP_TEXT)
        return EXIT_OK

    logger = setup_logging_from_env()

    try:
        config = load_config()
    except ValueError as e:
        print_error(f"Configuration error: {e}", stream=sys.stderr)
        return EXIT_FAILURE
    logger.debug(f"Configuration source: {config.source or 'defaults'}")

    ctx = RunContext(mode=mode, config=config, cwd=Path.cwd())
    try:
        return run_setup(ctx)
    except InstallError as e:
        get_logger().debug(f"Aborting after fatal install error: {e.message}")
        print_error(e.message)
        if e.remediation:
            print_info(f"Try running: {e.remediation}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print_error("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
