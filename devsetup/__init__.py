"""
devsetup - Python development environment bootstrap.

Core Modules:
- Foundation: Run context, config, logging, subprocess runner
- Collaborators: Homebrew, Python, pip, uv, VS Code and Ruff command surfaces
- Ensure phase: Install missing tools, upgrade present ones in upgrade mode
- Validate phase: Read-only checks with critical/optional tally
- Summary: Verdict and exit code
"""

__version__ = "1.0.0"
__author__ = "devsetup Contributors"

VERSION = __version__

# Foundation
from .environment import (
    RunContext,
    ValidationTally,
    MODE_INSTALL,
    MODE_UPGRADE,
    CRITICAL,
    OPTIONAL,
    CRITICAL_TOTAL,
    OPTIONAL_TOTAL,
)
from .config import (
    Config,
    ProjectConfig,
    HomebrewConfig,
    EditorConfig,
    Preferences,
    load_config,
    load_config_file,
)
from .runner import CommandResult, InstallError, command_exists, run_command

# Tool definitions and phases
from .tools import Presence, ToolSpec
from .ensure import ensure, ensure_extensions, ensure_project, run_ensure_phase
from .validate import ValidationResult, run_validation_phase
from .summary import exit_code, print_summary

# Entry point
from .cli import main, parse_mode, run_setup, UsageError

# Logging configuration
from .logging_config import (
    setup_logging,
    get_logger,
)

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Foundation
    "RunContext",
    "ValidationTally",
    "MODE_INSTALL",
    "MODE_UPGRADE",
    "CRITICAL",
    "OPTIONAL",
    "CRITICAL_TOTAL",
    "OPTIONAL_TOTAL",
    "Config",
    "ProjectConfig",
    "HomebrewConfig",
    "EditorConfig",
    "Preferences",
    "load_config",
    "load_config_file",
    "CommandResult",
    "InstallError",
    "command_exists",
    "run_command",
    # Tools and phases
    "Presence",
    "ToolSpec",
    "ensure",
    "ensure_extensions",
    "ensure_project",
    "run_ensure_phase",
    "ValidationResult",
    "run_validation_phase",
    "exit_code",
    "print_summary",
    # Entry point
    "main",
    "parse_mode",
    "run_setup",
    "UsageError",
    # Logging
    "setup_logging",
    "get_logger",
]
