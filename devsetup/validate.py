"""
Validation phase: read-only checks of the toolchain after the ensure phase.

Python, pip and uv are critical; VS Code, its extensions, Ruff and the
project layout are optional. The classification does not depend on the mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .collaborators import (
    EDITOR_EXTENSIONS,
    SHELL_COMMAND_HINT,
    Pip,
    PythonRuntime,
    Ruff,
    Uv,
    VSCode,
    parse_extension_listing,
)
from .environment import CRITICAL, OPTIONAL, RunContext
from .render import print_error, print_info, print_step, print_success, print_warning


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of one validation check.

    Attributes:
        name: Check identifier
        passed: Whether the check passed
        criticality: 'critical' or 'optional'
        detail: Version or status text that was reported
    """
    name: str
    passed: bool
    criticality: str
    detail: str = ""


def validate_python(ctx: RunContext) -> tuple[bool, str]:
    print_step("Validating Python...")
    version = PythonRuntime(ctx).version()
    if version:
        print_success(version)
        return True, version
    print_error("Python not found")
    return False, ""


def validate_pip(ctx: RunContext) -> tuple[bool, str]:
    print_step("Validating pip...")
    version = Pip(ctx).version()
    if version:
        print_success(f"pip version {version}")
        return True, version
    print_error("pip not found")
    return False, ""


def validate_uv(ctx: RunContext) -> tuple[bool, str]:
    print_step("Validating UV...")
    uv = Uv(ctx)
    if uv.is_available():
        version = uv.version() or ""
        print_success(version or "uv found")
        return True, version
    print_error("UV not found")
    return False, ""


def validate_vscode(ctx: RunContext) -> tuple[bool, str]:
    print_step("Validating VS Code...")
    code = VSCode(ctx)
    if code.is_available():
        version = code.version() or ""
        print_success(f"VS Code version {version}".rstrip())
        return True, version
    print_warning("VS Code 'code' command not found")
    if code.app_installed():
        print_info(f"VS Code app exists - add 'code' command via: {SHELL_COMMAND_HINT}")
    return False, ""


def validate_extensions(ctx: RunContext) -> tuple[bool, str]:
    """Both extensions must be installed; each one is reported."""
    print_step("Validating VS Code Extensions...")
    code = VSCode(ctx)
    if not code.is_available():
        print_warning("Cannot validate extensions - 'code' command not available")
        return False, "code command not available"

    listing = code.list_extensions()
    all_ok = True
    missing = []
    for extension_id, display_name in EDITOR_EXTENSIONS:
        if parse_extension_listing(listing, extension_id):
            print_success(f"{display_name} installed")
        else:
            print_warning(f"{display_name} not installed")
            missing.append(extension_id)
            all_ok = False
    return all_ok, f"missing: {', '.join(missing)}" if missing else ""


def validate_ruff(ctx: RunContext) -> tuple[bool, str]:
    """
    Prefer the project-scoped Ruff; fall back to a global install only when
    there is no manifest or the project-scoped call reports no version.
    """
    print_step("Validating Ruff...")
    ruff = Ruff(ctx)

    if ctx.project_detected():
        version = ruff.project_version()
        if version:
            print_success(f"Ruff (project): {version}")
            return True, version

    if ruff.is_available():
        version = ruff.global_version() or ""
        print_success(f"Ruff (global): {version}".rstrip())
        return True, version

    print_warning("Ruff not found")
    print_info("Install with: uv add --dev ruff (in project) or: brew install ruff (globally)")
    return False, ""


def validate_project(ctx: RunContext) -> tuple[bool, str]:
    """Manifest, version pin and virtual environment must all exist; each one is reported."""
    print_step("Validating Project Setup...")
    project = ctx.config.project
    all_ok = True
    missing = []

    if ctx.project_detected():
        print_success(f"{project.manifest} exists")
    else:
        print_info(f"{project.manifest} not found (run 'uv init' to create project)")
        missing.append(project.manifest)
        all_ok = False

    if ctx.version_pin_exists():
        print_success(f"{project.version_pin} exists")
    else:
        print_info(f"{project.version_pin} not found")
        missing.append(project.version_pin)
        all_ok = False

    if ctx.venv_exists():
        print_success("Virtual environment exists")
    else:
        print_info("Virtual environment not found (run 'uv sync' to create)")
        missing.append(project.venv)
        all_ok = False

    return all_ok, f"missing: {', '.join(missing)}" if missing else ""


VALIDATION_CHECKS: tuple[tuple[str, str, Callable[[RunContext], tuple[bool, str]]], ...] = (
    ("python", CRITICAL, validate_python),
    ("pip", CRITICAL, validate_pip),
    ("uv", CRITICAL, validate_uv),
    ("vscode", OPTIONAL, validate_vscode),
    ("extensions", OPTIONAL, validate_extensions),
    ("ruff", OPTIONAL, validate_ruff),
    ("project", OPTIONAL, validate_project),
)


def run_validation_phase(ctx: RunContext) -> list[ValidationResult]:
    """
    Run every check in order, recording each outcome in the run's tally.

    Returns:
        Results in validation order
    """
    results = []
    for name, criticality, check in VALIDATION_CHECKS:
        passed, detail = check(ctx)
        ctx.tally.record(criticality, passed)
        results.append(ValidationResult(name=name, passed=passed, criticality=criticality, detail=detail))
    return results
