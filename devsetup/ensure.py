"""
Ensure phase: check each managed tool, install what is missing, and in
upgrade mode upgrade what is present.

A failed install of a required tool raises InstallError and aborts the run.
Upgrade failures and editor extension problems are reported as warnings and
the phase carries on.
"""

from __future__ import annotations

from typing import Callable

from .collaborators import EDITOR_EXTENSIONS, VSCode
from .common import vlog
from .environment import RunContext
from .render import print_info, print_step, print_success, print_warning
from .runner import InstallError
from .tools import HOMEBREW, PIP, PYTHON, RUFF, UV, VIRTUAL_ENV, VSCODE, ToolSpec, extension_spec


def ensure(spec: ToolSpec, ctx: RunContext, announce: bool = True) -> bool:
    """
    Make sure one tool is present, upgrading it in upgrade mode.

    Args:
        spec: Tool to ensure
        ctx: Run context
        announce: Print the "Checking ..." step line

    Returns:
        True if the tool was already present or got installed

    Raises:
        InstallError: If the install action fails
    """
    if announce:
        print_step(f"Checking {spec.display_name}...")

    presence = spec.presence_check(ctx)
    vlog(f"{spec.name}: present={presence.present} detail={presence.detail!r}")

    if not presence.present:
        print_warning(spec.missing_text)
        installed = spec.install_action(ctx)
        if installed:
            print_success(spec.installed_text)
        return installed

    print_success(spec.present_text(presence.detail))
    if ctx.upgrade and spec.upgrade_action is not None:
        upgrade(spec, ctx)
    return True


def upgrade(spec: ToolSpec, ctx: RunContext) -> bool:
    """
    Run a tool's upgrade action without letting a failure stop the run.

    Returns:
        True if the upgrade succeeded
    """
    print_step(f"Upgrading {spec.display_name}...")
    try:
        spec.upgrade_action(ctx)
    except InstallError as e:
        vlog(f"{spec.name}: upgrade failed: {e.message}")
        print_warning(f"{spec.display_name} upgrade skipped ({e.message})")
        return False
    print_success(f"{spec.display_name} upgraded")
    return True


def ensure_extensions(ctx: RunContext) -> bool:
    """
    Install the editor extensions that are missing.

    Returns:
        True if every extension is present afterwards; False if the editor
        CLI is unavailable or an install failed
    """
    print_step("Checking VS Code Extensions...")

    if not VSCode(ctx).is_available():
        print_warning("Cannot install extensions - 'code' command not available")
        return False

    all_ok = True
    for extension_id, display_name in EDITOR_EXTENSIONS:
        try:
            ensure(extension_spec(extension_id, display_name), ctx, announce=False)
        except InstallError as e:
            print_warning(f"{display_name} could not be installed ({e.message})")
            print_info(f"Install manually with: code --install-extension {extension_id}")
            all_ok = False
    return all_ok


def ensure_project(ctx: RunContext) -> bool:
    """
    Create or refresh the project's virtual environment.

    Outside a project this only prints a hint. A missing virtual environment
    is created in either mode; an existing one is re-synced in upgrade mode.

    Raises:
        InstallError: If creating the virtual environment fails
    """
    print_step("Checking project setup...")

    if not ctx.project_detected():
        manifest = ctx.config.project.manifest
        print_info(f"Not in a project directory (no {manifest} found)")
        print_info("Run 'uv init' to create a new project")
        return False

    print_success(f"Project already initialized ({ctx.config.project.manifest} exists)")
    return ensure(VIRTUAL_ENV, ctx, announce=False)


ENSURE_STEPS: tuple[tuple[str, Callable[[RunContext], bool]], ...] = (
    (HOMEBREW.name, lambda ctx: ensure(HOMEBREW, ctx)),
    (PYTHON.name, lambda ctx: ensure(PYTHON, ctx)),
    (PIP.name, lambda ctx: ensure(PIP, ctx)),
    (UV.name, lambda ctx: ensure(UV, ctx)),
    (VSCODE.name, lambda ctx: ensure(VSCODE, ctx)),
    ("extensions", ensure_extensions),
    (RUFF.name, lambda ctx: ensure(RUFF, ctx)),
    ("project", ensure_project),
)


def run_ensure_phase(ctx: RunContext) -> dict[str, bool]:
    """
    Run every ensure step in order.

    Returns:
        Mapping of step name to whether it left its tool in place

    Raises:
        InstallError: On the first failed mandatory install
    """
    outcomes: dict[str, bool] = {}
    for name, step in ENSURE_STEPS:
        outcomes[name] = step(ctx)
    return outcomes
