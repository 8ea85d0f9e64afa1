"""
Managed tool definitions.

Each ToolSpec binds a presence check, an install action and an optional
upgrade action to one tool. The ensure engine drives them generically; every
tool-specific decision (which collaborator, which fallback) lives here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .collaborators import (
    PYTHON_FORMULA,
    SHELL_COMMAND_HINT,
    VSCODE_CASK,
    Homebrew,
    Pip,
    PythonRuntime,
    Ruff,
    Uv,
    VSCode,
)
from .environment import CRITICAL, OPTIONAL, RunContext
from .render import print_info, print_warning
from .runner import InstallError, run_first_success


@dataclass(frozen=True)
class Presence:
    """Outcome of a presence check: absence is a normal result, not an error."""
    present: bool
    detail: str = ""


@dataclass(frozen=True)
class ToolSpec:
    """
    Static descriptor for one managed tool.

    Attributes:
        name: Tool identifier
        display_name: Name used in progress lines
        presence_check: Detects the tool; never raises
        install_action: Installs the tool; returns False if it deliberately did nothing.
            Raises InstallError on failure.
        upgrade_action: Upgrades a present tool in upgrade mode; raises InstallError on failure
        criticality: 'critical' or 'optional'
        missing_message: Printed before the install action runs
        present_message: Printed when the tool is found
        installed_message: Printed after a successful install
    """
    name: str
    display_name: str
    presence_check: Callable[[RunContext], Presence]
    install_action: Callable[[RunContext], bool]
    upgrade_action: Optional[Callable[[RunContext], None]] = None
    criticality: str = OPTIONAL
    missing_message: str = ""
    present_message: str = ""
    installed_message: str = ""

    def __post_init__(self):
        if self.criticality not in (CRITICAL, OPTIONAL):
            raise ValueError(
                f"Invalid criticality for {self.name}: {self.criticality}. "
                "Must be 'critical' or 'optional'"
            )

    @property
    def missing_text(self) -> str:
        return self.missing_message or f"{self.display_name} not found. Installing..."

    def present_text(self, detail: str = "") -> str:
        text = self.present_message or f"{self.display_name} is already installed"
        return f"{text}: {detail}" if detail else text

    @property
    def installed_text(self) -> str:
        return self.installed_message or f"{self.display_name} installed"


# Homebrew

def _homebrew_presence(ctx: RunContext) -> Presence:
    return Presence(Homebrew(ctx).is_available())


def _homebrew_install(ctx: RunContext) -> bool:
    Homebrew(ctx).install_self()
    return True


def _homebrew_upgrade(ctx: RunContext) -> None:
    Homebrew(ctx).update()


# Python

def _python_presence(ctx: RunContext) -> Presence:
    runtime = PythonRuntime(ctx)
    if not runtime.is_available():
        return Presence(False)
    return Presence(True, runtime.version() or "")


def _python_install(ctx: RunContext) -> bool:
    Homebrew(ctx).install(PYTHON_FORMULA)
    return True


def _python_upgrade(ctx: RunContext) -> None:
    result = Homebrew(ctx).upgrade(PYTHON_FORMULA)
    if not result.success:
        raise InstallError("already latest or not installed via brew")


# pip

def _pip_presence(ctx: RunContext) -> Presence:
    version = Pip(ctx).version()
    if version is None:
        return Presence(False)
    return Presence(True, f"version {version}")


def _pip_install(ctx: RunContext) -> bool:
    Pip(ctx).bootstrap()
    return True


def _pip_upgrade(ctx: RunContext) -> None:
    Pip(ctx).upgrade_self()


# uv

def _uv_presence(ctx: RunContext) -> Presence:
    uv = Uv(ctx)
    if not uv.is_available():
        return Presence(False)
    return Presence(True, uv.version() or "")


def _install_with_brew_or_pip(ctx: RunContext, package: str) -> None:
    brew = Homebrew(ctx)
    if brew.is_available():
        brew.install(package)
    else:
        print_warning("Homebrew not available. Installing via pip...")
        Pip(ctx).install(package)


def _upgrade_with_brew_or_pip(ctx: RunContext, package: str) -> None:
    pip = Pip(ctx)
    run_first_success(
        [("brew", "upgrade", package), pip.command("install", "--upgrade", package)],
        ctx,
        f"Upgrading {package}",
    )


def _uv_install(ctx: RunContext) -> bool:
    _install_with_brew_or_pip(ctx, "uv")
    return True


def _uv_upgrade(ctx: RunContext) -> None:
    _upgrade_with_brew_or_pip(ctx, "uv")


# VS Code

def _vscode_presence(ctx: RunContext) -> Presence:
    code = VSCode(ctx)
    if not code.is_available():
        return Presence(False)
    version = code.version()
    return Presence(True, f"version {version}" if version else "")


def _vscode_install(ctx: RunContext) -> bool:
    code = VSCode(ctx)
    if code.app_installed():
        print_info("VS Code app found but 'code' command not in PATH")
        print_info(f"Please open VS Code and run: {SHELL_COMMAND_HINT}")
        return False
    print_warning("Installing VS Code via Homebrew...")
    Homebrew(ctx).install(VSCODE_CASK, cask=True)
    print_info(f"You may need to run: {SHELL_COMMAND_HINT}")
    return True


def _vscode_upgrade(ctx: RunContext) -> None:
    result = Homebrew(ctx).upgrade(VSCODE_CASK, cask=True)
    if not result.success:
        raise InstallError("not installed via brew")


# Editor extensions

def extension_spec(extension_id: str, display_name: str) -> ToolSpec:
    """Build the spec for one editor extension; extensions have no upgrade action."""

    def presence(ctx: RunContext) -> Presence:
        return Presence(VSCode(ctx).has_extension(extension_id))

    def install(ctx: RunContext) -> bool:
        VSCode(ctx).install_extension(extension_id)
        return True

    return ToolSpec(
        name=extension_id,
        display_name=display_name,
        presence_check=presence,
        install_action=install,
        criticality=OPTIONAL,
        missing_message=f"Installing {display_name}...",
        installed_message=f"{display_name} installed",
    )


# Ruff

def _ruff_presence(ctx: RunContext) -> Presence:
    ruff = Ruff(ctx)
    if ctx.project_detected():
        version = ruff.project_version()
        return Presence(version is not None, f"{version} (project)" if version else "")
    if not ruff.is_available():
        return Presence(False)
    version = ruff.global_version()
    return Presence(True, f"{version} (global)" if version else "(global)")


def _ruff_install(ctx: RunContext) -> bool:
    if ctx.project_detected():
        Uv(ctx).add_dev("ruff")
    else:
        _install_with_brew_or_pip(ctx, "ruff")
    return True


def _ruff_upgrade(ctx: RunContext) -> None:
    if ctx.project_detected():
        Uv(ctx).add_dev("ruff", upgrade=True)
    else:
        _upgrade_with_brew_or_pip(ctx, "ruff")


# Project environment

def _venv_presence(ctx: RunContext) -> Presence:
    return Presence(ctx.venv_exists())


def _venv_sync(ctx: RunContext) -> bool:
    Uv(ctx).sync()
    return True


def _venv_resync(ctx: RunContext) -> None:
    Uv(ctx).sync()


HOMEBREW = ToolSpec(
    name="homebrew",
    display_name="Homebrew",
    presence_check=_homebrew_presence,
    install_action=_homebrew_install,
    upgrade_action=_homebrew_upgrade,
)

PYTHON = ToolSpec(
    name="python",
    display_name="Python",
    presence_check=_python_presence,
    install_action=_python_install,
    upgrade_action=_python_upgrade,
    criticality=CRITICAL,
    missing_message="Python not found. Installing via Homebrew...",
)

PIP = ToolSpec(
    name="pip",
    display_name="pip",
    presence_check=_pip_presence,
    install_action=_pip_install,
    upgrade_action=_pip_upgrade,
    criticality=CRITICAL,
)

UV = ToolSpec(
    name="uv",
    display_name="UV",
    presence_check=_uv_presence,
    install_action=_uv_install,
    upgrade_action=_uv_upgrade,
    criticality=CRITICAL,
)

VSCODE = ToolSpec(
    name="vscode",
    display_name="VS Code",
    presence_check=_vscode_presence,
    install_action=_vscode_install,
    upgrade_action=_vscode_upgrade,
    missing_message="VS Code 'code' command not found.",
)

RUFF = ToolSpec(
    name="ruff",
    display_name="Ruff",
    presence_check=_ruff_presence,
    install_action=_ruff_install,
    upgrade_action=_ruff_upgrade,
)

VIRTUAL_ENV = ToolSpec(
    name="venv",
    display_name="Virtual environment",
    presence_check=_venv_presence,
    install_action=_venv_sync,
    upgrade_action=_venv_resync,
    missing_message="Virtual environment not found. Creating...",
    present_message="Virtual environment exists",
    installed_message="Virtual environment created",
)
