"""
External collaborators and the parsing of their output.

One class per external CLI (Homebrew, Python, pip, uv, VS Code, Ruff), each
exposing the subset of its command surface the setup needs. Each collaborator
also has exactly one parse function for its textual output, so format drift
in an upstream tool only needs a fix here.
"""

from __future__ import annotations

import os

from .common import machine_architecture, vlog
from .environment import RunContext
from .runner import (
    CommandResult,
    InstallError,
    command_exists,
    probe,
    run_action,
    run_command,
    run_checked,
)


PYTHON_BINARY = "python3"
PYTHON_FORMULA = "python3"
VSCODE_CASK = "visual-studio-code"
SHELLENV_ARCHITECTURES = ("arm64",)

EXTENSION_PYTHON = "ms-python.python"
EXTENSION_RUFF = "charliermarsh.ruff"
EDITOR_EXTENSIONS: tuple[tuple[str, str], ...] = (
    (EXTENSION_PYTHON, "Python extension"),
    (EXTENSION_RUFF, "Ruff extension"),
)

SHELL_COMMAND_HINT = "Cmd+Shift+P → 'Shell Command: Install code command in PATH'"


def first_line(output: str) -> str:
    """Return the first non-empty line of command output."""
    for line in output.splitlines():
        line = line.strip()
        if line:
            return line
    return ""


def parse_python_version(output: str) -> str:
    """Parse `python3 --version` output ("Python 3.12.4")."""
    return first_line(output)


def parse_pip_version(output: str) -> str:
    """Parse `pip --version` output ("pip 24.0 from /path (python 3.12)") to "24.0"."""
    fields = first_line(output).split()
    return fields[1] if len(fields) > 1 else ""


def parse_uv_version(output: str) -> str:
    """Parse `uv --version` output ("uv 0.4.18 (Homebrew 2024-09-30)")."""
    return first_line(output)


def parse_code_version(output: str) -> str:
    """Parse `code --version` output; the first of its three lines is the version."""
    return first_line(output)


def parse_extension_listing(output: str, extension_id: str) -> bool:
    """Check `code --list-extensions` output for an extension (substring match)."""
    return extension_id in output


def parse_ruff_version(output: str) -> str:
    """Parse `ruff --version` output ("ruff 0.6.9")."""
    return first_line(output)


def parse_shellenv(output: str) -> dict[str, str]:
    """Parse NUL-separated `env -0` output into a variable mapping."""
    env: dict[str, str] = {}
    for entry in output.split("\0"):
        name, sep, value = entry.partition("=")
        if sep and name and "\n" not in name:
            env[name] = value
    return env


class Homebrew:
    """The package manager."""

    name = "brew"
    display_name = "Homebrew"

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def is_available(self) -> bool:
        return command_exists(self.name, self.ctx)

    def install_self(self) -> None:
        """
        Run the official install script, then wire up the shell environment.

        Raises:
            InstallError: If the script cannot be fetched or fails
        """
        url = self.ctx.config.homebrew.install_script_url
        fetched = run_command(
            ("curl", "-fsSL", url),
            self.ctx,
            timeout=self.ctx.config.preferences.command_timeout_seconds,
        )
        if not fetched.success or not fetched.stdout:
            raise InstallError(
                f"Could not download the Homebrew install script ({fetched.error_message})",
                remediation=f'/bin/bash -c "$(curl -fsSL {url})"',
            )
        run_checked(
            ("/bin/bash", "-c", fetched.stdout),
            self.ctx,
            "Homebrew installation",
            remediation=f'/bin/bash -c "$(curl -fsSL {url})"',
        )
        self.configure_shellenv()

    def configure_shellenv(self) -> bool:
        """
        Persist and load `brew shellenv` where Homebrew lives outside the default PATH.

        Returns:
            True if the environment was configured, False on other architectures
        """
        arch = machine_architecture()
        if arch not in SHELLENV_ARCHITECTURES:
            vlog(f"Skipping shellenv setup on {arch}")
            return False

        brew_binary = self.ctx.config.homebrew.brew_binary
        eval_line = f'eval "$({brew_binary} shellenv)"'
        profile = self.ctx.config.homebrew.shell_profile_path
        os.makedirs(os.path.dirname(profile) or ".", exist_ok=True)
        with open(profile, "a", encoding="utf-8") as f:
            f.write(eval_line + "\n")
        vlog(f"Appended shellenv to {profile}")

        result = probe(("/bin/bash", "-c", f"{eval_line} && env -0"), self.ctx)
        if not result.success:
            raise InstallError(
                f"Could not load the Homebrew shell environment ({result.error_message})",
                remediation=eval_line,
            )
        self.ctx.apply_environment(parse_shellenv(result.stdout))
        return True

    def install(self, package: str, cask: bool = False) -> CommandResult:
        args = ("brew", "install", "--cask", package) if cask else ("brew", "install", package)
        return run_checked(args, self.ctx, f"brew install {package}")

    def upgrade(self, package: str, cask: bool = False) -> CommandResult:
        args = ("brew", "upgrade", "--cask", package) if cask else ("brew", "upgrade", package)
        return run_action(args, self.ctx)

    def update(self) -> CommandResult:
        return run_checked(("brew", "update"), self.ctx, "brew update")


class PythonRuntime:
    """The language runtime."""

    name = PYTHON_BINARY
    display_name = "Python"

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def is_available(self) -> bool:
        return command_exists(self.name, self.ctx)

    def version(self) -> str | None:
        result = probe((self.name, "--version"), self.ctx)
        if not result.success:
            return None
        # Python 2 printed its version on stderr
        return parse_python_version(result.stdout or result.stderr) or None


class Pip:
    """The package installer, always invoked through the runtime."""

    display_name = "pip"

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def command(self, *args: str) -> tuple[str, ...]:
        return (PYTHON_BINARY, "-m", "pip") + args

    def version(self) -> str | None:
        result = probe(self.command("--version"), self.ctx)
        if not result.success:
            return None
        return parse_pip_version(result.stdout) or None

    def bootstrap(self) -> None:
        run_checked((PYTHON_BINARY, "-m", "ensurepip", "--upgrade"), self.ctx, "pip bootstrap")
        self.upgrade_self()

    def upgrade_self(self) -> CommandResult:
        return run_checked(self.command("install", "--upgrade", "pip"), self.ctx, "pip upgrade")

    def install(self, package: str) -> CommandResult:
        return run_checked(self.command("install", package), self.ctx, f"pip install {package}")

    def upgrade(self, package: str) -> CommandResult:
        return run_action(self.command("install", "--upgrade", package), self.ctx)


class Uv:
    """The fast package and project manager."""

    name = "uv"
    display_name = "UV"

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def is_available(self) -> bool:
        return command_exists(self.name, self.ctx)

    def version(self) -> str | None:
        result = probe((self.name, "--version"), self.ctx)
        if not result.success:
            return None
        return parse_uv_version(result.stdout) or None

    def add_dev(self, package: str, upgrade: bool = False) -> CommandResult:
        args = ("uv", "add", "--dev", package)
        if upgrade:
            args += ("--upgrade",)
        return run_checked(
            args,
            self.ctx,
            f"uv add --dev {package}",
            remediation=" ".join(args),
        )

    def run_in_project(self, *args: str) -> CommandResult:
        """
        Run a command inside the project environment with output captured.

        `uv run` creates and syncs a missing virtual environment first, so it
        gets the install timeout rather than the probe timeout.
        """
        return run_command(
            ("uv", "run") + args,
            self.ctx,
            timeout=self.ctx.config.preferences.command_timeout_seconds,
        )

    def sync(self) -> CommandResult:
        return run_checked(("uv", "sync"), self.ctx, "uv sync", remediation="uv sync")


class VSCode:
    """The editor and its extension registry."""

    name = "code"
    display_name = "VS Code"

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def is_available(self) -> bool:
        return command_exists(self.name, self.ctx)

    def app_installed(self) -> bool:
        """Check for the application bundle when the CLI is missing from PATH."""
        return os.path.isdir(self.ctx.config.editor.app_path)

    def version(self) -> str | None:
        result = probe((self.name, "--version"), self.ctx)
        if not result.success:
            return None
        return parse_code_version(result.stdout) or None

    def list_extensions(self) -> str:
        result = probe((self.name, "--list-extensions"), self.ctx)
        return result.stdout if result.success else ""

    def has_extension(self, extension_id: str) -> bool:
        return parse_extension_listing(self.list_extensions(), extension_id)

    def install_extension(self, extension_id: str) -> CommandResult:
        return run_checked(
            (self.name, "--install-extension", extension_id),
            self.ctx,
            f"Installing extension {extension_id}",
        )


class Ruff:
    """The linter, either project-scoped through uv or installed globally."""

    name = "ruff"
    display_name = "Ruff"

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def is_available(self) -> bool:
        return command_exists(self.name, self.ctx)

    def global_version(self) -> str | None:
        result = probe((self.name, "--version"), self.ctx)
        if not result.success:
            return None
        return parse_ruff_version(result.stdout) or None

    def project_version(self) -> str | None:
        result = Uv(self.ctx).run_in_project(self.name, "--version")
        if not result.success:
            return None
        return parse_ruff_version(result.stdout) or None
