"""
Shared fixtures: a stateful fake of the external toolchain.

FakeToolchain stands in for subprocess.run and shutil.which. It interprets
the collaborator commands devsetup issues (brew, python3 -m pip, uv, code,
ruff) and mutates its own state on installs, so tests can run whole phases
and inspect both the printed output and the commands that were issued.
"""

import subprocess
from pathlib import Path

import pytest

from devsetup.config import Config, EditorConfig, HomebrewConfig
from devsetup.environment import RunContext


ALL_TOOLS = ("brew", "python3", "pip", "uv", "code", "ruff")
ALL_EXTENSIONS = ("ms-python.python", "charliermarsh.ruff")

INSTALLABLE = {
    "python3": "python3",
    "uv": "uv",
    "ruff": "ruff",
    "visual-studio-code": "code",
}


class FakeToolchain:
    def __init__(self, installed=(), extensions=(), project_ruff=None):
        self.installed = set(installed)
        self.extensions = list(extensions)
        self.project_ruff = project_ruff
        self.global_ruff = "ruff 0.5.0"
        self.failing = []
        self.slow = []
        self.broken = set()
        self.calls = []

    def install_all(self):
        self.installed.update(ALL_TOOLS)
        self.extensions = list(ALL_EXTENSIONS)
        return self

    def fail(self, *prefix):
        """Make every command starting with prefix exit 1."""
        self.failing.append(tuple(prefix))
        return self

    def slow_down(self, *prefix):
        """Make every command starting with prefix outlast any timeout it is given."""
        self.slow.append(tuple(prefix))
        return self

    def which(self, name, mode=None, path=None):
        if name in self.installed and name != "pip":
            return f"/usr/local/bin/{name}"
        return None

    def commands(self, *prefix):
        return [c for c in self.calls if c[:len(prefix)] == prefix]

    def _result(self, args, returncode=0, stdout="", stderr=""):
        return subprocess.CompletedProcess(list(args), returncode, stdout, stderr)

    def _add(self, package):
        tool = INSTALLABLE.get(package, package)
        if tool not in self.broken:
            self.installed.add(tool)

    def run(self, args, **kwargs):
        args = tuple(args)
        self.calls.append(args)
        binary = args[0]

        if binary not in ("curl", "/bin/bash") and binary not in self.installed:
            raise FileNotFoundError(2, "No such file or directory", binary)
        for prefix in self.slow:
            if args[:len(prefix)] == prefix and kwargs.get("timeout") is not None:
                raise subprocess.TimeoutExpired(list(args), kwargs["timeout"])
        for prefix in self.failing:
            if args[:len(prefix)] == prefix:
                return self._result(args, 1, stderr="simulated failure")

        cwd = Path(kwargs.get("cwd") or ".")
        handler = getattr(self, f"_run_{binary.strip('/').replace('/', '_')}", None)
        if handler is None:
            return self._result(args, 127, stderr=f"unhandled command: {args}")
        return handler(args, cwd)

    def _run_curl(self, args, cwd):
        return self._result(args, stdout="#!/bin/bash\necho 'installing homebrew'\n")

    def _run_bin_bash(self, args, cwd):
        script = args[-1]
        if "shellenv" in script:
            return self._result(
                args,
                stdout="HOMEBREW_PREFIX=/opt/homebrew\0PATH=/opt/homebrew/bin:/usr/bin\0",
            )
        self._add("brew")
        return self._result(args)

    def _run_brew(self, args, cwd):
        action = args[1]
        if action == "update":
            return self._result(args)
        package = args[-1]
        if action == "install":
            self._add(package)
            return self._result(args)
        if action == "upgrade":
            if INSTALLABLE.get(package, package) in self.installed:
                return self._result(args)
            return self._result(args, 1, stderr=f"Error: {package} not installed")
        return self._result(args, 1)

    def _run_python3(self, args, cwd):
        if args[1:] == ("--version",):
            return self._result(args, stdout="Python 3.12.4\n")
        if args[1:3] == ("-m", "ensurepip"):
            self._add("pip")
            return self._result(args)
        if args[1:3] == ("-m", "pip"):
            if "pip" not in self.installed:
                return self._result(args, 1, stderr="No module named pip")
            rest = args[3:]
            if rest == ("--version",):
                return self._result(args, stdout="pip 24.0 from /usr/lib/python3/site-packages/pip (python 3.12)\n")
            if rest[:1] == ("install",):
                self._add(rest[-1])
                return self._result(args)
        return self._result(args, 1)

    def _run_uv(self, args, cwd):
        rest = args[1:]
        has_manifest = (cwd / "pyproject.toml").is_file()
        if rest == ("--version",):
            return self._result(args, stdout="uv 0.4.18 (Homebrew 2024-09-30)\n")
        if rest[:2] == ("add", "--dev"):
            if not has_manifest:
                return self._result(args, 2, stderr="error: No `pyproject.toml` found")
            self.project_ruff = "ruff 0.6.9"
            return self._result(args)
        if rest == ("run", "ruff", "--version"):
            if has_manifest and self.project_ruff:
                return self._result(args, stdout=self.project_ruff + "\n")
            return self._result(args, 2, stderr="error: Failed to spawn: `ruff`")
        if rest == ("sync",):
            if not has_manifest:
                return self._result(args, 2, stderr="error: No `pyproject.toml` found")
            (cwd / ".venv").mkdir(exist_ok=True)
            return self._result(args)
        return self._result(args, 2)

    def _run_code(self, args, cwd):
        rest = args[1:]
        if rest == ("--version",):
            return self._result(args, stdout="1.94.2\n384ff7382de624fb94dbaf6da11977bba1ecd427\narm64\n")
        if rest == ("--list-extensions",):
            return self._result(args, stdout="".join(f"{e}\n" for e in self.extensions))
        if rest[:1] == ("--install-extension",):
            self.extensions.append(rest[1])
            return self._result(args, stdout=f"Extension '{rest[1]}' was successfully installed.\n")
        return self._result(args, 1)

    def _run_ruff(self, args, cwd):
        return self._result(args, stdout=self.global_ruff + "\n")


@pytest.fixture
def toolchain(monkeypatch):
    """Empty fake toolchain patched in for subprocess.run and shutil.which."""
    fake = FakeToolchain()
    monkeypatch.setattr("devsetup.runner.subprocess.run", fake.run)
    monkeypatch.setattr("devsetup.runner.shutil.which", fake.which)
    monkeypatch.setattr("devsetup.collaborators.machine_architecture", lambda: "x86_64")
    return fake


@pytest.fixture
def project_dir(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path):
    return Config(
        homebrew=HomebrewConfig(shell_profile=str(tmp_path / "home" / ".zprofile")),
        editor=EditorConfig(app_path=str(tmp_path / "Applications" / "Visual Studio Code.app")),
    )


@pytest.fixture
def make_ctx(project_dir, config):
    """Factory for run contexts rooted in the temporary project directory."""
    def factory(mode="install"):
        return RunContext(mode=mode, config=config, cwd=project_dir, env={"PATH": "/usr/bin:/bin"})
    return factory


@pytest.fixture
def python_project(project_dir):
    """Turn the project directory into a uv project without a virtual environment."""
    (project_dir / "pyproject.toml").write_text("[project]\nname = \"demo\"\nversion = \"0.1.0\"\n")
    (project_dir / ".python-version").write_text("3.12\n")
    return project_dir
