"""
Tests for collaborator wrappers and output parsing (devsetup/collaborators.py).
"""

import pytest

from devsetup.collaborators import (
    Homebrew,
    Pip,
    Ruff,
    Uv,
    VSCode,
    first_line,
    parse_code_version,
    parse_extension_listing,
    parse_pip_version,
    parse_python_version,
    parse_shellenv,
)
from devsetup.runner import InstallError


class TestParsing:
    """Tests for the per-collaborator parse functions."""

    def test_first_line_skips_blank_lines(self):
        assert first_line("\n  \nruff 0.6.9\nextra\n") == "ruff 0.6.9"
        assert first_line("") == ""

    def test_python_version(self):
        assert parse_python_version("Python 3.12.4\n") == "Python 3.12.4"

    def test_pip_version_second_field(self):
        output = "pip 24.0 from /opt/homebrew/lib/python3.12/site-packages/pip (python 3.12)\n"
        assert parse_pip_version(output) == "24.0"

    @pytest.mark.parametrize("output", ["", "pip\n"])
    def test_pip_version_malformed(self, output):
        assert parse_pip_version(output) == ""

    def test_code_version_first_of_three_lines(self):
        assert parse_code_version("1.94.2\n384ff7382de624fb94dbaf6da11977bba1ecd427\narm64\n") == "1.94.2"

    def test_extension_listing_substring(self):
        listing = "charliermarsh.ruff\nms-python.python\nms-python.vscode-pylance\n"
        assert parse_extension_listing(listing, "ms-python.python")
        assert not parse_extension_listing(listing, "esbenp.prettier-vscode")

    def test_shellenv(self):
        output = "HOMEBREW_PREFIX=/opt/homebrew\0PATH=/opt/homebrew/bin:/usr/bin\0MULTI=a\nb=c\0"
        assert parse_shellenv(output) == {
            "HOMEBREW_PREFIX": "/opt/homebrew",
            "PATH": "/opt/homebrew/bin:/usr/bin",
            "MULTI": "a\nb=c",
        }

    def test_shellenv_ignores_garbage(self):
        assert parse_shellenv("no-equals\0=value\0") == {}


class TestHomebrew:
    """Tests for the package manager wrapper."""

    def test_install_self_on_intel(self, toolchain, make_ctx, config):
        ctx = make_ctx()
        Homebrew(ctx).install_self()

        assert toolchain.commands("curl", "-fsSL")
        assert "brew" in toolchain.installed
        assert not toolchain.commands("/bin/bash", "-c", f'eval "$({config.homebrew.brew_binary} shellenv)" && env -0')

    def test_configure_shellenv_on_apple_silicon(self, toolchain, make_ctx, config, monkeypatch):
        monkeypatch.setattr("devsetup.collaborators.machine_architecture", lambda: "arm64")
        ctx = make_ctx()

        assert Homebrew(ctx).configure_shellenv() is True

        profile = config.homebrew.shell_profile_path
        with open(profile, encoding="utf-8") as f:
            assert f.read() == 'eval "$(/opt/homebrew/bin/brew shellenv)"\n'
        assert ctx.path == "/opt/homebrew/bin:/usr/bin"
        assert ctx.env["HOMEBREW_PREFIX"] == "/opt/homebrew"

    def test_configure_shellenv_failure(self, toolchain, make_ctx, monkeypatch):
        monkeypatch.setattr("devsetup.collaborators.machine_architecture", lambda: "arm64")
        toolchain.fail("/bin/bash")
        with pytest.raises(InstallError, match="Homebrew shell environment"):
            Homebrew(make_ctx()).configure_shellenv()

    def test_install_self_download_failure(self, toolchain, make_ctx):
        toolchain.fail("curl")
        with pytest.raises(InstallError) as exc_info:
            Homebrew(make_ctx()).install_self()
        assert "install script" in exc_info.value.message
        assert "curl -fsSL" in exc_info.value.remediation
        assert "brew" not in toolchain.installed

    def test_cask_arguments(self, toolchain, make_ctx):
        toolchain.installed.add("brew")
        Homebrew(make_ctx()).install("visual-studio-code", cask=True)
        assert ("brew", "install", "--cask", "visual-studio-code") in toolchain.calls
        assert "code" in toolchain.installed

    def test_upgrade_failure_does_not_raise(self, toolchain, make_ctx):
        toolchain.installed.add("brew")
        result = Homebrew(make_ctx()).upgrade("python3")
        assert not result.success


class TestPip:
    """Tests for the package installer wrapper."""

    def test_always_invoked_through_runtime(self, toolchain, make_ctx):
        assert Pip(make_ctx()).command("install", "uv") == ("python3", "-m", "pip", "install", "uv")

    def test_bootstrap(self, toolchain, make_ctx):
        toolchain.installed.add("python3")
        pip = Pip(make_ctx())
        pip.bootstrap()
        assert toolchain.calls[:2] == [
            ("python3", "-m", "ensurepip", "--upgrade"),
            ("python3", "-m", "pip", "install", "--upgrade", "pip"),
        ]
        assert pip.version() == "24.0"


class TestUv:
    """Tests for the project manager wrapper."""

    def test_add_dev_upgrade_flag(self, toolchain, make_ctx, python_project):
        toolchain.installed.add("uv")
        Uv(make_ctx()).add_dev("ruff", upgrade=True)
        assert ("uv", "add", "--dev", "ruff", "--upgrade") in toolchain.calls

    def test_sync_outside_project_raises(self, toolchain, make_ctx):
        toolchain.installed.add("uv")
        with pytest.raises(InstallError) as exc_info:
            Uv(make_ctx()).sync()
        assert exc_info.value.remediation == "uv sync"

    def test_sync_runs_in_project_directory(self, toolchain, make_ctx, python_project):
        toolchain.installed.add("uv")
        Uv(make_ctx()).sync()
        assert (python_project / ".venv").is_dir()


class TestVSCode:
    """Tests for the editor wrapper."""

    def test_has_extension(self, toolchain, make_ctx):
        toolchain.installed.add("code")
        toolchain.extensions = ["charliermarsh.ruff"]
        code = VSCode(make_ctx())
        assert code.has_extension("charliermarsh.ruff")
        assert not code.has_extension("ms-python.python")

    def test_list_extensions_without_cli(self, toolchain, make_ctx):
        assert VSCode(make_ctx()).list_extensions() == ""

    def test_app_installed(self, make_ctx, config, tmp_path):
        code = VSCode(make_ctx())
        assert not code.app_installed()
        (tmp_path / "Applications" / "Visual Studio Code.app").mkdir(parents=True)
        assert code.app_installed()


class TestRuff:
    """Tests for the linter wrapper."""

    def test_project_version(self, toolchain, make_ctx, python_project):
        toolchain.installed.add("uv")
        toolchain.project_ruff = "ruff 0.6.9"
        assert Ruff(make_ctx()).project_version() == "ruff 0.6.9"

    def test_project_version_absent(self, toolchain, make_ctx, python_project):
        toolchain.installed.add("uv")
        assert Ruff(make_ctx()).project_version() is None

    def test_global_version(self, toolchain, make_ctx):
        toolchain.installed.add("ruff")
        assert Ruff(make_ctx()).global_version() == "ruff 0.5.0"

    def test_project_version_waits_for_environment_sync(self, toolchain, make_ctx, python_project):
        """Test that `uv run` is not cut off by the short probe timeout."""
        toolchain.installed.add("uv")
        toolchain.project_ruff = "ruff 0.6.9"
        toolchain.slow_down("uv", "run")
        assert Ruff(make_ctx()).project_version() == "ruff 0.6.9"
