"""
Configuration file parsing and management.

Loads YAML configuration files and merges them from multiple sources
(explicit path → project → user → defaults). Only paths and timeouts are
configurable; the managed tool list is fixed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .common import vlog


CONFIG_ENV_VAR = "DEVSETUP_CONFIG"

# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".devsetup.yml",                                      # Project root (highest priority)
    ".devsetup.yaml",                                     # Alternative extension
    os.path.expanduser("~/.config/devsetup/config.yml"),  # User global
    os.path.expanduser("~/.config/devsetup/config.yaml"),
]

HOMEBREW_INSTALL_SCRIPT_URL = "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh"


def _require_strings(obj: Any, section: str, attrs: tuple[str, ...]) -> None:
    for attr in attrs:
        value = getattr(obj, attr)
        if not isinstance(value, str) or not value.strip():
            raise ValueError(f"Invalid {section}.{attr}: {value!r}. Must be a non-empty string")


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config section, treating a missing or null section as empty."""
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Invalid {name} section: expected a mapping, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class ProjectConfig:
    """
    File layout of a uv-managed project.

    Attributes:
        manifest: Project manifest file name
        version_pin: File pinning the Python version
        venv: Virtual environment directory name
    """
    manifest: str = "pyproject.toml"
    version_pin: str = ".python-version"
    venv: str = ".venv"

    def __post_init__(self):
        for attr in ("manifest", "version_pin", "venv"):
            value = getattr(self, attr)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Invalid project.{attr}: {value!r}. Must be a non-empty string")
            if os.path.isabs(value):
                raise ValueError(
                    f"Invalid project.{attr}: {value}. Must be relative to the project directory"
                )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ProjectConfig:
        """Create ProjectConfig from dictionary."""
        return ProjectConfig(
            manifest=data.get("manifest", "pyproject.toml"),
            version_pin=data.get("version_pin", ".python-version"),
            venv=data.get("venv", ".venv"),
        )


@dataclass(frozen=True)
class HomebrewConfig:
    """
    Homebrew bootstrap settings.

    Attributes:
        prefix: Installation prefix on Apple Silicon
        shell_profile: Profile that receives the shellenv line
        install_script_url: URL of the official install script
    """
    prefix: str = "/opt/homebrew"
    shell_profile: str = "~/.zprofile"
    install_script_url: str = HOMEBREW_INSTALL_SCRIPT_URL

    def __post_init__(self):
        _require_strings(self, "homebrew", ("prefix", "shell_profile", "install_script_url"))
        if not self.install_script_url.startswith("https://"):
            raise ValueError(
                f"Invalid homebrew.install_script_url: {self.install_script_url}. "
                "Must be an https:// URL"
            )

    @property
    def brew_binary(self) -> str:
        return os.path.join(self.prefix, "bin", "brew")

    @property
    def shell_profile_path(self) -> str:
        return os.path.expanduser(self.shell_profile)

    @staticmethod
    def from_dict(data: dict[str, Any]) -> HomebrewConfig:
        """Create HomebrewConfig from dictionary."""
        return HomebrewConfig(
            prefix=data.get("prefix", "/opt/homebrew"),
            shell_profile=data.get("shell_profile", "~/.zprofile"),
            install_script_url=data.get("install_script_url", HOMEBREW_INSTALL_SCRIPT_URL),
        )


@dataclass(frozen=True)
class EditorConfig:
    """
    Editor settings.

    Attributes:
        app_path: Application bundle checked when the `code` command is missing
    """
    app_path: str = "/Applications/Visual Studio Code.app"

    def __post_init__(self):
        _require_strings(self, "editor", ("app_path",))

    @staticmethod
    def from_dict(data: dict[str, Any]) -> EditorConfig:
        """Create EditorConfig from dictionary."""
        return EditorConfig(app_path=data.get("app_path", "/Applications/Visual Studio Code.app"))


@dataclass(frozen=True)
class Preferences:
    """
    Execution preferences.

    Attributes:
        probe_timeout_seconds: Timeout for version probes and listings
        command_timeout_seconds: Timeout for install/upgrade commands (None = wait indefinitely)
    """
    probe_timeout_seconds: int = 10
    command_timeout_seconds: int | None = None

    def __post_init__(self):
        """Validate preferences after initialization."""
        for attr in ("probe_timeout_seconds", "command_timeout_seconds"):
            value = getattr(self, attr)
            if value is None and attr == "command_timeout_seconds":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Invalid preferences.{attr}: {value!r}. Must be an integer")
        if self.probe_timeout_seconds < 1 or self.probe_timeout_seconds > 120:
            raise ValueError(
                f"Invalid probe_timeout_seconds: {self.probe_timeout_seconds}. "
                "Must be between 1 and 120"
            )
        if self.command_timeout_seconds is not None and (
            self.command_timeout_seconds < 1 or self.command_timeout_seconds > 7200
        ):
            raise ValueError(
                f"Invalid command_timeout_seconds: {self.command_timeout_seconds}. "
                "Must be null or between 1 and 7200"
            )

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Preferences:
        """Create Preferences from dictionary."""
        return Preferences(
            probe_timeout_seconds=data.get("probe_timeout_seconds", 10),
            command_timeout_seconds=data.get("command_timeout_seconds"),
        )


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for devsetup.

    Attributes:
        version: Config schema version
        project: Project file layout
        homebrew: Homebrew bootstrap settings
        editor: Editor settings
        preferences: Execution preferences
        source: Path(s) of the configuration file(s) that were loaded
    """
    version: int = 1
    project: ProjectConfig = field(default_factory=ProjectConfig)
    homebrew: HomebrewConfig = field(default_factory=HomebrewConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    preferences: Preferences = field(default_factory=Preferences)
    source: str = ""

    def __post_init__(self):
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        return Config(
            version=data.get("version", 1),
            project=ProjectConfig.from_dict(_section(data, "project")),
            homebrew=HomebrewConfig.from_dict(_section(data, "homebrew")),
            editor=EditorConfig.from_dict(_section(data, "editor")),
            preferences=Preferences.from_dict(_section(data, "preferences")),
            source=source,
        )


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError):
        return None
    if data is None:
        return {}
    return data if isinstance(data, dict) else None


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two config dictionaries, preferring values from override."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    data = _load_yaml(file_path)
    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Configuration precedence (highest to lowest):
    1. Custom path (argument, else $DEVSETUP_CONFIG)
    2. Project .devsetup.yml
    3. User ~/.config/devsetup/config.yml
    4. Default configuration

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (never None, returns defaults if no config found)

    Raises:
        ValueError: If a custom path is given but cannot be loaded or the merged result is invalid
    """
    custom_path = custom_path or os.environ.get(CONFIG_ENV_VAR) or None
    layers: list[tuple[str, dict[str, Any]]] = []

    if custom_path:
        if load_config_file(custom_path, verbose) is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        layers.append((custom_path, _load_yaml(custom_path) or {}))
        vlog(f"Using custom config: {custom_path}", verbose)

    for location in CONFIG_LOCATIONS:
        if load_config_file(location, verbose) is not None:
            layers.append((location, _load_yaml(location) or {}))
            vlog(f"Found config at: {location}", verbose)

    if not layers:
        vlog("No config files found, using defaults", verbose)
        return Config()

    # Lowest priority first so higher layers override
    merged: dict[str, Any] = {}
    for _, data in reversed(layers):
        merged = _deep_merge(merged, data)

    sources = ", ".join(path for path, _ in layers)
    vlog(f"Merged {len(layers)} config files", verbose)
    try:
        return Config.from_dict(merged, source=sources)
    except TypeError as e:
        raise ValueError(f"Invalid merged configuration from {sources}: {e}") from e
