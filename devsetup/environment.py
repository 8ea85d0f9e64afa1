"""
Run context for a single setup invocation.

Holds the run mode, the explicit process environment handed to every
collaborator, and the validation tally. Project file presence is read from
the filesystem on every call so a step that creates a file changes the answer
for the steps after it.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from .common import vlog
from .config import Config


MODE_INSTALL = "install"
MODE_UPGRADE = "upgrade"
VALID_MODES = (MODE_INSTALL, MODE_UPGRADE)

CRITICAL = "critical"
OPTIONAL = "optional"

CRITICAL_TOTAL = 3
OPTIONAL_TOTAL = 4


@dataclass
class ValidationTally:
    """
    Pass counters accumulated in validation order.

    Attributes:
        critical_passed: Critical checks that passed
        optional_passed: Optional checks that passed
        critical_total: Number of critical checks (fixed)
        optional_total: Number of optional checks (fixed)
    """
    critical_passed: int = 0
    optional_passed: int = 0
    critical_total: int = field(default=CRITICAL_TOTAL, init=False)
    optional_total: int = field(default=OPTIONAL_TOTAL, init=False)

    def record(self, criticality: str, passed: bool) -> None:
        if criticality not in (CRITICAL, OPTIONAL):
            raise ValueError(f"Invalid criticality: {criticality}")
        if not passed:
            return
        if criticality == CRITICAL:
            self.critical_passed += 1
        else:
            self.optional_passed += 1

    @property
    def all_critical_passed(self) -> bool:
        return self.critical_passed == self.critical_total

    @property
    def all_optional_passed(self) -> bool:
        return self.optional_passed == self.optional_total


@dataclass
class RunContext:
    """
    Ephemeral state for one invocation.

    Attributes:
        mode: 'install' or 'upgrade', fixed for the process lifetime
        config: Loaded configuration
        cwd: Project directory the run inspects
        env: Environment passed to every subprocess
        tally: Validation counters
    """
    mode: str = MODE_INSTALL
    config: Config = field(default_factory=Config)
    cwd: Path = field(default_factory=Path.cwd)
    env: dict[str, str] = field(default_factory=lambda: dict(os.environ))
    tally: ValidationTally = field(default_factory=ValidationTally)

    def __post_init__(self):
        if self.mode not in VALID_MODES:
            raise ValueError(
                f"Invalid mode: {self.mode}. Must be one of: {', '.join(VALID_MODES)}"
            )
        self.cwd = Path(self.cwd)

    @property
    def upgrade(self) -> bool:
        return self.mode == MODE_UPGRADE

    @property
    def path(self) -> str:
        return self.env.get("PATH", "")

    @property
    def manifest_path(self) -> Path:
        return self.cwd / self.config.project.manifest

    @property
    def version_pin_path(self) -> Path:
        return self.cwd / self.config.project.version_pin

    @property
    def venv_path(self) -> Path:
        return self.cwd / self.config.project.venv

    def project_detected(self) -> bool:
        """Check whether the working directory holds a project manifest."""
        return self.manifest_path.is_file()

    def version_pin_exists(self) -> bool:
        return self.version_pin_path.is_file()

    def venv_exists(self) -> bool:
        return self.venv_path.is_dir()

    def apply_environment(self, updates: dict[str, str], verbose: bool = False) -> None:
        """
        Merge environment variables produced by a collaborator.

        Args:
            updates: Variables to set for all later subprocesses
            verbose: Enable verbose logging
        """
        changed = sorted(k for k, v in updates.items() if self.env.get(k) != v)
        self.env.update(updates)
        if changed:
            vlog(f"Environment updated: {', '.join(changed)}", verbose)
