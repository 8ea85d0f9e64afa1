"""
Subprocess execution for collaborator commands.

Every external command goes through run_command(), which never raises for a
missing binary or a timeout: those come back as failed CommandResults.
Mandatory actions use run_checked(), which turns a failure into InstallError.
"""

from __future__ import annotations

import shutil
import subprocess
import time
from dataclasses import dataclass
from typing import Sequence

from .common import vlog
from .environment import RunContext


@dataclass(frozen=True)
class CommandResult:
    """
    Result of running one external command.

    Attributes:
        args: Command that was executed
        success: Whether the command exited with status 0
        stdout: Standard output (empty when output was not captured)
        stderr: Standard error (empty when output was not captured)
        exit_code: Process exit code (-1 if the process never ran to completion)
        duration_seconds: Time taken
        error_message: Human-readable error message if failed
    """
    args: tuple[str, ...]
    success: bool
    stdout: str
    stderr: str
    exit_code: int
    duration_seconds: float
    error_message: str | None = None


class InstallError(Exception):
    """
    A collaborator action failed.

    Attributes:
        message: Human-readable error message
        remediation: Suggested command or action to fix the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        self.message = message
        self.remediation = remediation
        super().__init__(message)


def command_exists(name: str, ctx: RunContext) -> bool:
    """Check whether a command is on the run's PATH."""
    return shutil.which(name, path=ctx.path or None) is not None


def run_command(
    args: Sequence[str],
    ctx: RunContext,
    capture: bool = True,
    timeout: int | None = None,
    verbose: bool = False,
) -> CommandResult:
    """
    Run an external command in the project directory with the run's environment.

    Args:
        args: Command and arguments
        ctx: Run context supplying cwd and environment
        capture: Capture output (probes) or stream it to the terminal (installs)
        timeout: Timeout in seconds (None waits indefinitely)
        verbose: Enable verbose logging

    Returns:
        CommandResult with execution outcome
    """
    command = tuple(args)
    start_time = time.time()
    vlog(f"Executing: {' '.join(command)}", verbose)

    try:
        if capture:
            result = subprocess.run(
                list(command),
                capture_output=True,
                text=True,
                stdin=subprocess.DEVNULL,
                cwd=str(ctx.cwd),
                env=ctx.env,
                timeout=timeout,
                check=False,
            )
        else:
            result = subprocess.run(
                list(command),
                cwd=str(ctx.cwd),
                env=ctx.env,
                timeout=timeout,
                check=False,
            )
    except subprocess.TimeoutExpired:
        vlog(f"Timed out after {timeout}s: {command[0]}", verbose)
        return CommandResult(
            args=command,
            success=False,
            stdout="",
            stderr="",
            exit_code=-1,
            duration_seconds=time.time() - start_time,
            error_message=f"Command timed out after {timeout}s",
        )
    except (FileNotFoundError, PermissionError):
        vlog(f"Command not found: {command[0]}", verbose)
        return CommandResult(
            args=command,
            success=False,
            stdout="",
            stderr="",
            exit_code=-1,
            duration_seconds=time.time() - start_time,
            error_message=f"Command not found: {command[0]}",
        )

    stdout = result.stdout or ""
    stderr = result.stderr or ""
    success = result.returncode == 0
    error_msg = None
    if not success:
        error_msg = f"Command failed with exit code {result.returncode}"
        if stderr:
            error_msg += f": {stderr.strip()[:200]}"

    vlog(f"Exit code {result.returncode}: {' '.join(command)}", verbose)
    return CommandResult(
        args=command,
        success=success,
        stdout=stdout,
        stderr=stderr,
        exit_code=result.returncode,
        duration_seconds=time.time() - start_time,
        error_message=error_msg,
    )


def probe(args: Sequence[str], ctx: RunContext) -> CommandResult:
    """Run a read-only query command with the probe timeout."""
    return run_command(args, ctx, capture=True, timeout=ctx.config.preferences.probe_timeout_seconds)


def run_action(args: Sequence[str], ctx: RunContext) -> CommandResult:
    """Run an install/upgrade command with its output streamed to the terminal."""
    return run_command(args, ctx, capture=False, timeout=ctx.config.preferences.command_timeout_seconds)


def run_checked(
    args: Sequence[str],
    ctx: RunContext,
    description: str,
    remediation: str | None = None,
) -> CommandResult:
    """
    Run an install/upgrade command and raise if it fails.

    Raises:
        InstallError: If the command does not succeed
    """
    result = run_action(args, ctx)
    if not result.success:
        message = f"{description} failed"
        if result.error_message:
            message += f" ({result.error_message})"
        raise InstallError(message, remediation=remediation or " ".join(args))
    return result


def run_first_success(
    commands: Sequence[Sequence[str]],
    ctx: RunContext,
    description: str,
) -> CommandResult:
    """
    Run commands in order until one succeeds.

    Raises:
        InstallError: If every command fails
    """
    failures = []
    for args in commands:
        result = run_action(args, ctx)
        if result.success:
            return result
        failures.append(result.error_message or f"{args[0]} failed")
    raise InstallError(f"{description} failed ({'; '.join(failures)})")
