"""Subprocess execution with Result-based error handling.

Two flavours:
- run(): capture stdout, used for commands whose output is parsed
  (`npm pack --json`)
- run_silent(): inherit the terminal, used for long steps whose output the
  user should see (`npm ci`, `npm test`, `npm publish`)

SubprocessRunner bundles both behind the ProcessRunner port so the publish
pipeline can be exercised with a fake.

Usage:
    match run(["npm", "--version"], cwd=Path(".")):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pubgate.core.result import Err, Ok, Result

__all__ = ["ProcessError", "ProcessRunner", "SubprocessRunner", "run", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process (-1 if it could not start).
        stdout: Standard output (empty when not captured).
        stderr: Standard error (empty when not captured).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"

    @property
    def detail(self) -> str | None:
        """Most useful output for a hint, if any was captured."""
        return self.stderr.strip() or self.stdout.strip() or None


def _resolve(cmd: list[str]) -> list[str]:
    # npm is a .cmd shim on Windows; subprocess does not search PATHEXT.
    if not cmd:
        return cmd
    found = shutil.which(cmd[0])
    return [found, *cmd[1:]] if found else cmd


def run(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (inherits the current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            _resolve(cmd),
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with output streaming to the terminal.

    No timeout: a hung command blocks the caller.

    Returns:
        Ok(None) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            _resolve(cmd),
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            check=False,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr=""))

    return Ok(None)


class ProcessRunner(Protocol):
    """Port for running external commands (npm, git)."""

    def __call__(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> Result[str, ProcessError]: ...


class SubprocessRunner:
    """ProcessRunner backed by real subprocesses.

    Attributes:
        stream_output: Let the child write to the terminal instead of
            capturing its output.
    """

    def __init__(self, *, stream_output: bool = True) -> None:
        self.stream_output = stream_output

    def __call__(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> Result[str, ProcessError]:
        if not self.stream_output:
            return run(cmd, cwd=cwd, env=env)
        result = run_silent(cmd, cwd=cwd, env=env)
        if isinstance(result, Err):
            return result
        return Ok("")
