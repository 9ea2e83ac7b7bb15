"""Git repository operations used after a publish.

Only what the pipeline needs: check for pending changes, stage everything
and commit with the new version as the message. All operations return Result types.

Usage:
    repo = Repository(Path("/path/to/package"))
    if isinstance(repo.add_all(), Ok):
        repo.commit("1.2.3")
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from pubgate.core.result import Err, Ok, Result
from pubgate.platform.process import ProcessError, ProcessRunner
from pubgate.platform.process import run as run_process

__all__ = [
    "GitError",
    "Repository",
    "VersionControl",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class VersionControl(Protocol):
    """Port for recording the published version in version control."""

    def is_clean(self) -> Result[bool, GitError]: ...

    def add_all(self) -> Result[None, GitError]: ...

    def commit(self, message: str) -> Result[None, GitError]: ...


def _capture(
    cmd: list[str],
    *,
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> Result[str, ProcessError]:
    return run_process(cmd, cwd=cwd, env=env)


def _git_error(command: str, e: ProcessError) -> GitError:
    return GitError(
        command=command,
        message=e.detail or f"git {command} failed",
        returncode=e.returncode,
    )


class Repository:
    """Git working tree at `path`.

    Attributes:
        path: Package directory (inside a git work tree)

    The runner must capture stdout; `is_clean` reads it.
    """

    def __init__(
        self,
        path: Path,
        *,
        runner: ProcessRunner | None = None,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self.path = path
        self._runner: ProcessRunner = runner or _capture
        self._env = env

    def is_clean(self) -> Result[bool, GitError]:
        """True when `git status --porcelain` reports nothing to commit."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Ok(stdout):
                return Ok(not stdout.strip())
            case Err(e):
                return Err(_git_error("status", e))

    def add_all(self) -> Result[None, GitError]:
        """Stage every change (`git add .`)."""
        return self._check("add", ["add", "."])

    def commit(self, message: str) -> Result[None, GitError]:
        """Commit staged changes with `message`."""
        return self._check("commit", ["commit", "-m", message])

    def _check(self, command: str, args: list[str]) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(_git_error(command, result.error))
        return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return self._runner(["git", *args], cwd=self.path, env=self._env)
