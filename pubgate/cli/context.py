from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from pubgate.core.errors import ErrorCode
from pubgate.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    env: Mapping[str, str]
    console: ConsoleProtocol


def build_context(cwd: Path | None = None, *, quiet: bool = False) -> CLIContext:
    console = RichConsole(quiet=quiet)
    try:
        root = (cwd or Path.cwd()).expanduser().resolve()
    except OSError as e:
        console.error(f"invalid --cwd: {e}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        console.error(f"--cwd '{root}' is not a directory")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(cwd=root, env=dict(os.environ), console=console)
