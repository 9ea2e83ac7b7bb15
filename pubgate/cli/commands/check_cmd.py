"""check command - report whether the package needs publishing."""

from __future__ import annotations

from pathlib import Path

import typer

from pubgate.cli.commands._helpers import exit_on_error, exit_with_code
from pubgate.cli.context import build_context
from pubgate.core.errors import ErrorCode
from pubgate.core.result import Ok
from pubgate.npm.pack import NpmPacker
from pubgate.output.console import Style
from pubgate.services.detector import detect


def check(
    cwd: Path | None = typer.Option(None, "--cwd", help="Package directory (default: current)"),
    exit_code: bool = typer.Option(
        False,
        "--exit-code",
        help="Exit with 1 when no publish is needed",
    ),
    ignore_scripts: bool = typer.Option(
        False,
        "--ignore-scripts",
        help="Pack without running prepack/prepare (faster, may miss build changes)",
    ),
) -> None:
    """Compare the local package with the registry; nothing is published or committed."""
    ctx = build_context(cwd)

    packer = NpmPacker(env=ctx.env, ignore_scripts=ignore_scripts)
    result = detect(ctx.cwd, packer=packer, environ=ctx.env)
    exit_on_error(result, ctx)
    if not isinstance(result, Ok):
        return

    verdict = result.value
    if verdict.changed:
        ctx.console.print(f"publish needed: {verdict.reason}", Style.WARNING)
        return

    ctx.console.print(f"up to date: {verdict.reason}", Style.SUCCESS)
    if exit_code:
        exit_with_code(int(ErrorCode.USER_ERROR))
