"""publish command - release the package if it changed."""

from __future__ import annotations

from pathlib import Path

import typer

from pubgate.cli.commands._helpers import exit_on_error
from pubgate.cli.context import build_context
from pubgate.services.flags import DEFAULT_BUMP, Flags
from pubgate.services.pipeline import PipelineOptions
from pubgate.services.pipeline import publish as run_publish


def publish(
    bump: str = typer.Argument(
        DEFAULT_BUMP,
        help="npm version argument: patch, minor, major, prerelease or an explicit version",
    ),
    yolo: bool = typer.Option(False, "--yolo", help="Skip the clean install and test run"),
    dry_run: bool = typer.Option(False, "--dry-run", "-d", help="Run npm publish with --dry-run"),
    otp: str | None = typer.Option(None, "--otp", "-o", help="One-time password for npm publish"),
    cwd: Path | None = typer.Option(None, "--cwd", help="Package directory (default: current)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide npm and git output"),
) -> None:
    """Test, bump, publish and commit the package, only if it changed."""
    ctx = build_context(cwd, quiet=quiet)

    flags = Flags(bump=bump, yolo=yolo, dry_run=dry_run, otp=otp)
    options = PipelineOptions(cwd=ctx.cwd, env=ctx.env, stream_output=not quiet)
    result = run_publish(flags, options, console=ctx.console)
    exit_on_error(result, ctx)
