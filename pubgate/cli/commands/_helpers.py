"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from pubgate.core.result import Err, Result
from pubgate.output.errors import pipeline_error_exit_code, print_pipeline_error
from pubgate.services.errors import PipelineError

if TYPE_CHECKING:
    from pubgate.cli.context import CLIContext

T = TypeVar("T")


def exit_on_error(result: Result[T, PipelineError], ctx: CLIContext) -> None:
    """Print the error and exit with its code if result is Err."""
    if isinstance(result, Err):
        print_pipeline_error(result.error, ctx.console)
        raise typer.Exit(code=pipeline_error_exit_code(result.error))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
