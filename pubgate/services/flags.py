"""Publish flags parsed from CLI-style tokens.

    parse_flags(["minor", "--dry-run", "--otp", "123456"])
    -> Ok(Flags(bump="minor", yolo=False, dry_run=True, otp="123456"))
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import click

from pubgate.core.result import Err, Ok, Result
from pubgate.services.errors import PipelineError

__all__ = ["DEFAULT_BUMP", "Flags", "parse_flags"]

DEFAULT_BUMP = "patch"


@dataclass(frozen=True, slots=True)
class Flags:
    """Options of one publish run.

    Attributes:
        bump: Argument for `npm version` (patch, minor, major, an explicit
            version, ...)
        yolo: Skip the clean install and test run
        dry_run: Pass --dry-run to `npm publish`; the only way past the
            test-environment safety gate
        otp: One-time password forwarded to `npm publish`
    """

    bump: str = DEFAULT_BUMP
    yolo: bool = False
    dry_run: bool = False
    otp: str | None = None


_PARSER = click.Command(
    "publish",
    params=[
        click.Argument(["bump"], required=False),
        click.Option(["--yolo"], is_flag=True, default=False),
        click.Option(["--dry-run", "-d", "dry_run"], is_flag=True, default=False),
        click.Option(["--otp", "-o"], default=None),
    ],
    add_help_option=False,
)


def parse_flags(tokens: Sequence[str]) -> Result[Flags, PipelineError]:
    try:
        ctx = _PARSER.make_context("publish", list(tokens))
    except click.ClickException as e:
        return Err(PipelineError(kind="invalid_args", message=e.format_message()))

    params = ctx.params
    bump = params.get("bump")
    otp = params.get("otp")
    return Ok(
        Flags(
            bump=bump if isinstance(bump, str) and bump else DEFAULT_BUMP,
            yolo=bool(params.get("yolo")),
            dry_run=bool(params.get("dry_run")),
            otp=otp if isinstance(otp, str) and otp else None,
        )
    )
