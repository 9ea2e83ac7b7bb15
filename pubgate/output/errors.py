"""Error presentation for pipeline failures."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pubgate.core.errors import ErrorCode
from pubgate.output.console import Style
from pubgate.services.errors import PipelineError

if TYPE_CHECKING:
    from pubgate.output.console import ConsoleProtocol

__all__ = ["pipeline_error_exit_code", "print_pipeline_error"]


def print_pipeline_error(error: PipelineError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def pipeline_error_exit_code(error: PipelineError) -> int:
    """Map a pipeline failure to the process exit code."""
    match error.kind:
        case "invalid_args":
            return int(ErrorCode.USER_ERROR)
        case "manifest_read":
            return int(ErrorCode.IO_ERROR)
        case "safety_gate":
            return int(ErrorCode.ENV_ERROR)
        case "test" | "version" | "commit":
            return int(ErrorCode.BUILD_ERROR)
        case "lookup" | "publish":
            return int(ErrorCode.NETWORK_ERROR)
    # Fallback for exhaustiveness
    return int(ErrorCode.USER_ERROR)
