"""Platform abstraction layer."""

from .files import safe_rm
from .process import (
    ProcessError,
    ProcessRunner,
    SubprocessRunner,
    run,
    run_silent,
)

__all__ = [
    # files
    "safe_rm",
    # process
    "ProcessError",
    "ProcessRunner",
    "SubprocessRunner",
    "run",
    "run_silent",
]
