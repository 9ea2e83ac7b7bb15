"""Process exit codes for pubgate commands.

The numeric values are part of the CLI contract and must stay stable:
- 0: Success, including "skipped" runs (private or unchanged package)
- 1: User error (bad arguments, unchanged package with --exit-code)
- 2: Environment error (safety gate in a test environment)
- 3: Build error (install, tests or version bump failed)
- 4: Network error (registry lookup or publish failed)
- 5: I/O error (package.json missing or unreadable)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
