from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

PipelineErrorKind = Literal[
    "invalid_args",
    "manifest_read",
    "lookup",
    "test",
    "version",
    "safety_gate",
    "publish",
    "commit",
]


@dataclass(frozen=True, slots=True)
class PipelineError:
    """Failure of a publish pipeline stage.

    `kind` names the stage that failed; `hint` carries tool output or a
    suggested fix when one is available.
    """

    kind: PipelineErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message
