from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from pubgate.core.result import Err, Ok, Result
from pubgate.services.errors import PipelineError

StepAction = Callable[[], Result[None, PipelineError]]


@dataclass(frozen=True, slots=True)
class Step:
    name: str
    action: StepAction


def run_steps(steps: Sequence[Step]) -> Result[None, PipelineError]:
    """Run steps one at a time, in order, stopping at the first failure.

    Each step runs at most once; a failed step is never retried and the
    steps after it never start.
    """
    for step in steps:
        outcome = step.action()
        if isinstance(outcome, Err):
            return outcome
    return Ok(None)
