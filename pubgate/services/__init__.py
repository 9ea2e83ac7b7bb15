"""Application services: change detection and the publish pipeline."""

from pubgate.services.detector import ChangeResult, detect
from pubgate.services.errors import PipelineError
from pubgate.services.flags import Flags, parse_flags
from pubgate.services.pipeline import PipelineOptions, PublishOutcome, publish, publish_args

__all__ = [
    "ChangeResult",
    "Flags",
    "PipelineError",
    "PipelineOptions",
    "PublishOutcome",
    "detect",
    "parse_flags",
    "publish",
    "publish_args",
]
