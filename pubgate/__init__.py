"""Publish an npm package only when it differs from the registry."""

from pubgate.services.detector import ChangeResult, detect
from pubgate.services.flags import Flags, parse_flags
from pubgate.services.pipeline import PipelineOptions, PublishOutcome, publish, publish_args

__version__ = "0.3.0"

has_changed = detect

__all__ = [
    "ChangeResult",
    "Flags",
    "PipelineOptions",
    "PublishOutcome",
    "__version__",
    "detect",
    "has_changed",
    "parse_flags",
    "publish",
    "publish_args",
]
