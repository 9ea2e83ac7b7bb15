"""Core types: results, exit codes, registry configuration."""

from .config import NpmrcError, RegistryConfig, is_test_environment, load_registry_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "NpmrcError",
    "RegistryConfig",
    "is_test_environment",
    "load_registry_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
