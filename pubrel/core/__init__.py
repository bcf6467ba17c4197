"""Core types: results, configuration, exit codes."""

from .config import ConfigError, PublishConfig, load_publish_config
from .errors import ErrorCode
from .redact import REDACTED, redact
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "PublishConfig",
    "load_publish_config",
    # errors
    "ErrorCode",
    # redact
    "REDACTED",
    "redact",
    # result
    "Err",
    "Ok",
    "Result",
]
