"""Domain layer: exceptions and value objects shared by parser and truncator."""

from .exceptions import (
    ConfigurationError,
    CrashPayloadError,
    ParseError,
    PayloadTooLargeError,
    UnsupportedShapeError,
)
from .value_objects import ErrorRecord, StackFrame, TruncationConfig

__all__ = [
    "ConfigurationError",
    "CrashPayloadError",
    "ErrorRecord",
    "ParseError",
    "PayloadTooLargeError",
    "StackFrame",
    "TruncationConfig",
    "UnsupportedShapeError",
]
