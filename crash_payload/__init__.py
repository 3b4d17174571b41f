"""Crash payload - prepare error reports for size-limited collectors.

Two building blocks:
- Backtrace parsing: textual stack frames (native or JVM) into StackFrame objects
- Payload truncation: bound strings, containers and error records to a budget,
  breaking reference cycles and repairing invalid text

Notice combines both for a live exception and shrinks the result until it
fits the configured size limit.
"""

from .application import build_error_records, Notice
from .domain.exceptions import (
    ConfigurationError,
    CrashPayloadError,
    ParseError,
    PayloadTooLargeError,
    UnsupportedShapeError,
)
from .domain.value_objects import ErrorRecord, StackFrame, TruncationConfig
from .infrastructure.backtrace import is_foreign_exception, parse, parse_exception
from .infrastructure.truncation import PayloadTruncator
from .logging_config import get_logger, setup_logging

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "CrashPayloadError",
    "ErrorRecord",
    "Notice",
    "ParseError",
    "PayloadTooLargeError",
    "PayloadTruncator",
    "StackFrame",
    "TruncationConfig",
    "UnsupportedShapeError",
    "build_error_records",
    "get_logger",
    "is_foreign_exception",
    "parse",
    "parse_exception",
    "setup_logging",
]
