"""Domain exceptions.

Only two conditions are errors inside the core: an unparsable backtrace
line and an attempt to truncate a non-container value. Oversized strings,
oversized containers, invalid text and circular references are handled
by policy and never raised.
"""

from typing import Any


class CrashPayloadError(Exception):
    """Base exception for all crash payload errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ParseError(CrashPayloadError):
    """No stack frame pattern matched a backtrace line.

    Fatal to the whole parse: a backtrace with one malformed line is
    treated as wholly unparsable.
    """

    def __init__(self, stackframe: str):
        super().__init__(f"can't parse '{stackframe}'", {"stackframe": stackframe})
        self.stackframe = stackframe


class UnsupportedShapeError(CrashPayloadError):
    """truncate_object was called with something other than a map, sequence or set."""

    def __init__(self, value: Any):
        value_type = type(value).__name__
        super().__init__(
            f"cannot truncate object: {value!r} ({value_type})",
            {"value_type": value_type},
        )
        self.value_type = value_type


class ConfigurationError(CrashPayloadError):
    """Configuration could not be loaded."""


class PayloadTooLargeError(CrashPayloadError):
    """The payload still exceeds the size limit after the budget ran out."""

    def __init__(self, size_bytes: int | None, limit_bytes: int):
        super().__init__(
            f"payload does not fit {limit_bytes} bytes after truncation (last size: {size_bytes})",
            {"size_bytes": size_bytes, "limit_bytes": limit_bytes},
        )
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes
