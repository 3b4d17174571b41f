"""Domain value objects."""

from .backtrace import StackFrame
from .error_record import ErrorRecord
from .truncation import TruncationConfig

__all__ = [
    "ErrorRecord",
    "StackFrame",
    "TruncationConfig",
]
