"""Backtrace parsing for native and foreign (JVM) stack frames."""

from .parser import backtrace_lines, is_foreign_exception, parse, parse_exception

__all__ = [
    "backtrace_lines",
    "is_foreign_exception",
    "parse",
    "parse_exception",
]
