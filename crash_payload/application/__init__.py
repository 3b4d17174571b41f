"""Application layer: notice assembly on top of the parser and truncator."""

from .notice import build_error_records, Notice

__all__ = [
    "Notice",
    "build_error_records",
]
