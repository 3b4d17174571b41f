"""Payload truncation infrastructure.

Components:
- PayloadTruncator: Bounds strings, containers and error records to a budget
"""

from .payload_truncator import (
    CIRCULAR_PLACEHOLDER,
    MAX_DEPTH_PLACEHOLDER,
    PayloadTruncator,
    replace_invalid_characters,
    TRUNCATED_MARKER,
)

__all__ = [
    "CIRCULAR_PLACEHOLDER",
    "MAX_DEPTH_PLACEHOLDER",
    "PayloadTruncator",
    "TRUNCATED_MARKER",
    "replace_invalid_characters",
]
