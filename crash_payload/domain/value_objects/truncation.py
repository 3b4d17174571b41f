"""Value objects for payload truncation.

Contains:
- TruncationConfig - budget and limits for truncating error payloads
"""

from dataclasses import dataclass
from typing import Any

DEFAULT_MAX_SIZE = 10_000
DEFAULT_MAX_NOTICE_BYTES = 64_000
DEFAULT_MAX_DEPTH = 100


@dataclass(frozen=True)
class TruncationConfig:
    """Configuration for payload truncation.

    Attributes:
        max_size: Initial budget. Bounds string length, container element
            count and backtrace frame count.
        max_notice_bytes: Size limit for a measured notice payload; the
            shrink loop halves ``max_size`` until the payload fits.
        max_depth: Containers nested deeper than this are not descended into.
    """

    max_size: int = DEFAULT_MAX_SIZE
    max_notice_bytes: int = DEFAULT_MAX_NOTICE_BYTES
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_size <= 0:
            raise ValueError("max_size must be positive")
        if self.max_notice_bytes <= 0:
            raise ValueError("max_notice_bytes must be positive")
        if self.max_depth <= 0:
            raise ValueError("max_depth must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TruncationConfig":
        """Create TruncationConfig from a dictionary.

        Args:
            data: Configuration dictionary. If None, returns default config.

        Returns:
            TruncationConfig instance.

        Raises:
            ValueError: If configuration values are invalid.
        """
        if not data:
            return cls()

        return cls(
            max_size=data.get("max_size", DEFAULT_MAX_SIZE),
            max_notice_bytes=data.get("max_notice_bytes", DEFAULT_MAX_NOTICE_BYTES),
            max_depth=data.get("max_depth", DEFAULT_MAX_DEPTH),
        )
