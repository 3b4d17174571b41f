"""Error record value object.

Unlike the frozen value objects, an ErrorRecord is owned by the caller
and rewritten in place by ``PayloadTruncator.truncate_error``.
"""

from dataclasses import dataclass, field, replace
from typing import Any

from .backtrace import StackFrame


@dataclass
class ErrorRecord:
    """A single error of a notice.

    Attributes:
        kind: Error type name, e.g. ``ValueError`` or ``myapp.errors.Timeout``.
        message: Error message.
        backtrace: Parsed frames, innermost first.
    """

    kind: str
    message: str
    backtrace: list[StackFrame] = field(default_factory=list)

    def copy(self) -> "ErrorRecord":
        """Return a copy whose backtrace list can be rewritten independently."""
        return replace(self, backtrace=list(self.backtrace))

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "message": self.message,
            "backtrace": [frame.to_dict() for frame in self.backtrace],
        }
