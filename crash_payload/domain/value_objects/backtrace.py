"""Value objects for parsed backtraces."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class StackFrame:
    """One entry of a stack trace.

    Attributes:
        file: Source file the frame points to.
        line: Line number, if the raw frame carried one.
        function: Function or method name, if known.
    """

    file: str
    line: int | None = None
    function: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "line": self.line, "function": self.function}
