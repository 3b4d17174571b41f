"""Stack frame parser.

Turns the textual lines of an exception's backtrace into ``StackFrame``
objects. Each line is matched against the runtime-specific pattern first
and the generic pattern second; the first match wins.

Example:
    >>> parse(["/app/foo.rb:10:in `bar'"])
    [StackFrame(file='/app/foo.rb', line=10, function='bar')]
"""

from collections.abc import Iterable
import re
import traceback

from ...domain.exceptions import ParseError
from ...domain.value_objects import StackFrame

# Code compiled with an empty filename, e.g. compile(src, "", "exec")
UNKNOWN_FILENAME = "<unknown>"

# ./lib/notice_builder.rb:43:in `block (3 levels) in <top (required)>'
NATIVE_STACKFRAME_PATTERN = re.compile(
    r"""
    (?P<file>.+)          # './lib/notice_builder.rb'
    :
    (?P<line>\d+)         # '43'
    :in\s
    [`'](?P<function>.*)' # "`block (3 levels) in <top (required)>'"
    """,
    re.VERBOSE,
)

# org.jruby.ast.NewlineNode.interpret(NewlineNode.java:105)
FOREIGN_STACKFRAME_PATTERN = re.compile(
    r"""
    (?P<function>.+)  # 'org.jruby.ast.NewlineNode.interpret'
    \(
        (?P<file>[^:]+)  # 'NewlineNode.java'
        :?
        (?P<line>\d+)?   # '105'
    \)
    """,
    re.VERBOSE,
)

# Manually set backtraces: '/foo/bar/baz.ext:43', '/foo/bar/baz.ext:' or
# '/foo/bar/baz.ext:43 in `func''
GENERIC_STACKFRAME_PATTERN = re.compile(
    r"""
    (?P<file>.+?)
    :
    (?P<line>\d+)?
    (?::?\s*in\s[`'](?P<function>.+)')?
    """,
    re.VERBOSE,
)


def is_foreign_exception(exc: BaseException) -> bool:
    """Check whether ``exc`` was raised by a JVM host (Jython).

    The Java throwable type only exists when running on the JVM, so the
    check is false everywhere else.
    """
    try:
        from java.lang import Throwable  # type: ignore[import-not-found]
    except ImportError:
        return False
    return isinstance(exc, Throwable)


def parse(lines: Iterable[str] | None, foreign: bool = False) -> list[StackFrame]:
    """Parse backtrace lines into stack frames.

    Args:
        lines: Raw backtrace lines, innermost frame first. None is treated
            as an empty backtrace.
        foreign: Whether the lines come from the foreign (JVM) runtime.

    Returns:
        Parsed frames in input order.

    Raises:
        ParseError: If a line matches neither the runtime pattern nor the
            generic one. The whole backtrace is rejected.
    """
    if not lines:
        return []

    pattern = FOREIGN_STACKFRAME_PATTERN if foreign else NATIVE_STACKFRAME_PATTERN
    return [_stack_frame(_match_frame(pattern, line)) for line in lines]


def parse_exception(exc: BaseException) -> list[StackFrame]:
    """Parse the backtrace of a live exception.

    An explicit ``backtrace`` attribute (a list of strings) takes precedence
    over the interpreter traceback.
    """
    return parse(backtrace_lines(exc), is_foreign_exception(exc))


def backtrace_lines(exc: BaseException) -> list[str]:
    """Render the traceback of ``exc`` as native frame lines, innermost first."""
    manual = getattr(exc, "backtrace", None)
    if isinstance(manual, (list, tuple)):
        return [str(line) for line in manual]

    if exc.__traceback__ is None:
        return []

    lines = []
    for frame in reversed(traceback.extract_tb(exc.__traceback__)):
        filename = frame.filename or UNKNOWN_FILENAME
        if frame.lineno is None:
            lines.append(f"{filename}:in `{frame.name}'")
        else:
            lines.append(f"{filename}:{frame.lineno}:in `{frame.name}'")
    return lines


def _match_frame(pattern: re.Pattern[str], stackframe: str) -> re.Match[str]:
    match = pattern.fullmatch(stackframe)
    if match:
        return match

    match = GENERIC_STACKFRAME_PATTERN.fullmatch(stackframe)
    if match:
        return match

    raise ParseError(stackframe)


def _stack_frame(match: re.Match[str]) -> StackFrame:
    line = match.group("line")
    return StackFrame(
        file=match.group("file"),
        line=int(line) if line else None,
        function=match.group("function"),
    )
