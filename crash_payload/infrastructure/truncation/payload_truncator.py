"""Payload truncator.

Bounds the size of error records and arbitrarily nested payloads so that
a notice fits the collector's limits. One budget (``max_size``) applies to
string length, container element count and backtrace frame count.

Containers are rebuilt rather than mutated. Cycles and shared references
are tracked by object identity: the first visit records ``[Circular]``
for the container, and the entry is overwritten with the truncated result
once the subtree is done. A re-entrant visit (a true cycle) therefore sees
the placeholder, while a later visit of a shared value sees the real
result.

Not thread-safe: ``max_size`` is mutable and ``truncate_error`` rewrites
the record it is given.
"""

from collections.abc import Mapping, Sequence
from collections.abc import Set as AbstractSet
from enum import Enum
from itertools import islice
import json
from numbers import Number
from typing import Any

from ...domain.exceptions import UnsupportedShapeError
from ...domain.value_objects import ErrorRecord
from ...domain.value_objects.truncation import DEFAULT_MAX_DEPTH
from ...logging_config import get_logger

CIRCULAR_PLACEHOLDER = "[Circular]"
TRUNCATED_MARKER = "[Truncated]"
MAX_DEPTH_PLACEHOLDER = "[MaxDepth]"

_TEXT_TYPES = (str, bytes, bytearray)


def replace_invalid_characters(text: str | bytes | bytearray) -> str:
    """Return ``text`` as valid Unicode.

    Bytes are decoded as UTF-8. Strings holding lone surrogates (e.g. from
    ``surrogateescape`` decoding) are passed through UTF-16; well-formed
    surrogate pairs are joined and the rest become U+FFFD.
    """
    if isinstance(text, (bytes, bytearray)):
        return bytes(text).decode("utf-8", errors="replace")

    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        return text.encode("utf-16", errors="surrogatepass").decode("utf-16", errors="replace")
    return text


def _is_container(value: Any) -> bool:
    if isinstance(value, _TEXT_TYPES):
        return False
    return isinstance(value, (Mapping, Sequence, AbstractSet))


def _object_fields(obj: Any) -> Any:
    fields = getattr(obj, "__dict__", None)
    if not fields:
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")
    return fields


def _stringify(value: Any) -> str:
    try:
        return json.dumps(value, default=_object_fields)
    except (TypeError, ValueError, RecursionError):
        return str(value)


class PayloadTruncator:
    """Truncates strings, containers and error records to a size budget.

    Attributes:
        max_size: Current budget, halved by ``reduce_max_size``.
    """

    def __init__(self, max_size: int, logger: Any = None, max_depth: int = DEFAULT_MAX_DEPTH):
        """Initialize the truncator.

        Args:
            max_size: Maximum size of strings, mappings, sequences and sets,
                and maximum number of backtrace frames.
            logger: Sink with an ``info(event, **kw)`` method. Defaults to
                the module logger.
            max_depth: Containers nested deeper than this are replaced by
                ``[MaxDepth]``.

        Raises:
            ValueError: If max_size or max_depth is not positive.
        """
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        if max_depth <= 0:
            raise ValueError("max_depth must be positive")

        self._max_size = max_size
        self._max_depth = max_depth
        self._logger = logger if logger is not None else get_logger(__name__)

    @property
    def max_size(self) -> int:
        return self._max_size

    def truncate_error(self, error: ErrorRecord) -> None:
        """Truncate the message and backtrace of an error record in place."""
        if len(error.message) > self._max_size:
            error.message = self.truncate_string(error.message)
            self._log("error_message_truncated", error_type=error.kind)

        dropped_frames = len(error.backtrace) - self._max_size
        if dropped_frames < 0:
            return

        error.backtrace = error.backtrace[: self._max_size]
        self._log("backtrace_frames_dropped", dropped=dropped_frames, error_type=error.kind)

    def truncate_object(self, obj: Any, seen: dict[int, Any] | None = None) -> Any:
        """Deeply truncate a mapping, sequence or set.

        Args:
            obj: The container to truncate.
            seen: Identity map shared across one traversal. A fresh one is
                created when omitted.

        Returns:
            A new container of at most ``max_size`` elements whose values
            are truncated recursively. Mappings become dicts, tuples stay
            tuples, frozensets stay frozensets.

        Raises:
            UnsupportedShapeError: If obj is not a mapping, sequence or set.
        """
        if seen is None:
            seen = {}
        return self._truncate_object(obj, seen, 0)

    def truncate_string(self, text: str | bytes | bytearray) -> str:
        """Repair invalid text and cut it to ``max_size`` characters.

        The marker is appended in full, so a truncated result is
        ``max_size + len("[Truncated]")`` characters long.
        """
        text = replace_invalid_characters(text)
        if len(text) <= self._max_size:
            return text
        return text[: self._max_size] + TRUNCATED_MARKER

    def reduce_max_size(self) -> None:
        """Halve the budget."""
        self._max_size //= 2

    def _truncate_object(self, obj: Any, seen: dict[int, Any], depth: int) -> Any:
        key = id(obj)
        if key in seen:
            return seen[key]

        if not _is_container(obj):
            raise UnsupportedShapeError(obj)

        if depth > self._max_depth:
            return MAX_DEPTH_PLACEHOLDER

        seen[key] = CIRCULAR_PLACEHOLDER
        if isinstance(obj, Mapping):
            truncated = self._truncate_mapping(obj, seen, depth)
        elif isinstance(obj, AbstractSet):
            truncated = self._truncate_set(obj, seen, depth)
        else:
            truncated = self._truncate_sequence(obj, seen, depth)
        seen[key] = truncated
        return truncated

    def _truncate(self, value: Any, seen: dict[int, Any], depth: int) -> Any:
        if isinstance(value, _TEXT_TYPES):
            return self.truncate_string(value)
        if _is_container(value):
            return self._truncate_object(value, seen, depth + 1)
        if value is None or isinstance(value, (bool, Number, Enum)):
            return value
        return self.truncate_string(_stringify(value))

    def _truncate_mapping(self, mapping: Mapping, seen: dict[int, Any], depth: int) -> dict:
        return {key: self._truncate(val, seen, depth) for key, val in islice(mapping.items(), self._max_size)}

    def _truncate_sequence(self, sequence: Sequence, seen: dict[int, Any], depth: int) -> list | tuple:
        items = [self._truncate(val, seen, depth) for val in islice(sequence, self._max_size)]
        if isinstance(sequence, tuple):
            return tuple(items)
        return items

    def _truncate_set(self, items: AbstractSet, seen: dict[int, Any], depth: int) -> set | frozenset:
        truncated = (self._set_member(self._truncate(val, seen, depth)) for val in islice(items, self._max_size))
        if isinstance(items, frozenset):
            return frozenset(truncated)
        return set(truncated)

    def _set_member(self, value: Any) -> Any:
        # Truncated lists and sets must stay hashable inside a set.
        if isinstance(value, list):
            value = tuple(value)
        elif isinstance(value, set):
            value = frozenset(value)
        try:
            hash(value)
        except TypeError:
            return self.truncate_string(_stringify(value))
        return value

    def _log(self, event: str, **kwargs: Any) -> None:
        try:
            self._logger.info(event, **kwargs)
        except Exception:  # noqa: BLE001 - a failing sink must not abort truncation
            pass
