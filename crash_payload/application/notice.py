"""Notice assembly and size fitting.

A Notice turns a live exception (and its cause chain) into error records
and, together with request/environment data, into a payload that fits the
configured size limit. Fitting is an adaptive loop: truncate from the
untouched originals, measure, halve the budget, repeat.
"""

import json
from typing import Any

from ..bootstrap.truncation import create_truncator, get_truncation_config
from ..domain.exceptions import PayloadTooLargeError
from ..domain.value_objects import ErrorRecord, TruncationConfig
from ..infrastructure.backtrace import parse_exception
from ..infrastructure.truncation import PayloadTruncator
from ..logging_config import get_logger

logger = get_logger(__name__)

MAX_NESTED_EXCEPTIONS = 3
"""How many exceptions of a cause chain are reported."""

TRUNCATABLE_KEYS = ("errors", "environment", "session", "params")


def error_kind(exc: BaseException) -> str:
    cls = type(exc)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def build_error_records(exception: BaseException) -> list[ErrorRecord]:
    """Build error records for an exception and its causes, outermost first.

    Raises:
        ParseError: If any backtrace in the chain cannot be parsed.
    """
    records: list[ErrorRecord] = []
    exc: BaseException | None = exception
    while exc is not None and len(records) < MAX_NESTED_EXCEPTIONS:
        records.append(
            ErrorRecord(
                kind=error_kind(exc),
                message=str(exc),
                backtrace=parse_exception(exc),
            )
        )
        if exc.__cause__ is not None:
            exc = exc.__cause__
        elif not exc.__suppress_context__:
            exc = exc.__context__
        else:
            exc = None
    return records


def payload_size(payload: dict[str, Any]) -> int | None:
    """Size of the payload as UTF-8 JSON, or None if it cannot be measured."""
    try:
        return len(json.dumps(payload, default=str).encode("utf-8"))
    except (TypeError, ValueError) as e:
        logger.debug("notice_size_unmeasurable", error=str(e))
        return None


class Notice:
    """An error report waiting to be sent.

    Attributes:
        errors: Error records of the exception chain, untruncated.
        context: Notifier/runtime context, never truncated.
        environment: Environment data.
        session: Session data.
        params: Request parameters.
    """

    def __init__(
        self,
        exception: BaseException,
        params: dict[str, Any] | None = None,
        environment: dict[str, Any] | None = None,
        session: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
        config: TruncationConfig | None = None,
        truncator: PayloadTruncator | None = None,
    ):
        """Build a notice from an exception.

        Args:
            exception: The exception to report.
            params: Request parameters.
            environment: Environment data.
            session: Session data.
            context: Context data; sent as is.
            config: Truncation limits. Defaults to the bootstrapped
                configuration, or TruncationConfig() when not initialized.
            truncator: Truncator to use. A new one is built from config
                when omitted; its budget is consumed by ``fit``.
        """
        self._config = config or get_truncation_config() or TruncationConfig()
        self._truncator = truncator or create_truncator(self._config)

        self.errors = build_error_records(exception)
        self.context = context or {}
        self.environment = environment or {}
        self.session = session or {}
        self.params = params or {}

    @property
    def truncator(self) -> PayloadTruncator:
        return self._truncator

    def to_payload(self) -> dict[str, Any]:
        """Return the untruncated payload."""
        return {
            "errors": [error.to_dict() for error in self.errors],
            "context": self.context,
            "environment": self.environment,
            "session": self.session,
            "params": self.params,
        }

    def fit(self) -> dict[str, Any]:
        """Return a truncated payload within ``max_notice_bytes``.

        Every round starts over from the original data with the current
        budget; the budget is halved after each round that does not fit.

        Raises:
            PayloadTooLargeError: If the budget reaches zero first.
        """
        limit = self._config.max_notice_bytes
        while True:
            payload = self._truncated_payload()
            size = payload_size(payload)
            if size is not None and size <= limit:
                return payload

            self._truncator.reduce_max_size()
            logger.debug(
                "notice_budget_reduced",
                size_bytes=size,
                limit_bytes=limit,
                max_size=self._truncator.max_size,
            )
            if self._truncator.max_size == 0:
                logger.error("notice_truncation_failed", size_bytes=size, limit_bytes=limit)
                raise PayloadTooLargeError(size, limit)

    def _truncated_payload(self) -> dict[str, Any]:
        errors = []
        for error in self.errors:
            record = error.copy()
            self._truncator.truncate_error(record)
            errors.append(record.to_dict())

        payload = self.to_payload()
        payload["errors"] = errors
        for key in TRUNCATABLE_KEYS:
            payload[key] = self._truncator.truncate_object(payload[key])
        return payload
