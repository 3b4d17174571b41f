"""Tests for notice assembly and size fitting."""

from unittest.mock import Mock

import pytest

from crash_payload.application.notice import build_error_records, error_kind, Notice, payload_size
from crash_payload.bootstrap.truncation import init_truncation, reset_truncation
from crash_payload.domain.exceptions import ParseError, PayloadTooLargeError
from crash_payload.domain.value_objects import TruncationConfig
from crash_payload.infrastructure.truncation import PayloadTruncator, TRUNCATED_MARKER


class CustomError(Exception):
    pass


def _raise_chained():
    try:
        raise KeyError("inner")
    except KeyError as e:
        raise RuntimeError("outer") from e


def _raise_implicit():
    try:
        raise KeyError("inner")
    except KeyError:
        raise RuntimeError("while handling")


def _raise_suppressed():
    try:
        raise KeyError("inner")
    except KeyError:
        raise RuntimeError("clean") from None


def _raise_nested(depth):
    if depth == 0:
        raise ValueError("level 0")
    try:
        _raise_nested(depth - 1)
    except ValueError as e:
        raise ValueError(f"level {depth}") from e


def _raised(func, *args):
    try:
        func(*args)
    except Exception as e:
        return e
    raise AssertionError("function did not raise")


@pytest.fixture(autouse=True)
def _reset_truncation():
    reset_truncation()
    yield
    reset_truncation()


class TestErrorKind:
    """Tests for error type names."""

    def test_builtin(self):
        """Test builtin exceptions use the bare class name."""
        assert error_kind(ValueError()) == "ValueError"

    def test_custom(self):
        """Test other exceptions are qualified by module."""
        assert error_kind(CustomError()) == f"{CustomError.__module__}.CustomError"


class TestBuildErrorRecords:
    """Tests for building error records from exception chains."""

    def test_single_exception(self):
        """Test an exception without causes gives one record."""
        records = build_error_records(_raised(_raise_nested, 0))
        assert len(records) == 1
        assert records[0].kind == "ValueError"
        assert records[0].message == "level 0"
        assert records[0].backtrace[0].function == "_raise_nested"

    def test_explicit_cause(self):
        """Test __cause__ is followed, outermost first."""
        records = build_error_records(_raised(_raise_chained))
        assert [r.kind for r in records] == ["RuntimeError", "KeyError"]
        assert records[1].message == "'inner'"

    def test_implicit_context(self):
        """Test __context__ is followed when there is no cause."""
        records = build_error_records(_raised(_raise_implicit))
        assert [r.kind for r in records] == ["RuntimeError", "KeyError"]

    def test_suppressed_context(self):
        """Test 'from None' hides the context."""
        records = build_error_records(_raised(_raise_suppressed))
        assert [r.kind for r in records] == ["RuntimeError"]

    def test_chain_bounded(self):
        """Test at most three exceptions of a chain are reported."""
        records = build_error_records(_raised(_raise_nested, 4))
        assert [r.message for r in records] == ["level 4", "level 3", "level 2"]

    def test_unparsable_backtrace(self):
        """Test a malformed manual backtrace is surfaced."""
        exc = RuntimeError("x")
        exc.backtrace = ["garbage"]
        with pytest.raises(ParseError):
            build_error_records(exc)


class TestNoticePayload:
    """Tests for the untruncated payload."""

    def test_payload_sections(self):
        """Test all sections are present."""
        notice = Notice(_raised(_raise_chained), params={"id": 1}, context={"version": "1.0"})
        payload = notice.to_payload()
        assert set(payload) == {"errors", "context", "environment", "session", "params"}
        assert payload["params"] == {"id": 1}
        assert payload["context"] == {"version": "1.0"}
        assert payload["environment"] == {}
        assert payload["errors"][0]["type"] == "RuntimeError"
        assert payload["errors"][0]["message"] == "outer"

    def test_frames_as_dicts(self):
        """Test frames appear in dictionary form."""
        payload = Notice(_raised(_raise_nested, 0)).to_payload()
        frame = payload["errors"][0]["backtrace"][0]
        assert set(frame) == {"file", "line", "function"}


class TestNoticeFit:
    """Tests for the adaptive shrink loop."""

    def test_small_payload_fits_first_time(self):
        """Test payloads within the limit keep the full budget."""
        notice = Notice(_raised(_raise_nested, 0), params={"q": "search"})
        payload = notice.fit()
        assert payload["params"] == {"q": "search"}
        assert notice.truncator.max_size == TruncationConfig().max_size

    def test_budget_halved_until_fits(self):
        """Test the budget is halved until the payload fits."""
        config = TruncationConfig(max_size=10_000, max_notice_bytes=5_000)
        notice = Notice(_raised(_raise_nested, 0), params={"blob": "x" * 50_000}, config=config)

        payload = notice.fit()

        assert payload_size(payload) <= 5_000
        assert notice.truncator.max_size == 2_500
        assert payload["params"]["blob"] == "x" * 2_500 + TRUNCATED_MARKER

    def test_originals_untouched(self):
        """Test fitting leaves the notice data as it was."""
        config = TruncationConfig(max_size=10_000, max_notice_bytes=5_000)
        notice = Notice(_raised(_raise_nested, 0), params={"blob": "x" * 50_000}, config=config)

        notice.fit()

        assert len(notice.params["blob"]) == 50_000

    def test_long_message_truncated(self):
        """Test error messages are bounded by the budget."""
        config = TruncationConfig(max_size=100)
        exc = _raised(_raise_nested, 0)
        exc.args = ("m" * 300,)
        payload = Notice(exc, config=config).fit()
        assert len(payload["errors"][0]["message"]) == 111

    def test_gives_up_when_budget_exhausted(self):
        """Test an untruncatable payload raises once the budget reaches zero."""
        config = TruncationConfig(max_size=64, max_notice_bytes=100)
        notice = Notice(_raised(_raise_nested, 0), context={"big": "x" * 1_000}, config=config)

        with pytest.raises(PayloadTooLargeError) as exc_info:
            notice.fit()

        assert exc_info.value.limit_bytes == 100
        assert exc_info.value.size_bytes > 100
        assert notice.truncator.max_size == 0

    def test_unmeasurable_payload(self):
        """Test a payload that cannot be measured never counts as fitting."""
        context = {}
        context["self"] = context
        notice = Notice(_raised(_raise_nested, 0), context=context, config=TruncationConfig(max_size=8))

        with pytest.raises(PayloadTooLargeError) as exc_info:
            notice.fit()

        assert exc_info.value.size_bytes is None

    def test_uses_given_truncator(self):
        """Test a supplied truncator and its log sink are used."""
        sink = Mock()
        truncator = PayloadTruncator(2, sink)
        notice = Notice(_raised(_raise_nested, 0), truncator=truncator)

        payload = notice.fit()

        assert payload["errors"][0]["message"] == "le" + TRUNCATED_MARKER
        sink.info.assert_any_call("error_message_truncated", error_type="ValueError")

    def test_uses_bootstrapped_config(self):
        """Test notices pick up the initialized truncation config."""
        init_truncation({"truncation": {"max_size": 50, "max_notice_bytes": 1_000}})

        notice = Notice(_raised(_raise_nested, 0), params={"blob": "x" * 5_000})
        payload = notice.fit()

        assert notice.truncator.max_size == 50
        assert payload["params"]["blob"] == "x" * 50 + TRUNCATED_MARKER

    def test_uses_bootstrapped_sink(self):
        """Test notices log through the initialized sink."""
        sink = Mock()
        init_truncation({"truncation": {"max_size": 2}}, sink)

        Notice(_raised(_raise_nested, 0)).fit()

        sink.info.assert_any_call("error_message_truncated", error_type="ValueError")

    def test_explicit_config_beats_bootstrap(self):
        """Test a config passed to the notice overrides the initialized one."""
        init_truncation({"truncation": {"max_size": 50}})
        notice = Notice(_raised(_raise_nested, 0), config=TruncationConfig(max_size=500))
        assert notice.truncator.max_size == 500
