"""
Test suite for structured logging helpers.

System role: Verification of safe log context handling
"""

import logging

from respondo.observability.log_utils import (
    log_exception_with_context,
    log_with_context,
    safe_log_value,
)


class TestSafeLogValue:
    def test_none_and_strings(self) -> None:
        assert safe_log_value(None) == "None"
        assert safe_log_value("plain") == "plain"

    def test_collections_should_be_summarized(self) -> None:
        assert safe_log_value([1, 2, 3]) == "list(3 items)"
        assert safe_log_value({"a": 1}) == "dict(1 keys)"

    def test_long_values_should_be_truncated(self) -> None:
        value = safe_log_value("x" * 30, max_length=10)

        assert value == "x" * 10 + "... (truncated, 30 total)"

    def test_unprintable_values_should_not_raise(self) -> None:
        class Broken:
            def __str__(self) -> str:
                raise RuntimeError("nope")

        assert safe_log_value(Broken()) == "<unable to log: RuntimeError>"


class TestLogWithContext:
    def test_context_should_be_attached_to_record(self, caplog) -> None:
        logger = logging.getLogger("respondo.test")

        with caplog.at_level(logging.INFO, logger="respondo.test"):
            log_with_context(logger, logging.INFO, "uploaded", document_id="d1", chunks=[1, 2])

        record = caplog.records[-1]
        assert record.document_id == "d1"
        assert record.chunks == "list(2 items)"

    def test_reserved_keys_should_be_renamed(self, caplog) -> None:
        logger = logging.getLogger("respondo.test")

        with caplog.at_level(logging.INFO, logger="respondo.test"):
            log_with_context(logger, logging.INFO, "renamed", name="faq.txt", message="m")

        record = caplog.records[-1]
        assert record.ctx_name == "faq.txt"
        assert record.ctx_message == "m"
        assert record.getMessage() == "renamed"

    def test_exception_should_be_logged_with_traceback(self, caplog) -> None:
        logger = logging.getLogger("respondo.test")
        error = ValueError("bad input")

        with caplog.at_level(logging.ERROR, logger="respondo.test"):
            log_exception_with_context(logger, "failed", error, document_id="d1")

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert record.error_type == "ValueError"
        assert record.error_msg == "bad input"
        assert record.exc_info[1] is error
