"""Tests for logging utilities."""

import logging
from unittest.mock import MagicMock

from errlog.errors.shapes import ErrorCode, SentinelError
from errlog.logging.utilities import (
    MAX_ERROR_MESSAGE_LENGTH,
    log_exception,
    log_with_context,
)


class TestLogWithContext:

    def test_passes_extras(self):
        logger = MagicMock(spec=logging.Logger)

        log_with_context(logger, logging.INFO, "Reporter installed", reporter="eventhub")

        logger.log.assert_called_once_with(
            logging.INFO, "Reporter installed", exc_info=None, extra={"reporter": "eventhub"}
        )

    def test_drops_reserved_keys(self):
        logger = MagicMock(spec=logging.Logger)

        log_with_context(logger, logging.INFO, "msg", name="clash", lineno=3, trace_id="t")

        assert logger.log.call_args.kwargs["extra"] == {"trace_id": "t"}

    def test_exc_info_passed_through(self):
        logger = MagicMock(spec=logging.Logger)

        log_with_context(logger, logging.ERROR, "failed", exc_info=True)

        assert logger.log.call_args.kwargs["exc_info"] is True
        assert "exc_info" not in logger.log.call_args.kwargs["extra"]


class TestLogException:

    def test_adds_canonical_kind(self):
        logger = MagicMock(spec=logging.Logger)
        exc = SentinelError(ErrorCode.IO_UNEXPECTED_EOF)

        log_exception(logger, exc, "Config fetch failed", url="https://example.com")

        args, kwargs = logger.log.call_args
        assert args == (logging.ERROR, "Config fetch failed")
        assert kwargs["exc_info"] is exc
        assert kwargs["extra"]["error_kind"] == "io.ErrUnexpectedEOF"
        assert kwargs["extra"]["error_message"] == "unexpected EOF"
        assert kwargs["extra"]["url"] == "https://example.com"

    def test_explicit_kind_kept(self):
        logger = MagicMock(spec=logging.Logger)

        log_exception(logger, EOFError(), "read failed", error_kind="custom.Kind")

        assert logger.log.call_args.kwargs["extra"]["error_kind"] == "custom.Kind"

    def test_truncates_long_message(self):
        logger = MagicMock(spec=logging.Logger)

        log_exception(logger, ValueError("x" * 1000), "failed")

        message = logger.log.call_args.kwargs["extra"]["error_message"]
        assert len(message) == MAX_ERROR_MESSAGE_LENGTH + 3
        assert message.endswith("...")

    def test_without_traceback(self):
        logger = MagicMock(spec=logging.Logger)

        log_exception(logger, EOFError(), "failed", level=logging.WARNING, include_traceback=False)

        args, kwargs = logger.log.call_args
        assert args[0] == logging.WARNING
        assert "exc_info" not in kwargs
