"""
Process-wide reporter registry and the built-in reporters.

Exactly one reporter is active at a time. ``report_to`` swaps it
atomically; reads and swaps share one lock so a ``log`` call running
concurrently with a swap sees either the old or the new reporter, never
a torn reference.

Reporters must not raise: they return ``True`` when the record was
delivered and ``False`` otherwise.
"""

import logging
import sys
import threading
from typing import IO, Protocol, runtime_checkable

from errlog.errors.exceptions import ReportDeliveryError
from errlog.reporting.record import ErrorRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class Reporter(Protocol):
    """Sink for finished error records."""

    def report(self, record: ErrorRecord) -> bool:
        ...


def reporter_name(reporter: Reporter) -> str:
    """Name used to label metrics for ``reporter``."""
    return getattr(reporter, "name", None) or type(reporter).__name__


# =============================================================================
# Built-in Reporters
# =============================================================================


class StdReporter:
    """
    Writes each record as one JSON line.

    The stream defaults to ``sys.stdout`` looked up at report time, so
    output redirection installed after construction is honored.
    """

    name = "std"

    def __init__(self, stream: IO[str] | None = None):
        self._stream = stream

    def report(self, record: ErrorRecord) -> bool:
        stream = self._stream if self._stream is not None else sys.stdout
        try:
            line = record.to_json()
        except (TypeError, ValueError) as e:
            _print_failure(ReportDeliveryError(self.name, "Unable to serialize error record", cause=e))
            return False
        try:
            stream.write(line + "\n")
            stream.flush()
        except (OSError, ValueError) as e:
            # ValueError covers writes to a closed stream
            _print_failure(ReportDeliveryError(self.name, "Unable to write error record", cause=e))
            return False
        return True


class LoggingReporter:
    """
    Emits each record through stdlib logging.

    The wire form travels as structured extras, so a ``JSONFormatter``
    handler writes it out as typed fields.
    """

    name = "logging"

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.ERROR):
        self._logger = logger or logging.getLogger("errlog.reports")
        self._level = level

    def report(self, record: ErrorRecord) -> bool:
        try:
            self._logger.log(
                self._level,
                "%s: %s",
                record.kind,
                record.desc,
                extra={
                    "error_kind": record.kind,
                    "error_origin": record.origin,
                    "error_record": record.to_dict(),
                },
            )
        except Exception as e:
            _print_failure(ReportDeliveryError(self.name, "Unable to log error record", cause=e))
            return False
        return True


def _print_failure(error: ReportDeliveryError) -> None:
    """Last-resort diagnostic for a failed report."""
    try:
        print(f"errlog: {error}", file=sys.stderr)
    except (OSError, ValueError):
        # stderr is gone too; nothing left to tell
        pass


# =============================================================================
# Registry
# =============================================================================

_reporter: Reporter = StdReporter()
_reporter_lock = threading.Lock()


def report_to(reporter: Reporter) -> Reporter:
    """
    Install ``reporter`` as the process-wide sink.

    Returns:
        The previously active reporter, so callers can restore it.
    """
    global _reporter
    if not isinstance(reporter, Reporter):
        raise TypeError(f"reporter must implement report(record), got {type(reporter).__name__}")
    with _reporter_lock:
        previous = _reporter
        _reporter = reporter
    logger.debug(
        "Active reporter changed",
        extra={"previous_reporter": reporter_name(previous), "reporter": reporter_name(reporter)},
    )
    return previous


def get_reporter() -> Reporter:
    with _reporter_lock:
        return _reporter


def reset_reporter() -> Reporter:
    """Restore a fresh ``StdReporter``. Returns the previous reporter."""
    return report_to(StdReporter())


__all__ = [
    "Reporter",
    "StdReporter",
    "LoggingReporter",
    "report_to",
    "get_reporter",
    "reset_reporter",
    "reporter_name",
]
