"""
Per-subsystem error collector.

Each subsystem owns one ``ErrorCollector`` created with its name. ``log``
classifies an exception, builds the record, applies decorators in order
and hands the result to the active reporter.

``log`` never raises: a failing decorator is skipped and a failing
reporter is counted, both with a diagnostic line on stderr.
"""

import logging
import sys
import threading

from errlog.errors.classifier import (
    MAX_EXTRA_LENGTH,
    describe,
    parse_error,
    truncate_tail,
    type_name,
)
from errlog.errors.exceptions import ReportDeliveryError
from errlog.reporting.decorators import Decorator
from errlog.reporting.metrics import record_classified, record_reported
from errlog.reporting.probes import host_system_info
from errlog.reporting.record import ErrorRecord, SystemInfo
from errlog.reporting.reporter import get_reporter, reporter_name

logger = logging.getLogger(__name__)


class ErrorCollector:
    """
    Builds and reports error records for one subsystem.

    Immutable after construction and safe to share across threads.

    Attributes:
        origin: Subsystem identifier stamped on every record
        system: Host system block shared by every record
        max_extra_length: Cap on each extra value

    Example:
        >>> collector = ErrorCollector("proxy")
        >>> record = collector.log(EOFError(), with_op(Op.READ))
        >>> record.kind, record.op
        ('io.EOF', 'read')
    """

    def __init__(
        self,
        origin: str,
        system: SystemInfo | None = None,
        max_extra_length: int = MAX_EXTRA_LENGTH,
    ):
        if not origin:
            raise ValueError("origin cannot be empty")
        self._origin = origin
        self._system = system if system is not None else host_system_info()
        self._max_extra_length = max_extra_length

    @property
    def origin(self) -> str:
        return self._origin

    @property
    def system(self) -> SystemInfo:
        return self._system

    @property
    def max_extra_length(self) -> int:
        return self._max_extra_length

    def build(self, err: BaseException, *decorators: Decorator) -> ErrorRecord:
        """Classify ``err`` and apply ``decorators`` without reporting."""
        parsed = parse_error(err, self._max_extra_length)
        record = ErrorRecord(
            origin=self._origin,
            kind=parsed.kind,
            desc=parsed.desc,
            op=parsed.op,
            extra=parsed.extra,
            system=self._system,
        )
        for decorate in decorators:
            try:
                record = decorate(record)
            except Exception as e:
                _print_stderr(
                    f"errlog: skipping decorator {getattr(decorate, '__qualname__', decorate)!s}: "
                    f"{type_name(e)}: {describe(e)}"
                )
        return _cap_extra(record, self._max_extra_length)

    def log(self, err: BaseException, *decorators: Decorator) -> ErrorRecord | None:
        """
        Report ``err`` through the active reporter.

        Args:
            err: Exception to report
            *decorators: Context decorators, applied in order

        Returns:
            The reported record, or None if no record could be built
        """
        try:
            record = self.build(err, *decorators)
        except Exception as e:
            _print_stderr(f"errlog: unable to build error record: {type_name(e)}: {describe(e)}")
            return None

        record_classified(record.kind)

        reporter = get_reporter()
        name = reporter_name(reporter)
        try:
            delivered = bool(reporter.report(record))
        except Exception as e:
            _print_stderr(f"errlog: {ReportDeliveryError(name, 'Reporter raised', cause=e)}")
            delivered = False

        if not delivered:
            _print_stderr(f"errlog: unable to report error: {record.kind}: {record.desc}")
        record_reported(name, success=delivered)
        return record


def _cap_extra(record: ErrorRecord, limit: int) -> ErrorRecord:
    # Decorators may have added values past the cap
    capped = {key: truncate_tail(str(value), limit) for key, value in record.extra.items()}
    if capped == record.extra:
        return record
    return record.model_copy(update={"extra": capped})


def _print_stderr(message: str) -> None:
    try:
        print(message, file=sys.stderr)
    except (OSError, ValueError):
        # stderr is gone too; nothing left to tell
        pass


# =============================================================================
# Collector Cache
# =============================================================================

_collectors: dict[str, ErrorCollector] = {}
_collectors_lock = threading.Lock()


def error_collector_for(origin: str) -> ErrorCollector:
    """Return the shared collector for ``origin``, creating it on first use."""
    with _collectors_lock:
        collector = _collectors.get(origin)
        if collector is None:
            collector = ErrorCollector(origin)
            _collectors[origin] = collector
            logger.debug("Created error collector", extra={"origin": origin})
        return collector


__all__ = [
    "ErrorCollector",
    "error_collector_for",
]
