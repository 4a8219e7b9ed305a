"""
Prometheus metrics for error reporting.

Focused on the health of the reporting path itself:
- Records classified, by kind
- Records delivered and delivery failures, by reporter
- Records dropped before delivery (full queue, open circuit), by reporter

Metrics register with the default prometheus registry, so any exposition
the host process already runs (``prometheus_client.start_http_server``)
picks them up.
"""

import logging

from prometheus_client import REGISTRY, Counter

logger = logging.getLogger(__name__)


def _create_counter(name: str, description: str, labelnames=None) -> Counter:
    """Create a Counter, reusing an existing one on re-registration."""
    try:
        return Counter(name, description, labelnames=labelnames or [], registry=REGISTRY)
    except ValueError:
        # Module re-import (e.g. importlib.reload in tests) registers twice
        logger.debug("Reusing already registered metric %s", name)
        return REGISTRY._names_to_collectors[name]


# =============================================================================
# Reporting Metrics
# =============================================================================

records_classified_counter = _create_counter(
    "errlog_records_classified",
    "Total error records classified, by canonical kind",
    labelnames=["kind"],
)

records_reported_counter = _create_counter(
    "errlog_records_reported",
    "Total error records delivered by a reporter",
    labelnames=["reporter"],
)

report_failures_counter = _create_counter(
    "errlog_report_failures",
    "Total error records a reporter failed to deliver",
    labelnames=["reporter"],
)

records_dropped_counter = _create_counter(
    "errlog_records_dropped",
    "Total error records dropped before delivery",
    labelnames=["reporter"],
)


# =============================================================================
# Recording Helpers
# =============================================================================


def record_classified(kind: str) -> None:
    records_classified_counter.labels(kind=kind).inc()


def record_reported(reporter: str, success: bool = True) -> None:
    """Count one delivery attempt outcome for ``reporter``."""
    if success:
        records_reported_counter.labels(reporter=reporter).inc()
    else:
        report_failures_counter.labels(reporter=reporter).inc()


def record_dropped(reporter: str, count: int = 1) -> None:
    records_dropped_counter.labels(reporter=reporter).inc(count)


__all__ = [
    "records_classified_counter",
    "records_reported_counter",
    "report_failures_counter",
    "records_dropped_counter",
    "record_classified",
    "record_reported",
    "record_dropped",
]
