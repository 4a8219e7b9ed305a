"""
Error record construction and delivery.

Provides:
- ErrorRecord and its context blocks
- ErrorCollector / error_collector_for for reporting exceptions
- Decorators attaching operation, proxy, locale, user agent and fields
- The process-wide reporter registry and built-in reporters

The Event Hub reporter lives in ``errlog.reporting.eventhub`` and is
imported on demand so the Azure SDK is only loaded when it is used.
"""

from errlog.reporting.collector import ErrorCollector, error_collector_for
from errlog.reporting.decorators import (
    Decorator,
    with_field,
    with_locale,
    with_op,
    with_proxy,
    with_user_agent,
)
from errlog.reporting.probes import detect_locale, host_system_info
from errlog.reporting.record import (
    ErrorRecord,
    ProxyingInfo,
    SystemInfo,
    UserAgentInfo,
    UserLocale,
)
from errlog.reporting.reporter import (
    LoggingReporter,
    Reporter,
    StdReporter,
    get_reporter,
    report_to,
    reset_reporter,
)

__all__ = [
    # Records
    "ErrorRecord",
    "SystemInfo",
    "ProxyingInfo",
    "UserLocale",
    "UserAgentInfo",
    # Collector
    "ErrorCollector",
    "error_collector_for",
    # Decorators
    "Decorator",
    "with_op",
    "with_proxy",
    "with_locale",
    "with_user_agent",
    "with_field",
    # Probes
    "host_system_info",
    "detect_locale",
    # Reporters
    "Reporter",
    "StdReporter",
    "LoggingReporter",
    "report_to",
    "get_reporter",
    "reset_reporter",
]
