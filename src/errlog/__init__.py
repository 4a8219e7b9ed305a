"""
errlog: error normalization and reporting.

Turns arbitrary exceptions into canonical ``ErrorRecord``s and routes them
to one process-wide reporter.

Example:
    >>> from errlog import error_collector_for, with_op, Op
    >>> collector = error_collector_for("proxy")
    >>> try:
    ...     conn.read()
    ... except OSError as e:
    ...     collector.log(e, with_op(Op.READ))
"""

from errlog.errors import (
    MAX_EXTRA_LENGTH,
    ErrorCode,
    ParsedError,
    SentinelError,
    parse_error,
)
from errlog.reporting import (
    Decorator,
    ErrorCollector,
    ErrorRecord,
    LoggingReporter,
    ProxyingInfo,
    Reporter,
    StdReporter,
    SystemInfo,
    UserAgentInfo,
    UserLocale,
    detect_locale,
    error_collector_for,
    get_reporter,
    host_system_info,
    report_to,
    reset_reporter,
    with_field,
    with_locale,
    with_op,
    with_proxy,
    with_user_agent,
)
from errlog.types import Op, ProxyType, UserConfig

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # Types
    "Op",
    "ProxyType",
    "UserConfig",
    # Classification
    "MAX_EXTRA_LENGTH",
    "ParsedError",
    "parse_error",
    "ErrorCode",
    "SentinelError",
    # Records
    "ErrorRecord",
    "SystemInfo",
    "ProxyingInfo",
    "UserLocale",
    "UserAgentInfo",
    # Collector and decorators
    "ErrorCollector",
    "error_collector_for",
    "with_op",
    "with_proxy",
    "with_locale",
    "with_user_agent",
    "with_field",
    "Decorator",
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
