"""
Structured logging module.

Provides JSON logging with context propagation for the reporting machinery
and for ``LoggingReporter`` output.
"""

from errlog.logging.context import (
    clear_log_context,
    get_log_context,
    set_log_context,
)
from errlog.logging.formatters import ConsoleFormatter, JSONFormatter
from errlog.logging.setup import (
    get_logger,
    setup_logging,
)
from errlog.logging.utilities import log_exception, log_with_context

__all__ = [
    # Setup
    "setup_logging",
    "get_logger",
    # Formatters
    "JSONFormatter",
    "ConsoleFormatter",
    # Context
    "set_log_context",
    "get_log_context",
    "clear_log_context",
    # Utilities
    "log_with_context",
    "log_exception",
]
