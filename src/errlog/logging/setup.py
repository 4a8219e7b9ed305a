"""Logging setup and configuration."""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from errlog.logging.context import set_log_context
from errlog.logging.formatters import ConsoleFormatter, JSONFormatter

DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG
DEFAULT_BACKUP_COUNT = 7

# Noisy loggers to suppress
NOISY_LOGGERS = [
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.eventhub",
    "uamqp",
    "aiohttp",
]


def setup_logging(
    name: str = "errlog",
    origin: str | None = None,
    log_file: Path | None = None,
    json_format: bool = True,
    console_level: int = DEFAULT_CONSOLE_LEVEL,
    file_level: int = DEFAULT_FILE_LEVEL,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    suppress_noisy: bool = True,
) -> logging.Logger:
    """
    Configure console logging and, optionally, a daily rotating log file.

    Console output goes to stderr: stdout belongs to ``StdReporter``, whose
    consumers expect one JSON record per line and nothing else.

    Args:
        name: Logger name to return
        origin: Subsystem name, set in the log context
        log_file: Rotating log file (console only when omitted)
        json_format: Use JSON format for the log file (default: True)
        console_level: Console handler level (default: INFO)
        file_level: File handler level (default: DEBUG)
        backup_count: Rotated files to keep (default: 7)
        suppress_noisy: Quiet down Azure SDK and HTTP client loggers

    Returns:
        Configured logger instance
    """
    if origin:
        set_log_context(origin=origin)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ConsoleFormatter())
    console_handler.setLevel(console_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(min(console_level, file_level) if log_file else console_level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        if json_format:
            file_formatter = JSONFormatter()
        else:
            file_formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
            )

        file_handler = TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    if suppress_noisy:
        for logger_name in NOISY_LOGGERS:
            logging.getLogger(logger_name).setLevel(logging.WARNING)

    logger = logging.getLogger(name)
    logger.debug(f"Logging initialized: file={log_file}, json={json_format}")
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
