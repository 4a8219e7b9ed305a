"""Configuration loading for error reporting.

Main Functions
--------------

    - load_config(): Load reporting configuration from YAML
    - get_config(): Get or load singleton config instance
    - reset_config(): Reset singleton config instance
    - build_reporter(): Create the configured reporter
    - configure_reporting(): Install the configured reporter process-wide

Usage Examples
--------------

    >>> from errlog.config import configure_reporting, load_config
    >>>
    >>> configure_reporting(load_config())
"""

from errlog.config.config import (
    DEFAULT_CONFIG_FILE,
    EVENTHUB_CONNECTION_ENV,
    REPORTER_NAMES,
    ReportingConfig,
    build_reporter,
    configure_reporting,
    get_config,
    load_config,
    load_yaml,
    reset_config,
    set_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "EVENTHUB_CONNECTION_ENV",
    "REPORTER_NAMES",
    "ReportingConfig",
    "build_reporter",
    "configure_reporting",
    "get_config",
    "load_config",
    "load_yaml",
    "reset_config",
    "set_config",
]
