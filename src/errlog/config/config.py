"""Error reporting configuration from YAML file.

Loads from errlog/config/config.yaml:
- Which reporter is active (std, logging, eventhub)
- Logging reporter level
- Event Hub connection and batching settings

Environment variables ARE supported using ${VAR_NAME} and
${VAR_NAME:-default} syntax in YAML files. A ``.env`` file is loaded
first when given (or found in the working directory for the CLI).
"""

import json
import logging
import os
import re
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from errlog.errors.exceptions import ConfigurationError, ErrlogError
from errlog.logging.setup import setup_logging
from errlog.reporting.reporter import LoggingReporter, Reporter, StdReporter, report_to

# Configure module logger
logger = logging.getLogger(__name__)

REPORTER_NAMES = ("std", "logging", "eventhub")

LOG_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Overrides the connection string from YAML when set
EVENTHUB_CONNECTION_ENV = "EVENTHUB_NAMESPACE_CONNECTION_STRING"


def load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file and return dict."""
    if not path.exists():
        return {}
    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand ${VAR_NAME} and ${VAR_NAME:-default} environment variables in config data."""
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        pattern = r"\$\{([^}:]+)(?::-(([^}]*))?)?\}"

        def replacer(match):
            var_name = match.group(1)
            default_value = match.group(2) if match.group(2) is not None else match.group(0)
            return os.getenv(var_name, default_value)

        return re.sub(pattern, replacer, data)
    else:
        return data


DEFAULT_CONFIG_FILE = Path(__file__).parent / "config.yaml"


@dataclass
class ReportingConfig:
    """Error reporting configuration.

    Configuration structure:
        errlog:
          reporter: std               # std | logging | eventhub
          logging:
            level: ERROR              # LoggingReporter level
          eventhub:
            connection_string: ...
            eventhub_name: client-errors
            batch_size: 100
            batch_timeout_seconds: 1.0
            max_queue_size: 10000
            circuit_breaker_threshold: 5
            circuit_reset_seconds: 60.0
    """

    reporter: str = "std"

    # =========================================================================
    # LOGGING REPORTER
    # =========================================================================
    logging_level: str = "ERROR"

    # =========================================================================
    # EVENT HUB REPORTER
    # =========================================================================
    eventhub_connection_string: str = ""
    eventhub_name: str = "client-errors"
    eventhub_batch_size: int = 100
    eventhub_batch_timeout_seconds: float = 1.0
    eventhub_max_queue_size: int = 10000
    eventhub_circuit_breaker_threshold: int = 5
    eventhub_circuit_reset_seconds: float = 60.0

    def validate(self) -> None:
        """Validate configuration for correctness and constraints."""
        if self.reporter not in REPORTER_NAMES:
            raise ConfigurationError(
                f"reporter must be one of {list(REPORTER_NAMES)}, got '{self.reporter}'"
            )

        if self.logging_level.upper() not in LOG_LEVEL_NAMES:
            raise ConfigurationError(
                f"logging.level must be one of {list(LOG_LEVEL_NAMES)}, got '{self.logging_level}'"
            )

        if self.reporter == "eventhub":
            if not self.eventhub_connection_string:
                raise ConfigurationError(
                    f"eventhub.connection_string (or {EVENTHUB_CONNECTION_ENV}) is required "
                    "when reporter is 'eventhub'"
                )
            if not self.eventhub_name:
                raise ConfigurationError("eventhub.eventhub_name is required when reporter is 'eventhub'")

        self._validate_min("eventhub.batch_size", self.eventhub_batch_size, 1)
        self._validate_min("eventhub.max_queue_size", self.eventhub_max_queue_size, 1)
        self._validate_min("eventhub.circuit_breaker_threshold", self.eventhub_circuit_breaker_threshold, 1)
        self._validate_positive("eventhub.batch_timeout_seconds", self.eventhub_batch_timeout_seconds)
        self._validate_positive("eventhub.circuit_reset_seconds", self.eventhub_circuit_reset_seconds)

    @staticmethod
    def _validate_min(key: str, value: float, min_value: float) -> None:
        if value < min_value:
            raise ConfigurationError(f"{key} must be >= {min_value}, got {value}")

    @staticmethod
    def _validate_positive(key: str, value: float) -> None:
        if value <= 0:
            raise ConfigurationError(f"{key} must be > 0, got {value}")

    def to_dict(self) -> Dict[str, Any]:
        """Config as a dict with the connection string redacted."""
        data = asdict(self)
        if data["eventhub_connection_string"]:
            data["eventhub_connection_string"] = "[REDACTED]"
        return data


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge overlay into base dict."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _as_number(section: Dict[str, Any], key: str, default: Any, cast: type, context: str) -> Any:
    """Read a numeric setting; env expansion leaves numbers as strings."""
    value = section.get(key, default)
    try:
        return cast(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{context}.{key} must be a number, got '{value}'", cause=e) from e


def load_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
    env_file: Optional[Path] = None,
) -> ReportingConfig:
    """Load reporting configuration from a config.yaml file.

    Args:
        config_path: YAML file (default: the packaged config.yaml)
        overrides: Dict deep-merged over the ``errlog:`` section
        env_file: ``.env`` file loaded before expansion (existing
            environment variables win)

    Raises:
        FileNotFoundError: If the config file does not exist
        ConfigurationError: If the file is malformed or fails validation
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    if env_file is not None:
        load_dotenv(env_file)

    logger.info("Loading configuration from file", extra={"config_path": str(config_path)})
    yaml_data = _expand_env_vars(load_yaml(config_path))

    if "errlog" not in yaml_data:
        raise ConfigurationError("Invalid config file: missing 'errlog:' section")

    section = yaml_data["errlog"] or {}

    if overrides:
        logger.debug(f"Applying overrides: {list(overrides.keys())}")
        section = _deep_merge(section, overrides)

    logging_section = section.get("logging") or {}
    eventhub = section.get("eventhub") or {}

    config = ReportingConfig(
        reporter=str(section.get("reporter", "std")).strip().lower(),
        logging_level=str(logging_section.get("level", "ERROR")).strip().upper(),
        eventhub_connection_string=(
            os.getenv(EVENTHUB_CONNECTION_ENV) or eventhub.get("connection_string") or ""
        ),
        eventhub_name=eventhub.get("eventhub_name", "client-errors"),
        eventhub_batch_size=_as_number(eventhub, "batch_size", 100, int, "eventhub"),
        eventhub_batch_timeout_seconds=_as_number(eventhub, "batch_timeout_seconds", 1.0, float, "eventhub"),
        eventhub_max_queue_size=_as_number(eventhub, "max_queue_size", 10000, int, "eventhub"),
        eventhub_circuit_breaker_threshold=_as_number(eventhub, "circuit_breaker_threshold", 5, int, "eventhub"),
        eventhub_circuit_reset_seconds=_as_number(eventhub, "circuit_reset_seconds", 60.0, float, "eventhub"),
    )

    logger.debug(f"Configuration loaded: reporter={config.reporter}")
    config.validate()
    return config


def build_reporter(config: ReportingConfig) -> Reporter:
    """Create the reporter the configuration selects."""
    if config.reporter == "logging":
        return LoggingReporter(level=logging.getLevelName(config.logging_level.upper()))

    if config.reporter == "eventhub":
        # Imported on demand so the Azure SDK loads only when selected
        from errlog.reporting.eventhub import EventHubReporter

        return EventHubReporter(
            connection_string=config.eventhub_connection_string,
            eventhub_name=config.eventhub_name,
            batch_size=config.eventhub_batch_size,
            batch_timeout_seconds=config.eventhub_batch_timeout_seconds,
            max_queue_size=config.eventhub_max_queue_size,
            circuit_breaker_threshold=config.eventhub_circuit_breaker_threshold,
            circuit_reset_seconds=config.eventhub_circuit_reset_seconds,
        )

    return StdReporter()


def configure_reporting(config: Optional[ReportingConfig] = None) -> Reporter:
    """Install the configured reporter process-wide.

    Returns:
        The previously active reporter
    """
    config = config or get_config()
    reporter = build_reporter(config)
    previous = report_to(reporter)
    logger.info("Error reporting configured", extra={"reporter": config.reporter})
    return previous


_reporting_config: Optional[ReportingConfig] = None


def get_config() -> ReportingConfig:
    """Get or load the singleton reporting config instance."""
    global _reporting_config
    if _reporting_config is None:
        _reporting_config = load_config()
    return _reporting_config


def set_config(config: ReportingConfig) -> None:
    """Set the singleton reporting config instance (useful for testing)."""
    global _reporting_config
    _reporting_config = config


def reset_config() -> None:
    """Reset the singleton config instance (forces reload on next get_config() call)."""
    global _reporting_config
    _reporting_config = None


def _cli_main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point for config validation and debugging."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Error Reporting Configuration Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate configuration
  python -m errlog.config --validate

  # Show merged configuration
  python -m errlog.config --show-merged

  # Use custom config file
  python -m errlog.config --config /path/to/config.yaml --validate

  # JSON output for automation
  python -m errlog.config --validate --json
        """,
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration structure and completeness",
    )
    parser.add_argument(
        "--show-merged",
        action="store_true",
        help="Display resolved configuration",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.yaml file (default: packaged errlog/config/config.yaml)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Path to .env file (default: ./.env)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format instead of human-readable",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    setup_logging(
        name="errlog.config",
        origin="config",
        console_level=logging.DEBUG if args.verbose else logging.INFO,
    )

    if not args.validate and not args.show_merged:
        parser.print_help()
        return 0

    try:
        config = load_config(config_path=args.config, env_file=args.env_file)
    except FileNotFoundError as e:
        if args.json:
            print(json.dumps({"error": str(e)}))
        else:
            print(f"✗ Error: {e}", file=sys.stderr)
        return 1
    except ErrlogError as e:
        if args.json:
            print(json.dumps({"validation": {"passed": False, "errors": [str(e)]}}))
        else:
            print(f"✗ Validation error: {e}", file=sys.stderr)
        return 1

    output: Dict[str, Any] = {}

    if args.validate:
        # Validation happens during load_config(), if we got here it passed
        if args.json:
            output["validation"] = {"passed": True, "errors": []}
        else:
            print("✓ Configuration validation passed")
            print(f"  - Reporter: {config.reporter}")

    if args.show_merged:
        if args.json:
            output["merged_config"] = config.to_dict()
        else:
            print("\nConfiguration:")
            print("=" * 80)
            print(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False))
            print("=" * 80)

    if args.json:
        print(json.dumps(output, indent=2))

    return 0


if __name__ == "__main__":
    sys.exit(_cli_main())
