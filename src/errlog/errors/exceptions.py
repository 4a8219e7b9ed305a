"""
Exception hierarchy for errlog itself.

These are failures of the reporting machinery (bad configuration, a sink
that could not deliver), not the foreign faults being classified. Reporting
failures are never raised back to a subsystem calling ``ErrorCollector.log``;
reporters use ``ReportDeliveryError`` internally and signal the outcome
through their boolean return value.
"""


class ErrlogError(Exception):
    """
    Base exception for all errlog errors.

    Attributes:
        message: Human-readable error description
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ErrlogError):
    """Invalid or incomplete reporting configuration."""

    pass


# =============================================================================
# Delivery Errors
# =============================================================================


class ReportDeliveryError(ErrlogError):
    """A reporter failed to serialize or deliver a record."""

    def __init__(
        self,
        reporter: str,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        ctx = {"reporter": reporter}
        if context:
            ctx.update(context)
        super().__init__(message, cause, ctx)
        self.reporter = reporter


__all__ = [
    "ErrlogError",
    "ConfigurationError",
    "ReportDeliveryError",
]
