"""
Record decorators.

A decorator takes a record and returns a new one with some context
attached. ``ErrorCollector.log`` applies them in call order, so a later
decorator overrides what an earlier one set.

Example:
    >>> collector.log(err, with_op("fetch-cloud-config"), with_locale())
"""

from collections.abc import Callable

from errlog.reporting.probes import detect_locale
from errlog.reporting.record import ErrorRecord, ProxyingInfo, UserAgentInfo, UserLocale
from errlog.types import Op, op_value

Decorator = Callable[[ErrorRecord], ErrorRecord]


def with_op(op: Op | str) -> Decorator:
    """Override the failing operation."""

    def decorate(record: ErrorRecord) -> ErrorRecord:
        return record.model_copy(update={"op": op_value(op)})

    return decorate


def with_proxy(info: ProxyingInfo) -> Decorator:
    """Attach how the failed request was proxied."""

    def decorate(record: ErrorRecord) -> ErrorRecord:
        return record.model_copy(update={"proxy": info})

    return decorate


def with_locale(probe: Callable[[], UserLocale] = detect_locale) -> Decorator:
    """Attach the user locale, probed when the decorator is applied."""

    def decorate(record: ErrorRecord) -> ErrorRecord:
        return record.model_copy(update={"locale": probe()})

    return decorate


def with_user_agent(user_agent: UserAgentInfo | str) -> Decorator:
    """Attach the user agent of the failed request."""
    if not isinstance(user_agent, UserAgentInfo):
        user_agent = UserAgentInfo(user_agent=user_agent)

    def decorate(record: ErrorRecord) -> ErrorRecord:
        return record.model_copy(update={"user_agent": user_agent})

    return decorate


def with_field(key: str, value: object) -> Decorator:
    """Add one entry to the record extras."""

    def decorate(record: ErrorRecord) -> ErrorRecord:
        extra = dict(record.extra)
        extra[key] = str(value)
        return record.model_copy(update={"extra": extra})

    return decorate


__all__ = [
    "Decorator",
    "with_op",
    "with_proxy",
    "with_locale",
    "with_user_agent",
    "with_field",
]
