"""
Error classification into the canonical taxonomy.

Maps any exception to the base fields of an ``ErrorRecord``: the failing
operation, the canonical kind, a description and shape-specific extras.

Dispatch is strictly ordered and the first match wins:
1. Network faults (after unwrapping a network-operation wrapper)
2. Language runtime faults
3. Structured library faults (ordered rule table)
4. Sentinel errors (explicit codes, then native sentinel types)

Anything unmatched is reported under its dynamic type name. ``parse_error``
never raises.
"""

import binascii
import email.errors
import http.client
import json
import logging
import os
import re
import smtplib
import ssl
import subprocess
import urllib.error
from collections.abc import Callable
from typing import NamedTuple

import aiohttp
import pydantic

from errlog.errors.shapes import (
    AddrError,
    DNSError,
    EscapeError,
    InvalidAddrError,
    InvalidHostError,
    InvalidUnmarshalError,
    InvalidUTF8Error,
    MarshalerError,
    NetOpError,
    ParseError,
    RecordHeaderError,
    SentinelError,
    SyscallError,
    SystemRootsError,
    UnknownNetworkError,
    UnmarshalFieldError,
    UnmarshalTypeError,
    UnsupportedTypeError,
    UnsupportedValueError,
)
from errlog.errors.taxonomy import (
    CERT_VERIFY_KINDS,
    DNS_ERROR_TYPES,
    HOSTNAME_ERROR,
    HTTP_PROTOCOL_ERROR,
    HTTP_PROTOCOL_ERRORS,
    JSON_UNSUPPORTED_VALUE_MARKERS,
    NETWORK_ERROR_TYPES,
    RUNTIME_FAULT_KINDS,
    RUNTIME_FAULT_TYPES,
    SENTINEL_ERRORS,
    TIME_PARSE_MARKERS,
    TLS_RECORD_HEADER_REASONS,
    lookup_mro,
)
from errlog.types import Op

logger = logging.getLogger(__name__)

# Upper bound for any single extra value (process stderr captures in particular)
MAX_EXTRA_LENGTH = 4096

TRUNCATION_MARKER = "..."

JSON_SHAPE_KINDS: dict[type[BaseException], str] = {
    InvalidUnmarshalError: "json.InvalidUnmarshalError",
    MarshalerError: "json.MarshalerError",
    UnmarshalFieldError: "json.UnmarshalFieldError",
    UnmarshalTypeError: "json.UnmarshalTypeError",
    UnsupportedTypeError: "json.UnsupportedTypeError",
    UnsupportedValueError: "json.UnsupportedValueError",
}

_NUM_ERROR_PATTERN = re.compile(
    r"invalid literal for (?P<literal>int|float|complex)\(\)"
    r"|could not convert string to (?P<convert>float|complex)"
    r"|(?P<malformed>complex)\(\) arg is a malformed string"
)

_CERT_HOST_PATTERN = re.compile(r"not valid for '([^']+)'")


class ParsedError(NamedTuple):
    """Base record fields produced by classification."""

    op: str
    kind: str
    desc: str
    extra: dict[str, str]


# =============================================================================
# Helpers
# =============================================================================


def type_name(err: BaseException) -> str:
    """
    Dynamic type name of an exception.

    Builtins are reported by bare name ("ValueError"), everything else
    qualified by module ("aiohttp.client_exceptions.ServerDisconnectedError").
    """
    cls = type(err)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def describe(err: BaseException) -> str:
    """Message of an exception, falling back to its type name when empty."""
    try:
        text = str(err)
    except Exception:
        text = ""
    return text or type_name(err)


def _os_message(err: BaseException) -> str:
    strerror = getattr(err, "strerror", None)
    if isinstance(strerror, str) and strerror:
        return strerror
    return describe(err)


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return str(data)


def truncate_tail(value: str, limit: int) -> str:
    """Cap ``value`` to ``limit`` characters, keeping the tail."""
    if limit <= 0 or len(value) <= limit:
        return value
    if limit <= len(TRUNCATION_MARKER):
        return value[-limit:]
    return TRUNCATION_MARKER + value[len(value) - limit + len(TRUNCATION_MARKER):]


def _host_of(addr: str) -> str:
    """Host part of "host:port" / "[v6]:port" / bare host."""
    addr = str(addr)
    if addr.startswith("["):
        end = addr.find("]")
        return addr[1:end] if end > 0 else addr
    if addr.count(":") == 1:
        return addr.split(":", 1)[0]
    return addr


# =============================================================================
# Network Category
# =============================================================================


def _parse_network(err: BaseException, extra: dict[str, str]) -> tuple[str, str, str]:
    op = ""
    host = ""

    # Unwrap the network-operation wrapper, if any
    if isinstance(err, NetOpError):
        op = err.op
        if err.source:
            extra["localAddr"] = str(err.source)
        if err.addr:
            extra["remoteAddr"] = str(err.addr)
            host = _host_of(err.addr)
        extra["network"] = err.net
        err = err.err
    elif isinstance(err, aiohttp.ClientConnectorError):
        op = Op.DIAL.value
        host = err.host
        extra["remoteAddr"] = f"{err.host}:{err.port}"
        extra["network"] = "tcp"
        if isinstance(err, aiohttp.ClientConnectorCertificateError):
            err = err.certificate_error
        else:
            err = err.os_error

    if isinstance(err, AddrError):
        kind, desc = "net.AddrError", err.err
        extra["addr"] = err.addr
    elif isinstance(err, DNSError):
        kind, desc = "net.DNSError", err.err
        extra["domain"] = err.name
        if err.server:
            extra["dnsServer"] = err.server
    elif isinstance(err, DNS_ERROR_TYPES):
        kind, desc = "net.DNSError", _os_message(err)
        if host:
            extra["domain"] = host
    elif isinstance(err, InvalidAddrError):
        kind, desc = "net.InvalidAddrError", describe(err)
    elif isinstance(err, ParseError):
        kind, desc = "net.ParseError", f"invalid {err.value_type}"
        extra["textToParse"] = err.text
    elif isinstance(err, UnknownNetworkError):
        kind, desc = "net.UnknownNetworkError", "unknown network"
    elif isinstance(err, urllib.error.URLError):
        kind = "url.Error"
        reason = err.reason
        desc = describe(reason) if isinstance(reason, BaseException) else str(reason)
        url_op = getattr(err, "op", None)
        if url_op:
            op = url_op
    elif isinstance(err, ssl.SSLError):
        # errno on TLS faults is the OpenSSL error, not a syscall errno
        kind, desc = _parse_tls(err, extra)
    elif isinstance(err, OSError) and isinstance(err.errno, int):
        kind, desc = "syscall.Errno", os.strerror(err.errno)
    else:
        _, kind, desc = _parse_sentinel(err)

    return op, kind, desc


# =============================================================================
# Runtime-Fault Category
# =============================================================================


def _parse_runtime(err: BaseException) -> tuple[str, str, str]:
    kind = RUNTIME_FAULT_KINDS.get(type(err)) or type_name(err)
    return "", kind, describe(err)


# =============================================================================
# Structured Category
# =============================================================================


class _Rule(NamedTuple):
    matches: Callable[[BaseException], bool]
    extract: Callable[[BaseException, dict[str, str]], tuple[str, str, str]]


def _message_contains(err: BaseException, markers: tuple[str, ...]) -> bool:
    message = describe(err).lower()
    return any(marker in message for marker in markers)


def _is_invalid_host(err: BaseException) -> bool:
    if isinstance(err, InvalidHostError):
        return True
    if not isinstance(err, UnicodeError):
        return False
    return getattr(err, "encoding", None) == "idna" or "idna" in describe(err).lower()


def _is_record_header(err: BaseException) -> bool:
    if isinstance(err, RecordHeaderError):
        return True
    return isinstance(err, ssl.SSLError) and getattr(err, "reason", None) in TLS_RECORD_HEADER_REASONS


def _is_known_cert_error(err: BaseException) -> bool:
    return (
        isinstance(err, ssl.SSLCertVerificationError)
        and getattr(err, "verify_code", None) in CERT_VERIFY_KINDS
    )


def _is_hex_error(err: BaseException) -> bool:
    return isinstance(err, ValueError) and _message_contains(
        err, ("non-hexadecimal", "odd-length string")
    )


def _is_num_error(err: BaseException) -> bool:
    return type(err) is ValueError and _NUM_ERROR_PATTERN.search(describe(err)) is not None


def _is_time_parse_error(err: BaseException) -> bool:
    return type(err) is ValueError and _message_contains(err, TIME_PARSE_MARKERS)


def _is_json_unsupported_value(err: BaseException) -> bool:
    return type(err) is ValueError and _message_contains(err, JSON_UNSUPPORTED_VALUE_MARKERS)


def _extract_http_protocol(err, extra):
    return "", lookup_mro(HTTP_PROTOCOL_ERRORS, err) or HTTP_PROTOCOL_ERROR, describe(err)


def _extract_textproto(err, extra):
    message = _decode(err.smtp_error)
    return "", "textproto.Error", f"{err.smtp_code:03d} {message}"


def _extract_record_header(err, extra):
    header = getattr(err, "record_header", b"")
    if header:
        extra["header"] = bytes(header).hex()
    desc = getattr(err, "msg", None) or describe(err)
    return "", "tls.RecordHeaderError", desc


def _extract_cert_error(err, extra):
    kind = CERT_VERIFY_KINDS[err.verify_code]
    desc = describe(err)
    if kind == HOSTNAME_ERROR:
        match = _CERT_HOST_PATTERN.search(getattr(err, "verify_message", None) or desc)
        if match:
            extra["host"] = match.group(1)
    return "", kind, desc


def _parse_tls(err: BaseException, extra: dict[str, str]) -> tuple[str, str]:
    if _is_record_header(err):
        _, kind, desc = _extract_record_header(err, extra)
    elif _is_known_cert_error(err):
        _, kind, desc = _extract_cert_error(err, extra)
    else:
        kind, desc = type_name(err), describe(err)
    return kind, desc


def _extract_hex(err, extra):
    if "odd-length" in describe(err).lower():
        return "", "hex.ErrLength", describe(err)
    return "", "hex.InvalidByteError", "invalid byte"


def _extract_syscall(err, extra):
    return err.syscall, "os.SyscallError", _os_message(err.err)


def _extract_path(err, extra):
    inner = getattr(err, "err", None)
    desc = _os_message(inner if isinstance(inner, BaseException) else err)
    return getattr(err, "op", None) or "", "os.PathError", desc


def _extract_exit(err, extra):
    extra["stderr"] = _decode(err.stderr)
    return "", "exec.ExitError", describe(err)


def _extract_num(err, extra):
    match = _NUM_ERROR_PATTERN.search(describe(err))
    extra["function"] = next(group for group in match.groups() if group)
    return "", "strconv.NumError", describe(err)


def _fixed(kind: str, desc: str | None = None):
    def extract(err, extra):
        return "", kind, desc or describe(err)

    return extract


STRUCTURED_RULES: list[_Rule] = [
    # Protocol
    _Rule(lambda e: isinstance(e, http.client.HTTPException), _extract_http_protocol),
    _Rule(lambda e: isinstance(e, EscapeError), _fixed("url.EscapeError", "invalid URL escape")),
    _Rule(_is_invalid_host, _fixed("url.InvalidHostError", "invalid character in host name")),
    _Rule(lambda e: isinstance(e, smtplib.SMTPResponseException), _extract_textproto),
    _Rule(lambda e: isinstance(e, email.errors.HeaderParseError), _fixed("textproto.ProtocolError")),
    # TLS and certificates
    _Rule(_is_record_header, _extract_record_header),
    _Rule(lambda e: isinstance(e, SystemRootsError), _fixed("x509.SystemRootsError")),
    _Rule(_is_known_cert_error, _extract_cert_error),
    # Encodings
    _Rule(_is_hex_error, _extract_hex),
    _Rule(lambda e: isinstance(e, json.JSONDecodeError), _fixed("json.SyntaxError")),
    _Rule(lambda e: isinstance(e, InvalidUTF8Error), _fixed("json.InvalidUTF8Error", "invalid UTF-8 in string")),
    _Rule(lambda e: type(e) in JSON_SHAPE_KINDS, lambda e, x: ("", JSON_SHAPE_KINDS[type(e)], describe(e))),
    _Rule(lambda e: isinstance(e, pydantic.ValidationError), _fixed("json.UnmarshalTypeError")),
    _Rule(_is_json_unsupported_value, _fixed("json.UnsupportedValueError")),
    # OS and processes
    _Rule(lambda e: isinstance(e, SyscallError), _extract_syscall),
    _Rule(lambda e: isinstance(e, OSError) and e.filename2 is not None, _fixed("os.LinkError")),
    _Rule(lambda e: isinstance(e, OSError) and e.filename is not None, _extract_path),
    _Rule(lambda e: isinstance(e, subprocess.CalledProcessError), _extract_exit),
    _Rule(lambda e: isinstance(e, subprocess.SubprocessError), _fixed("exec.Error")),
    # Conversions
    _Rule(_is_num_error, _extract_num),
    _Rule(_is_time_parse_error, _fixed("time.ParseError")),
]


# =============================================================================
# Sentinel Category
# =============================================================================


def _parse_sentinel(err: BaseException) -> tuple[str, str, str]:
    if isinstance(err, SentinelError):
        return "", err.code.value, describe(err)
    kind = lookup_mro(SENTINEL_ERRORS, err)
    if kind is not None:
        return "", kind, describe(err)
    return "", type_name(err), describe(err)


# =============================================================================
# Entry Point
# =============================================================================


def _classify(err: BaseException, extra: dict[str, str]) -> tuple[str, str, str]:
    if isinstance(err, NETWORK_ERROR_TYPES):
        return _parse_network(err, extra)

    if isinstance(err, RUNTIME_FAULT_TYPES):
        return _parse_runtime(err)

    for rule in STRUCTURED_RULES:
        if rule.matches(err):
            return rule.extract(err, extra)

    return _parse_sentinel(err)


def parse_error(err: BaseException, max_extra_length: int = MAX_EXTRA_LENGTH) -> ParsedError:
    """
    Classify an exception into base record fields.

    Args:
        err: Exception to classify
        max_extra_length: Cap applied to every extra value (tail kept)

    Returns:
        ParsedError with op ("" when unspecified), kind, non-empty desc and
        extras (empty dict when none apply)

    Example:
        >>> parse_error(EOFError()).kind
        'io.EOF'
    """
    extra: dict[str, str] = {}
    try:
        op, kind, desc = _classify(err, extra)
    except Exception:
        logger.debug("Classification failed, using type name", exc_info=True)
        return ParsedError("", type_name(err), describe(err), {})

    extra = {key: truncate_tail(str(value), max_extra_length) for key, value in extra.items()}
    return ParsedError(op or "", kind or type_name(err), desc or kind or type_name(err), extra)


__all__ = [
    "MAX_EXTRA_LENGTH",
    "ParsedError",
    "STRUCTURED_RULES",
    "describe",
    "parse_error",
    "truncate_tail",
    "type_name",
]
