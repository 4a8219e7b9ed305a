"""
Error classification and exception hierarchy.

Provides:
- parse_error for mapping any exception to the canonical taxonomy
- Shape classes and sentinel codes for faults with no native exception
- ErrlogError hierarchy for failures of the reporting machinery itself
"""

from errlog.errors.classifier import (
    # Constants
    MAX_EXTRA_LENGTH,
    # Classes
    ParsedError,
    describe,
    # Functions
    parse_error,
    truncate_tail,
    type_name,
)
from errlog.errors.exceptions import (
    ConfigurationError,
    ErrlogError,
    ReportDeliveryError,
)
from errlog.errors.shapes import (
    AddrError,
    DNSError,
    ErrorCode,
    EscapeError,
    InvalidAddrError,
    InvalidHostError,
    InvalidUnmarshalError,
    InvalidUTF8Error,
    JSONError,
    MarshalerError,
    NetError,
    NetOpError,
    ParseError,
    PathError,
    RecordHeaderError,
    SentinelError,
    SyscallError,
    SystemRootsError,
    UnknownNetworkError,
    UnmarshalFieldError,
    UnmarshalTypeError,
    UnsupportedTypeError,
    UnsupportedValueError,
    URLError,
)

__all__ = [
    # Classification
    "MAX_EXTRA_LENGTH",
    "ParsedError",
    "parse_error",
    "describe",
    "type_name",
    "truncate_tail",
    # Own exceptions
    "ErrlogError",
    "ConfigurationError",
    "ReportDeliveryError",
    # Network shapes
    "NetError",
    "NetOpError",
    "AddrError",
    "DNSError",
    "InvalidAddrError",
    "ParseError",
    "UnknownNetworkError",
    "URLError",
    "EscapeError",
    "InvalidHostError",
    # TLS shapes
    "RecordHeaderError",
    "SystemRootsError",
    # JSON shapes
    "JSONError",
    "InvalidUTF8Error",
    "InvalidUnmarshalError",
    "MarshalerError",
    "UnmarshalFieldError",
    "UnmarshalTypeError",
    "UnsupportedTypeError",
    "UnsupportedValueError",
    # OS shapes
    "PathError",
    "SyscallError",
    # Sentinels
    "ErrorCode",
    "SentinelError",
]
