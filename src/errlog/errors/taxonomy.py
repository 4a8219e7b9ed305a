"""
Classification tables for the canonical error taxonomy.

The kind strings below are the interoperable names consumers of reported
records key on. They must not be renamed.
"""

import asyncio
import http.client
import socket
import urllib.error

import aiohttp

from errlog.errors.shapes import NetError, NetOpError

# =============================================================================
# Network Category
# =============================================================================

# Anything with network-fault semantics enters the network category
NETWORK_ERROR_TYPES: tuple[type[BaseException], ...] = (
    NetError,
    NetOpError,
    socket.gaierror,
    socket.herror,
    ConnectionError,
    TimeoutError,
    urllib.error.URLError,
    aiohttp.ClientConnectionError,
)

# Resolver failures map to net.DNSError
DNS_ERROR_TYPES: tuple[type[BaseException], ...] = (
    socket.gaierror,
    socket.herror,
)

# =============================================================================
# Runtime-Fault Category
# =============================================================================

RUNTIME_FAULT_TYPES: tuple[type[BaseException], ...] = (
    ArithmeticError,
    AssertionError,
    AttributeError,
    LookupError,
    NameError,
    RecursionError,
    MemoryError,
    TypeError,
)

# Faults with a known sub-kind, matched by exact type
RUNTIME_FAULT_KINDS: dict[type[BaseException], str] = {
    TypeError: "runtime.TypeAssertionError",
}

# =============================================================================
# Structured / Library Category
# =============================================================================

# Precise protocol kinds, looked up along the exception's MRO
HTTP_PROTOCOL_ERRORS: dict[type[BaseException], str] = {
    http.client.LineTooLong: "http.ErrHeaderTooLong",
    http.client.IncompleteRead: "http.ErrShortBody",
    http.client.UnknownProtocol: "http.ErrNotSupported",
    http.client.UnknownTransferEncoding: "http.ErrNotSupported",
}

HTTP_PROTOCOL_ERROR = "http.ProtocolError"

# OpenSSL reasons meaning the peer did not speak TLS
TLS_RECORD_HEADER_REASONS = frozenset(
    {
        "WRONG_VERSION_NUMBER",
        "RECORD_LAYER_FAILURE",
        "HTTP_REQUEST",
        "HTTPS_PROXY_REQUEST",
    }
)

# OpenSSL X509_V_ERR_* verify codes
CERT_VERIFY_KINDS: dict[int, str] = {
    # Unknown authority
    2: "x509.UnknownAuthorityError",  # UNABLE_TO_GET_ISSUER_CERT
    18: "x509.UnknownAuthorityError",  # DEPTH_ZERO_SELF_SIGNED_CERT
    19: "x509.UnknownAuthorityError",  # SELF_SIGNED_CERT_IN_CHAIN
    20: "x509.UnknownAuthorityError",  # UNABLE_TO_GET_ISSUER_CERT_LOCALLY
    21: "x509.UnknownAuthorityError",  # UNABLE_TO_VERIFY_LEAF_SIGNATURE
    # Invalid certificate
    7: "x509.CertificateInvalidError",  # CERT_SIGNATURE_FAILURE
    9: "x509.CertificateInvalidError",  # CERT_NOT_YET_VALID
    10: "x509.CertificateInvalidError",  # CERT_HAS_EXPIRED
    24: "x509.CertificateInvalidError",  # INVALID_CA
    25: "x509.CertificateInvalidError",  # PATH_LENGTH_EXCEEDED
    47: "x509.CertificateInvalidError",  # PERMITTED_VIOLATION
    48: "x509.CertificateInvalidError",  # EXCLUDED_VIOLATION
    # Key usage constraints
    26: "x509.ConstraintViolationError",  # INVALID_PURPOSE
    # Unhandled critical extension
    34: "x509.UnhandledCriticalExtension",  # UNHANDLED_CRITICAL_EXTENSION
    # Host name mismatch
    62: "x509.HostnameError",  # HOSTNAME_MISMATCH
    64: "x509.HostnameError",  # IP_ADDRESS_MISMATCH
    # Weak keys and digests
    66: "x509.InsecureAlgorithmError",  # EE_KEY_TOO_SMALL
    67: "x509.InsecureAlgorithmError",  # CA_KEY_TOO_SMALL
    68: "x509.InsecureAlgorithmError",  # CA_MD_TOO_WEAK
}

HOSTNAME_ERROR = "x509.HostnameError"

# Messages raised by the stdlib json encoder for unencodable values
JSON_UNSUPPORTED_VALUE_MARKERS = (
    "out of range float values are not json compliant",
    "circular reference detected",
)

# Messages raised by datetime/time parsing
TIME_PARSE_MARKERS = (
    "does not match format",
    "unconverted data remains",
    "invalid isoformat string",
)

# =============================================================================
# Sentinel Category
# =============================================================================

# Native sentinel-like exceptions, looked up along the exception's MRO
SENTINEL_ERRORS: dict[type[BaseException], str] = {
    asyncio.IncompleteReadError: "io.ErrUnexpectedEOF",
    EOFError: "io.EOF",
    asyncio.LimitOverrunError: "bufio.ErrTooLong",
    PermissionError: "os.ErrPermission",
    FileExistsError: "os.ErrExist",
    FileNotFoundError: "os.ErrNotExist",
}


def lookup_mro(table: dict[type[BaseException], str], err: BaseException) -> str | None:
    """Return the entry for the most specific class of ``err`` found in ``table``."""
    for cls in type(err).__mro__:
        kind = table.get(cls)
        if kind is not None:
            return kind
    return None


__all__ = [
    "NETWORK_ERROR_TYPES",
    "DNS_ERROR_TYPES",
    "RUNTIME_FAULT_TYPES",
    "RUNTIME_FAULT_KINDS",
    "HTTP_PROTOCOL_ERRORS",
    "HTTP_PROTOCOL_ERROR",
    "TLS_RECORD_HEADER_REASONS",
    "CERT_VERIFY_KINDS",
    "HOSTNAME_ERROR",
    "JSON_UNSUPPORTED_VALUE_MARKERS",
    "TIME_PARSE_MARKERS",
    "SENTINEL_ERRORS",
    "lookup_mro",
]
