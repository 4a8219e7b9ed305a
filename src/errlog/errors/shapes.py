"""
Fault shapes with no Python standard-library counterpart.

The canonical taxonomy names a number of failure shapes (network operation
wrappers, DNS failures carrying the looked-up name, TLS record headers,
JSON marshalling faults, ...) for which neither the standard library nor
the libraries we depend on raise a matching exception. Producers raise the
classes below when they detect such a failure so the classifier can extract
the shape-specific fields.

Well-known singleton errors are expressed as ``ErrorCode`` members raised
through ``SentinelError``: Python exceptions are instances, not comparable
singletons, so identity lookup is replaced by an explicit code.
"""

import ssl
import urllib.error
from enum import Enum


# =============================================================================
# Network Shapes
# =============================================================================


class NetError(OSError):
    """Base class for network fault shapes."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NetOpError(NetError):
    """
    Network operation wrapper.

    Wraps the fault raised by a socket operation together with where it
    happened. The classifier takes the operation and addresses from the
    wrapper and classifies ``err``.

    Attributes:
        op: Operation name ("dial", "read", "write", "close")
        net: Network type ("tcp", "udp", ...)
        err: The underlying fault
        source: Local address, if known
        addr: Remote address, if known
    """

    def __init__(
        self,
        op: str,
        net: str,
        err: BaseException,
        source: str | None = None,
        addr: str | None = None,
    ):
        self.op = op
        self.net = net
        self.err = err
        self.source = source
        self.addr = addr

        message = op
        if net:
            message += f" {net}"
        if source:
            message += f" {source}"
            if addr:
                message += "->"
        elif addr:
            message += " "
        if addr:
            message += addr
        message += f": {err}"
        super().__init__(message)


class AddrError(NetError):
    """Malformed or unusable address."""

    def __init__(self, err: str, addr: str = ""):
        self.err = err
        self.addr = addr
        message = f"address {addr}: {err}" if addr else err
        super().__init__(message)


class DNSError(NetError):
    """
    Name resolution failure.

    Attributes:
        err: Resolver message (e.g. "no such host")
        name: Name that was looked up
        server: DNS server used, if known
    """

    def __init__(self, err: str, name: str, server: str = ""):
        self.err = err
        self.name = name
        self.server = server
        message = f"lookup {name}"
        if server:
            message += f" on {server}"
        message += f": {err}"
        super().__init__(message)


class InvalidAddrError(NetError):
    """Address is syntactically valid but not usable for the operation."""

    pass


class ParseError(NetError):
    """Unparseable network value (address, CIDR, MAC)."""

    def __init__(self, value_type: str, text: str):
        self.value_type = value_type
        self.text = text
        super().__init__(f"invalid {value_type}: {text}")


class UnknownNetworkError(NetError):
    """Unsupported network name passed to a dial or listen call."""

    def __init__(self, network: str):
        self.network = network
        super().__init__(f"unknown network {network}")


class URLError(urllib.error.URLError):
    """
    HTTP client fault tied to a request method and URL.

    A ``urllib.error.URLError`` that also records the request method, so
    the classifier can report it as the failing operation.
    """

    def __init__(self, op: str, url: str, reason: BaseException | str):
        super().__init__(reason)
        self.op = op
        self.url = url

    def __str__(self) -> str:
        return f'{self.op} "{self.url}": {self.reason}'


class EscapeError(ValueError):
    """Invalid percent-escape in a URL."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f'invalid URL escape "{text}"')


class InvalidHostError(ValueError):
    """Invalid character in a URL host name."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(f'invalid character "{text}" in host name')


# =============================================================================
# TLS / Certificate Shapes
# =============================================================================


class RecordHeaderError(ssl.SSLError):
    """
    Peer answered with something that is not a TLS record.

    Attributes:
        msg: Description of the fault
        record_header: The raw record header bytes received
    """

    def __init__(self, msg: str, record_header: bytes = b""):
        super().__init__(msg)
        self.msg = msg
        self.record_header = bytes(record_header)

    def __str__(self) -> str:
        return self.msg


class SystemRootsError(ssl.SSLError):
    """System certificate roots could not be loaded."""

    def __init__(self, err: BaseException | None = None):
        super().__init__("x509: failed to load system roots and no roots provided")
        self.err = err

    def __str__(self) -> str:
        message = "x509: failed to load system roots and no roots provided"
        if self.err is not None:
            message += f"; {self.err}"
        return message


# =============================================================================
# JSON Shapes
# =============================================================================


class JSONError(ValueError):
    """Base class for JSON marshalling fault shapes."""

    pass


class InvalidUTF8Error(JSONError):
    def __init__(self, s: str):
        self.s = s
        super().__init__(f"json: invalid UTF-8 in string: {s!r}")


class InvalidUnmarshalError(JSONError):
    def __init__(self, type_name: str | None = None):
        self.type_name = type_name
        if type_name is None:
            super().__init__("json: Unmarshal(None)")
        else:
            super().__init__(f"json: Unmarshal(non-pointer {type_name})")


class MarshalerError(JSONError):
    def __init__(self, type_name: str, err: BaseException):
        self.type_name = type_name
        self.err = err
        super().__init__(f"json: error calling MarshalJSON for type {type_name}: {err}")


class UnmarshalFieldError(JSONError):
    def __init__(self, key: str, type_name: str, field: str):
        self.key = key
        self.type_name = type_name
        self.field = field
        super().__init__(
            f"json: cannot unmarshal object key {key!r} into unexported field "
            f"{field} of type {type_name}"
        )


class UnmarshalTypeError(JSONError):
    def __init__(self, value: str, type_name: str, offset: int = 0):
        self.value = value
        self.type_name = type_name
        self.offset = offset
        super().__init__(f"json: cannot unmarshal {value} into value of type {type_name}")


class UnsupportedTypeError(JSONError):
    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"json: unsupported type: {type_name}")


class UnsupportedValueError(JSONError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"json: unsupported value: {value}")


# =============================================================================
# OS Shapes
# =============================================================================


class PathError(OSError):
    """
    File operation failure tied to the operation name.

    Native ``OSError``s carry the path but not the call that failed; wrap
    them to keep it: ``raise PathError("open", path, exc) from exc``.
    """

    def __init__(self, op: str, path: str, err: BaseException):
        super().__init__(getattr(err, "errno", None), getattr(err, "strerror", None), path)
        self.op = op
        self.path = path
        self.err = err

    def __str__(self) -> str:
        return f"{self.op} {self.path}: {self.err}"


class SyscallError(OSError):
    """
    Failed system call.

    Attributes:
        syscall: Name of the failing call
        err: The underlying OS error
    """

    def __init__(self, syscall: str, err: BaseException):
        super().__init__(f"{syscall}: {err}")
        self.syscall = syscall
        self.err = err

    def __str__(self) -> str:
        return f"{self.syscall}: {self.err}"


# =============================================================================
# Sentinel Codes
# =============================================================================


class ErrorCode(str, Enum):
    """
    Well-known sentinel errors, keyed by their canonical kind.

    The value of each member is the kind reported for it.
    """

    # bufio
    BUFIO_INVALID_UNREAD_BYTE = "bufio.ErrInvalidUnreadByte"
    BUFIO_INVALID_UNREAD_RUNE = "bufio.ErrInvalidUnreadRune"
    BUFIO_BUFFER_FULL = "bufio.ErrBufferFull"
    BUFIO_NEGATIVE_COUNT = "bufio.ErrNegativeCount"
    BUFIO_TOO_LONG = "bufio.ErrTooLong"
    BUFIO_NEGATIVE_ADVANCE = "bufio.ErrNegativeAdvance"
    BUFIO_ADVANCE_TOO_FAR = "bufio.ErrAdvanceTooFar"
    BUFIO_FINAL_TOKEN = "bufio.ErrFinalToken"

    # http protocol errors
    HTTP_HEADER_TOO_LONG = "http.ErrHeaderTooLong"
    HTTP_SHORT_BODY = "http.ErrShortBody"
    HTTP_NOT_SUPPORTED = "http.ErrNotSupported"
    HTTP_UNEXPECTED_TRAILER = "http.ErrUnexpectedTrailer"
    HTTP_MISSING_CONTENT_LENGTH = "http.ErrMissingContentLength"
    HTTP_NOT_MULTIPART = "http.ErrNotMultipart"
    HTTP_MISSING_BOUNDARY = "http.ErrMissingBoundary"

    # http
    HTTP_WRITE_AFTER_FLUSH = "http.ErrWriteAfterFlush"
    HTTP_BODY_NOT_ALLOWED = "http.ErrBodyNotAllowed"
    HTTP_HIJACKED = "http.ErrHijacked"
    HTTP_CONTENT_LENGTH = "http.ErrContentLength"
    HTTP_BODY_READ_AFTER_CLOSE = "http.ErrBodyReadAfterClose"
    HTTP_HANDLER_TIMEOUT = "http.ErrHandlerTimeout"
    HTTP_LINE_TOO_LONG = "http.ErrLineTooLong"
    HTTP_MISSING_FILE = "http.ErrMissingFile"
    HTTP_NO_COOKIE = "http.ErrNoCookie"
    HTTP_NO_LOCATION = "http.ErrNoLocation"
    HTTP_SKIP_ALT_PROTOCOL = "http.ErrSkipAltProtocol"

    # io
    IO_EOF = "io.EOF"
    IO_CLOSED_PIPE = "io.ErrClosedPipe"
    IO_NO_PROGRESS = "io.ErrNoProgress"
    IO_SHORT_BUFFER = "io.ErrShortBuffer"
    IO_SHORT_WRITE = "io.ErrShortWrite"
    IO_UNEXPECTED_EOF = "io.ErrUnexpectedEOF"

    # os
    OS_INVALID = "os.ErrInvalid"
    OS_PERMISSION = "os.ErrPermission"
    OS_EXIST = "os.ErrExist"
    OS_NOT_EXIST = "os.ErrNotExist"

    # exec
    EXEC_NOT_FOUND = "exec.ErrNotFound"

    # x509
    X509_UNSUPPORTED_ALGORITHM = "x509.ErrUnsupportedAlgorithm"
    X509_INCORRECT_PASSWORD = "x509.IncorrectPasswordError"

    # hex
    HEX_LENGTH = "hex.ErrLength"


SENTINEL_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.BUFIO_INVALID_UNREAD_BYTE: "bufio: invalid use of UnreadByte",
    ErrorCode.BUFIO_INVALID_UNREAD_RUNE: "bufio: invalid use of UnreadRune",
    ErrorCode.BUFIO_BUFFER_FULL: "bufio: buffer full",
    ErrorCode.BUFIO_NEGATIVE_COUNT: "bufio: negative count",
    ErrorCode.BUFIO_TOO_LONG: "bufio.Scanner: token too long",
    ErrorCode.BUFIO_NEGATIVE_ADVANCE: "bufio.Scanner: SplitFunc returns negative advance count",
    ErrorCode.BUFIO_ADVANCE_TOO_FAR: "bufio.Scanner: SplitFunc returns advance count beyond input",
    ErrorCode.BUFIO_FINAL_TOKEN: "final token",
    ErrorCode.HTTP_HEADER_TOO_LONG: "header too long",
    ErrorCode.HTTP_SHORT_BODY: "entity body too short",
    ErrorCode.HTTP_NOT_SUPPORTED: "feature not supported",
    ErrorCode.HTTP_UNEXPECTED_TRAILER: "trailer header without chunked transfer encoding",
    ErrorCode.HTTP_MISSING_CONTENT_LENGTH: "missing ContentLength in HEAD response",
    ErrorCode.HTTP_NOT_MULTIPART: "request Content-Type isn't multipart/form-data",
    ErrorCode.HTTP_MISSING_BOUNDARY: "no multipart boundary param in Content-Type",
    ErrorCode.HTTP_WRITE_AFTER_FLUSH: "unused",
    ErrorCode.HTTP_BODY_NOT_ALLOWED: "http: request method or response status code does not allow body",
    ErrorCode.HTTP_HIJACKED: "http: connection has been hijacked",
    ErrorCode.HTTP_CONTENT_LENGTH: "http: wrote more than the declared Content-Length",
    ErrorCode.HTTP_BODY_READ_AFTER_CLOSE: "http: invalid Read on closed Body",
    ErrorCode.HTTP_HANDLER_TIMEOUT: "http: Handler timeout",
    ErrorCode.HTTP_LINE_TOO_LONG: "header line too long",
    ErrorCode.HTTP_MISSING_FILE: "http: no such file",
    ErrorCode.HTTP_NO_COOKIE: "http: named cookie not present",
    ErrorCode.HTTP_NO_LOCATION: "http: no Location header in response",
    ErrorCode.HTTP_SKIP_ALT_PROTOCOL: "net/http: skip alternate protocol",
    ErrorCode.IO_EOF: "EOF",
    ErrorCode.IO_CLOSED_PIPE: "io: read/write on closed pipe",
    ErrorCode.IO_NO_PROGRESS: "multiple Read calls return no data or error",
    ErrorCode.IO_SHORT_BUFFER: "short buffer",
    ErrorCode.IO_SHORT_WRITE: "short write",
    ErrorCode.IO_UNEXPECTED_EOF: "unexpected EOF",
    ErrorCode.OS_INVALID: "invalid argument",
    ErrorCode.OS_PERMISSION: "permission denied",
    ErrorCode.OS_EXIST: "file already exists",
    ErrorCode.OS_NOT_EXIST: "file does not exist",
    ErrorCode.EXEC_NOT_FOUND: "executable file not found in $PATH",
    ErrorCode.X509_UNSUPPORTED_ALGORITHM: "x509: cannot verify signature: algorithm unimplemented",
    ErrorCode.X509_INCORRECT_PASSWORD: "x509: decryption password incorrect",
    ErrorCode.HEX_LENGTH: "encoding/hex: odd length hex string",
}


class SentinelError(Exception):
    """
    A well-known sentinel error identified by its code.

    Example:
        raise SentinelError(ErrorCode.IO_EOF)
    """

    def __init__(self, code: ErrorCode, message: str | None = None):
        self.code = ErrorCode(code)
        super().__init__(message or SENTINEL_MESSAGES[self.code])


__all__ = [
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
    "RecordHeaderError",
    "SystemRootsError",
    "JSONError",
    "InvalidUTF8Error",
    "InvalidUnmarshalError",
    "MarshalerError",
    "UnmarshalFieldError",
    "UnmarshalTypeError",
    "UnsupportedTypeError",
    "UnsupportedValueError",
    "PathError",
    "SyscallError",
    "ErrorCode",
    "SENTINEL_MESSAGES",
    "SentinelError",
]
