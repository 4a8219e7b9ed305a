"""Tests for fault shapes and sentinel codes."""

import errno
import urllib.error

import pytest

from errlog.errors.shapes import (
    SENTINEL_MESSAGES,
    AddrError,
    DNSError,
    ErrorCode,
    NetError,
    NetOpError,
    PathError,
    RecordHeaderError,
    SentinelError,
    SyscallError,
    SystemRootsError,
    URLError,
)


class TestNetOpError:

    def test_message_with_both_addresses(self):
        err = NetOpError(
            "read", "tcp", OSError("connection reset"), source="10.0.0.1:5000", addr="1.2.3.4:443"
        )

        assert str(err) == "read tcp 10.0.0.1:5000->1.2.3.4:443: connection reset"

    def test_message_with_remote_only(self):
        err = NetOpError("dial", "tcp", OSError("refused"), addr="1.2.3.4:443")

        assert str(err) == "dial tcp 1.2.3.4:443: refused"

    def test_is_network_error(self):
        err = NetOpError("dial", "tcp", OSError("refused"))

        assert isinstance(err, NetError)
        assert isinstance(err, OSError)
        assert err.source is None
        assert err.addr is None


class TestNetShapes:

    def test_dns_error_message(self):
        err = DNSError("no such host", "example.invalid", server="8.8.8.8:53")

        assert str(err) == "lookup example.invalid on 8.8.8.8:53: no such host"

    def test_addr_error_message(self):
        assert str(AddrError("missing port in address", "example.com")) == (
            "address example.com: missing port in address"
        )
        assert str(AddrError("too many colons")) == "too many colons"

    def test_url_error_is_stdlib_url_error(self):
        err = URLError("Get", "https://example.com", "timeout")

        assert isinstance(err, urllib.error.URLError)
        assert err.reason == "timeout"
        assert str(err) == 'Get "https://example.com": timeout'


class TestTLSShapes:

    def test_record_header_keeps_bytes(self):
        err = RecordHeaderError("not a TLS handshake", bytearray(b"\x16\x03"))

        assert err.record_header == b"\x16\x03"
        assert str(err) == "not a TLS handshake"

    def test_system_roots_error_includes_cause(self):
        err = SystemRootsError(OSError("no bundle"))

        assert str(err).endswith("; no bundle")


class TestOSShapes:

    def test_path_error_exposes_os_fields(self):
        cause = FileNotFoundError(errno.ENOENT, "No such file or directory")

        err = PathError("open", "/etc/missing", cause)

        assert err.errno == errno.ENOENT
        assert err.strerror == "No such file or directory"
        assert err.filename == "/etc/missing"
        assert str(err) == "open /etc/missing: [Errno 2] No such file or directory"

    def test_syscall_error_message(self):
        err = SyscallError("setsockopt", OSError("bad option"))

        assert str(err) == "setsockopt: bad option"
        assert err.filename is None


class TestSentinelError:

    def test_every_code_has_a_message(self):
        for code in ErrorCode:
            assert SENTINEL_MESSAGES[code]

    def test_default_message(self):
        err = SentinelError(ErrorCode.IO_UNEXPECTED_EOF)

        assert str(err) == "unexpected EOF"
        assert err.code is ErrorCode.IO_UNEXPECTED_EOF

    def test_accepts_kind_string(self):
        err = SentinelError("io.EOF")

        assert err.code is ErrorCode.IO_EOF

    def test_rejects_unknown_code(self):
        with pytest.raises(ValueError):
            SentinelError("io.Nope")
