"""End-to-end tests through the top-level package."""

import errno
import json

import errlog
from errlog import (
    Op,
    ProxyingInfo,
    ProxyType,
    UserLocale,
    error_collector_for,
    with_locale,
    with_op,
    with_proxy,
    with_user_agent,
)


class TestReportToStdout:

    def test_default_reporter_writes_wire_form(self, capsys):
        err = ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused")

        record = error_collector_for("proxy").log(
            err,
            with_op(Op.DIAL),
            with_proxy(ProxyingInfo(proxy_type=ProxyType.CHAINED, proxy_addr="10.0.0.5:443")),
            with_locale(lambda: UserLocale(time_zone="UTC", language="en", country="US")),
            with_user_agent("client/7.0"),
        )

        line = capsys.readouterr().out.strip()
        payload = json.loads(line)
        assert payload == record.to_dict()
        assert payload["package"] == "proxy"
        assert payload["type"] == "syscall.Errno"
        assert payload["operation"] == "dial"
        assert payload["proxyType"] == "chained"
        assert payload["language"] == "en"
        assert payload["userAgent"] == "client/7.0"
        assert {"osType", "osVersion", "osArch"} <= payload.keys()

    def test_version(self):
        assert errlog.__version__ == "1.0.0"
