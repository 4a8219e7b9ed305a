"""Tests for reporting metrics."""

import importlib

from prometheus_client import REGISTRY

from errlog.reporting import metrics


def _sample(name: str, labels: dict) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestRecordingHelpers:

    def test_record_classified(self):
        before = _sample("errlog_records_classified_total", {"kind": "net.DNSError"})

        metrics.record_classified("net.DNSError")

        assert _sample("errlog_records_classified_total", {"kind": "net.DNSError"}) == before + 1

    def test_record_reported_success_and_failure(self):
        labels = {"reporter": "metrics-test"}
        reported = _sample("errlog_records_reported_total", labels)
        failed = _sample("errlog_report_failures_total", labels)

        metrics.record_reported("metrics-test")
        metrics.record_reported("metrics-test", success=False)
        metrics.record_reported("metrics-test", success=False)

        assert _sample("errlog_records_reported_total", labels) == reported + 1
        assert _sample("errlog_report_failures_total", labels) == failed + 2

    def test_record_dropped_count(self):
        labels = {"reporter": "metrics-test"}
        before = _sample("errlog_records_dropped_total", labels)

        metrics.record_dropped("metrics-test", count=5)

        assert _sample("errlog_records_dropped_total", labels) == before + 5


class TestRegistration:

    def test_reload_reuses_registered_counters(self):
        original = metrics.records_classified_counter

        reloaded = importlib.reload(metrics)

        assert reloaded.records_classified_counter is original
