"""Tests for EventHubReporter."""

import json
import queue
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from prometheus_client import REGISTRY

from errlog.reporting import metrics  # noqa: F401
from errlog.reporting.record import ErrorRecord, SystemInfo

# Mock azure.eventhub before importing the reporter
with patch.dict("sys.modules", {
    "azure.eventhub": MagicMock(),
    "azure.eventhub.aio": MagicMock(),
}):
    from errlog.reporting.eventhub import EventHubReporter


def _dropped() -> float:
    return REGISTRY.get_sample_value("errlog_records_dropped_total", {"reporter": "eventhub"}) or 0.0


@pytest.fixture
def record():
    return ErrorRecord(
        origin="proxy",
        kind="io.EOF",
        desc="EOF",
        system=SystemInfo(os_type="linux", os_version="6.1", os_arch="amd64"),
    )


class TestEventHubReporterInit:

    @patch.object(EventHubReporter, "_start_sender")
    def test_stores_configuration(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
            batch_size=50,
            batch_timeout_seconds=2.0,
            max_queue_size=5000,
            circuit_breaker_threshold=3,
            circuit_reset_seconds=30.0,
        )

        assert reporter.connection_string == "Endpoint=sb://test"
        assert reporter.eventhub_name == "client-errors"
        assert reporter.batch_size == 50
        assert reporter.batch_timeout_seconds == 2.0
        assert reporter.circuit_breaker_threshold == 3
        assert reporter.record_queue.maxsize == 5000
        assert reporter._circuit_reset_interval == 30.0

    @patch.object(EventHubReporter, "_start_sender")
    def test_uses_default_parameters(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        assert reporter.batch_size == 100
        assert reporter.batch_timeout_seconds == 1.0
        assert reporter.record_queue.maxsize == 10000
        assert reporter.circuit_breaker_threshold == 5
        assert reporter._total_sent == 0
        assert reporter._total_dropped == 0
        assert reporter._circuit_open is False

    @patch.object(EventHubReporter, "_start_sender")
    def test_starts_sender_on_init(self, mock_start):
        EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        mock_start.assert_called_once()

    def test_sender_thread_is_daemon(self):
        with patch.object(threading.Thread, "start"):
            reporter = EventHubReporter(
                connection_string="Endpoint=sb://test",
                eventhub_name="client-errors",
            )

        assert reporter._sender_thread is not None
        assert reporter._sender_thread.daemon is True
        assert reporter._sender_thread.name == "eventhub-error-sender"


class TestEventHubReporterReport:

    @patch.object(EventHubReporter, "_start_sender")
    def test_queues_wire_form(self, mock_start, record):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        assert reporter.report(record) is True

        payload = json.loads(reporter.record_queue.get_nowait())
        assert payload["package"] == "proxy"
        assert payload["type"] == "io.EOF"
        assert payload["osType"] == "linux"

    @patch.object(EventHubReporter, "_start_sender")
    def test_drops_when_circuit_open(self, mock_start, record):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )
        reporter._circuit_open = True
        before = _dropped()

        assert reporter.report(record) is False

        assert reporter.record_queue.qsize() == 0
        assert reporter._total_dropped == 1
        assert _dropped() == before + 1

    @patch.object(EventHubReporter, "_start_sender")
    def test_drops_when_queue_full(self, mock_start, record):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
            max_queue_size=1,
        )

        assert reporter.report(record) is True
        assert reporter.report(record) is False

        assert reporter.record_queue.qsize() == 1
        assert reporter._total_dropped == 1

    @patch.object(EventHubReporter, "_start_sender")
    def test_serialization_failure_is_not_raised(self, mock_start, record):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        with patch.object(ErrorRecord, "to_json", side_effect=TypeError("not serializable")):
            assert reporter.report(record) is False

        assert reporter.record_queue.qsize() == 0


class TestEventHubReporterCircuitBreaker:

    @patch.object(EventHubReporter, "_start_sender")
    def test_opens_circuit_after_threshold_failures(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
            circuit_breaker_threshold=3,
        )

        error = Exception("send failed")

        reporter._handle_send_error(error, loop_time=100.0)
        reporter._handle_send_error(error, loop_time=101.0)
        assert reporter._circuit_open is False
        assert reporter._failure_count == 2

        reporter._handle_send_error(error, loop_time=102.0)
        assert reporter._circuit_open is True
        assert reporter._circuit_opened_at == 102.0

    @patch.object(EventHubReporter, "_start_sender")
    def test_does_not_reopen_already_open_circuit(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
            circuit_breaker_threshold=2,
        )

        error = Exception("fail")
        reporter._handle_send_error(error, loop_time=100.0)
        reporter._handle_send_error(error, loop_time=101.0)
        opened_at = reporter._circuit_opened_at

        reporter._handle_send_error(error, loop_time=200.0)
        assert reporter._circuit_opened_at == opened_at


class TestEventHubReporterSendBatch:

    @pytest.mark.asyncio
    @patch.object(EventHubReporter, "_start_sender")
    async def test_sends_batch_to_producer(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        mock_producer = AsyncMock()
        mock_batch = MagicMock()
        mock_batch.__len__ = MagicMock(return_value=2)
        mock_producer.create_batch.return_value = mock_batch

        await reporter._send_batch(mock_producer, ["{}", "{}"])

        mock_producer.create_batch.assert_called_once()
        assert mock_batch.add.call_count == 2
        mock_producer.send_batch.assert_called_once_with(mock_batch)
        assert reporter._total_sent == 2

    @pytest.mark.asyncio
    @patch.object(EventHubReporter, "_start_sender")
    async def test_skips_empty_batch(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        mock_producer = AsyncMock()
        await reporter._send_batch(mock_producer, [])

        mock_producer.create_batch.assert_not_called()

    @pytest.mark.asyncio
    @patch.object(EventHubReporter, "_start_sender")
    async def test_handles_batch_full_error(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        mock_producer = AsyncMock()
        mock_batch1 = MagicMock()
        mock_batch1.__len__ = MagicMock(return_value=1)
        mock_batch2 = MagicMock()
        mock_batch2.__len__ = MagicMock(return_value=1)

        # Second add overflows the first batch
        mock_batch1.add.side_effect = [None, ValueError("batch full")]
        mock_batch2.add.side_effect = [None]
        mock_producer.create_batch.side_effect = [mock_batch1, mock_batch2]

        await reporter._send_batch(mock_producer, ["{}", "{}"])

        assert mock_producer.create_batch.call_count == 2
        assert mock_producer.send_batch.call_count == 2
        assert reporter._total_sent == 2

    @pytest.mark.asyncio
    @patch.object(EventHubReporter, "_start_sender")
    async def test_success_resets_circuit(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )
        reporter._failure_count = 3
        reporter._circuit_open = True

        mock_producer = AsyncMock()
        mock_batch = MagicMock()
        mock_batch.__len__ = MagicMock(return_value=1)
        mock_producer.create_batch.return_value = mock_batch

        await reporter._send_batch(mock_producer, ["{}"])

        assert reporter._failure_count == 0
        assert reporter._circuit_open is False

    @pytest.mark.asyncio
    @patch.object(EventHubReporter, "_start_sender")
    async def test_handles_send_error_and_reraises(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        mock_producer = AsyncMock()
        mock_producer.create_batch.side_effect = Exception("network error")

        with pytest.raises(Exception, match="network error"):
            await reporter._send_batch(mock_producer, ["{}"])

        assert reporter._failure_count == 1
        assert reporter._total_sent == 0

    @pytest.mark.asyncio
    @patch.object(EventHubReporter, "_start_sender")
    async def test_failure_mid_batch_keeps_only_unsent(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        mock_producer = AsyncMock()
        mock_batch1 = MagicMock()
        mock_batch1.add.side_effect = [None, ValueError("batch full")]
        mock_batch2 = MagicMock()
        mock_producer.create_batch.side_effect = [mock_batch1, mock_batch2]
        # First part goes out, the second send fails
        mock_producer.send_batch.side_effect = [None, Exception("link detached")]
        batch = ['{"n": 1}', '{"n": 2}']

        with pytest.raises(Exception, match="link detached"):
            await reporter._send_batch(mock_producer, batch)

        assert batch == ['{"n": 2}']
        assert reporter._total_sent == 1
        assert reporter._failure_count == 1

    @patch.object(EventHubReporter, "_start_sender")
    def test_retained_batch_is_capped(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
            batch_size=2,
        )
        before = _dropped()
        batch = ["a", "b", "c", "d"]

        reporter._trim_batch(batch)

        assert batch == ["c", "d"]
        assert reporter._total_dropped == 2
        assert _dropped() == before + 2

    @patch.object(EventHubReporter, "_start_sender")
    def test_batch_within_size_is_kept(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
            batch_size=2,
        )
        batch = ["a", "b"]

        reporter._trim_batch(batch)

        assert batch == ["a", "b"]
        assert reporter._total_dropped == 0


class TestEventHubReporterStatsAndClose:

    @patch.object(EventHubReporter, "_start_sender")
    def test_returns_stats_dict(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )
        reporter._total_sent = 100
        reporter._total_dropped = 5
        reporter.record_queue.put_nowait("{}")

        stats = reporter.get_stats()

        assert stats == {
            "total_sent": 100,
            "total_dropped": 5,
            "queue_size": 1,
            "circuit_open": False,
            "failure_count": 0,
        }

    @patch.object(EventHubReporter, "_start_sender")
    def test_close_joins_sender(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )
        reporter._sender_thread = MagicMock()

        reporter.close()

        assert reporter._shutdown.is_set()
        reporter._sender_thread.join.assert_called_once_with(timeout=5.0)

    @patch.object(EventHubReporter, "_start_sender")
    def test_close_works_without_sender_thread(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        reporter.close()

        assert reporter._shutdown.is_set()


class TestEventHubReporterQueue:

    @patch.object(EventHubReporter, "_start_sender")
    def test_queue_is_fifo(self, mock_start, record):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )
        reporter.report(record)
        reporter.report(record.model_copy(update={"kind": "io.ErrUnexpectedEOF"}))

        first = json.loads(reporter.record_queue.get_nowait())
        second = json.loads(reporter.record_queue.get_nowait())

        assert first["type"] == "io.EOF"
        assert second["type"] == "io.ErrUnexpectedEOF"
        with pytest.raises(queue.Empty):
            reporter.record_queue.get_nowait()


class TestEventHubReporterSenderStopped:

    def test_report_fails_once_producer_cannot_be_created(self, record):
        before = _dropped()

        with patch.object(EventHubReporter, "_create_producer", side_effect=ValueError("bad connection string")):
            reporter = EventHubReporter(
                connection_string="Endpoint=sb://test",
                eventhub_name="client-errors",
            )
            reporter._sender_thread.join(timeout=5.0)

        assert reporter._sender_stopped.is_set()
        assert [reporter.report(record) for _ in range(3)] == [False, False, False]

        stats = reporter.get_stats()
        assert stats["total_sent"] == 0
        assert stats["total_dropped"] == 3
        assert stats["queue_size"] == 0
        assert _dropped() == before + 3

    @patch.object(EventHubReporter, "_start_sender")
    def test_queued_records_are_dropped_when_sender_stops(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )
        reporter.record_queue.put_nowait("{}")
        reporter.record_queue.put_nowait("{}")

        with patch.object(reporter, "_create_producer", side_effect=RuntimeError("no transport")):
            sender = threading.Thread(target=reporter._run_sender)
            sender.start()
            sender.join(timeout=5.0)

        assert reporter.record_queue.qsize() == 0
        assert reporter._total_dropped == 2

    @patch.object(EventHubReporter, "_start_sender")
    def test_drop_count_is_thread_safe(self, mock_start):
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://test",
            eventhub_name="client-errors",
        )

        def drop_many():
            for _ in range(1000):
                reporter._drop()

        threads = [threading.Thread(target=drop_many) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert reporter._total_dropped == 8000
