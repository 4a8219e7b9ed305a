"""
Event Hub reporter for streaming error records.

Records are serialized to their JSON wire form, queued, and sent from a
background thread in batches, so ``ErrorCollector.log`` never waits on the
network.

Features:
- Non-blocking report (enqueue only)
- Batching by size and timeout
- Circuit breaker that drops records while Event Hub is unavailable and
  retries after a cooldown
"""

import asyncio
import contextlib
import logging
import os
import queue
import threading

from azure.eventhub import EventData, TransportType
from azure.eventhub.aio import EventHubProducerClient

from errlog.reporting.metrics import record_dropped
from errlog.reporting.record import ErrorRecord

logger = logging.getLogger(__name__)


class EventHubReporter:
    """
    Queue-and-drain reporter sending records to Azure Event Hub.

    ``report`` returns ``True`` once the record is queued; delivery happens
    later on the sender thread. Records are dropped (and counted) when they
    cannot be queued or the sender thread is no longer draining the queue.

    Example:
        reporter = EventHubReporter(
            connection_string="Endpoint=sb://...",
            eventhub_name="client-errors",
            batch_size=100,
            batch_timeout_seconds=1.0,
        )
        report_to(reporter)
    """

    name = "eventhub"

    def __init__(
        self,
        connection_string: str,
        eventhub_name: str,
        batch_size: int = 100,
        batch_timeout_seconds: float = 1.0,
        max_queue_size: int = 10000,
        circuit_breaker_threshold: int = 5,
        circuit_reset_seconds: float = 60.0,
    ):
        """
        Initialize Event Hub reporter.

        Args:
            connection_string: Azure Event Hub connection string
            eventhub_name: Name of the Event Hub (e.g., "client-errors")
            batch_size: Number of records to batch before sending
            batch_timeout_seconds: Max seconds to wait before sending partial batch
            max_queue_size: Max records to queue (new records dropped if full)
            circuit_breaker_threshold: Consecutive failures before circuit opens
            circuit_reset_seconds: Cooldown before an open circuit is retried
        """
        self.connection_string = connection_string
        self.eventhub_name = eventhub_name
        self.batch_size = batch_size
        self.batch_timeout_seconds = batch_timeout_seconds
        self.circuit_breaker_threshold = circuit_breaker_threshold

        self.record_queue: queue.Queue = queue.Queue(maxsize=max_queue_size)

        # Background thread state
        self._sender_thread: threading.Thread | None = None
        self._shutdown = threading.Event()
        self._sender_stopped = threading.Event()
        self._stats_lock = threading.Lock()
        self._circuit_open = False
        self._circuit_opened_at = 0.0
        self._circuit_reset_interval = circuit_reset_seconds
        self._failure_count = 0
        self._total_sent = 0
        self._total_dropped = 0

        logger.info(
            "Initializing Event Hub reporter",
            extra={
                "eventhub_name": eventhub_name,
                "batch_size": batch_size,
                "batch_timeout_seconds": batch_timeout_seconds,
            },
        )
        self._start_sender()

    def report(self, record: ErrorRecord) -> bool:
        """Queue ``record`` for sending. Returns False when it was dropped."""
        if self._sender_stopped.is_set() or self._circuit_open:
            self._drop()
            return False

        try:
            payload = record.to_json()
        except (TypeError, ValueError):
            logger.warning("Unable to serialize error record", exc_info=True)
            return False

        try:
            self.record_queue.put_nowait(payload)
        except queue.Full:
            self._drop()
            logger.warning(
                "Event Hub queue full, dropping error record",
                extra={"total_dropped": self._total_dropped},
            )
            return False
        return True

    def _drop(self, count: int = 1) -> None:
        with self._stats_lock:
            self._total_dropped += count
        record_dropped(self.name, count)

    def _discard_queued(self) -> None:
        """Drop everything still queued once nothing will drain the queue."""
        discarded = 0
        while True:
            try:
                self.record_queue.get_nowait()
            except queue.Empty:
                break
            discarded += 1
        if discarded:
            self._drop(discarded)
            logger.warning(
                "Event Hub sender stopped, dropped queued error records",
                extra={"dropped": discarded},
            )

    def _trim_batch(self, batch: list[str]) -> None:
        """Keep at most ``batch_size`` pending records, dropping the oldest."""
        overflow = len(batch) - self.batch_size
        if overflow > 0:
            del batch[:overflow]
            self._drop(overflow)

    def _start_sender(self) -> None:
        """Start background thread for sending records to Event Hub."""
        self._sender_thread = threading.Thread(
            target=self._run_sender, daemon=True, name="eventhub-error-sender"
        )
        self._sender_thread.start()

    def _run_sender(self) -> None:
        """Run the send loop on the sender thread's own event loop."""
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)

        try:
            loop.run_until_complete(self._send_loop())
        finally:
            loop.close()
            self._sender_stopped.set()
            self._discard_queued()

    def _create_producer(self) -> EventHubProducerClient:
        # AMQP over WebSocket (443) gets through networks that block 5671
        ssl_kwargs = {}
        ca_bundle = (
            os.getenv("SSL_CERT_FILE")
            or os.getenv("REQUESTS_CA_BUNDLE")
            or os.getenv("CURL_CA_BUNDLE")
        )
        if ca_bundle:
            ssl_kwargs = {"connection_verify": ca_bundle}

        return EventHubProducerClient.from_connection_string(
            conn_str=self.connection_string,
            eventhub_name=self.eventhub_name,
            transport_type=TransportType.AmqpOverWebsocket,
            **ssl_kwargs,
        )

    async def _send_loop(self) -> None:
        """Main loop for sending batches to Event Hub."""
        try:
            producer = self._create_producer()
        except Exception as e:
            logger.error(
                "Unable to create Event Hub producer",
                extra={"eventhub_name": self.eventhub_name, "error_message": str(e)[:200]},
                exc_info=True,
            )
            return

        async with producer:
            logger.info("Connected to Event Hub", extra={"eventhub_name": self.eventhub_name})
            batch: list[str] = []
            last_send = asyncio.get_running_loop().time()

            while not self._shutdown.is_set():
                try:
                    try:
                        batch.append(self.record_queue.get(timeout=0.1))
                    except queue.Empty:
                        pass
                    self._trim_batch(batch)

                    now = asyncio.get_running_loop().time()

                    # Auto-reset circuit breaker after cooldown period
                    if self._circuit_open and (now - self._circuit_opened_at) >= self._circuit_reset_interval:
                        logger.info("Circuit breaker cooldown expired, retrying Event Hub")
                        self._circuit_open = False
                        self._failure_count = 0

                    should_send = len(batch) >= self.batch_size or (
                        batch and (now - last_send) >= self.batch_timeout_seconds
                    )

                    if should_send and not self._circuit_open:
                        await self._send_batch(producer, batch)
                        batch = []
                        last_send = now

                except asyncio.CancelledError:
                    break
                except Exception:
                    # Unsent remainder is kept and retried on the next pass
                    await asyncio.sleep(1)

            # Final flush on shutdown
            if batch and not self._circuit_open:
                with contextlib.suppress(Exception):
                    await self._send_batch(producer, batch)
            if batch:
                self._drop(len(batch))

        # Give the websocket transport's aiohttp session time to close
        await asyncio.sleep(0.250)

    async def _send_batch(self, producer: EventHubProducerClient, batch: list[str]) -> None:
        """
        Send a batch of serialized records to Event Hub.

        Sent records are removed from ``batch``; on failure it holds only
        the unsent remainder.

        Args:
            producer: Event Hub producer client
            batch: JSON wire forms to send

        Raises:
            Exception: If sending fails
        """
        if not batch:
            return

        sent = 0
        pending = 0
        try:
            event_batch = await producer.create_batch()

            for payload in batch:
                event_data = EventData(payload)
                try:
                    event_batch.add(event_data)
                except ValueError:
                    # Batch is full, send it and start a new one
                    await producer.send_batch(event_batch)
                    sent += pending
                    pending = 0
                    event_batch = await producer.create_batch()
                    event_batch.add(event_data)
                pending += 1

            if pending:
                await producer.send_batch(event_batch)
                sent += pending

            if self._failure_count > 0:
                self._failure_count = 0
                logger.info("Circuit breaker reset after successful send")

            if self._circuit_open:
                self._circuit_open = False
                logger.info("Circuit breaker closed")

        except Exception as e:
            self._handle_send_error(e, asyncio.get_running_loop().time())
            logger.error(
                "Error sending batch to Event Hub",
                extra={"batch_size": len(batch), "error_message": str(e)[:200]},
            )
            raise
        finally:
            # Never resend what already went out
            del batch[:sent]
            with self._stats_lock:
                self._total_sent += sent

    def _handle_send_error(self, error: Exception, loop_time: float) -> None:
        """
        Count a failed send and open the circuit at the threshold.

        Args:
            error: Exception that occurred during send
            loop_time: Current event loop time for circuit breaker timing
        """
        self._failure_count += 1

        if self._failure_count >= self.circuit_breaker_threshold and not self._circuit_open:
            self._circuit_open = True
            self._circuit_opened_at = loop_time
            logger.warning(
                "Circuit breaker opened",
                extra={
                    "failure_count": self._failure_count,
                    "retry_in_seconds": self._circuit_reset_interval,
                    "error_type": type(error).__name__,
                },
            )

    def get_stats(self) -> dict:
        """
        Get reporter statistics.

        Returns:
            Dict with sent/dropped counts and circuit state
        """
        return {
            "total_sent": self._total_sent,
            "total_dropped": self._total_dropped,
            "queue_size": self.record_queue.qsize(),
            "circuit_open": self._circuit_open,
            "failure_count": self._failure_count,
        }

    def close(self) -> None:
        """Stop the sender thread after a final flush."""
        self._shutdown.set()
        if self._sender_thread:
            self._sender_thread.join(timeout=5.0)


__all__ = ["EventHubReporter"]
