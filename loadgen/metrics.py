"""Thread-safe batch delivery counters and a periodic reporter thread."""

import collections
import logging
import statistics
import threading
import time

logger = logging.getLogger(__name__)

# Percentiles are computed over the most recent deliveries only.
SEND_TIME_WINDOW = 1024


class MetricsCollector:
    """Collects delivery statistics shared by every worker.

    Counters and the send-time sum are cumulative; the p95 send time is
    taken from a sliding window of the last *window* deliveries so memory
    stays constant however long the generator runs.
    """

    def __init__(self, window: int = SEND_TIME_WINDOW) -> None:
        self._lock = threading.Lock()
        self._batches_sent: int = 0
        self._total_records: int = 0
        self._total_bytes: int = 0
        self._oversized_batches: int = 0
        self._send_time_total: float = 0.0
        self._recent_send_times: collections.deque = collections.deque(maxlen=window)
        self._start_time = time.monotonic()

    def record_batch(
        self,
        records: int,
        bytes_sent: int,
        send_time_ms: float,
        oversized: bool = False,
    ) -> None:
        """Record one successfully delivered batch.

        Args:
            records: Number of log records in the batch.
            bytes_sent: Batch size in bytes, delimiters included.
            send_time_ms: Time the sink took to deliver, in milliseconds.
            oversized: True when the batch is a single record over budget.
        """
        with self._lock:
            self._batches_sent += 1
            self._total_records += records
            self._total_bytes += bytes_sent
            self._send_time_total += send_time_ms
            self._recent_send_times.append(send_time_ms)
            if oversized:
                self._oversized_batches += 1

    @property
    def window_size(self) -> int:
        with self._lock:
            return len(self._recent_send_times)

    def snapshot(self) -> dict:
        """Return a point-in-time copy of all counters and derived rates."""
        with self._lock:
            batches = self._batches_sent
            records = self._total_records
            total_bytes = self._total_bytes
            oversized = self._oversized_batches
            send_time_total = self._send_time_total
            recent = list(self._recent_send_times)

        uptime = time.monotonic() - self._start_time
        return {
            "batches_sent": batches,
            "total_records": records,
            "total_bytes": total_bytes,
            "oversized_batches": oversized,
            "avg_batch_bytes": total_bytes / batches if batches else 0.0,
            "avg_records_per_batch": records / batches if batches else 0.0,
            "avg_send_time_ms": send_time_total / batches if batches else 0.0,
            "p95_send_time_ms": self._percentile(recent, 95),
            "bytes_per_second": total_bytes / uptime if uptime > 0 else 0.0,
            "uptime_seconds": uptime,
        }

    @staticmethod
    def _percentile(data: list, pct: int) -> float:
        """Linearly interpolated *pct*-th percentile, 0.0 for no data."""
        if not data:
            return 0.0
        if len(data) == 1:
            return float(data[0])
        return float(statistics.quantiles(data, n=100, method="inclusive")[pct - 1])


def format_snapshot(snapshot: dict) -> str:
    return (
        f"batches={snapshot['batches_sent']} "
        f"records={snapshot['total_records']} "
        f"bytes={snapshot['total_bytes']} "
        f"oversized={snapshot['oversized_batches']} "
        f"avg_send={snapshot['avg_send_time_ms']:.1f}ms "
        f"p95_send={snapshot['p95_send_time_ms']:.1f}ms "
        f"rate={snapshot['bytes_per_second'] / 1024:.1f}KiB/s"
    )


class MetricsReporter:
    """Background thread that periodically logs a metrics summary."""

    def __init__(
        self,
        metrics: MetricsCollector,
        interval: float,
        shutdown_event: threading.Event,
    ):
        self._metrics = metrics
        self._interval = interval
        self._shutdown = shutdown_event
        self._thread: threading.Thread | None = None

    def start(self):
        """Start the reporter thread. A zero interval disables reporting."""
        if self._interval <= 0:
            return
        self._thread = threading.Thread(
            target=self._report_loop, name="metrics-reporter", daemon=True
        )
        self._thread.start()

    def stop(self):
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    def _report_loop(self):
        while not self._shutdown.wait(self._interval):
            logger.info("[metrics] %s", format_snapshot(self._metrics.snapshot()))
