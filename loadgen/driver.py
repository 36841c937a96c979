"""Driver loop: pack a batch, deliver it, pace, repeat."""

import logging
import random
import threading
import time

from loadgen.errors import DeliveryError
from loadgen.metrics import MetricsCollector
from loadgen.packer import pack_batch, count_records
from loadgen.pacing import Pacer
from loadgen.sinks import Sink

logger = logging.getLogger(__name__)


class LoadDriver:
    """Runs the generate/deliver/pace cycle for one worker.

    Stop requests are observed only between iterations, so a batch that has
    started packing is always delivered before the loop exits. A
    DeliveryError from the sink ends the loop and propagates to the caller.
    """

    def __init__(
        self,
        budget: int,
        sink: Sink,
        pacer: Pacer,
        rng: random.Random,
        shutdown_event: threading.Event,
        metrics: MetricsCollector | None = None,
        name: str = "worker-0",
    ):
        self._budget = budget
        self._sink = sink
        self._pacer = pacer
        self._rng = rng
        self._shutdown = shutdown_event
        self._metrics = metrics
        self._name = name
        self._batches = 0

    @property
    def batches_delivered(self) -> int:
        return self._batches

    def run_once(self) -> int:
        """Run a single iteration. Returns the number of bytes delivered."""
        batch = pack_batch(self._budget, self._rng)
        if batch:
            self._deliver(batch)
        self._pacer.pace()
        return len(batch)

    def _deliver(self, batch: bytes) -> None:
        start = time.monotonic()
        self._sink.deliver(batch)
        elapsed_ms = (time.monotonic() - start) * 1000
        self._batches += 1

        if self._metrics is not None:
            self._metrics.record_batch(
                records=count_records(batch),
                bytes_sent=len(batch),
                send_time_ms=elapsed_ms,
                oversized=len(batch) > self._budget,
            )

    def run(self) -> int:
        """Loop until the shutdown event is set. Returns batches delivered."""
        logger.info(
            "%s started: budget=%d bytes, pacing=%.3fs",
            self._name,
            self._budget,
            self._pacer.delay_seconds,
        )
        try:
            while not self._shutdown.is_set():
                self.run_once()
        except DeliveryError:
            logger.error("%s stopped after %d batches", self._name, self._batches)
            raise
        logger.info("%s stopped after %d batches", self._name, self._batches)
        return self._batches
