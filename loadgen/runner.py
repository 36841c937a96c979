"""Builds one driver per worker and runs them until stop or failure."""

import logging
import random
import threading
from concurrent.futures import ThreadPoolExecutor, FIRST_EXCEPTION, wait
from typing import Callable

from loadgen.config import Config
from loadgen.driver import LoadDriver
from loadgen.metrics import MetricsCollector
from loadgen.pacing import Pacer
from loadgen.sinks import Sink, create_sink

logger = logging.getLogger(__name__)


def make_rng(seed: int | None, worker_index: int) -> random.Random:
    """Independent randomness source per worker; OS-seeded unless *seed* is set."""
    if seed is None:
        return random.Random()
    return random.Random(seed + worker_index)


def build_drivers(
    config: Config,
    shutdown_event: threading.Event,
    metrics: MetricsCollector | None,
    sink_factory: Callable[[Config], Sink],
) -> list[tuple[LoadDriver, Sink]]:
    drivers = []
    for i in range(config.workers):
        sink = sink_factory(config)
        driver = LoadDriver(
            budget=config.batch_bytes,
            sink=sink,
            pacer=Pacer(config.sleep_ms),
            rng=make_rng(config.seed, i),
            shutdown_event=shutdown_event,
            metrics=metrics,
            name=f"worker-{i}",
        )
        drivers.append((driver, sink))
    return drivers


def run(
    config: Config,
    shutdown_event: threading.Event,
    metrics: MetricsCollector | None = None,
    sink_factory: Callable[[Config], Sink] = create_sink,
) -> int:
    """Run every worker until *shutdown_event* is set.

    Returns the total number of batches delivered. The first DeliveryError
    from any worker sets *shutdown_event*, so the others stop at their next
    iteration boundary, and is then re-raised.
    """
    drivers = build_drivers(config, shutdown_event, metrics, sink_factory)
    try:
        if len(drivers) == 1:
            driver, _ = drivers[0]
            return driver.run()
        return _run_concurrently([d for d, _ in drivers], shutdown_event)
    finally:
        for _, sink in drivers:
            sink.close()


def _run_concurrently(drivers: list[LoadDriver], shutdown_event: threading.Event) -> int:
    logger.info("Running %d workers", len(drivers))
    with ThreadPoolExecutor(
        max_workers=len(drivers), thread_name_prefix="loadgen"
    ) as executor:
        futures = [executor.submit(d.run) for d in drivers]
        done, _ = wait(futures, return_when=FIRST_EXCEPTION)
        if any(f.exception() is not None for f in done):
            logger.warning("A worker failed, stopping the remaining workers")
            shutdown_event.set()
        wait(futures)

    for future in futures:
        exc = future.exception()
        if exc is not None:
            raise exc
    return sum(f.result() for f in futures)
