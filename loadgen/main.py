#!/usr/bin/env python3
"""Access-log load generator entry point."""

import logging
import signal
import sys
import threading

from loadgen.config import load_config
from loadgen.errors import ConfigError, DeliveryError
from loadgen.metrics import MetricsCollector, MetricsReporter, format_snapshot
from loadgen import runner

EXIT_DELIVERY_ERROR = 1
EXIT_CONFIG_ERROR = 2

logger = logging.getLogger(__name__)


def _configure_logging(level: str = "INFO") -> None:
    # stdout carries the generated logs, so diagnostics go to stderr
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    _configure_logging()

    try:
        config = load_config(argv)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_CONFIG_ERROR

    logging.getLogger().setLevel(config.log_level)

    shutdown_event = threading.Event()
    received = []

    def handle_signal(signum, frame):
        logger.info("Received signal %d, stopping after the current batch...", signum)
        received.append(signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    logger.info(
        "Starting load generator: output=%s%s, batch_bytes=%d, sleep_ms=%d, workers=%d",
        config.output,
        f" ({config.http_jsonline})" if config.output == "http" else "",
        config.batch_bytes,
        config.sleep_ms,
        config.workers,
    )

    metrics = MetricsCollector()
    reporter = MetricsReporter(metrics, config.metrics_interval, shutdown_event)
    reporter.start()

    try:
        runner.run(config, shutdown_event, metrics)
    except DeliveryError as exc:
        logger.error("Delivery failed: %s", exc)
        return EXIT_DELIVERY_ERROR
    finally:
        shutdown_event.set()
        reporter.stop()
        logger.info("Final metrics: %s", format_snapshot(metrics.snapshot()))

    signum = received[0] if received else signal.SIGTERM
    return 128 + int(signum)


if __name__ == "__main__":
    sys.exit(main())
