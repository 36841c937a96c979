"""Delivery sinks that write a finished batch to stdout or POST it over HTTP."""

import logging
import sys
import threading
from abc import ABC, abstractmethod
from typing import BinaryIO

import requests

from loadgen.config import Config
from loadgen.errors import DeliveryError

logger = logging.getLogger(__name__)

NDJSON_CONTENT_TYPE = "application/x-ndjson"

# Shared by every StdoutSink so concurrent workers never interleave batches.
_stdout_lock = threading.Lock()


class Sink(ABC):
    """Accepts whole batches. A batch is delivered entirely or not at all."""

    @abstractmethod
    def deliver(self, batch: bytes) -> None:
        """Deliver *batch* or raise DeliveryError."""

    def close(self) -> None:
        pass


class StdoutSink(Sink):
    """Writes batches to a binary stream and flushes after each one."""

    def __init__(self, stream: BinaryIO | None = None):
        self._stream = stream if stream is not None else sys.stdout.buffer

    def deliver(self, batch: bytes) -> None:
        with _stdout_lock:
            try:
                self._stream.write(batch)
                self._stream.flush()
            except (OSError, ValueError) as exc:
                raise DeliveryError(f"failed to write batch to stream: {exc}") from exc


class HttpSink(Sink):
    """POSTs each batch as an NDJSON request body to a fixed endpoint."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ):
        self._endpoint = endpoint
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def deliver(self, batch: bytes) -> None:
        try:
            with self._session.post(
                self._endpoint,
                data=batch,
                headers={"Content-Type": NDJSON_CONTENT_TYPE},
                timeout=self._timeout,
            ) as response:
                response.raise_for_status()
        except requests.HTTPError as exc:
            raise DeliveryError(
                f"endpoint {self._endpoint} rejected batch: "
                f"HTTP {exc.response.status_code}"
            ) from exc
        except requests.RequestException as exc:
            raise DeliveryError(
                f"failed to POST batch to {self._endpoint}: {exc}"
            ) from exc

    def close(self) -> None:
        self._session.close()


def _stdout_sink(config: Config) -> Sink:
    return StdoutSink()


def _http_sink(config: Config) -> Sink:
    return HttpSink(config.http_jsonline, timeout=config.http_timeout)


_SINK_FACTORIES = {
    "stdout": _stdout_sink,
    "http": _http_sink,
}


def create_sink(config: Config) -> Sink:
    """Build the sink selected by ``config.output``."""
    return _SINK_FACTORIES[config.output](config)
