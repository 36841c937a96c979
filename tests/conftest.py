import json
import os
import random
import signal
import socket
import threading

import jsonschema
import pytest
from flask import Flask, request
from werkzeug.serving import make_server

from loadgen.config import _ENV_VARS

SCHEMA_PATH = os.path.join(os.path.dirname(__file__), "schemas", "access_log.json")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's shell environment out of config loading."""
    for env_var in list(_ENV_VARS.values()) + ["CONFIG_PATH"]:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture(scope="session")
def record_validator():
    with open(SCHEMA_PATH, "r") as f:
        schema = json.load(f)
    return jsonschema.Draft202012Validator(schema)


@pytest.fixture
def restore_signals():
    """Put back SIGINT/SIGTERM handlers replaced by main()."""
    saved = {
        sig: signal.getsignal(sig) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    yield
    for sig, handler in saved.items():
        signal.signal(sig, handler)


class NDJSONReceiver:
    """Handle to a live Flask endpoint that records every POSTed batch."""

    def __init__(self, url: str):
        self.url = url
        self.status = 200
        self.requests: list[tuple[str, bytes]] = []
        self.lock = threading.Lock()

    @property
    def bodies(self) -> list[bytes]:
        with self.lock:
            return [body for _, body in self.requests]


@pytest.fixture
def ndjson_receiver():
    """Serve an ingest endpoint on an ephemeral loopback port."""
    app = Flask(__name__)
    receiver = None

    @app.route("/ingest", methods=["POST"])
    def ingest():
        with receiver.lock:
            receiver.requests.append((request.content_type, request.get_data()))
        return "", receiver.status

    server = make_server("127.0.0.1", 0, app, threaded=True)
    port = server.server_address[1]
    receiver = NDJSONReceiver(f"http://127.0.0.1:{port}/ingest")

    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield receiver
    server.shutdown()
    thread.join(timeout=5)


@pytest.fixture
def closed_port():
    """A loopback port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
