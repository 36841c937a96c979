"""Access-log record model and the random record generator."""

import json
import random
from dataclasses import dataclass, asdict
from datetime import datetime

from loadgen.pools import (
    HTTP_METHODS,
    HTTP_VERSIONS,
    STATUS_CODES,
    PATH_SEGMENTS,
    HOST_PREFIXES,
    MONTH_ABBREVIATIONS,
    TRACE_ID_ALPHABET,
    TRACE_ID_LENGTH,
    TERMINATION_STATE,
)


@dataclass(frozen=True)
class AccessLogRecord:
    """One synthetic proxy access-log entry. Every value is a string."""

    time: str
    client_ip: str
    bytes_read: str
    captured_request_headers: str
    http_method: str
    http_request_path: str
    http_request_query_string: str
    http_version: str
    server_name: str
    status_code: str
    ta: str
    tc: str
    termination_state: str
    tr_client: str
    tr_server: str
    tw: str

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> str:
        """Compact single-line JSON with keys in sorted order."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))


RECORD_FIELDS = tuple(sorted(AccessLogRecord.__dataclass_fields__))


def format_timestamp(now: datetime) -> str:
    """Render *now* as ``19/Oct/2026:14:03:07.123``."""
    month = MONTH_ABBREVIATIONS[now.month - 1]
    return (
        f"{now.day:02d}/{month}/{now.year:04d}:"
        f"{now.hour:02d}:{now.minute:02d}:{now.second:02d}."
        f"{now.microsecond // 1000:03d}"
    )


def random_ip(rng: random.Random) -> str:
    """Half IPv4 dotted quad, half IPv6-style eight hex groups."""
    if rng.random() < 0.5:
        return "%d.%d.%d.%d" % (
            rng.randint(1, 255),
            rng.randint(0, 255),
            rng.randint(0, 255),
            rng.randint(1, 255),
        )
    return ":".join(format(rng.randint(0, 0xFFFF), "x") for _ in range(8))


def random_host(rng: random.Random) -> str:
    return f"{rng.choice(HOST_PREFIXES)}-{rng.randint(1, 9999)}"


def random_path(rng: random.Random) -> str:
    segments = rng.randint(2, 4)
    return "/" + "/".join(rng.choice(PATH_SEGMENTS) for _ in range(segments))


def random_trace_id(rng: random.Random) -> str:
    return "".join(rng.choices(TRACE_ID_ALPHABET, k=TRACE_ID_LENGTH))


def _timing(rng: random.Random) -> str:
    return str(rng.randrange(0, 200))


def generate_record(rng: random.Random, now: datetime | None = None) -> AccessLogRecord:
    """Build one independent record, drawing all randomness from *rng*."""
    if now is None:
        now = datetime.now()
    client_ip = random_ip(rng)
    host = random_host(rng)
    return AccessLogRecord(
        time=format_timestamp(now),
        client_ip=client_ip,
        bytes_read=str(rng.randrange(200, 5000)),
        captured_request_headers=f"{host} - {client_ip} -",
        http_method=rng.choice(HTTP_METHODS),
        http_request_path=random_path(rng),
        http_request_query_string=f"?traceId={random_trace_id(rng)}",
        http_version=rng.choice(HTTP_VERSIONS),
        server_name=host,
        status_code=str(rng.choice(STATUS_CODES)),
        ta=_timing(rng),
        tc=_timing(rng),
        termination_state=TERMINATION_STATE,
        tr_client=_timing(rng),
        tr_server=_timing(rng),
        tw=_timing(rng),
    )


def generate_line(rng: random.Random) -> str:
    """Return one serialized record, without the trailing newline."""
    return generate_record(rng).to_json()
