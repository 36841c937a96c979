"""Configuration as a frozen dataclass built from YAML, env vars and CLI args."""

import argparse
import logging
import os
import re
from dataclasses import dataclass, fields

import yaml

from loadgen.errors import ConfigError

logger = logging.getLogger(__name__)

VALID_OUTPUTS = ("stdout", "http")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_SIZE_MULTIPLIERS = {
    "": 1,
    "k": 1024,
    "m": 1024 ** 2,
    "g": 1024 ** 3,
}
_SIZE_PATTERN = re.compile(r"([0-9]+)([kmg]?)")

# Largest value a 64-bit unsigned size can hold without the sign bit.
MAX_BYTE_SIZE = 2 ** 63 - 1


def parse_byte_size(value: str) -> int:
    """Parse ``"100"``, ``"64k"``, ``"1m"`` or ``"2g"`` into a byte count.

    Suffixes are case-insensitive and mean powers of 1024. Raises
    ConfigError for empty input, anything that is not digits plus an
    optional suffix, or a result larger than MAX_BYTE_SIZE.
    """
    text = str(value).strip().lower()
    if not text:
        raise ConfigError("batch_bytes cannot be empty")

    match = _SIZE_PATTERN.fullmatch(text)
    if match is None:
        raise ConfigError(f"invalid number in batch_bytes: {value!r}")

    number, suffix = match.groups()
    result = int(number) * _SIZE_MULTIPLIERS[suffix]
    if result > MAX_BYTE_SIZE:
        raise ConfigError(f"batch_bytes too large: {value!r}")
    return result


@dataclass(frozen=True)
class Config:
    sleep_ms: int = 0
    batch_bytes: int = 64 * 1024
    output: str = "stdout"
    http_jsonline: str | None = None
    http_timeout: float = 10.0
    workers: int = 1
    metrics_interval: float = 0.0
    seed: int | None = None
    log_level: str = "INFO"


# field name -> environment variable
_ENV_VARS = {
    "sleep_ms": "SLEEP_MS",
    "batch_bytes": "BATCH_BYTES",
    "output": "OUTPUT",
    "http_jsonline": "HTTP_JSONLINE",
    "http_timeout": "HTTP_TIMEOUT",
    "workers": "WORKERS",
    "metrics_interval": "METRICS_INTERVAL",
    "seed": "SEED",
    "log_level": "LOG_LEVEL",
}


def load_yaml(path: str) -> dict:
    """Read a YAML config file whose top level is a mapping of Config fields."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigError(f"cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    known = {f.name for f in fields(Config)}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys in %s: %s", path, ", ".join(unknown))
    return {k: v for k, v in data.items() if k in known}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate JSON access logs continuously for load testing."
    )
    parser.add_argument("--config", default=None, help="Path to a YAML config file.")
    parser.add_argument(
        "--sleep_ms", "--sleep-ms", dest="sleep_ms", default=None,
        help="Sleep milliseconds after each batch is delivered.",
    )
    parser.add_argument(
        "--batch_bytes", "--batch-bytes", dest="batch_bytes", default=None,
        help="Bytes to emit per batch (supports k/m/g suffixes).",
    )
    parser.add_argument(
        "--output", choices=VALID_OUTPUTS, default=None,
        help="Where to send logs: stdout or POST over http.",
    )
    parser.add_argument(
        "--http.jsonline", "--http-jsonline", dest="http_jsonline", default=None,
        help="HTTP endpoint that receives NDJSON batches when output=http.",
    )
    parser.add_argument("--http-timeout", dest="http_timeout", default=None)
    parser.add_argument("--workers", default=None)
    parser.add_argument("--metrics-interval", dest="metrics_interval", default=None)
    parser.add_argument("--seed", default=None)
    parser.add_argument("--log-level", dest="log_level", default=None)
    return parser


def _to_int(name: str, value) -> int:
    # int() would silently truncate a YAML float such as 1.9
    if isinstance(value, (bool, float)):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got {value!r}") from None


def _to_float(name: str, value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


def _validate(raw: dict) -> Config:
    """Coerce raw string/YAML values and check cross-field rules."""
    sleep_ms = _to_int("sleep_ms", raw["sleep_ms"])
    if sleep_ms < 0:
        raise ConfigError("sleep_ms must not be negative")

    batch_bytes = raw["batch_bytes"]
    if not isinstance(batch_bytes, int) or isinstance(batch_bytes, bool):
        batch_bytes = parse_byte_size(batch_bytes)
    if batch_bytes <= 0:
        raise ConfigError("batch_bytes must be greater than 0")
    if batch_bytes > MAX_BYTE_SIZE:
        raise ConfigError(f"batch_bytes too large: {batch_bytes}")

    output = str(raw["output"]).strip().lower()
    if output not in VALID_OUTPUTS:
        raise ConfigError(
            f"output must be one of {', '.join(VALID_OUTPUTS)}, got {raw['output']!r}"
        )

    http_jsonline = raw["http_jsonline"] or None
    if output == "http" and not http_jsonline:
        raise ConfigError("http.jsonline is required when output=http")

    http_timeout = _to_float("http_timeout", raw["http_timeout"])
    if http_timeout <= 0:
        raise ConfigError("http_timeout must be greater than 0")

    workers = _to_int("workers", raw["workers"])
    if workers < 1:
        raise ConfigError("workers must be at least 1")

    metrics_interval = _to_float("metrics_interval", raw["metrics_interval"])
    if metrics_interval < 0:
        raise ConfigError("metrics_interval must not be negative")

    seed = raw["seed"]
    if seed is not None and seed != "":
        seed = _to_int("seed", seed)
    else:
        seed = None

    log_level = str(raw["log_level"]).strip().upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ConfigError(f"invalid log_level: {raw['log_level']!r}")

    return Config(
        sleep_ms=sleep_ms,
        batch_bytes=batch_bytes,
        output=output,
        http_jsonline=http_jsonline,
        http_timeout=http_timeout,
        workers=workers,
        metrics_interval=metrics_interval,
        seed=seed,
        log_level=log_level,
    )


def load_config(argv: list[str] | None = None) -> Config:
    """Build Config from defaults <- YAML file <- env vars <- CLI args.

    Pass argv for testability; when None, argparse reads sys.argv.
    Raises ConfigError for anything invalid.
    """
    args = _build_parser().parse_args(argv)

    raw = {f.name: getattr(Config, f.name) for f in fields(Config)}

    config_path = args.config or os.environ.get("CONFIG_PATH")
    if config_path:
        raw.update(load_yaml(config_path))

    for name, env_var in _ENV_VARS.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw[name] = value

    for name in raw:
        value = getattr(args, name, None)
        if value is not None:
            raw[name] = value

    return _validate(raw)
