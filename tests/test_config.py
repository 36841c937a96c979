"""Tests for byte-size parsing and configuration loading."""

import pytest

from loadgen.config import Config, load_config, load_yaml, parse_byte_size, MAX_BYTE_SIZE
from loadgen.errors import ConfigError


class TestParseByteSize:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("64k", 65536),
            ("1m", 1048576),
            ("2g", 2147483648),
            ("100", 100),
            ("64K", 65536),
            ("  1m  ", 1048576),
            ("0", 0),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_byte_size(text) == expected

    @pytest.mark.parametrize(
        "text",
        ["", "   ", "abc", "k", "12x", "1.5k", "-5", "+5", "10 k", "kk", "1kb"],
    )
    def test_invalid(self, text):
        with pytest.raises(ConfigError):
            parse_byte_size(text)

    def test_overflow_rejected(self):
        with pytest.raises(ConfigError, match="too large"):
            parse_byte_size("8589934592g")  # 2**63
        with pytest.raises(ConfigError, match="too large"):
            parse_byte_size("99999999999999999999")

    def test_largest_value_accepted(self):
        assert parse_byte_size(str(MAX_BYTE_SIZE)) == MAX_BYTE_SIZE

    def test_idempotent(self):
        assert parse_byte_size("64k") == parse_byte_size("64k")


class TestConfigDefaults:
    def test_defaults(self):
        cfg = Config()
        assert cfg.sleep_ms == 0
        assert cfg.batch_bytes == 65536
        assert cfg.output == "stdout"
        assert cfg.http_jsonline is None
        assert cfg.http_timeout == 10.0
        assert cfg.workers == 1
        assert cfg.metrics_interval == 0.0
        assert cfg.seed is None
        assert cfg.log_level == "INFO"

    def test_frozen(self):
        cfg = Config()
        with pytest.raises(AttributeError):
            cfg.batch_bytes = 10

    def test_load_with_no_args_matches_defaults(self):
        assert load_config([]) == Config()


class TestLoadConfigCLI:
    def test_underscore_flags(self):
        cfg = load_config(["--sleep_ms", "250", "--batch_bytes", "1m"])
        assert cfg.sleep_ms == 250
        assert cfg.batch_bytes == 1048576

    def test_dash_aliases(self):
        cfg = load_config([
            "--sleep-ms", "5",
            "--batch-bytes", "2k",
            "--output", "http",
            "--http-jsonline", "http://localhost:9200/_bulk",
        ])
        assert cfg.sleep_ms == 5
        assert cfg.batch_bytes == 2048
        assert cfg.output == "http"
        assert cfg.http_jsonline == "http://localhost:9200/_bulk"

    def test_dotted_endpoint_flag(self):
        cfg = load_config(["--output", "http", "--http.jsonline", "http://sink:8080/in"])
        assert cfg.http_jsonline == "http://sink:8080/in"

    def test_extra_options(self):
        cfg = load_config([
            "--workers", "4",
            "--metrics-interval", "2.5",
            "--seed", "42",
            "--http-timeout", "3",
            "--log-level", "debug",
        ])
        assert cfg.workers == 4
        assert cfg.metrics_interval == 2.5
        assert cfg.seed == 42
        assert cfg.http_timeout == 3.0
        assert cfg.log_level == "DEBUG"

    def test_unknown_output_rejected_by_argparse(self):
        with pytest.raises(SystemExit):
            load_config(["--output", "kafka"])


class TestLoadConfigEnv:
    def test_env_values(self, monkeypatch):
        monkeypatch.setenv("SLEEP_MS", "100")
        monkeypatch.setenv("BATCH_BYTES", "4k")
        monkeypatch.setenv("OUTPUT", "HTTP")
        monkeypatch.setenv("HTTP_JSONLINE", "http://collector/ingest")
        monkeypatch.setenv("WORKERS", "2")

        cfg = load_config([])
        assert cfg.sleep_ms == 100
        assert cfg.batch_bytes == 4096
        assert cfg.output == "http"
        assert cfg.http_jsonline == "http://collector/ingest"
        assert cfg.workers == 2

    def test_cli_overrides_env(self, monkeypatch):
        monkeypatch.setenv("BATCH_BYTES", "4k")
        cfg = load_config(["--batch-bytes", "8k"])
        assert cfg.batch_bytes == 8192


class TestLoadConfigYAML:
    def test_yaml_values(self, tmp_path):
        path = tmp_path / "loadgen.yml"
        path.write_text("sleep_ms: 20\nbatch_bytes: 16k\nworkers: 3\n")
        cfg = load_config(["--config", str(path)])
        assert cfg.sleep_ms == 20
        assert cfg.batch_bytes == 16384
        assert cfg.workers == 3

    def test_yaml_integer_budget(self, tmp_path):
        path = tmp_path / "loadgen.yml"
        path.write_text("batch_bytes: 1000\n")
        assert load_config(["--config", str(path)]).batch_bytes == 1000

    def test_config_path_env(self, tmp_path, monkeypatch):
        path = tmp_path / "loadgen.yml"
        path.write_text("sleep_ms: 7\n")
        monkeypatch.setenv("CONFIG_PATH", str(path))
        assert load_config([]).sleep_ms == 7

    def test_precedence_yaml_env_cli(self, tmp_path, monkeypatch):
        path = tmp_path / "loadgen.yml"
        path.write_text("sleep_ms: 1\nbatch_bytes: 1k\nworkers: 5\n")
        monkeypatch.setenv("SLEEP_MS", "2")
        monkeypatch.setenv("BATCH_BYTES", "2k")
        cfg = load_config(["--config", str(path), "--batch-bytes", "3k"])
        assert cfg.workers == 5
        assert cfg.sleep_ms == 2
        assert cfg.batch_bytes == 3072

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "loadgen.yml"
        path.write_text("sleep_ms: 3\nfoo: bar\n")
        assert load_yaml(str(path)) == {"sleep_ms": 3}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "loadgen.yml"
        path.write_text("")
        assert load_yaml(str(path)) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read"):
            load_config(["--config", str(tmp_path / "nope.yml")])

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("sleep_ms: [1, 2\n")
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config(["--config", str(path)])

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(["--config", str(path)])

    @pytest.mark.parametrize(
        "content, field",
        [
            ("sleep_ms: 1.9\n", "sleep_ms"),
            ("workers: 2.5\n", "workers"),
            ("seed: 3.7\n", "seed"),
            ("workers: 2.0\n", "workers"),
        ],
    )
    def test_yaml_float_rejected_for_integer_field(self, tmp_path, content, field):
        path = tmp_path / "loadgen.yml"
        path.write_text(content)
        with pytest.raises(ConfigError, match=f"{field} must be an integer"):
            load_config(["--config", str(path)])

    def test_yaml_float_budget_rejected(self, tmp_path):
        path = tmp_path / "loadgen.yml"
        path.write_text("batch_bytes: 1.5\n")
        with pytest.raises(ConfigError, match="batch_bytes"):
            load_config(["--config", str(path)])


class TestValidation:
    def test_zero_budget(self):
        with pytest.raises(ConfigError, match="greater than 0"):
            load_config(["--batch-bytes", "0"])

    def test_zero_budget_with_suffix(self):
        with pytest.raises(ConfigError, match="greater than 0"):
            load_config(["--batch-bytes", "0k"])

    def test_invalid_budget(self):
        with pytest.raises(ConfigError, match="invalid number"):
            load_config(["--batch-bytes", "lots"])

    def test_http_requires_endpoint(self):
        with pytest.raises(ConfigError, match="http.jsonline is required"):
            load_config(["--output", "http"])

    def test_endpoint_ignored_for_stdout(self):
        cfg = load_config(["--http-jsonline", "http://unused/"])
        assert cfg.output == "stdout"

    def test_negative_sleep(self):
        with pytest.raises(ConfigError):
            load_config(["--sleep-ms", "-1"])

    def test_non_integer_sleep(self):
        with pytest.raises(ConfigError, match="integer"):
            load_config(["--sleep-ms", "fast"])

    def test_zero_workers(self):
        with pytest.raises(ConfigError, match="workers"):
            load_config(["--workers", "0"])

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigError, match="http_timeout"):
            load_config(["--http-timeout", "0"])

    def test_negative_metrics_interval(self):
        with pytest.raises(ConfigError, match="metrics_interval"):
            load_config(["--metrics-interval", "-1"])

    def test_invalid_output_from_env(self, monkeypatch):
        monkeypatch.setenv("OUTPUT", "tcp")
        with pytest.raises(ConfigError, match="output must be one of"):
            load_config([])

    def test_invalid_log_level(self):
        with pytest.raises(ConfigError, match="log_level"):
            load_config(["--log-level", "chatty"])
