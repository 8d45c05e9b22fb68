"""Tests for configuration module."""

from __future__ import annotations

from unittest.mock import patch

from neurelay.config import Config, _parse_int


class TestParseInt:
    def test_valid(self):
        assert _parse_int("8080", 3000) == (8080, None)

    def test_missing(self):
        assert _parse_int(None, 3000) == (3000, None)

    def test_blank(self):
        assert _parse_int("  ", 3000) == (3000, None)

    def test_invalid(self):
        assert _parse_int("abc", 3000) == (3000, "abc")


class TestConfig:
    def test_defaults(self):
        cfg = Config()
        assert cfg.port == 3000
        assert cfg.host == "0.0.0.0"
        assert cfg.history_size == 100
        assert cfg.replay_delay_ms == 100
        assert cfg.replay_delay == 0.1
        assert cfg.validate() == []

    @patch.dict("os.environ", {}, clear=True)
    def test_from_env_defaults(self):
        cfg = Config.from_env()
        assert cfg.port == 3000
        assert cfg.welcome_message == "Connected to Neural Terminal"
        assert cfg.log_level == "INFO"

    @patch.dict(
        "os.environ",
        {
            "PORT": "8080",
            "HOST": "127.0.0.1",
            "HISTORY_SIZE": "10",
            "REPLAY_DELAY_MS": "0",
            "WELCOME_MESSAGE": "hi",
            "LOG_LEVEL": "debug",
        },
        clear=True,
    )
    def test_from_env(self):
        cfg = Config.from_env()
        assert cfg.port == 8080
        assert cfg.host == "127.0.0.1"
        assert cfg.history_size == 10
        assert cfg.replay_delay_ms == 0
        assert cfg.welcome_message == "hi"
        assert cfg.log_level == "DEBUG"
        assert cfg.validate() == []

    @patch.dict("os.environ", {"PORT": "eighty"}, clear=True)
    def test_from_env_invalid_port(self):
        cfg = Config.from_env()
        assert cfg.port == 3000
        assert any("PORT must be an integer" in e for e in cfg.validate())

    @patch.dict("os.environ", {"PORT": "8080"}, clear=True)
    def test_from_args_overrides_env(self):
        cfg = Config.from_args(port=9000, history_size=5)
        assert cfg.port == 9000
        assert cfg.history_size == 5

    @patch.dict("os.environ", {"PORT": "8080"}, clear=True)
    def test_from_args_falls_back_to_env(self):
        cfg = Config.from_args()
        assert cfg.port == 8080

    def test_validate_port_range(self):
        assert any("PORT" in e for e in Config(port=0).validate())
        assert any("PORT" in e for e in Config(port=70000).validate())

    def test_validate_history_size(self):
        assert any("HISTORY_SIZE" in e for e in Config(history_size=0).validate())

    def test_validate_replay_delay(self):
        assert any("REPLAY_DELAY_MS" in e for e in Config(replay_delay_ms=-1).validate())

    def test_validate_log_level(self):
        assert any("LOG_LEVEL" in e for e in Config(log_level="LOUD").validate())
