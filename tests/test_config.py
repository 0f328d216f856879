"""Tests for everything_mcp.core.config - Configuration management."""

import pytest

from everything_mcp.core.config import AppConfig, EverythingConfig, ServerConfig

_ENV_VARS = (
    "EVERYTHING_BASE_URL",
    "EVERYTHING_PORT",
    "EVERYTHING_USERNAME",
    "EVERYTHING_PASSWORD",
    "EVERYTHING_TIMEOUT",
    "EVERYTHING_DEBUG",
    "EVERYTHING_MCP_LOG_LEVEL",
    "EVERYTHING_MCP_LOG_FILE",
    "EVERYTHING_MCP_SLOW_CALL_MS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestAppConfigDefaults:
    def test_from_env_defaults(self):
        config = AppConfig.from_env()
        assert config.everything.base_url == "http://localhost"
        assert config.everything.port == 80
        assert config.everything.username == ""
        assert config.everything.has_auth is False
        assert config.everything.timeout == 10.0
        assert config.server.name == "everything-mcp"
        assert config.server.version == "1.0.0"
        assert config.server.debug is False
        assert config.server.log_level == "WARNING"
        assert config.server.log_file is None
        assert config.server.default_max_results == 100

    def test_model_defaults_match_env_defaults(self):
        assert AppConfig() == AppConfig.from_env()


class TestAppConfigEnvOverrides:
    def test_everything_overrides(self, monkeypatch):
        monkeypatch.setenv("EVERYTHING_BASE_URL", "http://192.168.1.20")
        monkeypatch.setenv("EVERYTHING_PORT", "8080")
        monkeypatch.setenv("EVERYTHING_USERNAME", "admin")
        monkeypatch.setenv("EVERYTHING_PASSWORD", "s3cret")
        monkeypatch.setenv("EVERYTHING_TIMEOUT", "2.5")
        config = AppConfig.from_env()
        assert config.everything.search_url() == "http://192.168.1.20:8080/"
        assert config.everything.has_auth is True
        assert config.everything.timeout == 2.5

    def test_invalid_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("EVERYTHING_PORT", "eighty")
        monkeypatch.setenv("EVERYTHING_TIMEOUT", "-1")
        monkeypatch.setenv("EVERYTHING_MCP_SLOW_CALL_MS", "soon")
        config = AppConfig.from_env()
        assert config.everything.port == 80
        assert config.everything.timeout == 10.0
        assert config.server.slow_call_warn_ms == 5000.0

    def test_debug_raises_log_level(self, monkeypatch):
        monkeypatch.setenv("EVERYTHING_DEBUG", "true")
        config = AppConfig.from_env()
        assert config.server.debug is True
        assert config.server.log_level == "DEBUG"

    def test_explicit_log_level_wins(self, monkeypatch):
        monkeypatch.setenv("EVERYTHING_DEBUG", "1")
        monkeypatch.setenv("EVERYTHING_MCP_LOG_LEVEL", "info")
        monkeypatch.setenv("EVERYTHING_MCP_LOG_FILE", "/tmp/everything-mcp.log")
        config = AppConfig.from_env()
        assert config.server.log_level == "INFO"
        assert config.server.log_file == "/tmp/everything-mcp.log"

    def test_unknown_log_level_ignored(self, monkeypatch):
        monkeypatch.setenv("EVERYTHING_MCP_LOG_LEVEL", "chatty")
        assert AppConfig.from_env().server.log_level == "WARNING"


class TestSearchUrl:
    @pytest.mark.parametrize(
        "base_url, port, expected",
        [
            ("http://localhost", 80, "http://localhost:80/"),
            ("localhost", 8080, "http://localhost:8080/"),
            ("https://everything.lan/", 443, "https://everything.lan:443/"),
            ("http://localhost:9000", 80, "http://localhost:9000/"),
            ("http://localhost", 0, "http://localhost/"),
        ],
    )
    def test_search_url(self, base_url, port, expected):
        assert EverythingConfig(base_url=base_url, port=port).search_url() == expected

    def test_invalid_base_url(self):
        with pytest.raises(ValueError):
            EverythingConfig(base_url="http://localhost:notaport").search_url()

    def test_auth_needs_both_halves(self):
        assert EverythingConfig(username="a").has_auth is False
        assert EverythingConfig(password="b").has_auth is False
        assert EverythingConfig(username="a", password="b").has_auth is True


def test_server_config_defaults():
    assert ServerConfig().slow_call_warn_ms == 5000.0
