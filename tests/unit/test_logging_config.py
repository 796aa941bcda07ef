"""Tests for environment-driven logging configuration."""

import pytest

from keycloak_discovery.config.logging_config import (
    LogFormat,
    LoggingConfig,
    get_log_level_from_verbosity,
)


@pytest.fixture
def log_env(monkeypatch):
    for key in ("LOG_LEVEL", "LOG_VERBOSITY", "LOG_FORMAT", "ENABLE_SQL_LOGGING"):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestVerbosity:

    @pytest.mark.parametrize("verbosity,level", [
        ("quiet", "ERROR"),
        ("NORMAL", "INFO"),
        ("verbose", "INFO"),
        ("DEBUG", "DEBUG"),
        ("chatty", "INFO"),
    ])
    def test_level_from_verbosity(self, verbosity, level):
        assert get_log_level_from_verbosity(verbosity) == level

    def test_normal_keeps_libraries_quiet(self, log_env):
        config = LoggingConfig.build()

        assert config["root"]["level"] == "INFO"
        assert config["loggers"]["uvicorn.access"]["level"] == "ERROR"
        assert config["loggers"]["asyncpg"]["level"] == "WARNING"

    def test_verbose_lets_library_info_through(self, log_env):
        log_env.setenv("LOG_VERBOSITY", "VERBOSE")

        config = LoggingConfig.build()

        assert config["root"]["level"] == "INFO"
        assert config["loggers"]["uvicorn.access"]["level"] == "INFO"
        assert config["loggers"]["asyncpg"]["level"] == "INFO"

    def test_explicit_level_wins(self, log_env):
        log_env.setenv("LOG_VERBOSITY", "QUIET")
        log_env.setenv("LOG_LEVEL", "debug")

        config = LoggingConfig.build()

        assert config["root"]["level"] == "DEBUG"
        assert config["loggers"]["httpx"]["level"] == "DEBUG"


class TestFormat:

    def test_json_format(self, log_env):
        log_env.setenv("LOG_FORMAT", "json")

        assert LoggingConfig.build()["formatters"]["default"]["format"].startswith('{"time"')

    def test_unknown_format_falls_back_to_simple(self, log_env):
        log_env.setenv("LOG_FORMAT", "fancy")

        assert LoggingConfig.build()["formatters"]["default"]["format"] == LoggingConfig.FORMATS[LogFormat.SIMPLE]

    def test_sql_logging_leaves_asyncpg_alone(self, log_env):
        log_env.setenv("ENABLE_SQL_LOGGING", "true")

        assert "asyncpg" not in LoggingConfig.build()["loggers"]
