"""Tests for log level resolution and request log context."""

import pytest
import structlog
from marketplace.utils.logging import bind_actor, clear_context, get_log_level


@pytest.fixture()
def no_env(monkeypatch):
    for name in ("LOG_LEVEL", "ENV", "ENVIRONMENT", "PROTEAN_ENV"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestGetLogLevel:
    def test_explicit_level_used_without_environment(self, no_env):
        assert get_log_level("INFO") == "INFO"
        assert get_log_level("ERROR") == "ERROR"

    def test_falls_back_to_info(self, no_env):
        assert get_log_level() == "INFO"

    def test_environment_overrides_explicit_level(self, no_env):
        no_env.setenv("PROTEAN_ENV", "test")
        assert get_log_level("INFO") == "WARNING"

        no_env.setenv("ENV", "Development")
        assert get_log_level("INFO") == "DEBUG"

    def test_unknown_environment_keeps_explicit_level(self, no_env):
        no_env.setenv("ENV", "qa")
        assert get_log_level("ERROR") == "ERROR"

    def test_log_level_variable_wins(self, no_env):
        no_env.setenv("PROTEAN_ENV", "production")
        no_env.setenv("LOG_LEVEL", "DEBUG")
        assert get_log_level("INFO") == "DEBUG"


class TestActorContext:
    def test_bind_and_clear(self):
        clear_context()
        bind_actor("ven-1", "vendor")
        assert structlog.contextvars.get_contextvars() == {"actor_id": "ven-1", "actor_role": "vendor"}

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}

    def test_missing_headers_bind_nothing(self):
        clear_context()
        bind_actor(None, None)
        assert structlog.contextvars.get_contextvars() == {}
