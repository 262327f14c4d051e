"""Tests for environment driven settings and logging setup."""

import sys

import pytest
from loguru import logger

from collab_events.common.types import FailurePolicy
from collab_events.config import EventSettings, get_settings
from collab_events.core.logging import configure_logging
from collab_events.events import KeyedEventRegistry


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ("EVENTS_FAILURE_POLICY", "EVENTS_THREAD_SAFE", "LOG_LEVEL", "LOG_PATH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults():
    """Test default settings values."""
    settings = get_settings()

    assert settings.failure_policy is FailurePolicy.ISOLATE
    assert settings.thread_safe is False
    assert settings.log_level == "INFO"
    assert settings.log_path is None


def test_environment_overrides(monkeypatch):
    """Test environment variables override the defaults."""
    monkeypatch.setenv("EVENTS_FAILURE_POLICY", "Fail-Fast")
    monkeypatch.setenv("EVENTS_THREAD_SAFE", "true")
    monkeypatch.setenv("LOG_PATH", "")

    settings = get_settings()

    assert settings.failure_policy is FailurePolicy.FAIL_FAST
    assert settings.thread_safe is True
    assert settings.log_path is None


def test_dotenv_file_is_read(tmp_path):
    """Test settings are read from a .env file."""
    (tmp_path / ".env").write_text("EVENTS_FAILURE_POLICY=fail_fast\n", encoding="utf-8")

    assert get_settings().failure_policy is FailurePolicy.FAIL_FAST


def test_unknown_policy_is_rejected(monkeypatch):
    """Test an unknown failure policy fails validation."""
    monkeypatch.setenv("EVENTS_FAILURE_POLICY", "ignore")

    with pytest.raises(ValueError):
        get_settings()


def test_registry_reads_environment(monkeypatch):
    """Test registries pick up environment settings."""
    monkeypatch.setenv("EVENTS_FAILURE_POLICY", "fail_fast")

    registry = KeyedEventRegistry()

    assert registry.policy is FailurePolicy.FAIL_FAST
    assert registry.thread_safe is False


def test_explicit_arguments_win_over_settings(monkeypatch):
    """Test explicit registry arguments take precedence over settings."""
    monkeypatch.setenv("EVENTS_FAILURE_POLICY", "fail_fast")

    registry = KeyedEventRegistry(policy=FailurePolicy.ISOLATE, thread_safe=True)

    assert registry.policy is FailurePolicy.ISOLATE
    assert registry.thread_safe is True


def test_configure_logging_writes_file(tmp_path):
    """Test logging setup writes to the configured file."""
    log_path = tmp_path / "logs" / "events.log"
    settings = EventSettings(log_level="debug", log_path=log_path)

    try:
        configure_logging(settings)
        logger.debug("registry ready")
    finally:
        logger.remove()
        logger.add(sys.stderr)

    assert "registry ready" in log_path.read_text(encoding="utf-8")
