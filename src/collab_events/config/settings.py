"""Runtime configuration loaded from env variables or a .env file."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from collab_events.common.types import FailurePolicy


class EventSettings(BaseSettings):
    """Defaults applied to registries that are not configured explicitly."""

    # Behaviour of combined handlers when a subscriber raises
    failure_policy: FailurePolicy = Field(FailurePolicy.ISOLATE, alias="EVENTS_FAILURE_POLICY")

    # Guard every registry operation with one lock
    thread_safe: bool = Field(False, alias="EVENTS_THREAD_SAFE")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_path: Path | None = Field(None, alias="LOG_PATH")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("failure_policy", mode="before")
    @classmethod
    def _normalise_failure_policy(cls, value):
        return FailurePolicy.parse(value)

    @field_validator("log_path", mode="before")
    @classmethod
    def _empty_log_path_is_unset(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def get_settings(**overrides) -> EventSettings:
    """
    Return a settings instance.

    Args:
        **overrides: field values that take precedence over the environment

    Returns:
        EventSettings instance
    """
    return EventSettings(**overrides)


__all__ = ["EventSettings", "get_settings"]
