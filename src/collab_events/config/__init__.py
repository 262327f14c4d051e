"""Configuration helpers for the event registries."""

from .settings import EventSettings, get_settings

__all__ = ["EventSettings", "get_settings"]
