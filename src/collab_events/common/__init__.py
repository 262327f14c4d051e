"""Common types and utilities."""

from .types import FailurePolicy

__all__ = ["FailurePolicy"]
