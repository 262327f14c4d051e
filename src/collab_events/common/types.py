"""Common types used across the event registries."""

from __future__ import annotations

from enum import Enum


class FailurePolicy(Enum):
    """How a combined handler reacts when one of its subscribers raises."""
    ISOLATE = "isolate"
    FAIL_FAST = "fail_fast"

    @classmethod
    def parse(cls, value: "FailurePolicy | str") -> "FailurePolicy":
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown failure policy: {value!r}") from None
