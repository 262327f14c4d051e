"""Errors raised while dispatching keyed events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Hashable, Sequence


class EventRegistryError(Exception):
    """Base class for event registry errors."""
    pass


@dataclass(frozen=True)
class SubscriberFailure:
    """One subscriber that raised during a combined invocation."""

    index: int
    subscriber: Callable[..., Any]
    exception: BaseException


class SubscriberInvocationError(EventRegistryError):
    """Raised after an isolated invocation in which one or more subscribers failed."""

    def __init__(self, key: Hashable, failures: Sequence[SubscriberFailure], total: int) -> None:
        self.key = key
        self.failures = tuple(failures)
        self.total = total
        first = self.failures[0].exception if self.failures else None
        super().__init__(
            f"{len(self.failures)} of {total} subscribers failed for {key!r}"
            + (f": {first!r}" if first is not None else "")
        )

    @property
    def exceptions(self) -> tuple[BaseException, ...]:
        return tuple(failure.exception for failure in self.failures)


__all__ = ["EventRegistryError", "SubscriberFailure", "SubscriberInvocationError"]
