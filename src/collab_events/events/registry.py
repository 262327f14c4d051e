"""Keyed event registry: zero or more subscribers per key, one combined callable per key."""

from __future__ import annotations

import threading
from contextlib import nullcontext
from typing import Any, Callable, ContextManager, Dict, Generic, Hashable, Iterator, Optional, TypeVar

from loguru import logger

from collab_events.common.types import FailurePolicy
from collab_events.config.settings import EventSettings, get_settings
from collab_events.events.event import (
    CombinedHandler,
    Event,
    Subscription,
    describe_subscriber,
)

K = TypeVar("K", bound=Hashable)
S = TypeVar("S", bound=Callable[..., Any])


class KeyedEventRegistry(Generic[K, S]):
    """Map keys to ordered subscriber lists.

    Per-key storage is created on the first :meth:`subscribe` for that key and
    is kept, possibly empty, after its last subscriber is removed. Lookups
    (:meth:`get_handlers`, :meth:`has_subscribers`, ``in``) never create it.
    """

    def __init__(
        self,
        *,
        policy: FailurePolicy | str | None = None,
        thread_safe: bool | None = None,
        settings: EventSettings | None = None,
    ) -> None:
        if policy is None or thread_safe is None:
            settings = settings or get_settings()
            if policy is None:
                policy = settings.failure_policy
            if thread_safe is None:
                thread_safe = settings.thread_safe

        self._policy = FailurePolicy.parse(policy)
        self._thread_safe = bool(thread_safe)
        self._lock: ContextManager[Any] = threading.RLock() if self._thread_safe else nullcontext()
        self._events: Dict[K, Event[S]] = {}

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    @property
    def thread_safe(self) -> bool:
        return self._thread_safe

    def subscribe(self, key: K, subscriber: S) -> Subscription[S]:
        """Append ``subscriber`` to the list for ``key`` and return its handle."""
        with self._lock:
            subscription = self._get_or_create(key).add(subscriber, owner=self)
        logger.debug("Subscribed {} to {!r}", describe_subscriber(subscriber), key)
        return subscription

    def unsubscribe(self, key: K, subscriber: S | Subscription[S]) -> bool:
        """Remove one occurrence of ``subscriber`` (or exactly one handle) for ``key``.

        A missing key or subscriber is not an error; nothing changes and False
        is returned.
        """
        with self._lock:
            event = self._events.get(key)
            if event is None:
                removed = False
            elif isinstance(subscriber, Subscription):
                removed = event.discard(subscriber)
            else:
                removed = event.remove(subscriber)

        target = subscriber.subscriber if isinstance(subscriber, Subscription) else subscriber
        if removed:
            logger.debug("Unsubscribed {} from {!r}", describe_subscriber(target), key)
        else:
            logger.debug("No subscription of {} for {!r}; ignoring", describe_subscriber(target), key)
        return removed

    def get_handlers(
        self, key: K, policy: FailurePolicy | str | None = None
    ) -> Optional[CombinedHandler]:
        """Return one callable invoking the current subscribers of ``key``, or None if there are none."""
        with self._lock:
            event = self._events.get(key)
            if event is None:
                return None
            return event.combined(self._resolve_policy(policy))

    def has_subscribers(self, key: K) -> bool:
        return self.subscriber_count(key) > 0

    def subscriber_count(self, key: K) -> int:
        with self._lock:
            event = self._events.get(key)
            return len(event) if event is not None else 0

    def keys(self) -> list[K]:
        with self._lock:
            return list(self._events)

    def _get_or_create(self, key: K) -> Event[S]:
        event = self._events.get(key)
        if event is None:
            event = Event(key)
            self._events[key] = event
        return event

    def _resolve_policy(self, policy: FailurePolicy | str | None) -> FailurePolicy:
        return self._policy if policy is None else FailurePolicy.parse(policy)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def __iter__(self) -> Iterator[K]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} keys={len(self)} policy={self._policy.value} "
            f"thread_safe={self._thread_safe}>"
        )


__all__ = ["KeyedEventRegistry"]
