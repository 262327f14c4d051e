"""Per-key subscriber lists and the combined callables built from them."""

from __future__ import annotations

from typing import Any, Callable, Generic, Hashable, Iterable, Iterator, Optional, TypeVar

from loguru import logger

from collab_events.common.types import FailurePolicy
from collab_events.events.errors import SubscriberFailure, SubscriberInvocationError

S = TypeVar("S", bound=Callable[..., Any])


def describe_subscriber(subscriber: Callable[..., Any]) -> str:
    """Return a short human readable name for logging."""
    name = getattr(subscriber, "__qualname__", None) or getattr(subscriber, "__name__", None)
    return name if name else repr(subscriber)


class Subscription(Generic[S]):
    """Handle for exactly one occurrence of a subscriber in one key's list."""

    __slots__ = ("key", "subscriber", "_owner", "_active")

    def __init__(self, key: Hashable, subscriber: S, owner: Any = None) -> None:
        self.key = key
        self.subscriber = subscriber
        self._owner = owner
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> bool:
        """Remove this subscription. Returns False if it was already removed."""
        if not self._active or self._owner is None:
            return False
        return self._owner.unsubscribe(self.key, self)

    def _deactivate(self) -> None:
        self._active = False

    def __repr__(self) -> str:
        state = "active" if self._active else "cancelled"
        return f"<Subscription {describe_subscriber(self.subscriber)} for {self.key!r} ({state})>"


class Event(Generic[S]):
    """Ordered, non-deduplicated list of subscribers for a single key."""

    def __init__(self, key: Hashable) -> None:
        self.key = key
        self._subscriptions: list[Subscription[S]] = []

    def add(self, subscriber: S, owner: Any = None) -> Subscription[S]:
        subscription = Subscription(self.key, subscriber, owner)
        self._subscriptions.append(subscription)
        return subscription

    def remove(self, subscriber: S) -> bool:
        """Remove the first occurrence of ``subscriber``."""
        for index, subscription in enumerate(self._subscriptions):
            if subscription.subscriber is subscriber or subscription.subscriber == subscriber:
                del self._subscriptions[index]
                subscription._deactivate()
                return True
        return False

    def discard(self, subscription: Subscription[S]) -> bool:
        """Remove exactly ``subscription``, leaving equal subscribers in place."""
        for index, existing in enumerate(self._subscriptions):
            if existing is subscription:
                del self._subscriptions[index]
                subscription._deactivate()
                return True
        return False

    def snapshot(self) -> tuple[S, ...]:
        return tuple(subscription.subscriber for subscription in self._subscriptions)

    def combined(self, policy: FailurePolicy = FailurePolicy.ISOLATE) -> Optional["CombinedHandler"]:
        """Return a combined handler over the current subscribers, or None if there are none."""
        subscribers = self.snapshot()
        if not subscribers:
            return None
        return CombinedHandler(self.key, subscribers, policy)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def __iter__(self) -> Iterator[S]:
        return iter(self.snapshot())

    def __contains__(self, subscriber: object) -> bool:
        return any(
            subscription.subscriber is subscriber or subscription.subscriber == subscriber
            for subscription in self._subscriptions
        )

    def __repr__(self) -> str:
        return f"<Event {self.key!r} subscribers={len(self._subscriptions)}>"


class CombinedHandler:
    """Single callable that invokes a captured tuple of subscribers in order.

    The subscriber tuple is fixed when the handler is built. Changes made to the
    registry afterwards, including by the subscribers themselves while the
    handler runs, are not visible to it.

    With ``FailurePolicy.ISOLATE`` every subscriber is attempted; failures are
    logged and re-raised together as :class:`SubscriberInvocationError` once all
    subscribers have run. With ``FailurePolicy.FAIL_FAST`` the first exception
    propagates and the remaining subscribers are skipped.
    """

    __slots__ = ("key", "policy", "_subscribers")

    def __init__(
        self,
        key: Hashable,
        subscribers: Iterable[Callable[..., Any]],
        policy: FailurePolicy = FailurePolicy.ISOLATE,
    ) -> None:
        self.key = key
        self.policy = FailurePolicy.parse(policy)
        self._subscribers = tuple(subscribers)

    @classmethod
    def combine(
        cls,
        key: Hashable,
        handlers: Iterable[Optional["CombinedHandler"]],
        policy: FailurePolicy | None = None,
    ) -> Optional["CombinedHandler"]:
        """Concatenate several handlers into one. Missing handlers are skipped."""
        present = [handler for handler in handlers if handler is not None]
        subscribers = [subscriber for handler in present for subscriber in handler.subscribers]
        if not subscribers:
            return None
        if policy is None:
            policy = present[0].policy
        return cls(key, subscribers, policy)

    @property
    def subscribers(self) -> tuple[Callable[..., Any], ...]:
        return self._subscribers

    def with_policy(self, policy: FailurePolicy | str) -> "CombinedHandler":
        return CombinedHandler(self.key, self._subscribers, FailurePolicy.parse(policy))

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self._dispatch(args, kwargs, stop_when_handled=False)

    def until_handled(self, *args: Any, **kwargs: Any) -> bool:
        """Invoke subscribers until one returns a truthy value.

        Returns:
            bool: True if a subscriber reported the event as handled
        """
        return self._dispatch(args, kwargs, stop_when_handled=True)

    def _dispatch(self, args: tuple, kwargs: dict, stop_when_handled: bool) -> bool:
        total = len(self._subscribers)
        failures: list[SubscriberFailure] = []
        handled = False

        for index, subscriber in enumerate(self._subscribers):
            if self.policy is FailurePolicy.FAIL_FAST:
                result = subscriber(*args, **kwargs)
            else:
                try:
                    result = subscriber(*args, **kwargs)
                except Exception as exc:
                    logger.opt(exception=exc).error(
                        "Subscriber {} failed for {!r} ({}/{})",
                        describe_subscriber(subscriber),
                        self.key,
                        index + 1,
                        total,
                    )
                    failures.append(SubscriberFailure(index, subscriber, exc))
                    continue

            if stop_when_handled and result:
                handled = True
                break

        if failures:
            raise SubscriberInvocationError(self.key, failures, total) from failures[0].exception
        return handled

    def __len__(self) -> int:
        return len(self._subscribers)

    def __iter__(self) -> Iterator[Callable[..., Any]]:
        return iter(self._subscribers)

    def __repr__(self) -> str:
        return (
            f"<CombinedHandler {self.key!r} subscribers={len(self._subscribers)} "
            f"policy={self.policy.value}>"
        )


__all__ = ["CombinedHandler", "Event", "Subscription", "describe_subscriber"]
