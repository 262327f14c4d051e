"""Event registry keyed by class, with handlers inherited from base classes."""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from collab_events.common.types import FailurePolicy
from collab_events.events.event import CombinedHandler, Subscription
from collab_events.events.registry import KeyedEventRegistry

S = TypeVar("S", bound=Callable[..., Any])


def _require_class(key: object) -> type:
    if not isinstance(key, type):
        raise TypeError(f"Type event keys must be classes, got {key!r}")
    return key


class TypeEventRegistry(KeyedEventRegistry[type, S]):
    """Map classes to subscribers.

    By default :meth:`get_handlers` also collects the handlers registered for
    every base class of the requested class, so a handler registered for
    ``Component`` runs for ``Light`` and ``Camera`` too. Handlers are combined
    in the order their keys were first registered.
    """

    def subscribe(self, key: type, subscriber: S) -> Subscription[S]:
        return super().subscribe(_require_class(key), subscriber)

    def unsubscribe(self, key: type, subscriber: S | Subscription[S]) -> bool:
        return super().unsubscribe(_require_class(key), subscriber)

    def get_handlers(
        self,
        key: type,
        policy: FailurePolicy | str | None = None,
        check_inheritance: bool = True,
    ) -> Optional[CombinedHandler]:
        """
        Get the combined handlers for a class.

        Args:
            key: class to get handlers for
            policy: failure policy override for the returned handler
            check_inheritance: also include handlers registered for base classes

        Returns:
            CombinedHandler, or None if no matching key has subscribers
        """
        if not check_inheritance:
            return super().get_handlers(key, policy)

        resolved = self._resolve_policy(policy)
        with self._lock:
            matches = [
                event.combined(resolved)
                for registered, event in self._events.items()
                if isinstance(key, type) and issubclass(key, registered)
            ]
        return CombinedHandler.combine(key, matches, resolved)


__all__ = ["TypeEventRegistry"]
