"""Fire registry handlers when a watched value changes."""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Hashable, TypeVar

from loguru import logger

from collab_events.events.registry import KeyedEventRegistry

K = TypeVar("K", bound=Hashable)

ChangeHandler = Callable[[Any, Any, Any], None]


class _Unset:
    """Marker for a key that has never been set."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class StateWatcher(Generic[K]):
    """Remember the last value per key and notify subscribers on change.

    Subscribers are called as ``handler(key, previous, current)``. ``previous``
    is :data:`UNSET` the first time a key is set, so a first ``set(key, None)``
    is distinguishable from a change away from None.
    """

    def __init__(self, registry: KeyedEventRegistry[K, ChangeHandler] | None = None) -> None:
        self._registry = registry if registry is not None else KeyedEventRegistry()
        self._values: Dict[K, Any] = {}

    @property
    def registry(self) -> KeyedEventRegistry[K, ChangeHandler]:
        return self._registry

    def get(self, key: K, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: K, value: Any) -> bool:
        """Store ``value`` for ``key``. Returns True if the value changed."""
        previous = self._values.get(key, UNSET)
        if previous is not UNSET and previous == value:
            return False

        self._values[key] = value
        handlers = self._registry.get_handlers(key)
        if handlers is None:
            logger.debug("State {!r} changed to {!r} with no subscribers", key, value)
            return True

        logger.debug("State {!r} changed {!r} -> {!r}; notifying {} subscribers", key, previous, value, len(handlers))
        handlers(key, previous, value)
        return True


__all__ = ["ChangeHandler", "StateWatcher", "UNSET"]
