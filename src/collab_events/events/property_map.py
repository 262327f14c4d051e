"""Event registry keyed by property name and owning class."""

from __future__ import annotations

import threading
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Any, Callable, ContextManager, Dict, Generic, Iterator, Optional, TypeVar

from collab_events.common.types import FailurePolicy
from collab_events.config.settings import EventSettings, get_settings
from collab_events.events.event import CombinedHandler, Subscription
from collab_events.events.type_map import TypeEventRegistry

S = TypeVar("S", bound=Callable[..., Any])


@dataclass(frozen=True)
class PropertyNode:
    """A property in a property tree. The root of a tree has no name and no parent."""

    name: str | None = None
    parent: "PropertyNode | None" = None

    @classmethod
    def from_path(cls, path: str) -> "PropertyNode":
        """Build the node for a dotted path such as ``transform.position.x``."""
        node = cls()
        for part in path.split("."):
            node = cls(part, node)
        return node

    @property
    def path(self) -> str:
        return ".".join(node.name for node in reversed(list(self.lineage())) if node.name)

    def lineage(self) -> Iterator["PropertyNode"]:
        """Yield this node and its ancestors, excluding the root."""
        node: PropertyNode | None = self
        while node is not None and node.parent is not None:
            yield node
            node = node.parent


class TypedPropertyEventRegistry(Generic[S]):
    """Map property names to :class:`TypeEventRegistry` instances."""

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
        self._maps: Dict[str, TypeEventRegistry[S]] = {}

    @property
    def policy(self) -> FailurePolicy:
        return self._policy

    def subscribe(self, key: type, name: str, subscriber: S) -> Subscription[S]:
        """Add a handler for a class and property name."""
        return self._get_or_create_type_map(name).subscribe(key, subscriber)

    def unsubscribe(self, key: type, name: str, subscriber: S | Subscription[S]) -> bool:
        """Remove a handler for a class and property name."""
        with self._lock:
            type_map = self._maps.get(name)
        if type_map is None:
            return False
        return type_map.unsubscribe(key, subscriber)

    def get_handlers(
        self,
        key: type,
        prop: str | PropertyNode,
        policy: FailurePolicy | str | None = None,
    ) -> Optional[CombinedHandler]:
        """
        Get the handlers for a class and property.

        For a nested property such as ``a.b.c`` the handlers registered for
        ``c``, ``b`` and ``a`` are combined, in that order. Unnamed nodes are
        skipped.
        """
        resolved = self._policy if policy is None else FailurePolicy.parse(policy)
        if isinstance(prop, str):
            with self._lock:
                type_map = self._maps.get(prop)
            return type_map.get_handlers(key, resolved) if type_map is not None else None

        with self._lock:
            type_maps = [self._maps.get(node.name) for node in prop.lineage() if node.name]
        collected = [
            type_map.get_handlers(key, resolved) for type_map in type_maps if type_map is not None
        ]
        return CombinedHandler.combine((key, prop.path), collected, resolved)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._maps)

    def _get_or_create_type_map(self, name: str) -> TypeEventRegistry[S]:
        with self._lock:
            type_map = self._maps.get(name)
            if type_map is None:
                type_map = TypeEventRegistry(policy=self._policy, thread_safe=self._thread_safe)
                self._maps[name] = type_map
            return type_map

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._maps

    def __len__(self) -> int:
        with self._lock:
            return len(self._maps)


__all__ = ["PropertyNode", "TypedPropertyEventRegistry"]
