"""Keyed event registries."""

from .errors import EventRegistryError, SubscriberFailure, SubscriberInvocationError
from .event import CombinedHandler, Event, Subscription
from .property_map import PropertyNode, TypedPropertyEventRegistry
from .registry import KeyedEventRegistry
from .type_map import TypeEventRegistry
from .watch import UNSET, StateWatcher

__all__ = [
    "CombinedHandler",
    "Event",
    "EventRegistryError",
    "KeyedEventRegistry",
    "PropertyNode",
    "StateWatcher",
    "Subscription",
    "SubscriberFailure",
    "SubscriberInvocationError",
    "TypeEventRegistry",
    "TypedPropertyEventRegistry",
    "UNSET",
]
