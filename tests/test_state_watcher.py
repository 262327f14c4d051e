"""Unit tests for the state watcher."""

from collab_events.common.types import FailurePolicy
from collab_events.events import UNSET, KeyedEventRegistry, StateWatcher


def make_watcher():
    return StateWatcher(KeyedEventRegistry(policy=FailurePolicy.ISOLATE, thread_safe=False))


def test_change_notifies_subscribers():
    """Test each change fires handlers with the previous and current value."""
    watcher = make_watcher()
    seen = []
    watcher.registry.subscribe("connected", lambda key, old, new: seen.append((key, old, new)))

    assert watcher.set("connected", True) is True
    assert watcher.set("connected", False) is True

    assert seen == [("connected", UNSET, True), ("connected", True, False)]
    assert watcher.get("connected") is False


def test_first_set_to_none_is_distinguishable():
    """Test a first set to None reports UNSET rather than None as previous."""
    watcher = make_watcher()
    seen = []
    watcher.registry.subscribe("selection", lambda key, old, new: seen.append((old, new)))

    assert watcher.set("selection", None) is True
    assert watcher.set("selection", None) is False
    assert watcher.set("selection", "cube") is True

    assert seen == [(UNSET, None), (None, "cube")]
    assert seen[0][0] is UNSET
    assert not UNSET
    assert repr(UNSET) == "UNSET"


def test_unchanged_value_does_not_notify():
    """Test setting the same value again fires nothing."""
    watcher = make_watcher()
    seen = []
    watcher.set("connected", True)
    watcher.registry.subscribe("connected", lambda *args: seen.append(args))

    assert watcher.set("connected", True) is False
    assert seen == []


def test_change_without_subscribers_leaves_registry_empty():
    """Test changes with no subscribers do not create registry entries."""
    watcher = make_watcher()

    assert watcher.set("connected", True) is True
    assert watcher.get("missing", "default") == "default"
    assert len(watcher.registry) == 0


def test_default_registry_is_created():
    """Test a watcher builds its own registry when none is given."""
    watcher = StateWatcher()

    assert isinstance(watcher.registry, KeyedEventRegistry)
