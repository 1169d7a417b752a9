"""Unit tests for WatchRegistry."""

import pytest

from namewatch.domain.watch.model.registry import Subscription, WatchEntry, WatchRegistry


def cb_a(name, context):
    pass


def cb_b(name, context):
    pass


@pytest.fixture
def registry() -> WatchRegistry:
    return WatchRegistry()


class TestAddCallback:
    """Tests for WatchRegistry.add_callback."""

    def test_first_callback_creates_entry(self, registry: WatchRegistry):
        """The first registration for a name reports creation."""
        assert registry.add_callback("org.foo", cb_a, "ctx") is True

        entry = registry.find("org.foo")
        assert entry is not None
        assert entry.name == "org.foo"
        assert len(entry) == 1

    def test_second_callback_shares_entry(self, registry: WatchRegistry):
        """Later registrations append to the existing entry."""
        registry.add_callback("org.foo", cb_a, "ctx")

        assert registry.add_callback("org.foo", cb_b, "ctx") is False
        assert len(registry) == 1
        assert [s.callback for s in registry.subscriptions("org.foo")] == [cb_a, cb_b]

    def test_same_function_different_context_is_independent(self, registry: WatchRegistry):
        """One function with two contexts gives two subscriptions."""
        ctx1, ctx2 = object(), object()
        registry.add_callback("org.foo", cb_a, ctx1)
        registry.add_callback("org.foo", cb_a, ctx2)

        subs = registry.subscriptions("org.foo")
        assert [s.context for s in subs] == [ctx1, ctx2]

    def test_duplicate_is_ignored(self, registry: WatchRegistry):
        """The same (callback, context) is stored once."""
        ctx = object()
        registry.add_callback("org.foo", cb_a, ctx)

        assert registry.add_callback("org.foo", cb_a, ctx) is False
        assert len(registry.subscriptions("org.foo")) == 1

    def test_context_compared_by_identity(self, registry: WatchRegistry):
        """Equal but distinct contexts are different registrations."""
        registry.add_callback("org.foo", cb_a, [])
        registry.add_callback("org.foo", cb_a, [])

        assert len(registry.subscriptions("org.foo")) == 2

    def test_bound_methods_of_same_object_match(self, registry: WatchRegistry):
        """A bound method re-fetched from its object is the same callback."""

        class Player:
            def gone(self, name, context):
                pass

        player = Player()
        registry.add_callback("org.foo", player.gone, None)

        assert registry.add_callback("org.foo", player.gone, None) is False
        assert len(registry.subscriptions("org.foo")) == 1

    def test_insertion_order_of_names(self, registry: WatchRegistry):
        """Names iterate in the order they were first watched."""
        for name in ["org.c", "org.a", "org.b"]:
            registry.add_callback(name, cb_a, None)

        assert registry.names() == ["org.c", "org.a", "org.b"]
        assert list(registry) == ["org.c", "org.a", "org.b"]

    def test_memory_error_leaves_registry_unchanged(
        self, registry: WatchRegistry, monkeypatch: pytest.MonkeyPatch
    ):
        """A failed allocation adds nothing."""
        registry.add_callback("org.foo", cb_a, None)

        def fail(*args, **kwargs):
            raise MemoryError

        monkeypatch.setattr(
            "namewatch.domain.watch.model.registry.Subscription", fail
        )

        with pytest.raises(MemoryError):
            registry.add_callback("org.bar", cb_a, None)
        with pytest.raises(MemoryError):
            registry.add_callback("org.foo", cb_b, None)

        assert registry.names() == ["org.foo"]
        assert len(registry.subscriptions("org.foo")) == 1


class TestFind:
    """Tests for WatchRegistry.find and find_callback."""

    def test_find_unknown_name(self, registry: WatchRegistry):
        assert registry.find("org.none") is None

    def test_find_is_exact(self, registry: WatchRegistry):
        """No prefix or wildcard matching."""
        registry.add_callback("org.foo", cb_a, None)

        assert registry.find("org") is None
        assert registry.find("org.foo.bar") is None
        assert registry.find("org.*") is None

    def test_find_callback(self, registry: WatchRegistry):
        ctx = object()
        registry.add_callback("org.foo", cb_a, ctx)
        entry = registry.find("org.foo")
        assert entry is not None

        sub = registry.find_callback(entry, cb_a, ctx)
        assert isinstance(sub, Subscription)
        assert sub.name == "org.foo"
        assert registry.find_callback(entry, cb_a, object()) is None
        assert registry.find_callback(entry, cb_b, ctx) is None


class TestRemove:
    """Tests for WatchRegistry.remove_callback and remove_entry."""

    def test_remove_non_last_keeps_entry(self, registry: WatchRegistry):
        registry.add_callback("org.foo", cb_a, None)
        registry.add_callback("org.foo", cb_b, None)

        registry.remove_callback("org.foo", cb_a, None)

        assert "org.foo" in registry
        assert [s.callback for s in registry.subscriptions("org.foo")] == [cb_b]

    def test_remove_last_drops_entry(self, registry: WatchRegistry):
        registry.add_callback("org.foo", cb_a, None)

        registry.remove_callback("org.foo", cb_a, None)

        assert "org.foo" not in registry
        assert len(registry) == 0

    def test_remove_unknown_name_is_noop(self, registry: WatchRegistry):
        registry.remove_callback("org.none", cb_a, None)
        assert len(registry) == 0

    def test_remove_unknown_callback_is_noop(self, registry: WatchRegistry):
        registry.add_callback("org.foo", cb_a, "ctx")

        registry.remove_callback("org.foo", cb_b, "ctx")
        registry.remove_callback("org.foo", cb_a, object())

        assert len(registry.subscriptions("org.foo")) == 1

    def test_readding_after_last_removal_creates_entry_again(self, registry: WatchRegistry):
        registry.add_callback("org.foo", cb_a, None)
        registry.remove_callback("org.foo", cb_a, None)

        assert registry.add_callback("org.foo", cb_a, None) is True

    def test_remove_entry_drops_all_callbacks(self, registry: WatchRegistry):
        registry.add_callback("org.foo", cb_a, None)
        registry.add_callback("org.foo", cb_b, None)
        entry = registry.find("org.foo")
        assert entry is not None

        registry.remove_entry(entry)

        assert registry.find("org.foo") is None

    def test_remove_entry_ignores_stale_entry(self, registry: WatchRegistry):
        """An entry that was already replaced is not removed twice."""
        registry.add_callback("org.foo", cb_a, None)
        old = registry.find("org.foo")
        assert old is not None
        registry.remove_callback("org.foo", cb_a, None)
        registry.add_callback("org.foo", cb_b, None)

        registry.remove_entry(old)

        assert [s.callback for s in registry.subscriptions("org.foo")] == [cb_b]

    def test_remove_entry_not_in_registry(self, registry: WatchRegistry):
        registry.remove_entry(WatchEntry(name="org.ghost"))
        assert len(registry) == 0
