"""
Tests for the EventSub handler registry.
"""

from app.integrations.twitch.models import EventType
from app.integrations.twitch.registry import WILDCARD, HandlerRegistry


def handler_a(envelope):
    pass


def handler_b(envelope):
    pass


def test_register_and_lookup(registry):
    """Handlers are found under the key they were registered with."""
    registry.register("channel.follow", handler_a)

    assert registry.lookup("channel.follow") == frozenset({handler_a})
    assert registry.lookup(EventType.CHANNEL_FOLLOW) == frozenset({handler_a})
    assert registry.lookup("channel.subscribe") == frozenset()
    assert registry.lookup(WILDCARD) == frozenset()


def test_enum_and_string_keys_are_the_same(registry):
    """EventType members and their values address the same handlers."""
    registry.register(EventType.CHANNEL_SUBSCRIBE, handler_a)
    registry.register("channel.subscribe", handler_b)

    assert registry.lookup("channel.subscribe") == frozenset({handler_a, handler_b})
    assert registry.keys() == ["channel.subscribe"]


def test_unregister_removes_only_that_handler(registry):
    """The returned function removes exactly its own handler."""
    unregister_a = registry.register("channel.follow", handler_a)
    registry.register("channel.follow", handler_b)

    unregister_a()

    assert registry.lookup("channel.follow") == frozenset({handler_b})


def test_unregister_drops_empty_key(registry):
    """A key with no handlers left disappears from the registry."""
    unregister = registry.register(WILDCARD, handler_a)

    unregister()

    assert WILDCARD not in registry
    assert registry.keys() == []
    assert len(registry) == 0


def test_unregister_is_idempotent(registry):
    """Calling the unregister function twice is a no-op the second time."""
    unregister = registry.register("channel.follow", handler_a)
    unregister()
    registry.register("channel.follow", handler_a)

    unregister()

    assert registry.lookup("channel.follow") == frozenset({handler_a})


def test_lookup_returns_snapshot(registry):
    """Mutating the registry does not change a previous lookup result."""
    registry.register("channel.follow", handler_a)
    snapshot = registry.lookup("channel.follow")

    registry.register("channel.follow", handler_b)

    assert snapshot == frozenset({handler_a})
    assert len(registry) == 2


def test_on_alias_and_decorator(registry):
    """on() registers directly or as a decorator."""
    unregister = registry.on("channel.follow", handler_a)

    @registry.on(EventType.CHANNEL_CHAT_MESSAGE)
    async def chat_handler(envelope):
        pass

    assert registry.lookup("channel.follow") == frozenset({handler_a})
    assert registry.lookup("channel.chat.message") == frozenset({chat_handler})

    unregister()
    assert "channel.follow" not in registry


def test_registries_are_independent():
    """Handlers registered on one registry are invisible to another."""
    first = HandlerRegistry()
    second = HandlerRegistry()

    first.register("channel.follow", handler_a)

    assert second.lookup("channel.follow") == frozenset()


def test_clear(registry):
    """clear() removes every registration."""
    registry.register("channel.follow", handler_a)
    registry.register(WILDCARD, handler_b)

    registry.clear()

    assert len(registry) == 0
