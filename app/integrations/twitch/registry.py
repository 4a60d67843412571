"""
Registry of EventSub notification handlers.
"""

from typing import Any, Awaitable, Callable, Dict, FrozenSet, List, Optional, Set, Union

from loguru import logger

from .models import EventType, NotificationEnvelope

WILDCARD = "*"

EventHandler = Callable[[NotificationEnvelope], Union[Awaitable[Any], Any]]
HandlerKey = Union[EventType, str]


def _normalize_key(key: HandlerKey) -> str:
    if isinstance(key, EventType):
        return key.value
    return key


class HandlerRegistry:
    """
    Maps event types (or the "*" wildcard) to the handlers subscribed to them.

    One registry is created per application instance and handed to the
    webhook dispatcher.
    """

    def __init__(self):
        self._handlers: Dict[str, Set[EventHandler]] = {}

    def register(self, key: HandlerKey, handler: EventHandler) -> Callable[[], None]:
        """
        Register a handler for an event type or for every event ("*").

        Args:
            key: EventType, raw subscription type string, or WILDCARD
            handler: Sync or async callable receiving the NotificationEnvelope

        Returns:
            A function that unregisters this handler. Calling it more than
            once is harmless.
        """
        name = _normalize_key(key)
        handlers = self._handlers.setdefault(name, set())
        handlers.add(handler)
        logger.info(f"Registered handler for event type: {name}")

        removed = False

        def unregister() -> None:
            nonlocal removed
            current = self._handlers.get(name)
            if removed or current is None or handler not in current:
                return
            removed = True
            current.discard(handler)
            if not current:
                del self._handlers[name]
            logger.info(f"Unregistered handler for event type: {name}")

        return unregister

    def on(self, key: HandlerKey, handler: Optional[EventHandler] = None):
        """
        Alias of register that also works as a decorator.

            @registry.on(EventType.CHANNEL_FOLLOW)
            async def greet(envelope): ...
        """
        if handler is not None:
            return self.register(key, handler)

        def decorator(fn: EventHandler) -> EventHandler:
            self.register(key, fn)
            return fn

        return decorator

    def lookup(self, key: HandlerKey) -> FrozenSet[EventHandler]:
        """Return a snapshot of the handlers registered under key."""
        return frozenset(self._handlers.get(_normalize_key(key), ()))

    def keys(self) -> List[str]:
        return list(self._handlers)

    def clear(self) -> None:
        self._handlers.clear()

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self._handlers.values())

    def __contains__(self, key: HandlerKey) -> bool:
        return _normalize_key(key) in self._handlers
