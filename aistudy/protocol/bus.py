import asyncio
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, DefaultDict, List

from .events import EventTypes

# Every handler receives the event payload and is awaited in turn.
EventHandler = Callable[[Any], Awaitable[None]]


class EventBus:
    """
    In-process publish/subscribe channel between the chat core and the
    front-end.

    Delivery is sequential in subscription order, so a STATE_CHANGED
    snapshot is always rendered before the next one. A handler that raises
    is logged and skipped; the emitter never sees the error.
    """

    def __init__(self):
        self._lock = asyncio.Lock()
        self._handlers: DefaultDict[EventTypes, List[EventHandler]] = defaultdict(list)
        self._logger = logging.getLogger("EventBus")

    async def subscribe(self, event_type: EventTypes, handler: EventHandler) -> None:
        async with self._lock:
            self._handlers[event_type].append(handler)

    async def unsubscribe(self, event_type: EventTypes, handler: EventHandler) -> None:
        async with self._lock:
            if handler in self._handlers.get(event_type, ()):
                self._handlers[event_type].remove(handler)

    def subscriber_count(self, event_type: EventTypes) -> int:
        return len(self._handlers.get(event_type, ()))

    async def emit(self, event_type: EventTypes, data: Any = None) -> int:
        """
        Deliver ``data`` to the handlers registered for ``event_type``.

        Returns the number of handlers that completed without raising.
        """
        async with self._lock:
            pending = list(self._handlers.get(event_type, ()))

        delivered = 0
        for handler in pending:
            # A previous handler may have unsubscribed this one.
            if handler not in self._handlers.get(event_type, ()):
                continue
            try:
                await handler(data)
            except Exception:
                self._logger.exception("Handler for %s failed", event_type.value)
                continue
            delivered += 1
        return delivered
