"""
Event bus for RUNFORGE.

The window publishes frame ticks and player intents; the engine and shell
publish HUD readouts, run lifecycle and generator progress. Handlers may
be plain callables or coroutines.
"""

import asyncio
import inspect
import logging
import time
from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events exchanged between window, shell and engine."""
    # Player intents (window -> engine)
    LANE_LEFT = auto()
    LANE_RIGHT = auto()
    JUMP = auto()
    SLIDE = auto()

    # Lifecycle
    STATE_CHANGED = auto()
    RUN_STARTED = auto()
    RUN_STOPPED = auto()

    # Engine readouts
    HUD_UPDATE = auto()
    GAME_OVER = auto()

    # Theme generator progress
    THEME_REQUEST_START = auto()
    THEME_REQUEST_COMPLETE = auto()
    THEME_REQUEST_ERROR = auto()

    # Frame clock and teardown
    TICK = auto()
    SHUTDOWN = auto()


@dataclass
class Event:
    """
    A single published event.

    Attributes:
        type: EventType, or a string for ad-hoc events
        data: Payload
        source: Publishing component ("window", "engine", "shell", ...)
        timestamp: Creation time
    """
    type: EventType | str
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[Event], None] | Callable[[Event], Awaitable[None]]


class EventBus:
    """
    Pub/sub hub shared by one session.

    emit() runs plain handlers right away and skips coroutine handlers;
    queued events are drained once per frame and reach both kinds. A
    failing handler is logged and never stops delivery to the rest.
    """

    def __init__(self, history_limit: int = 100) -> None:
        self._handlers: dict[EventType | str, list[Handler]] = defaultdict(list)
        self._pending: asyncio.Queue[Event] = asyncio.Queue()
        self._history: deque[Event] = deque(maxlen=history_limit)

    def subscribe(self, event_type: EventType | str, handler: Handler) -> Callable[[], None]:
        """Register a handler for one event type; returns its unsubscriber."""
        listeners = self._handlers[event_type]
        listeners.append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to {event_type}")

        def unsubscribe() -> None:
            if handler in listeners:
                listeners.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> int:
        """Deliver to plain handlers now. Returns how many ran."""
        self._history.append(event)
        delivered = 0
        for handler in self._listeners_for(event):
            if inspect.iscoroutinefunction(handler):
                continue
            delivered += self._call(handler, event)
        return delivered

    def queue_event(self, event: Event) -> None:
        """Defer an event to the next process_queue()."""
        self._pending.put_nowait(event)

    async def process_queue(self) -> None:
        """Drain deferred events in arrival order."""
        while not self._pending.empty():
            event = self._pending.get_nowait()
            self._history.append(event)
            await self._deliver(event)
            self._pending.task_done()

    def _listeners_for(self, event: Event) -> list[Handler]:
        return list(self._handlers.get(event.type, ()))

    def _call(self, handler: Handler, event: Event) -> int:
        try:
            handler(event)
            return 1
        except Exception as e:
            logger.error(f"Handler for {event.type} failed: {e}")
            return 0

    async def _deliver(self, event: Event) -> None:
        coroutines = []
        for handler in self._listeners_for(event):
            if inspect.iscoroutinefunction(handler):
                coroutines.append(handler(event))
            else:
                self._call(handler, event)

        if not coroutines:
            return
        for outcome in await asyncio.gather(*coroutines, return_exceptions=True):
            if isinstance(outcome, Exception):
                logger.error(f"Async handler for {event.type} failed: {outcome}")

    def get_history(self, event_type: EventType | str | None = None, limit: int = 10) -> list[Event]:
        """Most recent events, oldest first, optionally of one type."""
        events = list(self._history)
        if event_type is not None:
            events = [e for e in events if e.type == event_type]
        return events[-limit:] if limit > 0 else []


def tick_event(delta: float, frame: int) -> Event:
    """Frame clock event published once per display refresh."""
    return Event(EventType.TICK, data={"delta": delta, "frame": frame}, source="window")
