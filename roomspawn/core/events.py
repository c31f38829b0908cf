"""
Room event notifications.

Markers and the marker manager publish a RoomEvent whenever a room is
placed, entered, fired or fails to spawn, and whenever marker state is
saved, loaded or cleared. Listeners (sound cues, quest hooks, debug
overlays) subscribe by event type.

Usage:
    bus = EventBus()
    bus.subscribe(RoomEvent.ROOM_FIRED, lambda e: print(e.room_id))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class RoomEvent(Enum):
    """Room spawner events."""
    # Markers
    MARKER_PLACED = auto()
    ROOM_ENTERED = auto()
    ROOM_FIRED = auto()
    ENTITY_SPAWNED = auto()
    SPAWN_FAILED = auto()

    # Persistence
    MARKERS_SAVED = auto()
    MARKERS_LOADED = auto()
    MARKERS_CLEARED = auto()


@dataclass(frozen=True)
class Event:
    """A published room event and its keyword payload."""
    type: RoomEvent
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def room_id(self) -> Optional[str]:
        return self.data.get("room_id")

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]


EventHandler = Callable[[Event], None]


class EventBus:
    """
    Delivers room events to listeners in subscription order.

    A failing listener is logged and skipped; it never reaches the
    marker or the tick that published the event.
    """

    def __init__(self):
        self._handlers: dict[RoomEvent, list[EventHandler]] = {}

    def subscribe(self, event_type: RoomEvent, handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)

    def publish(self, event_type: RoomEvent, **data: Any) -> Event:
        event = Event(type=event_type, data=data)
        for handler in list(self._handlers.get(event_type, ())):
            try:
                handler(event)
            except Exception:
                logger.exception(f"Room event listener failed for {event_type.name}")
        return event
