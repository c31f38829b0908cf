"""
Core spawner module.

Exports:
- SpawnerConfig: Tunables shared across the spawner
- EventBus, Event, RoomEvent: Event system
- Point, Extent: Tile geometry
"""

from roomspawn.core.config import SpawnerConfig
from roomspawn.core.events import EventBus, Event, RoomEvent
from roomspawn.core.geometry import TILE_SIZE, Point, Extent, as_vector

__all__ = [
    # Config
    "SpawnerConfig",
    # Events
    "EventBus",
    "Event",
    "RoomEvent",
    # Geometry
    "TILE_SIZE",
    "Point",
    "Extent",
    "as_vector",
]
