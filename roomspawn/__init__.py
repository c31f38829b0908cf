"""
Room Spawner

Room-based entity spawn triggers for tile worlds.

Quick Start:
    from roomspawn import SpawnRegistry, RoomMarkerManager, StructureCatalog

    registry = SpawnRegistry.load("SpawnInfo.json")
    manager = RoomMarkerManager(
        registry=registry,
        structures=StructureCatalog.from_json("structures.json"),
        spawn_entity=lambda type_id, x, y: world.spawn(type_id, x, y),
    )
    manager.place_room((120, 48), "Cave_Foo")
    manager.on_tick([player.position])
"""

__version__ = "0.1.0"

from roomspawn.core import (
    SpawnerConfig,
    EventBus,
    Event,
    RoomEvent,
    Point,
    Extent,
)
from roomspawn.world import (
    SpawnEntry,
    RoomSpawnList,
    EntityTypeResolver,
    SpawnRegistry,
    RoomMarker,
    RoomMarkerManager,
    StructureCatalog,
    EntityNameRegistry,
)
from roomspawn.save import WorldData

__all__ = [
    # Core
    "SpawnerConfig",
    "EventBus",
    "Event",
    "RoomEvent",
    "Point",
    "Extent",
    # World
    "SpawnEntry",
    "RoomSpawnList",
    "EntityTypeResolver",
    "SpawnRegistry",
    "RoomMarker",
    "RoomMarkerManager",
    "StructureCatalog",
    "EntityNameRegistry",
    # Save
    "WorldData",
]
