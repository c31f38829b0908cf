"""
World module - rooms, spawn lists, spawn triggers.

Provides:
- Spawn registry loaded from SpawnInfo.json
- Room markers with one-shot proximity spawns
- Marker manager driving the per-tick scan and persistence
- Collaborator interfaces (structures, actors, entity names)
"""

from roomspawn.world.errors import (
    RoomSpawnError,
    ConfigLoadError,
    StructureLookupError,
    ResolutionFailure,
    MissingRegistryEntry,
)
from roomspawn.world.providers import (
    StructureProvider,
    SpawnEntityFn,
    NameLookup,
    ActorSource,
    StructureCatalog,
    EntityNameRegistry,
)
from roomspawn.world.spawn_info import (
    SpawnEntry,
    RoomSpawnList,
    EntityTypeResolver,
)
from roomspawn.world.registry import SpawnRegistry
from roomspawn.world.marker import RoomMarker, SpawnContext
from roomspawn.world.manager import RoomMarkerManager

__all__ = [
    # Errors
    "RoomSpawnError",
    "ConfigLoadError",
    "StructureLookupError",
    "ResolutionFailure",
    "MissingRegistryEntry",
    # Providers
    "StructureProvider",
    "SpawnEntityFn",
    "NameLookup",
    "ActorSource",
    "StructureCatalog",
    "EntityNameRegistry",
    # Spawn info
    "SpawnEntry",
    "RoomSpawnList",
    "EntityTypeResolver",
    "SpawnRegistry",
    # Markers
    "RoomMarker",
    "SpawnContext",
    "RoomMarkerManager",
]
