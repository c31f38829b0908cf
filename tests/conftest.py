import pytest
from unittest.mock import MagicMock

from roomspawn.core.events import EventBus
from roomspawn.world.manager import RoomMarkerManager
from roomspawn.world.providers import EntityNameRegistry, StructureCatalog
from roomspawn.world.registry import SpawnRegistry
from roomspawn.world.spawn_info import EntityTypeResolver


SPAWN_INFO = {
    "Biomes": [
        {
            "BiomeName": "Cave",
            "Rooms": [
                {
                    "Name": "Foo",
                    "SpawnInfo": [
                        {"NameOrType": "Zombie", "OffsetX": 2, "OffsetY": 3},
                        {"NameOrType": "50", "OffsetX": 10, "OffsetY": 1},
                    ],
                },
                {
                    "Name": "Cave_Bar",
                    "SpawnInfo": [{"NameOrType": "BoneBat"}],
                },
                {
                    "SpawnInfo": [],
                },
            ],
        },
    ],
}


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    return EventBus()


@pytest.fixture
def registry():
    return SpawnRegistry.load(SPAWN_INFO)


@pytest.fixture
def structures():
    return StructureCatalog({
        "Cave_Foo": (40, 20),
        "Cave_Bar": (10, 10),
    })


@pytest.fixture
def resolver():
    builtin = EntityNameRegistry({"Zombie": 3, "Skeleton": 77})
    custom = EntityNameRegistry({"BoneBat": 1001})
    return EntityTypeResolver(builtin=builtin, custom=custom)


@pytest.fixture
def spawn_entity():
    """Records spawn calls as (type_id, x, y)."""
    return MagicMock(name="spawn_entity")


@pytest.fixture
def manager(registry, structures, spawn_entity, resolver, event_bus):
    return RoomMarkerManager(
        registry=registry,
        structures=structures,
        spawn_entity=spawn_entity,
        resolver=resolver,
        event_bus=event_bus,
    )
