"""
Room Spawn Demo: headless walk through a cave biome

Demonstrates:
- Loading spawn info for a biome
- Placing room markers
- A player walking past rooms over fixed ticks
- Saving and reloading marker state

Run: python -m demos.room_spawn_demo
"""

import logging
import tempfile

from pygame.math import Vector2

from roomspawn import (
    EntityNameRegistry,
    EntityTypeResolver,
    EventBus,
    RoomEvent,
    RoomMarkerManager,
    SpawnRegistry,
    SpawnerConfig,
    StructureCatalog,
)


SPAWN_INFO = {
    "Biomes": [
        {
            "BiomeName": "Cave",
            "Rooms": [
                {"Name": "Entrance", "SpawnInfo": [{"NameOrType": "Bat", "OffsetX": 3, "OffsetY": 2}]},
                {"Name": "Lair", "SpawnInfo": [
                    {"NameOrType": "Zombie", "OffsetX": 5, "OffsetY": 8},
                    {"NameOrType": "CaveTroll", "OffsetX": 12, "OffsetY": 8},
                ]},
                {"SpawnInfo": [{"NameOrType": "49"}]},
            ],
        },
    ],
}


class Player:
    """Walks right at a fixed speed."""

    def __init__(self):
        self.position = Vector2(0, 400)

    def active_actor_positions(self):
        return [self.position]


def spawn_entity(type_id: int, world_x: int, world_y: int) -> None:
    print(f"  spawned type {type_id} at ({world_x}, {world_y})")


def main():
    logging.basicConfig(level=logging.INFO)

    events = EventBus()

    def on_fired(event):
        print(f"Room {event['room_id']} fired ({event['spawned']} entities)")

    events.subscribe(RoomEvent.ROOM_FIRED, on_fired)

    registry = SpawnRegistry.load(SPAWN_INFO)
    structures = StructureCatalog({
        "Cave_Entrance": (30, 20),
        "Cave_Lair": (60, 30),
    })
    resolver = EntityTypeResolver(
        builtin=EntityNameRegistry({"Bat": 49, "Zombie": 3}),
        custom=EntityNameRegistry({"CaveTroll": 1200}),
    )

    with tempfile.TemporaryDirectory() as save_dir:
        config = SpawnerConfig(save_path=save_dir)
        player = Player()
        manager = RoomMarkerManager(
            registry, structures, spawn_entity, resolver,
            actors=player, event_bus=events, config=config,
        )

        manager.place_room((20, 10), "Cave_Entrance")
        manager.place_room((150, 15), "Cave_Lair")
        # No structure template: treated as a point
        manager.place_room((400, 20), "Cave_roomNo2")

        print("Walking...")
        for _ in range(200):
            player.position.x += 40
            manager.on_tick()

        print(f"{manager.fired_count}/{len(manager)} rooms fired")

        manager.save_world("demo")
        reloaded = RoomMarkerManager(registry, structures, spawn_entity, resolver, config=config)
        reloaded.load_world("demo")
        print("Reloaded:", reloaded.markers)

        # Fired rooms stay fired after reload
        reloaded.on_tick([Vector2(400, 400)])


if __name__ == "__main__":
    main()
