"""
Room marker manager - per-tick proximity scan and marker persistence.

Provides:
- The live, ordered marker collection for the current world
- A tick driver that checks every active actor against every marker
- Save/load of marker state (anchor, room id, fired flag)

Marker size and spawn lists are never saved. Sizes come back from the
structure provider, and spawn lists from the registry, which is loaded
before any world data.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from roomspawn.core.config import SpawnerConfig
from roomspawn.core.events import EventBus, RoomEvent
from roomspawn.core.geometry import Point, Position
from roomspawn.save.world_data import WorldData
from roomspawn.world.errors import MissingRegistryEntry, ResolutionFailure
from roomspawn.world.marker import RoomMarker, SpawnContext
from roomspawn.world.providers import ActorSource, SpawnEntityFn, StructureProvider
from roomspawn.world.registry import SpawnRegistry
from roomspawn.world.spawn_info import EntityTypeResolver

logger = logging.getLogger(__name__)

COUNT_KEY = "RoomMarkers_Count"


def _xy_key(i: int) -> str:
    return f"Room{i}_XY"


def _name_key(i: int) -> str:
    return f"Room{i}_Name"


def _did_spawns_key(i: int) -> str:
    return f"Room{i}_DidSpawns"


class RoomMarkerManager:
    """
    Owns the room markers of the loaded world.

    Usage:
        manager = RoomMarkerManager(
            registry=SpawnRegistry.load("SpawnInfo.json"),
            structures=catalog,
            spawn_entity=spawn_npc,
            resolver=EntityTypeResolver(builtin=npc_ids),
            actors=player_list,
        )
        manager.place_room((120, 48), "Cave_Foo")

        # Each simulation step
        manager.on_tick()

        # World save/load
        manager.save_world_data(tag)
        manager.load_world_data(tag)
    """

    def __init__(
        self,
        registry: SpawnRegistry,
        structures: StructureProvider,
        spawn_entity: SpawnEntityFn,
        resolver: Optional[EntityTypeResolver] = None,
        actors: Optional[ActorSource] = None,
        event_bus: Optional[EventBus] = None,
        config: Optional[SpawnerConfig] = None,
    ):
        self.config = config or SpawnerConfig()
        self.actors = actors
        self.event_bus = event_bus
        self.context = SpawnContext(
            registry=registry,
            structures=structures,
            spawn_entity=spawn_entity,
            resolver=resolver or EntityTypeResolver(),
            event_bus=event_bus,
        )

        self._markers: list[RoomMarker] = []
        # Markers added mid-tick wait here until the scan finishes
        self._pending: list[RoomMarker] = []
        self._ticking = False
        self._reported_missing: set[str] = set()

    @classmethod
    def from_config(
        cls,
        config: SpawnerConfig,
        structures: StructureProvider,
        spawn_entity: SpawnEntityFn,
        **kwargs,
    ) -> RoomMarkerManager:
        """Load the registry from config.spawn_info_path and build a manager."""
        registry = SpawnRegistry.load(config.spawn_info_path)
        return cls(registry, structures, spawn_entity, config=config, **kwargs)

    @property
    def markers(self) -> list[RoomMarker]:
        """Snapshot of the marker collection in placement order."""
        return list(self._markers)

    @property
    def registry(self) -> SpawnRegistry:
        return self.context.registry

    @property
    def fired_count(self) -> int:
        return sum(1 for m in self._markers if m.fired)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._markers)

    # Placement

    def add_marker(self, marker: RoomMarker) -> RoomMarker:
        """Bind a marker to this manager's context and append it."""
        marker.bind(self.context)
        if self._ticking:
            self._pending.append(marker)
        else:
            self._markers.append(marker)

        if self.event_bus:
            self.event_bus.publish(RoomEvent.MARKER_PLACED, marker=marker)
        return marker

    def place_room(
        self,
        anchor: Point | tuple[int, int],
        room_id: str,
        tile_width: Optional[int] = None,
        tile_height: Optional[int] = None,
    ) -> RoomMarker:
        """Create and add a marker for a room placed during world generation."""
        return self.add_marker(RoomMarker(
            anchor,
            room_id,
            tile_width=tile_width,
            tile_height=tile_height,
            offset_y_from_bottom=self.config.offset_y_from_bottom,
        ))

    def unload_world(self) -> None:
        """Drop every marker (world teardown)."""
        count = len(self._markers)
        self._markers.clear()
        self._pending.clear()
        self._reported_missing.clear()
        if self.event_bus:
            self.event_bus.publish(RoomEvent.MARKERS_CLEARED, count=count)

    # Tick

    def on_tick(self, actor_positions: Optional[Iterable[Position]] = None) -> int:
        """
        Check every active actor against every marker.

        Args:
            actor_positions: World positions to test. Defaults to the
                configured actor source.

        Returns:
            Number of rooms that fired during this tick
        """
        if actor_positions is None:
            if self.actors is None:
                return 0
            actor_positions = self.actors.active_actor_positions()

        fired = 0
        self._ticking = True
        try:
            for pos in actor_positions:
                for marker in self._markers:
                    if self._evaluate(marker, pos):
                        fired += 1
        finally:
            self._ticking = False
            if self._pending:
                self._markers.extend(self._pending)
                self._pending.clear()

        return fired

    def _evaluate(self, marker: RoomMarker, pos: Position) -> bool:
        """Evaluate one marker, keeping its failures out of the tick."""
        try:
            return marker.evaluate_proximity(pos)
        except ResolutionFailure as e:
            logger.warning(f"Room {marker.room_id}: {e}; will retry")
            self._publish_failure(marker, e)
        except MissingRegistryEntry as e:
            if marker.room_id not in self._reported_missing:
                self._reported_missing.add(marker.room_id)
                logger.error(f"Room {marker.room_id}: {e}")
            self._publish_failure(marker, e)
        return False

    def _publish_failure(self, marker: RoomMarker, error: Exception) -> None:
        if self.event_bus:
            self.event_bus.publish(
                RoomEvent.SPAWN_FAILED, room_id=marker.room_id, error=error
            )

    # Persistence

    def save_world_data(self, tag: WorldData) -> None:
        """Write marker count, then anchor, room id and fired flag per marker."""
        tag.set(COUNT_KEY, len(self._markers))
        for i, marker in enumerate(self._markers):
            tag.set(_xy_key(i), marker.anchor)
            tag.set(_name_key(i), marker.room_id)
            tag.set(_did_spawns_key(i), marker.fired)

        if self.event_bus:
            self.event_bus.publish(RoomEvent.MARKERS_SAVED, count=len(self._markers))

    def load_world_data(self, tag: WorldData) -> int:
        """
        Append markers stored in tag to the collection.

        Existing markers are kept. A missing or non-positive count
        leaves the collection untouched.

        Returns:
            Number of markers restored
        """
        count = tag.get_int(COUNT_KEY)
        if count <= 0:
            logger.warning("No Room data found for world.")
            return 0

        for i in range(count):
            marker = RoomMarker(
                tag.get_point(_xy_key(i)),
                tag.get_str(_name_key(i)),
                fired=tag.get_bool(_did_spawns_key(i)),
                offset_y_from_bottom=self.config.offset_y_from_bottom,
            )
            marker.bind(self.context)
            self._markers.append(marker)

        logger.info(f"Loaded {count} room markers.")
        if self.event_bus:
            self.event_bus.publish(RoomEvent.MARKERS_LOADED, count=count)
        return count

    def save_world(self, world_name: str) -> Path:
        """Persist marker state to the world's data file under config.save_path."""
        path = self.config.world_data_path(world_name)
        tag = WorldData()
        self.save_world_data(tag)
        tag.save(path)
        return path

    def load_world(self, world_name: str) -> int:
        return self.load_world_data(WorldData.load(self.config.world_data_path(world_name)))
