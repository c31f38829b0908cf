"""
Room markers - placed rooms with a one-shot spawn trigger.

A marker starts idle. The first time an actor comes within LOAD_RANGE
world units of the room's bounds, the marker spawns everything in its
room's spawn list and becomes fired. A fired marker never spawns again.

Usage:
    marker = RoomMarker(Point(100, 40), "Cave_Foo")
    marker.bind(context)
    marker.evaluate_proximity(player_position)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import ClassVar, Optional

from pygame.math import Vector2

from roomspawn.core.events import EventBus, RoomEvent
from roomspawn.core.geometry import TILE_SIZE, Extent, Point, Position, as_vector
from roomspawn.world.providers import SpawnEntityFn, StructureProvider
from roomspawn.world.registry import SpawnRegistry
from roomspawn.world.spawn_info import EntityTypeResolver, RoomSpawnList

logger = logging.getLogger(__name__)


@dataclass
class SpawnContext:
    """Collaborators a marker needs to size itself and spawn."""
    registry: SpawnRegistry
    structures: StructureProvider
    spawn_entity: SpawnEntityFn
    resolver: EntityTypeResolver
    event_bus: Optional[EventBus] = None


class RoomMarker:
    """
    A placed room instance.

    Attributes:
        anchor: Top-left corner in tile coordinates
        room_id: Key into the spawn registry
        fired: Whether the room's spawns have run
        offset_y_from_bottom: Measure spawn Y offsets up from the bottom edge
    """

    # 32 tiles
    LOAD_RANGE: ClassVar[float] = 512.0

    def __init__(
        self,
        anchor: Point | tuple[int, int],
        room_id: str,
        *,
        fired: bool = False,
        tile_width: Optional[int] = None,
        tile_height: Optional[int] = None,
        offset_y_from_bottom: bool = False,
    ):
        self._anchor = Point.coerce(anchor)
        self._room_id = room_id
        self._fired = fired
        self.offset_y_from_bottom = offset_y_from_bottom

        # Fixed size skips the structure lookup entirely
        self._fixed_size: Optional[Extent] = None
        if tile_width is not None or tile_height is not None:
            self._fixed_size = Extent(tile_width or 0, tile_height or 0)

        self._cached_size: Optional[Extent] = None
        self._context: Optional[SpawnContext] = None

    @property
    def anchor(self) -> Point:
        return self._anchor

    @property
    def room_id(self) -> str:
        return self._room_id

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def context(self) -> SpawnContext:
        """Get the context this marker is bound to."""
        if self._context is None:
            raise RuntimeError(f"RoomMarker {self._room_id} not bound to a spawn context")
        return self._context

    def bind(self, context: SpawnContext) -> None:
        """Attach collaborators. Called by the manager when the marker is added."""
        self._context = context

    # Size and bounds

    def size(self) -> Extent:
        """
        Room size in tiles.

        A failed structure lookup is logged and reads as a zero extent,
        so the room behaves like a single point at its anchor. Only
        successful lookups are cached.
        """
        if self._fixed_size is not None:
            return self._fixed_size
        if self._cached_size is not None:
            return self._cached_size

        structures = self.context.structures
        try:
            result = structures.get_dimensions(self._room_id)
            size = Extent(int(result[0]), int(result[1]))
        except Exception:
            logger.error(f"Room: {self._room_id} was not found/did not exist")
            return Extent(0, 0)

        self._cached_size = size
        return self._cached_size

    @property
    def width(self) -> int:
        return self.size().width

    @property
    def height(self) -> int:
        return self.size().height

    @property
    def left(self) -> int:
        return self._anchor.x

    @property
    def top(self) -> int:
        return self._anchor.y

    @property
    def right(self) -> int:
        return self._anchor.x + self.width

    @property
    def bottom(self) -> int:
        return self._anchor.y + self.height

    @property
    def center(self) -> Point:
        size = self.size()
        return Point(self._anchor.x + size.width // 2, self._anchor.y + size.height // 2)

    # Trigger

    def in_range(self, pos: Position) -> bool:
        """
        Check if a world position is within LOAD_RANGE of every edge.

        All comparisons are strict, so a point exactly LOAD_RANGE
        outside an edge is out of range.
        """
        pos = as_vector(pos)
        size = self.size()
        left = self.left * TILE_SIZE - self.LOAD_RANGE
        right = (self.left + size.width) * TILE_SIZE + self.LOAD_RANGE
        top = self.top * TILE_SIZE - self.LOAD_RANGE
        bottom = (self.top + size.height) * TILE_SIZE + self.LOAD_RANGE
        return left < pos.x < right and top < pos.y < bottom

    def evaluate_proximity(self, pos: Position) -> bool:
        """
        Run the room's spawns if an actor at pos is in range.

        Returns:
            True if spawns ran during this call
        """
        if self._fired or not self.in_range(pos):
            return False

        if self.context.event_bus:
            self.context.event_bus.publish(
                RoomEvent.ROOM_ENTERED, room_id=self._room_id, position=as_vector(pos)
            )
        return self.handle_spawns()

    def get_spawns(self) -> RoomSpawnList:
        """Raises MissingRegistryEntry if the room was never configured."""
        return self.context.registry.get_spawns(self._room_id)

    def try_get_spawns(self) -> Optional[RoomSpawnList]:
        return self.context.registry.try_get_spawns(self._room_id)

    def spawn_position(self, offset_x: int, offset_y: int) -> tuple[int, int]:
        """World position for a room-local tile offset."""
        x = (self.left + offset_x) * TILE_SIZE
        if self.offset_y_from_bottom:
            y = (self.top + self.height - offset_y) * TILE_SIZE
        else:
            y = (self.top + offset_y) * TILE_SIZE
        return x, y

    def handle_spawns(self) -> bool:
        """
        Spawn every entry in the room's spawn list, once.

        A missing registry entry or an unresolvable entity type raises
        before the marker is flagged, so the room stays eligible and
        is retried on the next proximity check.

        Returns:
            True if spawns ran, False if the marker had already fired
        """
        if self._fired:
            return False

        context = self.context
        spawn_list = self.get_spawns()
        spawned = 0
        for entry in spawn_list.entries:
            type_id = entry.resolve_type(context.resolver)
            x, y = self.spawn_position(entry.offset_x, entry.offset_y)
            context.spawn_entity(type_id, x, y)
            spawned += 1
            if context.event_bus:
                context.event_bus.publish(
                    RoomEvent.ENTITY_SPAWNED,
                    room_id=self._room_id,
                    type_id=type_id,
                    position=Vector2(x, y),
                )

        self._fired = True
        logger.debug(f"Room {self._room_id} fired, spawned {spawned} entities")
        if context.event_bus:
            context.event_bus.publish(RoomEvent.ROOM_FIRED, room_id=self._room_id, spawned=spawned)
        return True

    def __repr__(self) -> str:
        state = "fired" if self._fired else "idle"
        return f"RoomMarker({self._room_id!r}, anchor=({self._anchor.x}, {self._anchor.y}), {state})"
