"""
Collaborator interfaces for the room spawner.

The spawner never talks to a renderer, a structure loader or an entity
factory directly. It goes through these small interfaces, so a game
wires in its own implementations and tests wire in dicts and mocks.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional, Protocol, runtime_checkable

from roomspawn.core.geometry import Extent, Position
from roomspawn.world.errors import StructureLookupError

logger = logging.getLogger(__name__)


@runtime_checkable
class StructureProvider(Protocol):
    """Resolves a room's tile dimensions from its structure template."""

    def get_dimensions(self, room_id: str) -> Extent:
        """Raise LookupError if the room has no template."""
        ...


class SpawnEntityFn(Protocol):
    """Instantiates an entity of a type at a world position."""

    def __call__(self, type_id: int, world_x: int, world_y: int) -> object:
        ...


@runtime_checkable
class NameLookup(Protocol):
    """Maps an entity name to its numeric type id."""

    def try_get_id(self, name: str) -> Optional[int]:
        ...


@runtime_checkable
class ActorSource(Protocol):
    """Yields the positions of active actors for the current tick."""

    def active_actor_positions(self) -> Iterable[Position]:
        ...


class StructureCatalog:
    """
    Dict-backed structure provider.

    Usage:
        catalog = StructureCatalog({"Cave_Foo": (40, 20)})
        catalog.get_dimensions("Cave_Foo")  # Extent(width=40, height=20)
    """

    def __init__(self, dimensions: Mapping[str, tuple[int, int]] | None = None):
        self._dimensions: dict[str, Extent] = {}
        for room_id, size in (dimensions or {}).items():
            self.register(room_id, *size)

    @classmethod
    def from_json(cls, path: str | Path) -> StructureCatalog:
        """Load a {"room_id": [width, height]} file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        catalog = cls(data)
        logger.info(f"Loaded {len(catalog)} structure templates from {path}")
        return catalog

    def register(self, room_id: str, width: int, height: int) -> None:
        self._dimensions[room_id] = Extent(int(width), int(height))

    def get_dimensions(self, room_id: str) -> Extent:
        try:
            return self._dimensions[room_id]
        except KeyError:
            raise StructureLookupError(room_id) from None

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._dimensions

    def __len__(self) -> int:
        return len(self._dimensions)


class EntityNameRegistry:
    """Name -> type id table, usable as a builtin or custom name lookup."""

    def __init__(self, names: Mapping[str, int] | None = None):
        self._ids: dict[str, int] = dict(names or {})

    def register(self, name: str, type_id: int) -> None:
        self._ids[name] = type_id

    def try_get_id(self, name: str) -> Optional[int]:
        return self._ids.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._ids

    def __len__(self) -> int:
        return len(self._ids)
