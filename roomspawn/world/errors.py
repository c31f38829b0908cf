"""
Room spawner exceptions.
"""

from __future__ import annotations


class RoomSpawnError(Exception):
    """Base class for room spawner errors."""


class ConfigLoadError(RoomSpawnError):
    """The spawn configuration could not be read or parsed."""


class StructureLookupError(RoomSpawnError, LookupError):
    """The structure provider has no template for a room."""

    def __init__(self, room_id: str):
        super().__init__(f"Room: {room_id} was not found/did not exist")
        self.room_id = room_id


class ResolutionFailure(RoomSpawnError, ValueError):
    """A spawn entry's name or id matched no entity type."""

    def __init__(self, name_or_type: str):
        super().__init__(f"Entity type or name: '{name_or_type}' was not found")
        self.name_or_type = name_or_type


class MissingRegistryEntry(RoomSpawnError, KeyError):
    """A marker refers to a room id with no spawn list."""

    def __init__(self, room_id: str):
        super().__init__(room_id)
        self.room_id = room_id

    def __str__(self) -> str:
        return f"No spawn info registered for room '{self.room_id}'"
