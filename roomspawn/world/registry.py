"""
Spawn registry - room id to spawn list lookup.

Loaded once from SpawnInfo.json before any world data, then read-only.

File layout:
    {
      "Biomes": [
        {
          "BiomeName": "Cave",
          "Rooms": [
            {
              "Name": "Foo",
              "SpawnInfo": [
                {"NameOrType": "Zombie", "OffsetX": 4, "OffsetY": 2}
              ]
            }
          ]
        }
      ]
    }

Malformed entries never abort a load. Each structural problem is
logged as a warning and the entry falls back to its defaults.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import IO, Any, Iterator, Optional, Union

import jsonschema
from pydantic import ValidationError

from roomspawn.world.errors import ConfigLoadError, MissingRegistryEntry
from roomspawn.world.spawn_info import RoomSpawnList, SpawnEntry

logger = logging.getLogger(__name__)

SpawnInfoSource = Union[str, Path, IO[str], Mapping[str, Any]]

SPAWN_INFO_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "Biomes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["BiomeName"],
                "properties": {
                    "BiomeName": {"type": "string"},
                    "Rooms": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "Name": {"type": ["string", "null"]},
                                "SpawnInfo": {
                                    "type": "array",
                                    "items": {
                                        "type": "object",
                                        "properties": {
                                            "NameOrType": {"type": ["string", "integer"]},
                                            "OffsetX": {"type": "integer", "minimum": 0, "maximum": 65535},
                                            "OffsetY": {"type": "integer", "minimum": 0, "maximum": 65535},
                                        },
                                    },
                                },
                            },
                        },
                    },
                },
            },
        },
    },
}


class SpawnRegistry(Mapping):
    """
    Read-only mapping of room id -> RoomSpawnList.

    Usage:
        registry = SpawnRegistry.load("SpawnInfo.json")
        spawns = registry.get_spawns("Cave_Foo")
        maybe = registry.try_get_spawns("Cave_Bar")
    """

    def __init__(
        self,
        rooms: Mapping[str, RoomSpawnList] | None = None,
        duplicates: list[str] | None = None,
    ):
        self._rooms: dict[str, RoomSpawnList] = dict(rooms or {})
        self.duplicates: list[str] = list(duplicates or [])

    @staticmethod
    def room_id_for(biome: str, room_name: str) -> str:
        """Internal room id for a biome and bare room name."""
        return f"{biome}_{room_name}"

    # Mapping interface

    def __getitem__(self, room_id: str) -> RoomSpawnList:
        return self.get_spawns(room_id)

    def __iter__(self) -> Iterator[str]:
        return iter(self._rooms)

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    # Lookups

    def get_spawns(self, room_id: str) -> RoomSpawnList:
        """
        Get the spawn list for a room.

        Raises:
            MissingRegistryEntry: no room with that id was configured
        """
        try:
            return self._rooms[room_id]
        except KeyError:
            raise MissingRegistryEntry(room_id) from None

    def try_get_spawns(self, room_id: str) -> Optional[RoomSpawnList]:
        return self._rooms.get(room_id)

    # Loading

    @classmethod
    def load(cls, source: SpawnInfoSource) -> SpawnRegistry:
        """
        Build a registry from a file path, text stream or parsed dict.

        Raises:
            ConfigLoadError: the source is unreadable or not a JSON object
        """
        root = cls._read_source(source)
        cls._report_schema_problems(root)

        rooms: dict[str, RoomSpawnList] = {}
        duplicates: list[str] = []

        for biome in _as_list(root.get("Biomes")):
            if not isinstance(biome, dict):
                logger.warning(f"JSON: skipping biome entry that is not an object: {biome!r}")
                continue
            for spawn_list in cls._parse_biome(biome):
                if spawn_list.room_id in rooms:
                    duplicates.append(spawn_list.room_id)
                    logger.warning(
                        f"JSON: duplicate room id '{spawn_list.room_id}', "
                        f"the later definition replaces the earlier one"
                    )
                rooms[spawn_list.room_id] = spawn_list

        logger.info(f"Loaded spawn info for {len(rooms)} rooms.")
        return cls(rooms, duplicates)

    @staticmethod
    def _read_source(source: SpawnInfoSource) -> dict[str, Any]:
        if isinstance(source, Mapping):
            root = source
        else:
            try:
                if isinstance(source, (str, Path)):
                    with open(source, 'r', encoding='utf-8') as f:
                        root = json.load(f)
                else:
                    root = json.load(source)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigLoadError(f"Failed to read spawn info: {e}") from e

        if not isinstance(root, Mapping):
            raise ConfigLoadError(
                f"Spawn info root must be an object, got {type(root).__name__}"
            )
        return dict(root)

    @staticmethod
    def _report_schema_problems(root: dict[str, Any]) -> None:
        validator = jsonschema.Draft7Validator(SPAWN_INFO_SCHEMA)
        for error in validator.iter_errors(root):
            location = "/".join(str(p) for p in error.absolute_path) or "<root>"
            logger.warning(f"JSON: {location}: {error.message}")

    @classmethod
    def _parse_biome(cls, biome: dict[str, Any]) -> Iterator[RoomSpawnList]:
        biome_name = biome.get("BiomeName")
        if not isinstance(biome_name, str):
            biome_name = ""

        for room_count, room in enumerate(_as_list(biome.get("Rooms"))):
            if not isinstance(room, dict):
                room = {}

            room_name = room.get("Name")
            if room_name:
                room_name = str(room_name)
                if not room_name.startswith(biome_name):
                    room_name = cls.room_id_for(biome_name, room_name)
            else:
                room_name = f"{biome_name}_roomNo{room_count}"
                logger.warning(
                    f"JSON: No room name was provided for Biome:{biome_name} "
                    f"Room:#{room_count}, one has been automatically created: {room_name}"
                )

            entries = tuple(
                entry
                for entry in (cls._parse_entry(room_name, raw) for raw in _as_list(room.get("SpawnInfo")))
                if entry is not None
            )
            yield RoomSpawnList(room_id=room_name, entries=entries)

    @staticmethod
    def _parse_entry(room_id: str, raw: Any) -> Optional[SpawnEntry]:
        if not isinstance(raw, dict):
            logger.warning(f"JSON: skipping spawn entry in {room_id} that is not an object: {raw!r}")
            return None
        try:
            return SpawnEntry.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"JSON: invalid spawn entry in {room_id}: {e}")
            return None


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []
