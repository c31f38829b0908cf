"""
Spawn info models - what a room spawns and where.

SpawnEntry and RoomSpawnList are pydantic models with frozen fields.
The only mutable state is the entity type cache on SpawnEntry, which
is filled the first time the entry resolves successfully.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from roomspawn.world.errors import ResolutionFailure
from roomspawn.world.providers import NameLookup

logger = logging.getLogger(__name__)

UINT16_MASK = 0xFFFF
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1

_TYPE_ID_RE = re.compile(r"\s*[+-]?[0-9]+\s*")


def to_uint16(value: Any) -> int:
    """Truncate an integer to 16 unsigned bits; anything else reads as 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str):
        try:
            value = int(value)
        except ValueError:
            logger.warning(f"JSON: offset '{value}' is not an integer, using 0")
            return 0
    if not isinstance(value, int):
        logger.warning(f"JSON: offset {value!r} is not an integer, using 0")
        return 0
    return value & UINT16_MASK


def parse_type_id(text: str) -> Optional[int]:
    """Parse a 32-bit decimal type id, or None if text is not one."""
    if not _TYPE_ID_RE.fullmatch(text):
        return None
    value = int(text)
    if not INT32_MIN <= value <= INT32_MAX:
        return None
    return value


class EntityTypeResolver:
    """
    Turns a spawn entry's NameOrType into a numeric entity type.

    Lookup order:
    1. Integer literal ("50" -> 50)
    2. Builtin entity names
    3. Custom (mod) entity names
    """

    def __init__(
        self,
        builtin: Optional[NameLookup] = None,
        custom: Optional[NameLookup] = None,
    ):
        self.builtin = builtin
        self.custom = custom

    def resolve(self, name_or_type: str) -> int:
        """
        Resolve a name or numeric id.

        Raises:
            ResolutionFailure: nothing matched
        """
        type_id = parse_type_id(name_or_type)
        if type_id is not None:
            return type_id

        for lookup in (self.builtin, self.custom):
            if lookup is None:
                continue
            type_id = lookup.try_get_id(name_or_type)
            if type_id is not None:
                return type_id

        raise ResolutionFailure(name_or_type)


class SpawnEntry(BaseModel):
    """
    One entity to spawn in a room.

    Attributes:
        name_or_type: Entity name or numeric type id as text
        offset_x: Tile offset from the room's left edge
        offset_y: Tile offset from the room's top edge (or bottom, see RoomMarker)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name_or_type: str = Field(default="0", alias="NameOrType")
    offset_x: int = Field(default=0, alias="OffsetX")
    offset_y: int = Field(default=0, alias="OffsetY")

    _entity_type: Optional[int] = PrivateAttr(default=None)

    @field_validator("name_or_type", mode="before")
    @classmethod
    def _coerce_name(cls, value: Any) -> str:
        if value is None:
            return "0"
        return str(value)

    @field_validator("offset_x", "offset_y", mode="before")
    @classmethod
    def _coerce_offset(cls, value: Any) -> int:
        if value is None:
            return 0
        return to_uint16(value)

    @property
    def entity_type(self) -> Optional[int]:
        """Cached type id, or None if not yet resolved."""
        return self._entity_type

    def resolve_type(self, resolver: EntityTypeResolver) -> int:
        """
        Resolve and cache this entry's entity type.

        Failures are not cached, so a later call can succeed once
        the missing name becomes available.
        """
        if self._entity_type is not None:
            return self._entity_type

        type_id = resolver.resolve(self.name_or_type)
        self._entity_type = type_id
        return type_id


class RoomSpawnList(BaseModel):
    """Ordered spawn entries for one room id."""

    model_config = ConfigDict(frozen=True)

    room_id: str
    entries: tuple[SpawnEntry, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.entries
