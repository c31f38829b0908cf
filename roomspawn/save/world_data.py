"""
World data - keyed per-world state persistence.

Provides:
- A flat tag store (key -> int/bool/str/point) that reads missing
  keys as type defaults
- Save/load to a JSON file
- Save integrity validation (checksum)
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
from pathlib import Path
from typing import Any, Iterator

from roomspawn.core.geometry import Point

logger = logging.getLogger(__name__)


class WorldDataError(Exception):
    """A world data file is unreadable or failed validation."""


class WorldData:
    """
    Flat keyed store for world state.

    Typed getters return the type's default when a key is absent,
    so loaders can read optional keys without guarding each one.

    Usage:
        tag = WorldData()
        tag.set("RoomMarkers_Count", 2)
        tag.set("Room0_XY", Point(10, 4))
        tag.save(path)

        tag = WorldData.load(path)
        count = tag.get_int("RoomMarkers_Count")
    """

    VERSION = "1.0"

    def __init__(self, tags: dict[str, Any] | None = None):
        self._tags: dict[str, Any] = dict(tags or {})

    def set(self, key: str, value: Any) -> None:
        if isinstance(value, Point):
            value = [value.x, value.y]
        self._tags[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._tags.get(key, default)

    def get_int(self, key: str) -> int:
        value = self._tags.get(key, 0)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"World data key {key} is not an int: {value!r}")
            return 0

    def get_bool(self, key: str) -> bool:
        return bool(self._tags.get(key, False))

    def get_str(self, key: str) -> str:
        value = self._tags.get(key)
        return "" if value is None else str(value)

    def get_point(self, key: str) -> Point:
        value = self._tags.get(key)
        if value is None:
            return Point(0, 0)
        try:
            return Point.coerce(value)
        except (TypeError, ValueError):
            logger.warning(f"World data key {key} is not a point: {value!r}")
            return Point(0, 0)

    def __contains__(self, key: object) -> bool:
        return key in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._tags)

    # File I/O

    def save(self, path: str | Path) -> None:
        """Write tags to a JSON file with a checksum."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {'version': self.VERSION, 'tags': self._tags}
        data['checksum'] = self._calculate_checksum(data)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    @classmethod
    def load(cls, path: str | Path, validate: bool = True) -> WorldData:
        """
        Read tags from a JSON file.

        A missing file yields an empty store.

        Raises:
            WorldDataError: unreadable file or checksum mismatch
        """
        path = Path(path)
        if not path.exists():
            logger.info(f"No world data at {path}")
            return cls()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise WorldDataError(f"Failed to read world data {path}: {e}") from e

        if not isinstance(data, dict):
            raise WorldDataError(f"World data {path} is not an object")

        if validate:
            checksum = data.get('checksum')
            if checksum and not cls._verify_checksum(data, checksum):
                raise WorldDataError(f"World data {path} corrupted: checksum mismatch")

        tags = data.get('tags', {})
        if not isinstance(tags, dict):
            raise WorldDataError(f"World data {path} has no tag table")
        return cls(tags)

    # Checksum validation

    @staticmethod
    def _calculate_checksum(data: dict) -> str:
        json_str = json.dumps(data, sort_keys=True, separators=(',', ':'))
        hash_bytes = hashlib.sha256(json_str.encode('utf-8')).digest()
        return base64.b64encode(hash_bytes).decode('ascii')

    @classmethod
    def _verify_checksum(cls, data: dict, expected_checksum: str) -> bool:
        data_copy = data.copy()
        data_copy.pop('checksum', None)
        return cls._calculate_checksum(data_copy) == expected_checksum
