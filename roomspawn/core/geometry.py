"""
Tile and world-space geometry helpers.

Tile coordinates are integers; world coordinates are tile * TILE_SIZE.
"""

from __future__ import annotations

from typing import NamedTuple, Sequence, Union

from pygame.math import Vector2

TILE_SIZE = 16

Position = Union[Vector2, Sequence[float]]


class Point(NamedTuple):
    """Integer tile coordinate."""
    x: int
    y: int

    def to_world(self, tile_size: int = TILE_SIZE) -> Vector2:
        """Convert to world units."""
        return Vector2(self.x * tile_size, self.y * tile_size)

    @classmethod
    def coerce(cls, value) -> Point:
        """Build a point from a Point, pair or list (as stored on disk)."""
        if isinstance(value, Point):
            return value
        x, y = value
        return cls(int(x), int(y))


class Extent(NamedTuple):
    """Width/height in tiles."""
    width: int = 0
    height: int = 0

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0


def as_vector(pos: Position) -> Vector2:
    """Normalize an actor position to a Vector2."""
    if isinstance(pos, Vector2):
        return pos
    return Vector2(pos[0], pos[1])
