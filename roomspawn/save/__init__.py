"""
Save module - world state persistence.

Provides:
- Keyed tag store for per-world data
- JSON save/load with checksum validation
"""

from roomspawn.save.world_data import WorldData, WorldDataError

__all__ = [
    "WorldData",
    "WorldDataError",
]
