"""
Spawner configuration.

Holds the file locations and marker defaults shared by the registry
loader and the marker manager.
"""

from __future__ import annotations

from pathlib import Path


class SpawnerConfig:
    """Configuration for the room spawner."""

    def __init__(
        self,
        spawn_info_path: str | Path = "SpawnInfo.json",
        save_path: str | Path = "game/saves",
        offset_y_from_bottom: bool = False,
    ):
        self.spawn_info_path = Path(spawn_info_path)
        self.save_path = Path(save_path)
        # Spawn Y offsets count up from the room's bottom edge
        self.offset_y_from_bottom = offset_y_from_bottom

    def world_data_path(self, world_name: str) -> Path:
        """Get the file used to persist marker state for a world."""
        return self.save_path / f"{world_name}_rooms.json"
