"""
Occupancy map consumed by the exploration core.

OccupancyMapInterface is the read-only map service the algorithm talks to.
GridSlamMap is the in-memory implementation used by the simulation: a numpy
status grid refreshed from sensor scans, with A* and flood-fill queries.

MAP INTEGRATION:
- Implement OccupancyMapInterface on top of your SLAM backend
- Every query is in tile coordinates; world_to_tile/tile_to_world convert
"""

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple
import math

import numpy as np

from roomsweep.geometry import Tile
from roomsweep.navigation import AStarPathfinder, flood_fill_nearest


class TileStatus(IntEnum):
    """Per-tile occupancy classification."""
    UNSEEN = 0
    OPEN = 1
    SOLID = 2


class OccupancyMapInterface(ABC):
    """Read-only occupancy/map service."""

    @abstractmethod
    def get_tile_status(self, tile: Tile) -> TileStatus:
        pass

    @abstractmethod
    def get_currently_visible_tiles(self) -> Dict[Tile, TileStatus]:
        """Tiles seen by the latest scan with their status."""
        pass

    @abstractmethod
    def is_within_bounds(self, tile: Tile) -> bool:
        pass

    @abstractmethod
    def get_path(self, start: Tile, target: Tile, optimistic: bool = False) -> Optional[List[Tile]]:
        """Shortest tile path, or None if the target cannot be reached."""
        pass

    @abstractmethod
    def get_nearest_tile_flood_fill(self, start: Tile, status: TileStatus,
                                    excluded: Optional[Set[Tile]] = None) -> Optional[Tile]:
        pass

    @abstractmethod
    def world_to_tile(self, x: float, y: float) -> Tile:
        pass

    @abstractmethod
    def tile_to_world(self, tile: Tile) -> Tuple[float, float]:
        pass

    @abstractmethod
    def count_status(self, status: TileStatus) -> int:
        """Number of tiles currently holding status."""
        pass

    @property
    @abstractmethod
    def revision(self) -> int:
        """Incremented every time the occupancy data is refreshed."""
        pass

    def is_blocked(self, tile: Tile, optimistic: bool = False) -> bool:
        """Path planning passability; Unseen only passes when optimistic."""
        if not self.is_within_bounds(tile):
            return True
        status = self.get_tile_status(tile)
        if status == TileStatus.SOLID:
            return True
        return status == TileStatus.UNSEEN and not optimistic


class GridSlamMap(OccupancyMapInterface):
    """
    Occupancy grid map for one robot.
    Grid values are TileStatus codes stored as uint8, indexed [y, x].
    """

    def __init__(self, width: int, height: int, resolution: float = 1.0):
        if width <= 0 or height <= 0:
            raise ValueError(f"map size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.resolution = resolution
        self.grid = np.full((height, width), int(TileStatus.UNSEEN), dtype=np.uint8)
        self._visible: Dict[Tile, TileStatus] = {}
        self._revision = 0
        self.pathfinder = AStarPathfinder()

    @classmethod
    def from_ascii(cls, rows: Sequence[str], visible: Optional[Iterable[Tile]] = None) -> 'GridSlamMap':
        """
        Build a map from text rows, first row = northernmost.
        '#' Solid, '.' Open, anything else Unseen. `visible` defaults to every
        known tile.
        """
        height = len(rows)
        width = max(len(row) for row in rows)
        slam_map = cls(width, height)
        for row_index, row in enumerate(rows):
            y = height - 1 - row_index
            for x, char in enumerate(row):
                if char == '#':
                    slam_map.grid[y, x] = TileStatus.SOLID
                elif char == '.':
                    slam_map.grid[y, x] = TileStatus.OPEN
        if visible is None:
            ys, xs = np.nonzero(slam_map.grid != int(TileStatus.UNSEEN))
            visible = [(int(x), int(y)) for x, y in zip(xs, ys)]
        slam_map._visible = {tile: slam_map.get_tile_status(tile) for tile in visible}
        slam_map._revision = 1
        return slam_map

    @property
    def revision(self) -> int:
        return self._revision

    def is_within_bounds(self, tile: Tile) -> bool:
        return 0 <= tile[0] < self.width and 0 <= tile[1] < self.height

    def get_tile_status(self, tile: Tile) -> TileStatus:
        # Outside the map behaves like a wall
        if not self.is_within_bounds(tile):
            return TileStatus.SOLID
        return TileStatus(int(self.grid[tile[1], tile[0]]))

    def set_tile_status(self, tile: Tile, status: TileStatus):
        if self.is_within_bounds(tile):
            self.grid[tile[1], tile[0]] = status

    def update_from_scan(self, observations: Dict[Tile, TileStatus]):
        """Write one sensor sweep into the map and make it the visible set."""
        for tile, status in observations.items():
            self.set_tile_status(tile, status)
        self._visible = {tile: status for tile, status in observations.items()
                         if self.is_within_bounds(tile)}
        self._revision += 1

    def get_currently_visible_tiles(self) -> Dict[Tile, TileStatus]:
        return dict(self._visible)

    def get_path(self, start: Tile, target: Tile, optimistic: bool = False) -> Optional[List[Tile]]:
        if not self.is_within_bounds(start) or not self.is_within_bounds(target):
            return None
        return self.pathfinder.find_path(start, target, self, optimistic)

    def get_nearest_tile_flood_fill(self, start: Tile, status: TileStatus,
                                    excluded: Optional[Set[Tile]] = None) -> Optional[Tile]:
        if not self.is_within_bounds(start):
            return None
        return flood_fill_nearest(self, start, status, excluded)

    def world_to_tile(self, x: float, y: float) -> Tile:
        """Convert world coordinates to tile coordinates."""
        return (int(math.floor(x / self.resolution)), int(math.floor(y / self.resolution)))

    def tile_to_world(self, tile: Tile) -> Tuple[float, float]:
        """Convert tile coordinates to world coordinates (tile center)."""
        return ((tile[0] + 0.5) * self.resolution, (tile[1] + 0.5) * self.resolution)

    def count_status(self, status: TileStatus) -> int:
        return int(np.count_nonzero(self.grid == int(status)))

    def get_exploration_progress(self) -> float:
        """Percentage of the grid that is no longer Unseen."""
        total = self.width * self.height
        return 100.0 * (total - self.count_status(TileStatus.UNSEEN)) / total
