"""
Environment representation
Models building interiors as tile grids: '#' wall, '.' floor
"""

import numpy as np
from typing import Dict, List, Sequence, Tuple

Tile = Tuple[int, int]

# Building layouts - first row is the northern edge, every room connected by doors
LAYOUTS: Dict[str, Dict] = {
    "single_room": {
        "rows": [
            "############",
            "#..........#",
            "#..........#",
            "#..........#",
            "#..........#",
            "#..........#",
            "#..........#",
            "#..........#",
            "#..........#",
            "############",
        ],
        "spawns": [(5, 4), (6, 4), (5, 5), (6, 5)],
    },
    "two_rooms": {
        "rows": [
            "####################",
            "#........#.........#",
            "#........#.........#",
            "#........#.........#",
            "#..................#",
            "#..................#",
            "#........#.........#",
            "#........#.........#",
            "#........#.........#",
            "#........#.........#",
            "#........#.........#",
            "####################",
        ],
        "spawns": [(4, 5), (5, 5), (4, 4), (5, 4), (3, 5), (6, 5)],
    },
    "three_rooms": {
        "rows": [
            "########################",
            "#.......#..............#",
            "#.......#..............#",
            "#.......#..............#",
            "#.......#..............#",
            "#.......#..............#",
            "#.......#######..#######",
            "#.......#..............#",
            "#......................#",
            "#......................#",
            "#.......#..............#",
            "#.......#..............#",
            "#.......#..............#",
            "#.......#..............#",
            "#.......#..............#",
            "########################",
        ],
        "spawns": [(4, 7), (4, 6), (3, 7), (5, 6), (3, 6), (5, 7)],
    },
}


class Environment:
    """
    Represents the building the robots explore.
    Ground truth is a boolean numpy grid (True = wall) indexed [y, x].
    """

    def __init__(self, layout: str = "two_rooms"):
        """Initialize environment from a named layout."""
        if layout not in LAYOUTS:
            raise ValueError(f"unknown layout '{layout}', choose from {sorted(LAYOUTS)}")
        self.layout_name = layout
        self.solid = self._parse(LAYOUTS[layout]["rows"])
        self.height, self.width = self.solid.shape
        self.spawns: List[Tile] = list(LAYOUTS[layout]["spawns"])
        print(f"Environment: layout '{layout}' ({self.width}x{self.height} tiles, "
              f"{self.count_floor()} floor tiles)")

    @staticmethod
    def _parse(rows: Sequence[str]) -> np.ndarray:
        height = len(rows)
        width = max(len(row) for row in rows)
        # Anything outside the drawn rows is wall
        solid = np.ones((height, width), dtype=bool)
        for row_index, row in enumerate(rows):
            y = height - 1 - row_index
            for x, char in enumerate(row):
                solid[y, x] = char == '#'
        return solid

    def is_within_bounds(self, tile: Tile) -> bool:
        return 0 <= tile[0] < self.width and 0 <= tile[1] < self.height

    def is_solid(self, tile: Tile) -> bool:
        """Out-of-bounds counts as wall."""
        if not self.is_within_bounds(tile):
            return True
        return bool(self.solid[tile[1], tile[0]])

    def count_floor(self) -> int:
        return int(np.count_nonzero(~self.solid))

    def floor_tiles(self) -> List[Tile]:
        ys, xs = np.nonzero(~self.solid)
        return [(int(x), int(y)) for x, y in zip(xs, ys)]

    def spawn_points(self, count: int) -> List[Tile]:
        """First `count` spawn tiles of the layout."""
        if count > len(self.spawns):
            raise ValueError(f"layout '{self.layout_name}' has {len(self.spawns)} spawn points, "
                             f"{count} robots requested")
        return self.spawns[:count]
