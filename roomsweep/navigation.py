"""
Navigation algorithms on the tile grid
Includes A* pathfinding and flood-fill nearest-tile search
Designed for small per-robot maps with minimal memory usage
"""

import math
import heapq
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from roomsweep.algorithm_config import PATH_MAX_ITERATIONS
from roomsweep.geometry import CardinalDirection, Tile, add, distance, tile_center

_FOUR_CONNECTED = [(1, 0), (0, 1), (-1, 0), (0, -1)]


@dataclass
class PathNode:
    """Node for A* search."""
    tile: Tile
    g_cost: float = float('inf')  # Cost from start
    h_cost: float = 0.0           # Heuristic cost to goal
    parent: Optional['PathNode'] = field(default=None, repr=False)

    @property
    def f_cost(self) -> float:
        """Total cost (g + h)."""
        return self.g_cost + self.h_cost

    def __lt__(self, other):
        """For priority queue comparison; equal totals prefer the lower heuristic."""
        if abs(self.f_cost - other.f_cost) < 0.01:
            return self.h_cost < other.h_cost
        return self.f_cost < other.f_cost


class AStarPathfinder:
    """
    A* pathfinding over an occupancy map.

    The map must provide `is_blocked(tile, optimistic)`. Only Open tiles are
    traversable unless `optimistic` is set, in which case Unseen tiles are too.
    The target tile itself is always enterable.
    """

    def __init__(self, max_iterations: int = PATH_MAX_ITERATIONS):
        self.max_iterations = max_iterations

    def find_path(self, start: Tile, goal: Tile, occupancy_map,
                  optimistic: bool = False) -> Optional[List[Tile]]:
        """
        Find optimal path from start to goal using A*.
        Returns the list of tiles (start and goal included) or None if no path found.
        """
        start_node = PathNode(start, g_cost=0.0, h_cost=self._heuristic(start, goal))
        open_set: List[PathNode] = [start_node]
        best_g: Dict[Tile, float] = {start: 0.0}
        closed_set: Set[Tile] = set()

        iterations = 0
        while open_set:
            iterations += 1
            if iterations > self.max_iterations:
                return None

            current = heapq.heappop(open_set)
            if current.tile in closed_set:
                continue
            if current.tile == goal:
                return self._reconstruct_path(current)
            closed_set.add(current.tile)

            for direction in CardinalDirection.all_directions():
                neighbor = add(current.tile, direction.vector)
                if neighbor in closed_set:
                    continue
                if neighbor != goal and occupancy_map.is_blocked(neighbor, optimistic):
                    continue
                if direction.is_diagonal():
                    # To travel diagonally, the two neighbouring tiles must also be free
                    if (occupancy_map.is_blocked(add(current.tile, direction.previous().vector), optimistic) or
                            occupancy_map.is_blocked(add(current.tile, direction.next().vector), optimistic)):
                        continue

                tentative_g = current.g_cost + distance(current.tile, neighbor)
                if tentative_g < best_g.get(neighbor, float('inf')):
                    best_g[neighbor] = tentative_g
                    heapq.heappush(open_set, PathNode(neighbor, tentative_g,
                                                      self._heuristic(neighbor, goal), current))

        # No path found
        return None

    def _heuristic(self, a: Tile, b: Tile) -> float:
        """Octile distance."""
        dx = abs(a[0] - b[0])
        dy = abs(a[1] - b[1])
        return max(dx, dy) - min(dx, dy) + min(dx, dy) * math.sqrt(2.0)

    def _reconstruct_path(self, node: PathNode) -> List[Tile]:
        """Reconstruct path from goal node back to start."""
        path = []
        current = node
        while current is not None:
            path.append(current.tile)
            current = current.parent
        path.reverse()
        return path


def flood_fill_nearest(occupancy_map, start: Tile, status,
                       excluded: Optional[Set[Tile]] = None) -> Optional[Tile]:
    """
    Breadth-first search for the nearest tile with the given status.
    Spreads through every non-Solid tile except those in `excluded`
    (the start tile is always expanded).
    """
    excluded = excluded or set()
    visited = {start}
    queue = deque([start])
    while queue:
        tile = queue.popleft()
        if occupancy_map.get_tile_status(tile) == status:
            return tile
        if tile != start and occupancy_map.is_blocked(tile, True):
            continue
        for offset in _FOUR_CONNECTED:
            neighbor = add(tile, offset)
            if neighbor in visited or neighbor in excluded:
                continue
            if not occupancy_map.is_within_bounds(neighbor):
                continue
            visited.add(neighbor)
            queue.append(neighbor)
    return None


def path_distance(position: Tuple[float, float], path: List[Tile]) -> float:
    """Real distance the robot travels from `position` along a tile path."""
    if not path:
        return 0.0
    total = distance(position, tile_center(path[0]))
    for a, b in zip(path, path[1:]):
        total += distance(a, b)
    return total
