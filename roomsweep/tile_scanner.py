"""
Ray, arc and box queries over the robot's occupancy map.
Rays start at the center of the robot's tile.
"""

from typing import Iterable, List, Tuple
import math

from roomsweep.geometry import Tile, floor_tile, tile_center


class TileScanner:
    """Looks around the robot on its own map."""

    def __init__(self, slam_map, ray_step: float = 0.5, angle_step: float = 2.0):
        self.slam_map = slam_map
        self.ray_step = ray_step
        self.angle_step = angle_step

    def _ray(self, position: Tuple[float, float], angle: float, radius: float):
        """Tiles along a ray out to radius, robot tile excluded, in order."""
        robot_tile = floor_tile(position)
        origin = tile_center(robot_tile)
        rad = math.radians(angle)
        cos_a, sin_a = math.cos(rad), math.sin(rad)
        last = robot_tile
        steps = int(radius / self.ray_step)
        for i in range(1, steps + 1):
            d = i * self.ray_step
            tile = floor_tile((origin[0] + d * cos_a, origin[1] + d * sin_a))
            if tile == last:
                continue
            last = tile
            if not self.slam_map.is_within_bounds(tile):
                return
            yield tile

    def tiles_around_robot(self, position: Tuple[float, float], radius: float,
                           stop_at: Iterable, start_angle: float = 0.0,
                           arc: float = 360.0) -> List[Tile]:
        """
        Sweep rays counter-clockwise from start_angle over `arc` degrees.
        Each ray stops at (and includes) the first tile whose status is in stop_at.
        Returns unique tiles in sweep order.
        """
        stop_at = set(stop_at)
        seen = set()
        tiles = []
        rays = max(1, int(round(arc / self.angle_step)))
        for i in range(rays + 1 if arc < 360.0 else rays):
            angle = start_angle + i * self.angle_step
            for tile in self._ray(position, angle, radius):
                if tile not in seen:
                    seen.add(tile)
                    tiles.append(tile)
                if self.slam_map.get_tile_status(tile) in stop_at:
                    break
        return tiles

    def furthest_tile_around_robot(self, position: Tuple[float, float], angle: float,
                                   radius: float, stop_at: Iterable) -> Tile:
        """Last tile along a ray before radius, or the first stopping tile."""
        stop_at = set(stop_at)
        furthest = floor_tile(position)
        for tile in self._ray(position, angle, radius):
            furthest = tile
            if self.slam_map.get_tile_status(tile) in stop_at:
                break
        return furthest

    def box_around_robot(self, position: Tuple[float, float], radius: int) -> List[Tile]:
        """In-bounds tiles of the square of half-size radius, robot tile excluded."""
        cx, cy = floor_tile(position)
        tiles = []
        for y in range(cy - radius, cy + radius + 1):
            for x in range(cx - radius, cx + radius + 1):
                if (x, y) == (cx, cy):
                    continue
                if self.slam_map.is_within_bounds((x, y)):
                    tiles.append((x, y))
        return tiles
