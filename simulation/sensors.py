"""
Simulated range sensor feeding the robot's occupancy map.

REAL HARDWARE INTEGRATION NOTES:
- Replace `SlamSensor.scan(...)` with the tile observations produced by your
  SLAM backend; keep the {tile: TileStatus} shape so GridSlamMap.update_from_scan
  works unchanged.
"""

from typing import Dict, Tuple
import math

from roomsweep.algorithm_config import VISION_RADIUS
from roomsweep.geometry import Tile, floor_tile, tile_center
from roomsweep.slam import TileStatus


class SlamSensor:
    """
    Ray-casts the ground truth from the robot's tile.
    Each ray stops at (and reports) the first wall tile.
    """

    def __init__(self, environment, vision_radius: int = VISION_RADIUS,
                 ray_step: float = 0.25, num_rays: int = 180):
        self.environment = environment
        self.vision_radius = vision_radius
        self.ray_step = ray_step
        self.num_rays = num_rays
        self.scans = 0

    def scan(self, position: Tuple[float, float]) -> Dict[Tile, TileStatus]:
        """Observed tiles around a position."""
        robot_tile = floor_tile(position)
        origin = tile_center(robot_tile)
        observations: Dict[Tile, TileStatus] = {robot_tile: TileStatus.OPEN}
        angle_step = 2 * math.pi / self.num_rays
        steps = int(self.vision_radius / self.ray_step)

        for i in range(self.num_rays):
            angle = i * angle_step
            cos_a, sin_a = math.cos(angle), math.sin(angle)
            for s in range(1, steps + 1):
                d = s * self.ray_step
                tile = floor_tile((origin[0] + d * cos_a, origin[1] + d * sin_a))
                if not self.environment.is_within_bounds(tile):
                    break
                if self.environment.is_solid(tile):
                    observations[tile] = TileStatus.SOLID
                    break
                observations[tile] = TileStatus.OPEN

        self.scans += 1
        return observations

    def update_map(self, slam_map, position: Tuple[float, float]):
        """Scan and write the result into an occupancy map."""
        slam_map.update_from_scan(self.scan(position))
