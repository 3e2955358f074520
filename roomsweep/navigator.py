"""
Room coverage heuristics.

Picks the next local movement target while the robot explores a room.
Tiers, first applicable wins:
  1. Flood-fill fallback when nothing Unseen is in sensor reach
  2. Wall following (only on fresh occupancy data)
  3. Corner coverage (30 degree arc to the forward-right)
  4. Nearest edge (sweeping counter-clockwise from local right)
  5. Flood-fill fallback
"""

from typing import List, Optional, Tuple

from roomsweep.algorithm_config import VISION_RADIUS
from roomsweep.geometry import (
    CardinalDirection, Tile, add, angle_of, floor_tile, point_from_bearing,
    scale, sub, tile_center,
)
from roomsweep.slam import TileStatus
from roomsweep.states import Waypoint, WaypointType
from roomsweep.tile_scanner import TileScanner
from roomsweep.walls import extract_walls

# Outcomes of a navigation attempt
WAYPOINT = "waypoint"      # a waypoint was committed and a move issued
WAIT = "wait"              # nothing to do this tick (stale map data)
EXHAUSTED = "exhausted"    # nothing left to explore in this room


class RoomNavigator:
    """Next-target selection inside the current room."""

    def __init__(self, controller, doorways, vision_radius: int = VISION_RADIUS):
        self.controller = controller
        self.doorways = doorways
        self.vision_radius = vision_radius
        self.slam_map = controller.get_slam_map()
        self.scanner = TileScanner(self.slam_map)
        self.last_sampled_revision: Optional[int] = None
        self.waypoint: Optional[Waypoint] = None
        self.last_tier: Optional[str] = None
        self.debug = False

    @property
    def position(self) -> Tuple[float, float]:
        return self.controller.get_position()

    @property
    def robot_tile(self) -> Tile:
        return floor_tile(self.controller.get_position())

    @property
    def heading(self) -> float:
        return self.controller.get_global_angle()

    def explore(self, flood_only: bool = False) -> str:
        """
        Run the tiers; a committed waypoint is left in self.waypoint.
        flood_only skips straight to the flood-fill fallback.
        """
        self.waypoint = None
        if flood_only or not self.is_around_explorable(2):
            self.last_tier = "flood_fill"
            return self.move_to_nearest_unseen_within_room()

        wall = self.move_along_wall()
        if wall is not None:
            self.last_tier = "wall"
            return wall
        if self.move_to_corner_coverage():
            self.last_tier = "corner"
            return WAYPOINT
        if self.move_to_nearest_edge():
            self.last_tier = "edge"
            return WAYPOINT
        self.last_tier = "flood_fill"
        return self.move_to_nearest_unseen_within_room()

    # ── Tier 1/5: flood fill ────────────────────────────────────────────

    def move_to_nearest_unseen_within_room(self) -> str:
        """Path to the Open tile next to the nearest reachable Unseen tile."""
        here = self.robot_tile
        # Doorways we stand in must not wall us in
        excluded = self.doorways.all_tiles(skip=self.doorways.containing(here))
        unseen = self.slam_map.get_nearest_tile_flood_fill(here, TileStatus.UNSEEN, excluded)
        if unseen is None:
            return EXHAUSTED
        target = self.slam_map.get_nearest_tile_flood_fill(unseen, TileStatus.OPEN)
        if target is None or not self.controller.path_and_move_to(target):
            # Frontier exists but cannot be reached from here
            return EXHAUSTED
        self.waypoint = Waypoint(target, WaypointType.GREED, True)
        if self.debug:
            print(f"R{self.controller.get_robot_id()}: flood fill -> {target} (unseen {unseen})")
        return WAYPOINT

    # ── Tier 2: wall following ──────────────────────────────────────────

    def move_along_wall(self) -> Optional[str]:
        """WAYPOINT/WAIT when handled, None to fall through."""
        revision = self.slam_map.revision
        if revision == self.last_sampled_revision:
            # Map has not refreshed since the last sample
            return WAIT
        self.last_sampled_revision = revision

        position, heading = self.position, self.heading
        tiles = [tile for tile in self.scanner.tiles_around_robot(position, self.vision_radius + 2,
                                                                  [TileStatus.SOLID])
                 if self.slam_map.get_tile_status(tile) == TileStatus.SOLID]
        if len(tiles) < 2:
            return None

        tile_ahead = self.scanner.furthest_tile_around_robot(position, heading, self.vision_radius,
                                                             [TileStatus.SOLID])
        ahead_blocked = self.slam_map.get_tile_status(tile_ahead) == TileStatus.SOLID
        local_left = (heading + (90.0 if ahead_blocked else 0.0)) % 360.0

        here = self.robot_tile
        walls = extract_walls(tiles, self.slam_map)
        wall_points = list(dict.fromkeys([w.start for w in walls] + [w.end for w in walls]))
        wall_points.sort(key=lambda p: (angle_of(sub(p, here)) - local_left) % 360.0, reverse=True)

        offset = self.vision_radius - 2
        candidates = []
        for point in wall_points:
            perpendicular = CardinalDirection.perpendicular(sub(point, here)).vector
            perp = add(point, scale(perpendicular, offset))
            if self.slam_map.is_within_bounds(perp) and \
                    self.slam_map.get_tile_status(perp) != TileStatus.SOLID:
                candidates.append((perp, point))
        if not candidates:
            return None

        perp, point = candidates[0]
        third_direction = CardinalDirection.from_degrees(angle_of(sub(perp, here)) + 270.0).vector
        third_point = add(perp, scale(third_direction, offset))
        along = CardinalDirection.from_vector(sub(third_point, point)).vector
        side = CardinalDirection.perpendicular(along).vector
        for i in range(1, 4):
            possible_unseen = add(add(third_point, scale(along, i)), side)
            if self.slam_map.is_within_bounds(possible_unseen) and \
                    self.slam_map.get_tile_status(possible_unseen) == TileStatus.UNSEEN:
                self.controller.move_to(perp)
                self.waypoint = Waypoint(perp, WaypointType.WALL)
                if self.debug:
                    print(f"R{self.controller.get_robot_id()}: wall follow -> {perp}")
                return WAYPOINT
        return None

    # ── Tier 3: corner coverage ─────────────────────────────────────────

    def move_to_corner_coverage(self) -> bool:
        if self.is_ahead_explorable(1) and self.is_ahead_explorable(2):
            return False
        position, heading = self.position, self.heading
        # 30 degrees to the right of the forward direction
        tiles = self.scanner.tiles_around_robot(position, self.vision_radius + 2,
                                                [TileStatus.UNSEEN, TileStatus.SOLID],
                                                start_angle=heading - 30.0, arc=30.0)
        corner_coverage = [t for t in tiles if self.slam_map.get_tile_status(t) == TileStatus.UNSEEN]
        if not corner_coverage:
            return False
        location = corner_coverage[0]
        self.controller.move_to(location)
        self.waypoint = Waypoint(location, WaypointType.CORNER)
        if self.debug:
            print(f"R{self.controller.get_robot_id()}: corner -> {location}")
        return True

    # ── Tier 4: nearest edge ────────────────────────────────────────────

    def move_to_nearest_edge(self) -> bool:
        here = self.robot_tile
        offset = self.vision_radius - 1
        candidates: List[Tile] = []
        for tile in self.scanner.box_around_robot(self.position, self.vision_radius):
            status = self.slam_map.get_tile_status(tile)
            if status == TileStatus.UNSEEN or not self.is_perpendicular_unseen(tile):
                continue
            perpendicular = CardinalDirection.perpendicular(sub(tile, here)).vector
            perp = add(tile, scale(perpendicular, offset))
            if not self.slam_map.is_within_bounds(perp):
                continue
            if status == TileStatus.SOLID and self.slam_map.get_path(here, perp) is None:
                continue
            candidates.append(perp)
        if not candidates:
            return False

        # Sweep counter-clockwise from local right
        local_right = (self.heading + 270.0) % 360.0
        closest = min(candidates, key=lambda t: (angle_of(sub(t, here)) - local_right) % 360.0)
        origin = tile_center(here)
        bearing = angle_of((closest[0] + 0.5 - origin[0], closest[1] + 0.5 - origin[1]))
        target = point_from_bearing(origin, bearing, self.vision_radius + 1)
        if not self.slam_map.is_within_bounds(target):
            return False
        self.controller.move_to(target)
        self.waypoint = Waypoint(target, WaypointType.EDGE)
        if self.debug:
            print(f"R{self.controller.get_robot_id()}: edge -> {target}")
        return True

    # ── Helpers ─────────────────────────────────────────────────────────

    def is_perpendicular_unseen(self, tile: Tile) -> bool:
        direction = CardinalDirection.perpendicular(sub(tile, self.robot_tile)).vector
        perp = add(tile, direction)
        if not self.slam_map.is_within_bounds(perp):
            return False
        return self.slam_map.get_tile_status(perp) == TileStatus.UNSEEN

    def is_ahead_explorable(self, extra: int) -> bool:
        direction = CardinalDirection.from_degrees(self.heading).vector
        target = add(scale(direction, self.vision_radius + extra), self.robot_tile)
        if self.slam_map.is_within_bounds(target):
            return self.slam_map.get_tile_status(target) == TileStatus.UNSEEN
        return False

    def is_around_explorable(self, extra: int) -> bool:
        """Any Unseen tile within ray reach (rays stop at Solid)."""
        tiles = self.scanner.tiles_around_robot(self.position, self.vision_radius + extra,
                                                [TileStatus.SOLID])
        return any(self.slam_map.get_tile_status(t) == TileStatus.UNSEEN for t in tiles)
