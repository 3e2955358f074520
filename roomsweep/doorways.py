"""
Doorways and the doorway detection state machine.

Detection runs while the robot follows a wall:
  NONE   -> the straight wall run through the nearest Solid tile has an
            Open gap further along it:
            drive DOOR_WIDTH past the gap to confirm       -> SINGLE
  SINGLE -> confirmation point reached and the nearest wall run lies on
            the same line: register a Doorway between the recorded
            corner and the nearest wall tile                -> NONE
            wall gone: drop the candidate                   -> NONE
  INTERSECTION is reserved for multi-wall junctions and is never entered.
"""

from dataclasses import dataclass
from typing import FrozenSet, Iterator, List, Optional, Sequence, Set, Tuple

from roomsweep.algorithm_config import (
    CLOCKWISE, DOOR_WIDTH, DOORWAY_EPSILON, VISION_RADIUS, WALL_EPSILON,
)
from roomsweep.geometry import (
    CardinalDirection, Line2D, Tile, add, angle_of, distance, floor_tile,
    scale, sub, tile_center,
)
from roomsweep.slam import TileStatus
from roomsweep.states import DoorState, Waypoint, WaypointType
from roomsweep.walls import WallSegment, extract_walls, wall_run, walls_collinear


@dataclass(eq=False)
class Doorway:
    """Opening between two rooms. Compare with doorways_equal, not ==."""
    center: Tile
    approach_direction: CardinalDirection
    tiles: FrozenSet[Tile]
    width: int = DOOR_WIDTH
    explored: bool = False

    @classmethod
    def from_corners(cls, corner_a: Tile, corner_b: Tile,
                     approach_direction: CardinalDirection,
                     width: int = DOOR_WIDTH) -> 'Doorway':
        """Doorway spanning two wall corners, one tile deep on each side."""
        center = ((corner_a[0] + corner_b[0]) // 2, (corner_a[1] + corner_b[1]) // 2)
        step = approach_direction.vector
        tiles = frozenset(add(tile, scale(step, k))
                          for tile in Line2D(corner_a, corner_b).rasterize()
                          for k in (-1, 0, 1))
        return cls(center=center, approach_direction=approach_direction,
                   tiles=tiles, width=width)

    def mark_explored(self) -> bool:
        """Set the explored flag; returns False if it was already set."""
        if self.explored:
            return False
        self.explored = True
        return True


def doorways_equal(a: Doorway, b: Doorway, epsilon: float = DOORWAY_EPSILON) -> bool:
    """Same physical doorway: centers within epsilon tiles."""
    return distance(a.center, b.center) <= epsilon


class DoorwayRegistry:
    """
    The doorways one robot knows about.
    Registration is idempotent under geometric equality.
    """

    def __init__(self, epsilon: float = DOORWAY_EPSILON):
        self.epsilon = epsilon
        self._doorways: List[Doorway] = []

    def __len__(self) -> int:
        return len(self._doorways)

    def __iter__(self) -> Iterator[Doorway]:
        return iter(list(self._doorways))

    def find(self, doorway: Doorway) -> Optional[Doorway]:
        for known in list(self._doorways):
            if doorways_equal(known, doorway, self.epsilon):
                return known
        return None

    def register(self, doorway: Doorway) -> Tuple[Doorway, bool]:
        """Add unless already known. Returns (local instance, was_new)."""
        known = self.find(doorway)
        if known is not None:
            return known, False
        self._doorways.append(doorway)
        return doorway, True

    def unexplored(self) -> List[Doorway]:
        return [d for d in self._doorways if not d.explored]

    def all_tiles(self, skip: Sequence[Doorway] = ()) -> Set[Tile]:
        """Union of the tiles of every doorway except those in skip."""
        tiles: Set[Tile] = set()
        for doorway in list(self._doorways):
            if any(doorway is s for s in skip):
                continue
            tiles.update(doorway.tiles)
        return tiles

    def containing(self, tile: Tile) -> List[Doorway]:
        return [d for d in self._doorways if tile in d.tiles]


class DoorwayDetector:
    """Doorway detection sub-state machine for one robot."""

    def __init__(self, slam_map, doorways: DoorwayRegistry,
                 vision_radius: int = VISION_RADIUS, door_width: int = DOOR_WIDTH,
                 clockwise: bool = CLOCKWISE, wall_epsilon: float = WALL_EPSILON,
                 robot_id: int = 0):
        self.slam_map = slam_map
        self.doorways = doorways
        self.vision_radius = vision_radius
        self.door_width = door_width
        self.clockwise = clockwise
        self.wall_epsilon = wall_epsilon
        self.robot_id = robot_id
        self.state = DoorState.NONE
        self.corner_tile: Optional[Tile] = None
        self.last_walls: List[WallSegment] = []
        self.debug = False

    def update(self, wall_tiles: List[Tile], position: Tuple[float, float], heading: float,
               waypoint: Optional[Waypoint], destination_reached: bool
               ) -> Tuple[Optional[Waypoint], Optional[Doorway]]:
        """
        One detection step.

        wall_tiles: visible Solid tiles ordered by distance to the robot.
        Returns (confirmation waypoint to drive to, newly registered doorway).
        """
        if self.state == DoorState.NONE:
            if waypoint is not None and waypoint.type == WaypointType.WALL:
                confirmation = self.detect(wall_tiles, position, heading)
                if confirmation is not None:
                    return confirmation, None
        elif self.state == DoorState.SINGLE:
            if destination_reached:
                return None, self.confirm(wall_tiles, position, heading)
            if waypoint is None:
                # Confirmation move was cancelled
                self._reset()
        elif self.state == DoorState.INTERSECTION:
            pass
        return None, None

    def detect(self, wall_tiles: List[Tile], position: Tuple[float, float],
               heading: float) -> Optional[Waypoint]:
        """NONE-state check for a gap along the nearest wall."""
        run = self.nearest_run(wall_tiles, position, heading)
        walls = extract_walls(run, self.slam_map)
        if len(walls) != 1:
            return None

        start, end = self.sort_single_wall(walls[0], position, heading)
        direction = CardinalDirection.from_vector(sub(end, start)).vector
        visible = self.slam_map.get_currently_visible_tiles()
        gap = None
        for r in range(self.vision_radius * 2):
            tile = add(start, scale(direction, r))
            if visible.get(tile) == TileStatus.OPEN:
                gap = tile
                break
        if gap is None:
            return None

        robot_tile = floor_tile(position)
        offset = sub(gap, robot_tile)
        along_wall = (offset[0] * abs(direction[0]), offset[1] * abs(direction[1]))
        destination = add(add(robot_tile, along_wall), scale(direction, self.door_width))

        self.corner_tile = end
        self.last_walls = walls
        self.state = DoorState.SINGLE
        if self.debug:
            print(f"R{self.robot_id}: doorway candidate after {end}, confirming at {destination}")
        return Waypoint(destination, WaypointType.DOOR)

    def confirm(self, wall_tiles: List[Tile], position: Tuple[float, float],
                heading: float) -> Optional[Doorway]:
        """SINGLE-state check once the confirmation point is reached."""
        corner = self.corner_tile
        last_walls = self.last_walls
        self._reset()
        if corner is None:
            return None

        run = self.nearest_run(wall_tiles, position, heading)
        walls = extract_walls(run, self.slam_map)
        if not any(walls_collinear(wall, old, self.wall_epsilon) for wall in walls for old in last_walls):
            if self.debug:
                print(f"R{self.robot_id}: wall changed, doorway candidate at {corner} dropped")
            return None

        offset = 90.0 if self.clockwise else 270.0
        approach = CardinalDirection.from_degrees(heading + offset)
        doorway = Doorway.from_corners(corner, run[0], approach, self.door_width)
        _, is_new = self.doorways.register(doorway)
        if not is_new:
            return None
        if self.debug:
            print(f"R{self.robot_id}: doorway at {doorway.center} facing {approach.name}")
        return doorway

    def nearest_run(self, wall_tiles: List[Tile], position: Tuple[float, float],
                    heading: float) -> List[Tile]:
        """
        The straight run of wall tiles through the nearest one.
        Equally near tiles are ordered by the sweep from the robot's rear.
        """
        if not wall_tiles:
            return []
        origin = tile_center(floor_tile(position))
        nearest = min(distance(origin, tile_center(t)) for t in wall_tiles)
        closest = [t for t in wall_tiles if distance(origin, tile_center(t)) - nearest < 1e-9]
        seed = min(closest, key=lambda t: self._rear_sweep(t, origin, heading))
        run = wall_run(seed, wall_tiles)
        run.remove(seed)
        return [seed] + run

    def sort_single_wall(self, wall: WallSegment, position: Tuple[float, float],
                         heading: float) -> Tuple[Tile, Tile]:
        """Order endpoints by sweeping counter-clockwise from the robot's rear."""
        origin = tile_center(floor_tile(position))
        ordered = sorted([wall.raw_start, wall.raw_end],
                         key=lambda t: self._rear_sweep(t, origin, heading))
        return ordered[0], ordered[-1]

    @staticmethod
    def _rear_sweep(tile: Tile, origin: Tuple[float, float], heading: float) -> float:
        vector = (tile[0] + 0.5 - origin[0], tile[1] + 0.5 - origin[1])
        return (angle_of(vector) - (heading + 180.0)) % 360.0

    def _reset(self):
        self.state = DoorState.NONE
        self.corner_tile = None
        self.last_walls = []
