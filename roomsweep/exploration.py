"""
Exploration state machine - one instance per robot, one update per tick.

IDLE -> FIRST_WALL -> EXPLORE_ROOM -> MOVING_TO_DOORWAY -> ... -> DONE
                          |  ^               ^
                          v  |               |
                        AUCTIONING ----------+

Only talks to the outside world through RobotControllerInterface, so the
same logic runs against the simulator or a real base.
"""

from typing import List, Optional, Tuple

from roomsweep.algorithm_config import (
    AUCTION_TIMEOUT_TICKS, CLOCKWISE, DOOR_WIDTH, DOORWAY_EPSILON, NAVIGATION_STALL_TICKS,
    VISION_RADIUS, WALL_EPSILON, WAYPOINT_TOLERANCE,
)
from roomsweep.bidding import BiddingCoordinator
from roomsweep.doorways import Doorway, DoorwayDetector, DoorwayRegistry
from roomsweep.geometry import Tile, angle_of, distance, floor_tile, tile_center
from roomsweep.navigation import path_distance
from roomsweep.navigator import EXHAUSTED, WAYPOINT, RoomNavigator
from roomsweep.robot_controller import RobotStatus
from roomsweep.slam import TileStatus
from roomsweep.states import AlgorithmState, Waypoint, WaypointType
from roomsweep.tile_scanner import TileScanner


class ExplorationAlgorithm:
    """Per-robot decision core."""

    def __init__(self, controller, team_size: int = 1,
                 vision_radius: int = VISION_RADIUS, door_width: int = DOOR_WIDTH,
                 clockwise: bool = CLOCKWISE, doorway_epsilon: float = DOORWAY_EPSILON,
                 wall_epsilon: float = WALL_EPSILON,
                 auction_timeout_ticks: int = AUCTION_TIMEOUT_TICKS,
                 stall_ticks: int = NAVIGATION_STALL_TICKS,
                 debug: bool = False):
        if team_size < 1:
            raise ValueError(f"team_size must be at least 1, got {team_size}")
        if vision_radius < 3:
            raise ValueError(f"vision_radius must be at least 3, got {vision_radius}")

        self.controller = controller
        self.robot_id = controller.get_robot_id()
        self.slam_map = controller.get_slam_map()
        self.vision_radius = vision_radius

        self.state = AlgorithmState.IDLE
        self.waypoint: Optional[Waypoint] = None
        self.ticks = 0

        self.doorways = DoorwayRegistry(doorway_epsilon)
        self.detector = DoorwayDetector(self.slam_map, self.doorways, vision_radius,
                                        door_width, clockwise, wall_epsilon, self.robot_id)
        self.navigator = RoomNavigator(controller, self.doorways, vision_radius)
        self.coordinator = BiddingCoordinator(controller, self.doorways, team_size,
                                              auction_timeout_ticks, doorway_epsilon)
        self.scanner = TileScanner(self.slam_map)

        # Progress watchdog: no new map tiles for stall_ticks -> flood fill only
        self.stall_ticks = stall_ticks
        self.known_tiles = 0
        self.stalled_ticks = 0
        self.flood_only = False

        self.collisions = 0
        self.doorways_traversed = 0
        self.debug = debug

    @property
    def debug(self) -> bool:
        return self._debug

    @debug.setter
    def debug(self, value: bool):
        self._debug = value
        self.detector.debug = value
        self.navigator.debug = value
        self.coordinator.debug = value

    # ── Tick ────────────────────────────────────────────────────────────

    def update_logic(self):
        """Run one decision tick."""
        self.ticks += 1
        self._watch_progress()

        if self.controller.is_currently_colliding():
            self._handle_collision()
            return

        for doorway in self.coordinator.handle_messages():
            if self.state in (AlgorithmState.EXPLORE_ROOM, AlgorithmState.AUCTIONING):
                self._set_state(AlgorithmState.MOVING_TO_DOORWAY,
                                f"won doorway {doorway.center}")

        wall_tiles = self.visible_wall_tiles()
        self._update_doorway_detection(wall_tiles)

        if self.waypoint is not None:
            self._follow_waypoint()
            if self.waypoint is not None:
                return

        if self.state == AlgorithmState.IDLE:
            self.controller.start_moving()
            self._set_state(AlgorithmState.FIRST_WALL, "started")
        elif self.state == AlgorithmState.FIRST_WALL:
            self._first_wall(wall_tiles)
        elif self.state == AlgorithmState.EXPLORE_ROOM:
            self._explore_room()
        elif self.state == AlgorithmState.AUCTIONING:
            self._auctioning()
        elif self.state == AlgorithmState.MOVING_TO_DOORWAY:
            self._moving_to_doorway()
        elif self.state == AlgorithmState.DONE:
            pass

    def _handle_collision(self):
        self.collisions += 1
        if self.controller.get_status() == RobotStatus.MOVING:
            self.controller.stop_current_task()
        else:
            self.controller.move(1, reverse=True)
        if self.debug:
            print(f"R{self.robot_id}: collision, waypoint {self.waypoint} dropped")
        self.waypoint = None

    def _watch_progress(self):
        """Fall back to flood-fill navigation once the map stops growing in a room."""
        if self.state != AlgorithmState.EXPLORE_ROOM or self.flood_only:
            return
        known = (self.slam_map.count_status(TileStatus.OPEN) +
                 self.slam_map.count_status(TileStatus.SOLID))
        if known > self.known_tiles:
            self.known_tiles = known
            self.stalled_ticks = 0
            return
        self.stalled_ticks += 1
        if self.stalled_ticks >= self.stall_ticks:
            self.flood_only = True
            if self.debug:
                print(f"R{self.robot_id}: no new tiles for {self.stalled_ticks} ticks, "
                      "flood fill only until the room is done")

    def _update_doorway_detection(self, wall_tiles: List[Tile]):
        reached = self.waypoint is not None and self.is_reached(self.waypoint.destination)
        confirmation, doorway = self.detector.update(wall_tiles, self.controller.get_position(),
                                                     self.controller.get_global_angle(),
                                                     self.waypoint, reached)
        if confirmation is not None:
            self.waypoint = confirmation
            self.controller.move_to(confirmation.destination)
        if doorway is not None:
            self.coordinator.open_auction(doorway, self.ticks)

    # ── Waypoints ───────────────────────────────────────────────────────

    def is_reached(self, tile: Tile) -> bool:
        return distance(self.controller.get_position(), tile_center(tile)) < WAYPOINT_TOLERANCE

    def _follow_waypoint(self):
        """Keep the active waypoint moving, or clear it when reached/invalid."""
        destination = self.waypoint.destination
        if self.is_reached(destination):
            if self.debug:
                print(f"R{self.robot_id}: reached {self.waypoint.type.value} waypoint {destination}")
            self.waypoint = None
            return

        if self.waypoint.use_pathing:
            if self.controller.get_status() == RobotStatus.IDLE and \
                    not self.controller.path_and_move_to(destination):
                self.controller.stop_current_task()
                self.waypoint = None
            return

        position = self.controller.get_position()
        origin = tile_center(floor_tile(position))
        target = tile_center(destination)
        reach = min(self.vision_radius - 2, distance(origin, target))
        ahead = self.scanner.furthest_tile_around_robot(
            position, angle_of((target[0] - origin[0], target[1] - origin[1])), reach,
            [TileStatus.SOLID])
        if self.slam_map.get_tile_status(ahead) == TileStatus.SOLID:
            if self.debug:
                print(f"R{self.robot_id}: {ahead} blocks waypoint {destination}, cancelled")
            self.controller.stop_current_task()
            self.waypoint = None
            return
        self.controller.move_to(destination)

    # ── States ──────────────────────────────────────────────────────────

    def _first_wall(self, wall_tiles: List[Tile]):
        if wall_tiles:
            nearest = distance(tile_center(floor_tile(self.controller.get_position())),
                               tile_center(wall_tiles[0]))
            if nearest / 2 < self.vision_radius - 1:
                self.controller.stop_current_task()
                self._set_state(AlgorithmState.EXPLORE_ROOM, f"wall at {wall_tiles[0]}")
                return
        if self.controller.get_status() == RobotStatus.IDLE:
            self.controller.start_moving()

    def _explore_room(self):
        if self.controller.get_status() != RobotStatus.IDLE:
            return
        result = self.navigator.explore(flood_only=self.flood_only)
        if result == WAYPOINT:
            self.waypoint = self.navigator.waypoint
        elif result == EXHAUSTED:
            if self.coordinator.has_open_auctions():
                self._set_state(AlgorithmState.AUCTIONING, "room exhausted, resolving bids")
            else:
                self._set_state(AlgorithmState.MOVING_TO_DOORWAY, "room exhausted")

    def _auctioning(self):
        self.coordinator.resolve_ready(self.ticks)
        if self.coordinator.has_claim():
            self._set_state(AlgorithmState.MOVING_TO_DOORWAY, "doorway claimed")
        elif not self.coordinator.has_open_auctions():
            self._set_state(AlgorithmState.EXPLORE_ROOM, "all doorways awarded elsewhere")

    def _moving_to_doorway(self):
        target = self.select_doorway()
        if target is None:
            self._set_state(AlgorithmState.DONE, "no reachable unexplored doorway")
            return
        doorway, _ = target
        self.controller.path_and_move_to(doorway.center)
        self.waypoint = Waypoint(doorway.center, WaypointType.DOOR, True)
        doorway.mark_explored()
        self.doorways_traversed += 1
        self._set_state(AlgorithmState.EXPLORE_ROOM, f"heading through doorway {doorway.center}")

    def select_doorway(self) -> Optional[Tuple[Doorway, List[Tile]]]:
        """Claimed doorway if reachable, else the nearest unexplored one by path distance."""
        position = self.controller.get_position()
        here = floor_tile(position)
        claimed = self.coordinator.next_claim()
        if claimed is not None:
            path = self.slam_map.get_path(here, claimed.center)
            if path is not None:
                return claimed, path

        best = None
        best_distance = float('inf')
        for doorway in self.doorways.unexplored():
            path = self.slam_map.get_path(here, doorway.center)
            if path is None:
                continue
            d = path_distance(position, path)
            if d < best_distance:
                best, best_distance = (doorway, path), d
        return best

    # ── Helpers ─────────────────────────────────────────────────────────

    def visible_wall_tiles(self) -> List[Tile]:
        """Currently visible Solid tiles, nearest first."""
        origin = tile_center(floor_tile(self.controller.get_position()))
        visible = self.slam_map.get_currently_visible_tiles()
        tiles = [tile for tile, status in visible.items() if status == TileStatus.SOLID]
        tiles.sort(key=lambda t: (distance(origin, tile_center(t)), t))
        return tiles

    def _set_state(self, state: AlgorithmState, reason: str = ""):
        if state == self.state:
            return
        if self.debug:
            print(f"R{self.robot_id}: {self.state.value} -> {state.value} ({reason})")
        self.state = state
        self.known_tiles = 0
        self.stalled_ticks = 0
        self.flood_only = False

    def is_done(self) -> bool:
        return self.state == AlgorithmState.DONE

    def get_debug_info(self) -> dict:
        """Debug info for display."""
        return {
            'robot_id': self.robot_id,
            'state': self.state.value,
            'door_state': self.detector.state.value,
            'waypoint': self.waypoint.destination if self.waypoint else None,
            'waypoint_type': self.waypoint.type.value if self.waypoint else None,
            'nav_tier': self.navigator.last_tier,
            'flood_only': self.flood_only,
            'doorways_known': len(self.doorways),
            'doorways_unexplored': len(self.doorways.unexplored()),
            'doorways_traversed': self.doorways_traversed,
            'open_auctions': len(self.coordinator.auctions),
            'auctions_won': self.coordinator.auctions_won,
            'awards_sent': self.coordinator.awards_sent,
            'collisions': self.collisions,
            'ticks': self.ticks,
        }
