"""
Simulated robot base implementing RobotControllerInterface.

Motion tasks:
  direct   drive straight at a tile center
  path     follow an A* tile path planned on the robot's own map
  forward  drive along the heading until stopped
  distance drive a fixed distance forwards or backwards
"""

import math
from typing import List, Optional, Tuple

from roomsweep.geometry import Tile, angle_of, floor_tile, normalize_angle, tile_center
from roomsweep.robot_controller import RobotControllerInterface, RobotStatus


class SimulatedRobotController(RobotControllerInterface):
    """Robot base driven by TileKinematics, talking over a message channel."""

    def __init__(self, robot_id: int, position: Tuple[float, float], slam_map,
                 kinematics, channel, heading: float = 90.0):
        self.robot_id = robot_id
        self.position = position
        self.heading = normalize_angle(heading)
        self.slam_map = slam_map
        self.kinematics = kinematics
        self.channel = channel

        self.status = RobotStatus.IDLE
        self.colliding = False
        self._task: Optional[str] = None
        self._target: Optional[Tuple[float, float]] = None
        self._path: List[Tile] = []
        self._remaining = 0.0
        self._reverse = False
        self.distance_travelled = 0.0

    # ── RobotControllerInterface ────────────────────────────────────────

    def get_robot_id(self) -> int:
        return self.robot_id

    def get_position(self) -> Tuple[float, float]:
        return self.position

    def get_global_angle(self) -> float:
        return self.heading

    def get_status(self) -> RobotStatus:
        return self.status

    def is_currently_colliding(self) -> bool:
        return self.colliding

    def get_slam_map(self):
        return self.slam_map

    def move_to(self, tile: Tile):
        self._start_task("direct")
        self._target = tile_center(tile)

    def path_and_move_to(self, tile: Tile) -> bool:
        path = self.slam_map.get_path(floor_tile(self.position), tile)
        if path is None:
            return False
        self._start_task("path")
        # First tile is the one we stand on
        self._path = list(path[1:])
        self._target = tile_center(tile)
        return True

    def start_moving(self):
        self._start_task("forward")

    def move(self, distance: float, reverse: bool = False):
        self._start_task("distance")
        self._remaining = abs(distance)
        self._reverse = reverse

    def stop_current_task(self):
        self._task = None
        self._target = None
        self._path = []
        self._remaining = 0.0
        self.status = RobotStatus.IDLE
        # colliding stays set until a step succeeds

    def broadcast(self, message):
        self.channel.send(message)

    def receive_broadcast(self) -> List:
        return self.channel.receive()

    # ── Simulation ──────────────────────────────────────────────────────

    def _start_task(self, task: str):
        self._task = task
        self._path = []
        self.status = RobotStatus.MOVING

    def _finish_task(self):
        self._task = None
        self._target = None
        self.status = RobotStatus.IDLE

    def update(self):
        """Advance the current task by one tick of travel."""
        if self._task is None:
            return

        if self._task == "forward":
            self._advance_heading(self.kinematics.speed, self.heading)
        elif self._task == "distance":
            step = min(self.kinematics.speed, self._remaining)
            direction = self.heading + 180.0 if self._reverse else self.heading
            if self._advance_heading(step, direction):
                self._remaining -= step
                if self._remaining <= 1e-9:
                    self._finish_task()
        elif self._task == "direct":
            self._advance_to(self._target, final=True)
        elif self._task == "path":
            if not self._path:
                self._finish_task()
                return
            self._advance_to(tile_center(self._path[0]), final=len(self._path) == 1)

    def _advance_heading(self, step: float, direction: float) -> bool:
        new_position, collided = self.kinematics.step_heading(self.position, direction, step)
        self.colliding = collided
        if collided:
            return False
        self.distance_travelled += step
        self.position = new_position
        return True

    def _advance_to(self, target: Tuple[float, float], final: bool):
        dx, dy = target[0] - self.position[0], target[1] - self.position[1]
        if dx or dy:
            self.heading = angle_of((dx, dy))
        new_position, arrived, collided = self.kinematics.step_towards(self.position, target)
        self.colliding = collided
        if collided:
            return
        self.distance_travelled += math.hypot(new_position[0] - self.position[0],
                                              new_position[1] - self.position[1])
        self.position = new_position
        if arrived:
            if self._task == "path":
                self._path.pop(0)
            if final:
                self._finish_task()
