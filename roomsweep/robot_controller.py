"""
Robot Controller interface consumed by the exploration core.

HARDWARE INTEGRATION:
- Implement RobotControllerInterface for your robot base
- Replace SimulatedRobotController instantiation in RobotManager
- All exploration/auction logic remains unchanged
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Tuple

from roomsweep.geometry import Tile


class RobotStatus(Enum):
    """Movement task status."""
    IDLE = "idle"
    MOVING = "moving"


class RobotControllerInterface(ABC):
    """
    Abstract interface for the robot base.

    Positions are continuous tile coordinates (tile (x, y) spans [x, x+1) x [y, y+1)),
    the global angle is in degrees counter-clockwise from east.
    """

    @abstractmethod
    def get_robot_id(self) -> int:
        pass

    @abstractmethod
    def get_position(self) -> Tuple[float, float]:
        pass

    @abstractmethod
    def get_global_angle(self) -> float:
        pass

    @abstractmethod
    def get_status(self) -> RobotStatus:
        pass

    @abstractmethod
    def is_currently_colliding(self) -> bool:
        """Set by a blocked step and cleared by the next successful one, not by stopping."""
        pass

    @abstractmethod
    def move_to(self, tile: Tile):
        """Drive straight at a tile (direct kinematic move)."""
        pass

    @abstractmethod
    def path_and_move_to(self, tile: Tile) -> bool:
        """Plan a path on the robot's map and follow it. False when no path exists."""
        pass

    @abstractmethod
    def start_moving(self):
        """Drive forward until stopped or colliding."""
        pass

    @abstractmethod
    def move(self, distance: float, reverse: bool = False):
        """Drive a fixed distance forwards (or backwards)."""
        pass

    @abstractmethod
    def stop_current_task(self):
        pass

    @abstractmethod
    def broadcast(self, message):
        pass

    @abstractmethod
    def receive_broadcast(self) -> List:
        """All messages received since the previous call."""
        pass

    @abstractmethod
    def get_slam_map(self):
        """The robot's OccupancyMapInterface."""
        pass
