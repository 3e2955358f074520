"""
State and waypoint definitions shared by the exploration components.
"""

from dataclasses import dataclass
from enum import Enum

from roomsweep.geometry import Tile


class AlgorithmState(Enum):
    """Top-level exploration state, exactly one per robot."""
    IDLE = "idle"
    FIRST_WALL = "first_wall"
    EXPLORE_ROOM = "explore_room"
    AUCTIONING = "auctioning"
    MOVING_TO_DOORWAY = "moving_to_doorway"
    MOVING_TO_NEAREST_UNEXPLORED = "moving_to_nearest_unexplored"  # declared, never entered
    DONE = "done"


class DoorState(Enum):
    """Doorway detection sub-state."""
    NONE = "none"
    SINGLE = "single"
    INTERSECTION = "intersection"  # multi-wall junctions, not driven yet


class WaypointType(Enum):
    """Which behaviour committed the waypoint."""
    WALL = "wall"
    CORNER = "corner"
    EDGE = "edge"
    GREED = "greed"  # flood-fill frontier
    DOOR = "door"


@dataclass(frozen=True)
class Waypoint:
    """A committed movement target. At most one is active per robot."""
    destination: Tile
    type: WaypointType
    use_pathing: bool = False
