"""Shared fixtures: ASCII occupancy maps and a scripted robot controller."""

import pytest

from roomsweep.geometry import floor_tile, tile_center
from roomsweep.robot_controller import RobotControllerInterface, RobotStatus
from roomsweep.slam import GridSlamMap


class FakeController(RobotControllerInterface):
    """
    Records every command instead of moving.
    Position/heading/status/collision are plain attributes tests can set.
    """

    def __init__(self, slam_map, robot_id=0, tile=(1, 1), heading=0.0):
        self.slam_map = slam_map
        self.robot_id = robot_id
        self.position = tile_center(tile)
        self.heading = heading
        self.status = RobotStatus.IDLE
        self.colliding = False
        self.inbox = []
        self.sent = []
        self.commands = []

    def get_robot_id(self):
        return self.robot_id

    def get_position(self):
        return self.position

    def get_global_angle(self):
        return self.heading

    def get_status(self):
        return self.status

    def is_currently_colliding(self):
        return self.colliding

    def move_to(self, tile):
        self.commands.append(("move_to", tile))
        self.status = RobotStatus.MOVING

    def path_and_move_to(self, tile):
        path = self.slam_map.get_path(floor_tile(self.position), tile)
        self.commands.append(("path_and_move_to", tile, path is not None))
        if path is None:
            return False
        self.status = RobotStatus.MOVING
        return True

    def start_moving(self):
        self.commands.append(("start_moving",))
        self.status = RobotStatus.MOVING

    def move(self, distance, reverse=False):
        self.commands.append(("move", distance, reverse))
        self.status = RobotStatus.MOVING

    def stop_current_task(self):
        self.commands.append(("stop",))
        self.status = RobotStatus.IDLE

    def broadcast(self, message):
        self.sent.append(message)

    def receive_broadcast(self):
        messages, self.inbox = self.inbox, []
        return messages

    def get_slam_map(self):
        return self.slam_map

    def command_names(self):
        return [command[0] for command in self.commands]


def ascii_map(*rows, visible=None):
    """Occupancy map from text rows (first row = north). '#' Solid, '.' Open, '?' Unseen."""
    return GridSlamMap.from_ascii(list(rows), visible=visible)


# Closed 10x8 room, every tile known
CLOSED_ROOM = [
    "##########",
    "#........#",
    "#........#",
    "#........#",
    "#........#",
    "#........#",
    "#........#",
    "##########",
]


@pytest.fixture
def closed_room_map():
    return ascii_map(*CLOSED_ROOM)


@pytest.fixture
def make_controller():
    def _make(slam_map, robot_id=0, tile=(1, 1), heading=0.0):
        return FakeController(slam_map, robot_id=robot_id, tile=tile, heading=heading)
    return _make
