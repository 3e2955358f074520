"""
Robot Manager for Multi-Robot Exploration
Runs N robots, each with its own map, controller, channel and decision core.
"""

from typing import Dict, List, Optional, Tuple
import random

from roomsweep.algorithm_config import (
    COMM_RANGE, ROBOT_SPEED, SLAM_UPDATE_INTERVAL_TICKS, VISION_RADIUS,
)
from roomsweep.exploration import ExplorationAlgorithm
from roomsweep.geometry import tile_center
from roomsweep.mesh_network import RobotMessage, SimulatedMessageChannel
from roomsweep.slam import GridSlamMap, TileStatus
from simulation.physics import TileKinematics
from simulation.sensors import SlamSensor
from simulation.sim_robot_controller import SimulatedRobotController


class RobotManager:
    """
    Manages multiple robots exploring one building.
    Robots share nothing but the message bus.
    """

    def __init__(self, environment, count: int = 2, comm_range: Optional[float] = COMM_RANGE,
                 vision_radius: int = VISION_RADIUS, speed: float = ROBOT_SPEED,
                 slam_interval: int = SLAM_UPDATE_INTERVAL_TICKS, seed: Optional[int] = None,
                 duplicate_probability: float = 0.0, debug: bool = False):
        """
        Initialize robot manager.

        Args:
            environment: Ground-truth building
            count: Number of robots
            comm_range: Communication range in tiles, None for unlimited
            slam_interval: Ticks between occupancy map refreshes
            seed: Seed for message ordering/duplication
        """
        if count < 1:
            raise ValueError(f"need at least one robot, got {count}")
        if slam_interval < 1:
            raise ValueError(f"slam_interval must be at least 1, got {slam_interval}")
        self.environment = environment
        self.count = count
        self.comm_range = comm_range
        self.vision_radius = vision_radius
        self.speed = speed
        self.slam_interval = slam_interval
        self.duplicate_probability = duplicate_probability
        self.rng = random.Random(seed)
        self.debug = debug

        self.controllers: List[SimulatedRobotController] = []
        self.algorithms: List[ExplorationAlgorithm] = []
        self.sensors: List[SlamSensor] = []
        self.channels: List[SimulatedMessageChannel] = []

        # Shared resources for simulation
        self.message_bus: List[RobotMessage] = []
        self.positions: Dict[int, Tuple[float, float]] = {}  # Live position reference
        self.tick = 0

    def initialize(self):
        """Create and initialize all robots at the layout's spawn points."""
        self.controllers.clear()
        self.algorithms.clear()
        self.sensors.clear()
        self.channels.clear()
        self.message_bus.clear()
        self.positions.clear()
        self.tick = 0

        kinematics = TileKinematics(self.environment, self.speed)
        for i, spawn in enumerate(self.environment.spawn_points(self.count)):
            position = tile_center(spawn)
            self.positions[i] = position

            channel = SimulatedMessageChannel(
                robot_id=i,
                message_bus=self.message_bus,
                positions_ref=self.positions,
                comm_range=self.comm_range,
                duplicate_probability=self.duplicate_probability,
                rng=random.Random(self.rng.random())
            )
            self.channels.append(channel)

            slam_map = GridSlamMap(self.environment.width, self.environment.height)
            sensor = SlamSensor(self.environment, self.vision_radius)
            sensor.update_map(slam_map, position)
            self.sensors.append(sensor)

            controller = SimulatedRobotController(i, position, slam_map, kinematics, channel)
            self.controllers.append(controller)

            algorithm = ExplorationAlgorithm(controller, team_size=self.count,
                                             vision_radius=self.vision_radius, debug=self.debug)
            self.algorithms.append(algorithm)

        range_text = "unlimited" if self.comm_range is None else f"{self.comm_range} tile"
        print(f"RobotManager: Initialized {self.count} robots with {range_text} comm range")

    def update_positions(self):
        """Update position reference dict from controller states."""
        for controller in self.controllers:
            self.positions[controller.robot_id] = controller.get_position()

    def step(self):
        """One simulation step: sense, decide, move."""
        self.tick += 1
        for channel in self.channels:
            channel.tick = self.tick

        if self.tick % self.slam_interval == 0:
            for controller, sensor in zip(self.controllers, self.sensors):
                sensor.update_map(controller.get_slam_map(), controller.get_position())

        for algorithm in self.algorithms:
            algorithm.update_logic()
        for controller in self.controllers:
            controller.update()
        self.update_positions()
        self.prune_message_bus()

    def prune_message_bus(self):
        """Drop envelopes every robot has processed; pending ones stay on the bus."""
        done = {msg.msg_id for msg in self.message_bus
                if all(channel.has_processed(msg.msg_id) for channel in self.channels)}
        if not done:
            return
        self.message_bus[:] = [msg for msg in self.message_bus if msg.msg_id not in done]
        for channel in self.channels:
            channel.forget(done)

    def all_done(self) -> bool:
        return all(algorithm.is_done() for algorithm in self.algorithms)

    def run(self, max_ticks: int) -> int:
        """Step until every robot is done or max_ticks elapse. Returns ticks run."""
        while self.tick < max_ticks and not self.all_done():
            self.step()
        return self.tick

    def get_coverage(self) -> float:
        """Percentage of floor tiles seen by at least one robot."""
        floor = self.environment.floor_tiles()
        if not floor:
            return 100.0
        seen = set()
        for controller in self.controllers:
            slam_map = controller.get_slam_map()
            for tile in floor:
                if slam_map.get_tile_status(tile) != TileStatus.UNSEEN:
                    seen.add(tile)
        return 100.0 * len(seen) / len(floor)

    def get_combined_debug_info(self) -> dict:
        """Combined debug info across all robots."""
        return {
            'tick': self.tick,
            'robots': [algorithm.get_debug_info() for algorithm in self.algorithms],
            'coverage_pct': round(self.get_coverage(), 1),
            'messages_on_bus': len(self.message_bus),
            'all_done': self.all_done(),
        }
