"""
Physics for the tile-world simulation
Straight-line kinematics at a fixed speed with wall collision
"""

import math
from typing import Optional, Tuple


class TileKinematics:
    """
    Moves a square robot body through the ground-truth grid.
    A step that would put any part of the body inside a wall slides along
    the free axis, or is refused and reported as a collision.
    """

    def __init__(self, environment, speed: float = 0.5, body_radius: float = 0.2):
        if speed <= 0:
            raise ValueError(f"speed must be positive, got {speed}")
        self.environment = environment
        self.speed = speed
        self.body_radius = body_radius

    def is_position_valid(self, position: Tuple[float, float]) -> bool:
        """True if the robot body fits at position (no wall overlap)."""
        x, y = position
        r = self.body_radius
        for cx, cy in ((x - r, y - r), (x + r, y - r), (x - r, y + r), (x + r, y + r)):
            if self.environment.is_solid((int(math.floor(cx)), int(math.floor(cy)))):
                return False
        return True

    def step_towards(self, position: Tuple[float, float], target: Tuple[float, float],
                     max_distance: Optional[float] = None) -> Tuple[Tuple[float, float], bool, bool]:
        """
        Advance up to one tick of travel towards target.
        A blocked step slides along a free axis; only a step blocked on
        every axis is a collision.

        Returns:
            (new_position, arrived, collided)
        """
        budget = self.speed if max_distance is None else min(self.speed, max_distance)
        dx = target[0] - position[0]
        dy = target[1] - position[1]
        dist = math.hypot(dx, dy)
        if dist <= budget:
            new_position, arrived = (target[0], target[1]), True
        else:
            new_position = (position[0] + dx / dist * budget, position[1] + dy / dist * budget)
            arrived = False

        if self.is_position_valid(new_position):
            return new_position, arrived, False
        slid = self._slide(position, target, budget)
        if slid is None:
            return position, False, True
        return slid, False, False

    def step_heading(self, position: Tuple[float, float], heading: float,
                     distance: float) -> Tuple[Tuple[float, float], bool]:
        """Advance `distance` along a heading (degrees). Returns (new_position, collided)."""
        rad = math.radians(heading)
        new_position = (position[0] + distance * math.cos(rad),
                        position[1] + distance * math.sin(rad))
        if self.is_position_valid(new_position):
            return new_position, False
        slid = self._slide(position, new_position, distance)
        if slid is None:
            return position, True
        return slid, False

    def _slide(self, position: Tuple[float, float], target: Tuple[float, float],
               budget: float) -> Optional[Tuple[float, float]]:
        """First valid single-axis step towards target (x, then y), or None."""
        for axis in (0, 1):
            delta = target[axis] - position[axis]
            if abs(delta) < 1e-6:
                continue
            step = math.copysign(min(budget, abs(delta)), delta)
            if axis == 0:
                candidate = (position[0] + step, position[1])
            else:
                candidate = (position[0], position[1] + step)
            if self.is_position_valid(candidate):
                return candidate
        return None
