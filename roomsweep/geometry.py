"""
Tile geometry helpers.
Tiles are integer (x, y) tuples, +x is east and +y is north.
Angles are degrees in [0, 360), measured counter-clockwise from +x.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple
import math

Tile = Tuple[int, int]


def add(a: Tile, b: Tile) -> Tile:
    return (a[0] + b[0], a[1] + b[1])


def sub(a: Tile, b: Tile) -> Tile:
    return (a[0] - b[0], a[1] - b[1])


def scale(v: Tile, k: int) -> Tile:
    return (v[0] * k, v[1] * k)


def normalize_angle(angle: float) -> float:
    """Wrap an angle in degrees into [0, 360)."""
    return angle % 360.0


def angle_of(vector) -> float:
    """Angle of a vector relative to +x, in degrees [0, 360)."""
    return normalize_angle(math.degrees(math.atan2(vector[1], vector[0])))


def distance(a, b) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def floor_tile(point) -> Tile:
    """Tile that contains a continuous point."""
    return (int(math.floor(point[0])), int(math.floor(point[1])))


def tile_center(tile: Tile) -> Tuple[float, float]:
    return (tile[0] + 0.5, tile[1] + 0.5)


def point_from_bearing(origin, angle: float, magnitude: float) -> Tile:
    """Tile reached by travelling `magnitude` tiles from `origin` at `angle`."""
    rad = math.radians(angle)
    return floor_tile((origin[0] + magnitude * math.cos(rad),
                       origin[1] + magnitude * math.sin(rad)))


class CardinalDirection(Enum):
    """The eight grid directions, listed counter-clockwise from east."""
    EAST = (1, 0)
    NORTH_EAST = (1, 1)
    NORTH = (0, 1)
    NORTH_WEST = (-1, 1)
    WEST = (-1, 0)
    SOUTH_WEST = (-1, -1)
    SOUTH = (0, -1)
    SOUTH_EAST = (1, -1)

    @property
    def vector(self) -> Tile:
        return self.value

    @property
    def degrees(self) -> float:
        return _ORDER.index(self) * 45.0

    def is_diagonal(self) -> bool:
        return self.value[0] != 0 and self.value[1] != 0

    def next(self) -> 'CardinalDirection':
        """Neighbouring direction, 45 degrees counter-clockwise."""
        return _ORDER[(_ORDER.index(self) + 1) % 8]

    def previous(self) -> 'CardinalDirection':
        """Neighbouring direction, 45 degrees clockwise."""
        return _ORDER[(_ORDER.index(self) - 1) % 8]

    @staticmethod
    def from_degrees(angle: float) -> 'CardinalDirection':
        """Nearest cardinal direction to an angle."""
        index = int(math.floor(normalize_angle(angle) / 45.0 + 0.5)) % 8
        return _ORDER[index]

    @staticmethod
    def from_vector(vector) -> 'CardinalDirection':
        return CardinalDirection.from_degrees(angle_of(vector))

    @staticmethod
    def perpendicular(vector) -> 'CardinalDirection':
        """Direction 90 degrees counter-clockwise of a vector."""
        return CardinalDirection.from_degrees(angle_of(vector) + 90.0)

    @staticmethod
    def all_directions() -> List['CardinalDirection']:
        return list(_ORDER)


_ORDER = [
    CardinalDirection.EAST,
    CardinalDirection.NORTH_EAST,
    CardinalDirection.NORTH,
    CardinalDirection.NORTH_WEST,
    CardinalDirection.WEST,
    CardinalDirection.SOUTH_WEST,
    CardinalDirection.SOUTH,
    CardinalDirection.SOUTH_EAST,
]


def bresenham_line(x0: int, y0: int, x1: int, y1: int) -> List[Tile]:
    """Bresenham's line algorithm for ray tracing."""
    points = []

    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    x, y = x0, y0

    while True:
        points.append((x, y))

        if x == x1 and y == y1:
            break

        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy

    return points


@dataclass(frozen=True)
class Line2D:
    """Segment between two tiles."""
    start: Tile
    end: Tile

    def rasterize(self) -> List[Tile]:
        return bresenham_line(self.start[0], self.start[1], self.end[0], self.end[1])

    def length(self) -> float:
        return distance(self.start, self.end)

    def direction(self) -> CardinalDirection:
        return CardinalDirection.from_vector(sub(self.end, self.start))

    def equal_segment(self, other: 'Line2D') -> bool:
        """Same endpoints, in either order."""
        return ((self.start == other.start and self.end == other.end) or
                (self.start == other.end and self.end == other.start))

    def contains_point(self, point: Tile) -> bool:
        """Exact test: point lies on this segment."""
        (x0, y0), (x1, y1) = self.start, self.end
        cross = (x1 - x0) * (point[1] - y0) - (y1 - y0) * (point[0] - x0)
        if cross != 0:
            return False
        return (min(x0, x1) <= point[0] <= max(x0, x1) and
                min(y0, y1) <= point[1] <= max(y0, y1))

    def contains(self, other: 'Line2D') -> bool:
        """True when `other` is a strict sub-segment of this line."""
        if self.equal_segment(other):
            return False
        return self.contains_point(other.start) and self.contains_point(other.end)

    def distance_to_point(self, point) -> float:
        """Perpendicular distance from a point to the supporting line."""
        (x0, y0), (x1, y1) = self.start, self.end
        length = math.hypot(x1 - x0, y1 - y0)
        if length == 0:
            return distance(self.start, point)
        cross = (x1 - x0) * (point[1] - y0) - (y1 - y0) * (point[0] - x0)
        return abs(cross) / length

    def project(self, point) -> float:
        """Scalar position of a point along this segment (start = 0)."""
        (x0, y0), (x1, y1) = self.start, self.end
        length = math.hypot(x1 - x0, y1 - y0)
        if length == 0:
            return 0.0
        return ((point[0] - x0) * (x1 - x0) + (point[1] - y0) * (y1 - y0)) / length
