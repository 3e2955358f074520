"""
Wall extraction from Solid occupancy samples.

Sensor rays thicken walls on the side they hit from, so every tile is first
snapped onto an adjacent Open tile (east, north, then north-east). Candidate
walls are all pairwise lines; a line survives only if its raw rasterization
is Solid end to end, and only maximal lines are returned.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from roomsweep.geometry import CardinalDirection, Line2D, Tile, add
from roomsweep.slam import TileStatus

_SNAP_ORDER = [CardinalDirection.EAST, CardinalDirection.NORTH, CardinalDirection.NORTH_EAST]


@dataclass(frozen=True)
class WallSegment:
    """Maximal straight run of Solid tiles."""
    start: Tile        # snapped endpoints
    end: Tile
    raw_start: Tile    # Solid endpoints the run was measured between
    raw_end: Tile

    @property
    def line(self) -> Line2D:
        return Line2D(self.start, self.end)

    @property
    def raw_line(self) -> Line2D:
        return Line2D(self.raw_start, self.raw_end)


def snap_tile(tile: Tile, slam_map) -> Tile:
    """Move a wall tile onto a neighbouring Open tile when there is one."""
    for direction in _SNAP_ORDER:
        candidate = add(tile, direction.vector)
        if slam_map.get_tile_status(candidate) == TileStatus.OPEN:
            return candidate
    return tile


def extract_walls(tiles: Iterable[Tile], slam_map) -> List[WallSegment]:
    """Maximal unbroken wall segments through the given Solid tiles."""
    unique = list(dict.fromkeys(tiles))
    if len(unique) < 2:
        return []

    snapped = {tile: snap_tile(tile, slam_map) for tile in unique}

    # Every pair once; drop lines that cross anything but Solid
    candidates = []
    for i, a in enumerate(unique):
        for b in unique[i + 1:]:
            raw = Line2D(a, b)
            if all(slam_map.get_tile_status(t) == TileStatus.SOLID for t in raw.rasterize()):
                candidates.append(WallSegment(snapped[a], snapped[b], a, b))

    # Longest first: a line contained in anything is contained in a kept line
    candidates.sort(key=lambda wall: wall.raw_line.length(), reverse=True)
    maximal: List[WallSegment] = []
    for wall in candidates:
        if not any(kept.raw_line.contains(wall.raw_line) for kept in maximal):
            maximal.append(wall)
    return maximal


def walls_collinear(a: WallSegment, b: WallSegment, epsilon: float) -> bool:
    """Both segments lie on one supporting line, within epsilon. Spans may be apart."""
    for line, other in ((a.raw_line, b), (b.raw_line, a)):
        if line.start == line.end:
            continue
        for point in (other.raw_start, other.raw_end):
            if line.distance_to_point(point) > epsilon:
                return False
    return True


def wall_run(seed: Tile, tiles: Sequence[Tile]) -> List[Tile]:
    """
    Straight row or column of the given tiles through seed.
    The longer of the two wins (row on a tie). Keeps the order of `tiles`.
    """
    present = set(tiles)
    runs = []
    for axis in ((1, 0), (0, 1)):
        members = {seed}
        for sign in (1, -1):
            tile = add(seed, (axis[0] * sign, axis[1] * sign))
            while tile in present:
                members.add(tile)
                tile = add(tile, (axis[0] * sign, axis[1] * sign))
        runs.append(members)
    members = runs[0] if len(runs[0]) >= len(runs[1]) else runs[1]
    return [tile for tile in dict.fromkeys(tiles) if tile in members]
