"""Tests for doorways, the doorway registry and the detection state machine."""

from conftest import ascii_map

from roomsweep.doorways import Doorway, DoorwayDetector, DoorwayRegistry, doorways_equal
from roomsweep.geometry import CardinalDirection, distance, tile_center
from roomsweep.states import DoorState, Waypoint, WaypointType

# Wall along y=2 from x=3 to x=7, a two tile opening, then more wall.
# Robot stands at (5, 5) facing east.
HALLWAY = [
    "............",
    "............",
    "............",
    "............",
    "............",
    "...#####..##",
    "????????????",
    "????????????",
]

NEAR_WALL = [(5, 2), (4, 2), (6, 2), (3, 2), (7, 2)]
FOLLOWING = Waypoint((5, 5), WaypointType.WALL)


def wall_tiles_from(position, tiles):
    return sorted(tiles, key=lambda t: distance(position, tile_center(t)))


class TestDoorway:
    """Doorway value behaviour."""

    def test_from_corners_centers_and_thickens(self):
        doorway = Doorway.from_corners((7, 2), (10, 2), CardinalDirection.SOUTH)
        assert doorway.center == (8, 2)
        assert (8, 1) in doorway.tiles and (8, 3) in doorway.tiles
        assert len(doorway.tiles) == 12

    def test_mark_explored_is_monotonic(self):
        doorway = Doorway.from_corners((0, 0), (2, 0), CardinalDirection.NORTH)
        assert doorway.mark_explored() is True
        assert doorway.mark_explored() is False
        assert doorway.explored

    def test_equality_is_geometric(self):
        a = Doorway.from_corners((0, 0), (4, 0), CardinalDirection.NORTH)
        b = Doorway.from_corners((1, 0), (4, 0), CardinalDirection.SOUTH)
        c = Doorway.from_corners((9, 0), (12, 0), CardinalDirection.NORTH)
        assert doorways_equal(a, b, 2.0)
        assert not doorways_equal(a, c, 2.0)


class TestDoorwayRegistry:
    """Idempotent registration."""

    def test_repeated_registration_keeps_one_entry(self):
        registry = DoorwayRegistry(epsilon=2.0)
        first = Doorway.from_corners((7, 2), (10, 2), CardinalDirection.SOUTH)
        known, is_new = registry.register(first)
        assert is_new and known is first
        for corners in [((7, 2), (10, 2)), ((6, 2), (10, 2)), ((7, 2), (11, 2))]:
            known, is_new = registry.register(Doorway.from_corners(*corners, CardinalDirection.SOUTH))
            assert not is_new
            assert known is first
        assert len(registry) == 1

    def test_tiles_skip_and_containing(self):
        registry = DoorwayRegistry()
        a, _ = registry.register(Doorway.from_corners((0, 0), (2, 0), CardinalDirection.NORTH))
        b, _ = registry.register(Doorway.from_corners((10, 0), (12, 0), CardinalDirection.NORTH))
        assert (11, 0) in registry.all_tiles()
        assert (11, 0) not in registry.all_tiles(skip=[b])
        assert registry.containing((1, 1)) == [a]

    def test_iteration_is_a_snapshot(self):
        registry = DoorwayRegistry()
        registry.register(Doorway.from_corners((0, 0), (2, 0), CardinalDirection.NORTH))
        for _ in registry:
            registry.register(Doorway.from_corners((20, 0), (22, 0), CardinalDirection.NORTH))
        assert len(registry) == 2


class TestDoorwayDetector:
    """NONE -> SINGLE -> NONE transitions."""

    def make_detector(self, rows=HALLWAY):
        slam_map = ascii_map(*rows)
        registry = DoorwayRegistry()
        return DoorwayDetector(slam_map, registry, vision_radius=7, door_width=2), registry

    def test_single_wall_with_gap_enters_single(self):
        detector, _ = self.make_detector()
        position = tile_center((5, 5))
        waypoint, doorway = detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0,
                                            FOLLOWING, False)
        assert detector.state == DoorState.SINGLE
        assert doorway is None
        # Gap at x=8, confirmation point door_width further along the wall
        assert waypoint == Waypoint((10, 5), WaypointType.DOOR)
        assert detector.corner_tile == (7, 2)

    def test_only_runs_while_following_a_wall(self):
        detector, _ = self.make_detector()
        position = tile_center((5, 5))
        corner = Waypoint((5, 5), WaypointType.CORNER)
        waypoint, _ = detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0,
                                      corner, False)
        assert waypoint is None
        assert detector.state == DoorState.NONE
        detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0, None, False)
        assert detector.state == DoorState.NONE

    def test_far_wall_pieces_do_not_hide_the_gap(self):
        detector, _ = self.make_detector()
        position = tile_center((5, 5))
        tiles = wall_tiles_from(position, NEAR_WALL + [(10, 2), (11, 2)])
        waypoint, _ = detector.update(tiles, position, 0.0, FOLLOWING, False)
        assert detector.state == DoorState.SINGLE
        assert waypoint == Waypoint((10, 5), WaypointType.DOOR)

    def test_lone_wall_tile_does_not_trigger(self):
        detector, _ = self.make_detector()
        position = tile_center((5, 5))
        tiles = wall_tiles_from(position, [(5, 2), (3, 2), (7, 2)])
        waypoint, _ = detector.update(tiles, position, 0.0, FOLLOWING, False)
        assert waypoint is None
        assert detector.state == DoorState.NONE

    def test_gap_under_the_robot(self):
        # Wall three tiles south, x in [-2, 2] around the robot, Open at x=0
        slam_map = ascii_map(
            "..........",
            "..........",
            "..........",
            "..........",
            "...##.##..",
            "??????????",
        )
        detector = DoorwayDetector(slam_map, DoorwayRegistry(), vision_radius=7, door_width=2)
        position = tile_center((5, 4))
        tiles = wall_tiles_from(position, [(6, 1), (4, 1), (7, 1), (3, 1)])
        waypoint, doorway = detector.update(tiles, position, 0.0,
                                            Waypoint((5, 4), WaypointType.WALL), False)
        assert detector.state == DoorState.SINGLE
        assert doorway is None
        # door_width tiles beyond x=0 along the wall
        assert waypoint == Waypoint((7, 4), WaypointType.DOOR)
        assert detector.corner_tile == (4, 1)

    def test_confirmation_registers_doorway(self):
        detector, registry = self.make_detector()
        position = tile_center((5, 5))
        waypoint, _ = detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0,
                                      FOLLOWING, False)

        arrived = tile_center((10, 5))
        seen_now = wall_tiles_from(arrived, NEAR_WALL + [(10, 2), (11, 2)])
        _, doorway = detector.update(seen_now, arrived, 0.0, waypoint, True)
        assert detector.state == DoorState.NONE
        assert doorway is not None
        assert doorway.center == (8, 2)
        assert doorway.approach_direction == CardinalDirection.SOUTH
        assert len(registry) == 1

    def test_clockwise_bias_flips_approach(self):
        slam_map = ascii_map(*HALLWAY)
        detector = DoorwayDetector(slam_map, DoorwayRegistry(), vision_radius=7, door_width=2,
                                   clockwise=True)
        position = tile_center((5, 5))
        waypoint, _ = detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0,
                                      FOLLOWING, False)
        arrived = tile_center((10, 5))
        seen_now = wall_tiles_from(arrived, NEAR_WALL + [(10, 2), (11, 2)])
        _, doorway = detector.update(seen_now, arrived, 0.0, waypoint, True)
        assert doorway.approach_direction == CardinalDirection.NORTH

    def test_changed_wall_drops_candidate(self):
        detector, registry = self.make_detector(HALLWAY[:-1] + ["..........##"])
        position = tile_center((5, 5))
        waypoint, _ = detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0,
                                      FOLLOWING, False)
        # Only a wall two rows further south is visible on arrival
        _, doorway = detector.update([(10, 0), (11, 0)], tile_center((10, 5)), 0.0, waypoint, True)
        assert doorway is None
        assert detector.state == DoorState.NONE
        assert len(registry) == 0

    def test_cancelled_confirmation_move_resets(self):
        detector, registry = self.make_detector()
        position = tile_center((5, 5))
        detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0, FOLLOWING, False)
        assert detector.state == DoorState.SINGLE
        detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0, None, False)
        assert detector.state == DoorState.NONE
        assert detector.corner_tile is None
        assert len(registry) == 0

    def test_known_doorway_is_not_reported_twice(self):
        detector, registry = self.make_detector()
        registry.register(Doorway.from_corners((7, 2), (10, 2), CardinalDirection.SOUTH))
        position = tile_center((5, 5))
        waypoint, _ = detector.update(wall_tiles_from(position, NEAR_WALL), position, 0.0,
                                      FOLLOWING, False)
        arrived = tile_center((10, 5))
        seen_now = wall_tiles_from(arrived, NEAR_WALL + [(10, 2), (11, 2)])
        _, doorway = detector.update(seen_now, arrived, 0.0, waypoint, True)
        assert doorway is None
        assert len(registry) == 1
