"""Tests for wall extraction from Solid tiles."""

from conftest import ascii_map

from roomsweep.walls import extract_walls, snap_tile, wall_run, walls_collinear

ROW_MAP = [
    "............",
    "............",
    "............",
    "............",
    "..#######...",
    "????????????",
]


def solid_row(xs, y=1):
    return [(x, y) for x in xs]


class TestExtractWalls:
    """Maximal segments through unbroken Solid runs."""

    def test_straight_run_gives_one_segment_spanning_extremes(self):
        slam_map = ascii_map(*ROW_MAP)
        walls = extract_walls(solid_row(range(2, 9)), slam_map)
        assert len(walls) == 1
        assert {walls[0].raw_start, walls[0].raw_end} == {(2, 1), (8, 1)}

    def test_input_order_does_not_matter(self):
        slam_map = ascii_map(*ROW_MAP)
        walls = extract_walls([(5, 1), (8, 1), (2, 1), (3, 1), (7, 1), (4, 1), (6, 1)], slam_map)
        assert len(walls) == 1
        assert {walls[0].raw_start, walls[0].raw_end} == {(2, 1), (8, 1)}

    def test_fewer_than_two_tiles_gives_nothing(self):
        slam_map = ascii_map(*ROW_MAP)
        assert extract_walls([], slam_map) == []
        assert extract_walls([(4, 1)], slam_map) == []

    def test_gap_splits_the_wall(self):
        slam_map = ascii_map(
            "..........",
            "..###.###.",
            "??????????",
        )
        walls = extract_walls(solid_row([2, 3, 4, 6, 7, 8]), slam_map)
        spans = sorted(tuple(sorted((w.raw_start, w.raw_end))) for w in walls)
        assert spans == [((2, 1), (4, 1)), ((6, 1), (8, 1))]

    def test_no_segment_is_a_subset_of_another(self):
        slam_map = ascii_map(
            "#.......",
            "#.......",
            "#.......",
            "########",
        )
        tiles = [(0, y) for y in range(4)] + [(x, 0) for x in range(8)]
        walls = extract_walls(tiles, slam_map)
        for a in walls:
            for b in walls:
                if a is not b:
                    assert not a.raw_line.contains(b.raw_line)

    def test_endpoints_snap_onto_open_side(self):
        slam_map = ascii_map(*ROW_MAP)
        # East neighbour is Solid, north is Open
        assert snap_tile((4, 1), slam_map) == (4, 2)
        # East neighbour is Open
        assert snap_tile((8, 1), slam_map) == (9, 1)


class TestWallsCollinear:
    """Tolerant comparison of wall pieces seen at different times."""

    def test_same_wall_from_two_viewpoints(self):
        slam_map = ascii_map(*ROW_MAP)
        first = extract_walls(solid_row(range(2, 7)), slam_map)[0]
        second = extract_walls(solid_row(range(4, 9)), slam_map)[0]
        assert walls_collinear(first, second, 1.0)

    def test_parallel_wall_further_away_does_not_match(self):
        slam_map = ascii_map(
            "..#####...",
            "..........",
            "..........",
            "..#####...",
        )
        near = extract_walls(solid_row(range(2, 7), y=0), slam_map)[0]
        far = extract_walls(solid_row(range(2, 7), y=3), slam_map)[0]
        assert not walls_collinear(near, far, 1.0)

    def test_pieces_either_side_of_a_gap_share_a_line(self):
        slam_map = ascii_map(
            "..........",
            "..###..##.",
            "..........",
        )
        left = extract_walls(solid_row(range(2, 5)), slam_map)[0]
        right = extract_walls(solid_row(range(7, 9)), slam_map)[0]
        assert walls_collinear(left, right, 1.0)


class TestWallRun:
    """Picking the straight run through the nearest wall tile."""

    def test_row_through_seed_stops_at_gap(self):
        tiles = [(4, 1), (6, 1), (3, 1), (7, 1), (2, 1)]
        assert wall_run((4, 1), tiles) == [(4, 1), (3, 1), (2, 1)]

    def test_column_wins_when_longer(self):
        tiles = [(9, 3), (9, 2), (9, 4), (8, 0), (9, 0), (9, 1), (10, 0)]
        assert wall_run((9, 3), tiles) == [(9, 3), (9, 2), (9, 4), (9, 0), (9, 1)]

    def test_lone_tile_is_its_own_run(self):
        assert wall_run((5, 5), [(5, 5), (7, 7)]) == [(5, 5)]
