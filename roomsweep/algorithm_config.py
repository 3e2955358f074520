#!/usr/bin/env python3
"""
ALGORITHM SELECTION
===================

Room-by-room exploration with doorway auctions.

Strategy:
1. Drive forward until the first wall shows up
2. Cover the current room (wall following, corner sweep, edge search)
3. Recognize doorways along walls while following them
4. Auction each new doorway between the robots that share the room
5. When the room is exhausted, go through the nearest unexplored doorway
6. Stop when no unexplored doorway is reachable

All distances are in map tiles, all angles in degrees (0 = east, CCW).
"""

ALGORITHM = "room_doorway_auction"

ALGORITHM_INFO = {
    "room_doorway_auction": {
        "name": "Room Sweep + Doorway Auction",
        "description": "Per-room coverage, doorway detection, decentralized doorway claims.",
        "recommended": True
    }
}

# Sensing
VISION_RADIUS: int = 7                 # SLAM ray trace range (tiles)
SLAM_UPDATE_INTERVAL_TICKS: int = 2    # occupancy refresh period (logic ticks)

# Doorways
DOOR_WIDTH: int = 2                    # tiles, shared by every doorway
DOORWAY_EPSILON: float = 2.0           # center distance under which two doorways are the same
WALL_EPSILON: float = 1.0              # tolerance when matching a wall seen twice
CLOCKWISE: bool = False                # traversal-side bias for the approach direction

# Movement
WAYPOINT_TOLERANCE: float = 0.5        # distance to tile center counted as "reached"
ROBOT_SPEED: float = 0.5               # tiles per logic tick (simulation)
NAVIGATION_STALL_TICKS: int = 80       # ticks without new map tiles before flood-fill only

# Coordination
AUCTION_TIMEOUT_TICKS: int = 30        # bounded wait for doorway bids
COMM_RANGE = None                      # None = unlimited broadcast range (tiles)

# Path planning
PATH_MAX_ITERATIONS: int = 20000
