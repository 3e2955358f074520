"""
Room Sweep - per-robot decision core for multi-robot building exploration

  algorithm_config.py   Tunable constants
  geometry.py           Tiles, cardinal directions, lines
  slam.py               Occupancy map interface + numpy grid map
  navigation.py         A* path planning, flood fill
  walls.py              Wall extraction from Solid tiles
  doorways.py           Doorways + doorway detection state machine
  navigator.py          In-room coverage heuristics
  messages.py           DoorwayFound / Bidding messages
  bidding.py            Doorway auctions
  mesh_network.py       Unordered broadcast channel
  exploration.py        Top-level exploration state machine
"""
