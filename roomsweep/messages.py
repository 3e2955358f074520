"""
Doorway auction messages.

Two kinds travel between robots:
  DoorwayFoundMessage  requester announces a new doorway
  BiddingMessage       a robot's path length to it (final=True: the
                       requester's award announcement with every bid)

combine_messages folds duplicates/partial bid sets together; it is
associative and commutative on bid maps, so receipt order never matters.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from roomsweep.algorithm_config import DOORWAY_EPSILON
from roomsweep.doorways import Doorway, DoorwayRegistry, doorways_equal
from roomsweep.geometry import Tile


@dataclass
class DoorwayFoundMessage:
    """A robot found a doorway and asks the others to bid on it."""
    doorway: Doorway
    requester_id: int


@dataclass
class BiddingMessage:
    """Bids (robot id -> path length) for the requester's doorway."""
    requester_id: int
    bids: Dict[int, int] = field(default_factory=dict)
    doorway: Optional[Doorway] = None
    final: bool = False


ExplorationMessage = Union[DoorwayFoundMessage, BiddingMessage]


def same_auction(a: BiddingMessage, b: BiddingMessage, epsilon: float = DOORWAY_EPSILON) -> bool:
    return (a.requester_id == b.requester_id and
            a.doorway is not None and b.doorway is not None and
            doorways_equal(a.doorway, b.doorway, epsilon))


def combine_messages(a: ExplorationMessage, b: ExplorationMessage,
                     epsilon: float = DOORWAY_EPSILON) -> ExplorationMessage:
    """
    Merge b into a when both are bids for the same (requester, doorway).
    Awards only merge with awards. Anything else returns a unchanged.
    """
    if not isinstance(a, BiddingMessage) or not isinstance(b, BiddingMessage):
        return a
    if a.final != b.final or not same_auction(a, b, epsilon):
        return a
    bids = dict(b.bids)
    bids.update(a.bids)  # a duplicate report from the same robot keeps a's value
    return BiddingMessage(a.requester_id, bids, a.doorway, a.final)


def resolve_bids(bids: Dict[int, int]) -> Optional[int]:
    """Winner = shortest path; ties go to the lowest robot id."""
    if not bids:
        return None
    return min(bids.items(), key=lambda item: (item[1], item[0]))[0]


def process_doorway_found(message: DoorwayFoundMessage, robot_id: int, robot_tile: Tile,
                          doorways: DoorwayRegistry, slam_map) -> Optional[BiddingMessage]:
    """
    Register the announced doorway and bid on it.
    Abstains (None) without a path, or when the path passes through another
    known doorway: the doorway is then outside this robot's room.
    """
    known, _ = doorways.register(message.doorway)
    path = slam_map.get_path(robot_tile, known.center)
    if path is None:
        return None
    other_tiles = doorways.all_tiles(skip=[known])
    if any(tile in other_tiles for tile in path[1:]):
        return None
    return BiddingMessage(message.requester_id, {robot_id: len(path)}, message.doorway)
