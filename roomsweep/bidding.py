"""
Doorway auctions between robots.

Flow for a doorway found by robot R:
  1. R registers it, opens an auction with its own bid and broadcasts
     DoorwayFoundMessage.
  2. Every other robot registers the doorway and answers with a
     BiddingMessage holding its path length (or abstains).
  3. Once R's room is exhausted it resolves each ready auction (all team
     members answered, or AUCTION_TIMEOUT_TICKS passed) and broadcasts the
     award: a final BiddingMessage with every bid it collected.
  4. Receivers resolve the award themselves. The winner claims the
     doorway, everyone else marks it explored (someone else's job).
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from roomsweep.algorithm_config import AUCTION_TIMEOUT_TICKS, DOORWAY_EPSILON
from roomsweep.doorways import Doorway, DoorwayRegistry, doorways_equal
from roomsweep.geometry import floor_tile
from roomsweep.messages import (
    BiddingMessage, DoorwayFoundMessage, combine_messages, process_doorway_found,
    resolve_bids,
)


@dataclass
class Auction:
    """One doorway this robot is auctioning."""
    doorway: Doorway
    opened_tick: int
    bids: Dict[int, int] = field(default_factory=dict)


class BiddingCoordinator:
    """Auction bookkeeping for one robot."""

    def __init__(self, controller, doorways: DoorwayRegistry, team_size: int = 1,
                 timeout_ticks: int = AUCTION_TIMEOUT_TICKS,
                 epsilon: float = DOORWAY_EPSILON):
        self.controller = controller
        self.robot_id = controller.get_robot_id()
        self.doorways = doorways
        self.team_size = team_size
        self.timeout_ticks = timeout_ticks
        self.epsilon = epsilon
        self.auctions: List[Auction] = []
        self.claimed: List[Doorway] = []
        self.auctions_won = 0
        self.bids_sent = 0
        self.awards_sent = 0
        self.debug = False

    # ── Requester side ──────────────────────────────────────────────────

    def open_auction(self, doorway: Doorway, tick: int) -> Auction:
        """Start an auction for a doorway this robot just registered."""
        auction = Auction(doorway=doorway, opened_tick=tick)
        slam_map = self.controller.get_slam_map()
        path = slam_map.get_path(self._robot_tile(), doorway.center)
        if path is not None:
            auction.bids[self.robot_id] = len(path)
        self.auctions.append(auction)
        self.controller.broadcast(DoorwayFoundMessage(doorway, self.robot_id))
        if self.debug:
            print(f"R{self.robot_id}: auction opened for doorway {doorway.center}")
        return auction

    def has_open_auctions(self) -> bool:
        return bool(self.auctions)

    def is_ready(self, auction: Auction, tick: int) -> bool:
        return (len(auction.bids) >= self.team_size or
                tick - auction.opened_tick >= self.timeout_ticks)

    def resolve_ready(self, tick: int) -> List[Doorway]:
        """Close every ready auction and broadcast its award. Returns doorways won."""
        won = []
        for auction in list(self.auctions):
            if auction.doorway.explored:
                # Settled by someone else's award in the meantime
                self.auctions.remove(auction)
                continue
            if not self.is_ready(auction, tick):
                continue
            self.auctions.remove(auction)
            winner = resolve_bids(auction.bids)
            if winner is None:
                if self.debug:
                    print(f"R{self.robot_id}: no bids for doorway {auction.doorway.center}, dropped")
                continue
            self.controller.broadcast(BiddingMessage(self.robot_id, dict(auction.bids),
                                                     auction.doorway, final=True))
            self.awards_sent += 1
            if self.debug:
                print(f"R{self.robot_id}: doorway {auction.doorway.center} awarded to R{winner} "
                      f"(bids {auction.bids})")
            if winner == self.robot_id:
                self._claim(auction.doorway)
                won.append(auction.doorway)
            else:
                auction.doorway.mark_explored()
        return won

    def _merge_bids(self, message: BiddingMessage):
        for auction in self.auctions:
            if doorways_equal(auction.doorway, message.doorway, self.epsilon):
                for robot_id, length in message.bids.items():
                    auction.bids.setdefault(robot_id, length)
                return

    # ── Receiver side ───────────────────────────────────────────────────

    def handle_messages(self, messages: Optional[List] = None) -> List[Doorway]:
        """
        Process everything received since the last call.
        Returns doorways won through other robots' awards.
        """
        if messages is None:
            messages = self.controller.receive_broadcast()
        won = []
        for message in self.combine_all(messages):
            if isinstance(message, DoorwayFoundMessage):
                if message.requester_id == self.robot_id:
                    continue
                response = process_doorway_found(message, self.robot_id, self._robot_tile(),
                                                 self.doorways, self.controller.get_slam_map())
                if response is not None:
                    self.controller.broadcast(response)
                    self.bids_sent += 1
                elif self.debug:
                    print(f"R{self.robot_id}: abstaining on doorway {message.doorway.center}")
            elif isinstance(message, BiddingMessage) and message.doorway is not None:
                if message.final:
                    doorway = self.apply_award(message)
                    if doorway is not None:
                        won.append(doorway)
                elif message.requester_id == self.robot_id:
                    self._merge_bids(message)
        return won

    def combine_all(self, messages: List) -> List:
        """Fold bids for the same auction together and drop repeated announcements."""
        combined: List = []
        for message in messages:
            for i, existing in enumerate(combined):
                if isinstance(message, DoorwayFoundMessage) and \
                        isinstance(existing, DoorwayFoundMessage):
                    if existing.requester_id == message.requester_id and \
                            doorways_equal(existing.doorway, message.doorway, self.epsilon):
                        break
                    continue
                merged = combine_messages(existing, message, self.epsilon)
                if merged is not existing:
                    combined[i] = merged
                    break
            else:
                combined.append(message)
        return combined

    def apply_award(self, message: BiddingMessage) -> Optional[Doorway]:
        """Resolve an award locally. Returns the doorway if this robot won it."""
        if message.requester_id == self.robot_id:
            return None
        known, _ = self.doorways.register(message.doorway)
        # Our own auction for the same opening yields to the one already awarded
        self.auctions = [a for a in self.auctions
                         if not doorways_equal(a.doorway, known, self.epsilon)]
        winner = resolve_bids(message.bids)
        if winner == self.robot_id:
            if known.explored or any(known is d for d in self.claimed):
                return None
            self._claim(known)
            if self.debug:
                print(f"R{self.robot_id}: won doorway {known.center} from R{message.requester_id}")
            return known
        known.mark_explored()
        return None

    # ── Claims ──────────────────────────────────────────────────────────

    def _claim(self, doorway: Doorway):
        self.claimed.append(doorway)
        self.auctions_won += 1

    def has_claim(self) -> bool:
        return any(not d.explored for d in self.claimed)

    def next_claim(self) -> Optional[Doorway]:
        """Oldest claimed doorway still unexplored; explored claims are discarded."""
        self.claimed = [d for d in self.claimed if not d.explored]
        return self.claimed[0] if self.claimed else None

    def _robot_tile(self):
        return floor_tile(self.controller.get_position())
