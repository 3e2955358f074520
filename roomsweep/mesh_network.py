"""
Broadcast channel for robot-to-robot messages.
Unordered, at-least-once delivery: receivers must tolerate duplicates and
any interleaving.

HARDWARE INTEGRATION:
- Implement MessageChannelInterface for your radio hardware
- Replace SimulatedMessageChannel instantiation in RobotManager
- Auction logic remains unchanged
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Set, Tuple
import copy
import math
import random
import uuid


@dataclass
class RobotMessage:
    """Envelope around an exploration message."""
    msg_id: str
    source_id: int
    payload: Any
    tick: int

    @staticmethod
    def create(source_id: int, payload: Any, tick: int = 0) -> 'RobotMessage':
        """Factory method; the payload is copied so later sender edits don't leak."""
        return RobotMessage(
            msg_id=f"{source_id}-{uuid.uuid4().hex[:8]}",
            source_id=source_id,
            payload=copy.deepcopy(payload),
            tick=tick
        )


class MessageChannelInterface(ABC):
    """
    Abstract interface for the communication hardware.
    """

    @abstractmethod
    def send(self, payload: Any) -> bool:
        """
        Broadcast a payload.
        Returns True if transmission started successfully.
        """
        pass

    @abstractmethod
    def receive(self) -> List[Any]:
        """
        Get payloads received since last call, in no particular order.
        """
        pass


class SimulatedMessageChannel(MessageChannelInterface):
    """
    Simulated broadcast using a shared message bus.
    Range-limited based on robot positions; delivery order is shuffled and,
    with duplicate_probability > 0, a message may be delivered again later.
    """

    def __init__(self, robot_id: int, message_bus: List[RobotMessage],
                 positions_ref: Optional[Dict[int, Tuple[float, float]]] = None,
                 comm_range: Optional[float] = None,
                 duplicate_probability: float = 0.0,
                 rng: Optional[random.Random] = None):
        """
        Args:
            robot_id: This robot's ID
            message_bus: Shared message bus (list) for all robots
            positions_ref: Reference to dict of all robot positions (updated externally)
            comm_range: Communication range in tiles, None for unlimited
            duplicate_probability: Chance a delivered message stays pending
            rng: Random source for ordering and duplicates
        """
        self.robot_id = robot_id
        self.message_bus = message_bus
        self.positions = positions_ref if positions_ref is not None else {}
        self.comm_range = comm_range
        self.duplicate_probability = duplicate_probability
        self.rng = rng or random.Random()
        self.processed_ids: Set[str] = set()
        self.tick = 0
        self.messages_sent = 0
        self.messages_received = 0

    def _get_distance(self, other_id: int) -> float:
        """Calculate distance to another robot."""
        if self.robot_id not in self.positions or other_id not in self.positions:
            return float('inf')
        my_pos = self.positions[self.robot_id]
        other_pos = self.positions[other_id]
        return math.hypot(other_pos[0] - my_pos[0], other_pos[1] - my_pos[1])

    def is_in_range(self, target_id: int) -> bool:
        """Check if target is within comm range."""
        if self.comm_range is None:
            return True
        return self._get_distance(target_id) <= self.comm_range

    def send(self, payload: Any) -> bool:
        """Add message to shared bus (simulates broadcast)."""
        self.message_bus.append(RobotMessage.create(self.robot_id, payload, self.tick))
        self.messages_sent += 1
        return True

    def receive(self) -> List[Any]:
        """Get copies of pending messages from robots in range."""
        received = []
        for msg in list(self.message_bus):
            if msg.msg_id in self.processed_ids:
                continue
            if msg.source_id == self.robot_id:
                self.processed_ids.add(msg.msg_id)
                continue
            if not self.is_in_range(msg.source_id):
                continue
            received.append(copy.deepcopy(msg.payload))
            if self.rng.random() >= self.duplicate_probability:
                self.processed_ids.add(msg.msg_id)
        self.rng.shuffle(received)
        self.messages_received += len(received)
        return received

    def has_processed(self, msg_id: str) -> bool:
        return msg_id in self.processed_ids

    def forget(self, msg_ids: Set[str]):
        """Drop bookkeeping for envelopes that left the bus."""
        self.processed_ids -= msg_ids

    def update_comm_range(self, new_range: Optional[float]):
        self.comm_range = new_range
