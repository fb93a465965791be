"""
Keyed ledger stores and the block clock the poll engine reads from.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol

from infimum.errors import CoordinatorNotRegistered, PollDoesNotExist

from .types import Coordinator, Poll

logger = logging.getLogger(__name__)


class BlockClock(Protocol):
    def now(self) -> int:
        ...


class ManualClock:
    """Block height under test or operator control"""

    def __init__(self, block: int = 0):
        self.block = block

    def now(self) -> int:
        return self.block

    def set(self, block: int):
        if block < self.block:
            raise ValueError(
                f"Clock cannot move backwards from {self.block} to {block}")
        self.block = block

    def advance(self, blocks: int = 1) -> int:
        self.set(self.block + blocks)
        return self.block


@dataclass
class LedgerStore:
    """Coordinators, polls and coordinator poll ownership"""
    coordinators: Dict[str, Coordinator] = field(default_factory=dict)
    polls: Dict[int, Poll] = field(default_factory=dict)
    coordinator_poll_ids: Dict[str, List[int]] = field(default_factory=dict)
    next_poll_id: int = 0

    def get_coordinator(self, identity: str) -> Coordinator:
        coordinator = self.coordinators.get(identity)
        if coordinator is None:
            raise CoordinatorNotRegistered(
                f"Coordinator {identity} is not registered")
        return coordinator

    def get_poll(self, poll_id: int) -> Poll:
        poll = self.polls.get(poll_id)
        if poll is None:
            raise PollDoesNotExist(f"Poll {poll_id} does not exist")
        return poll

    def get_owned_poll(self, identity: str, poll_id: int) -> Poll:
        """Poll owned by identity; other coordinators' polls are not visible"""
        self.get_coordinator(identity)
        if poll_id not in self.coordinator_poll_ids.get(identity, []):
            raise PollDoesNotExist(
                f"Poll {poll_id} does not exist for coordinator {identity}")
        return self.get_poll(poll_id)

    def allocate_poll_id(self) -> int:
        poll_id = self.next_poll_id
        self.next_poll_id += 1
        return poll_id
