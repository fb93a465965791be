"""
Notifications emitted by successful poll engine operations.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar

from .types import PublicKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Event:
    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['event'] = type(self).__name__
        return data


@dataclass(frozen=True)
class CoordinatorRegistered(Event):
    coordinator: str
    public_key: PublicKey


@dataclass(frozen=True)
class CoordinatorKeysChanged(Event):
    coordinator: str
    public_key: PublicKey


@dataclass(frozen=True)
class PollCreated(Event):
    poll_id: int
    coordinator: str
    starts_at: int
    ends_at: int


@dataclass(frozen=True)
class ParticipantRegistered(Event):
    poll_id: int
    leaf_index: int
    block: int
    public_key: PublicKey


@dataclass(frozen=True)
class PollInteraction(Event):
    poll_id: int
    leaf_index: int
    public_key: PublicKey
    data: Tuple[bytes, ...]


@dataclass(frozen=True)
class PollCommitmentUpdated(Event):
    poll_id: int
    commitment: Tuple[bytes, bytes]


@dataclass(frozen=True)
class PollStateMerged(Event):
    poll_id: int
    registration_root: Optional[bytes] = None
    interaction_root: Optional[bytes] = None


@dataclass(frozen=True)
class PollOutcome(Event):
    poll_id: int
    outcome_index: int


@dataclass(frozen=True)
class PollNullified(Event):
    poll_id: int


E = TypeVar('E', bound=Event)


class EventLog:
    """Ordered record of emitted notifications"""

    def __init__(self):
        self.events: List[Event] = []

    def emit(self, event: Event):
        self.events.append(event)
        logger.info(f"Event {type(event).__name__}: {event}")

    def of_type(self, event_type: Type[E]) -> List[E]:
        return [e for e in self.events if isinstance(e, event_type)]

    def __iter__(self) -> Iterator[Event]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)
