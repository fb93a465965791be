"""
Coordinator Registry: identity, communication key and verifying keys of
trusted poll operators.
"""

import logging

from infimum.errors import (CoordinatorAlreadyRegistered, MalformedKeys,
                            PollCurrentlyActive)

from .events import CoordinatorKeysChanged, CoordinatorRegistered, EventLog
from .store import LedgerStore
from .types import Coordinator, PublicKey, VerifyingKeys

logger = logging.getLogger(__name__)


def validate_keys(public_key: PublicKey, verifying_keys: VerifyingKeys):
    if not isinstance(public_key, PublicKey) or not public_key.is_well_formed():
        raise MalformedKeys("Public key must be two field element coordinates")
    if not isinstance(verifying_keys, VerifyingKeys) or not verifying_keys.is_well_formed():
        raise MalformedKeys("Verifying keys are malformed")


class CoordinatorRegistry:
    def __init__(self, store: LedgerStore, events: EventLog):
        self.store = store
        self.events = events

    def register(self, identity: str, public_key: PublicKey,
                 verifying_keys: VerifyingKeys) -> Coordinator:
        """Register a new coordinator with an empty set of owned polls"""
        if identity in self.store.coordinators:
            raise CoordinatorAlreadyRegistered(
                f"Coordinator {identity} is already registered")
        validate_keys(public_key, verifying_keys)

        coordinator = Coordinator(
            identity=identity,
            public_key=public_key,
            verifying_keys=verifying_keys
        )
        self.store.coordinators[identity] = coordinator
        # Shared list: the keyed store and the record see the same ownership
        self.store.coordinator_poll_ids[identity] = coordinator.poll_ids

        logger.info(f"Registered coordinator {identity}")
        self.events.emit(CoordinatorRegistered(identity, public_key))
        return coordinator

    def rotate_keys(self, identity: str, public_key: PublicKey,
                    verifying_keys: VerifyingKeys) -> Coordinator:
        """Replace both keys once every owned poll is terminal"""
        coordinator = self.store.get_coordinator(identity)

        for poll_id in coordinator.poll_ids:
            poll = self.store.get_poll(poll_id)
            if not poll.state.is_terminal:
                raise PollCurrentlyActive(
                    f"Coordinator {identity} has active poll {poll_id}")

        validate_keys(public_key, verifying_keys)

        coordinator.public_key = public_key
        coordinator.verifying_keys = verifying_keys

        logger.info(f"Rotated keys for coordinator {identity}")
        self.events.emit(CoordinatorKeysChanged(identity, public_key))
        return coordinator
