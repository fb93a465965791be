"""
Poll Lifecycle Manager.

Owns poll creation, the registration and voting windows, tree finalization
and nullification. Windows are half-open block ranges:

    registration: [created_at, registration_deadline)
    voting:       [registration_deadline, voting_deadline)
"""

import logging
from typing import Sequence

from infimum.accumulator import Accumulator
from infimum.config import LimitsConfig
from infimum.errors import (AccumulatorFull, MalformedInput,
                            ParticipantInteractionLimitReached,
                            ParticipantRegistrationLimitReached,
                            PollAlreadyMerged, PollConfigInvalid,
                            CoordinatorPollLimitReached, PollCurrentlyActive,
                            PollOutcomeAlreadyDetermined,
                            PollRegistrationHasEnded,
                            PollRegistrationInProgress, PollVotingHasEnded,
                            PollVotingInProgress)
from infimum.zk.poseidon import FieldHasher

from .events import (EventLog, ParticipantRegistered, PollCreated,
                     PollInteraction, PollNullified, PollStateMerged)
from .leaves import interaction_leaf, registration_leaf, validate_payload
from .store import BlockClock, LedgerStore
from .types import Poll, PollConfiguration, PollState, PublicKey

logger = logging.getLogger(__name__)


def validate_poll_config(config: PollConfiguration, limits: LimitsConfig):
    """Raise PollConfigInvalid when a configuration breaks a deployment bound"""
    if config.signup_period <= 0 or config.voting_period <= 0:
        raise PollConfigInvalid("Signup and voting periods must be positive")

    depths = [
        ('registration_depth', config.registration_depth, limits.max_registration_depth),
        ('interaction_depth', config.interaction_depth, limits.max_interaction_depth),
        ('process_batch_depth', config.process_batch_depth, limits.max_process_batch_depth),
        ('tally_batch_depth', config.tally_batch_depth, limits.max_tally_batch_depth),
        ('vote_option_tree_depth', config.vote_option_tree_depth, limits.max_vote_option_tree_depth),
    ]
    for name, value, maximum in depths:
        if not 0 < value <= maximum:
            raise PollConfigInvalid(f"{name}={value} must be in [1, {maximum}]")

    if config.process_batch_depth > config.interaction_depth:
        raise PollConfigInvalid("Process batches cannot exceed the interaction tree")
    if config.tally_batch_depth > config.registration_depth:
        raise PollConfigInvalid("Tally batches cannot exceed the registration tree")

    n_options = len(config.vote_options)
    if n_options == 0 or n_options > limits.max_vote_options:
        raise PollConfigInvalid(
            f"Poll needs between 1 and {limits.max_vote_options} vote options, got {n_options}")
    if n_options > (1 << config.vote_option_tree_depth):
        raise PollConfigInvalid(
            f"{n_options} vote options do not fit a tree of depth {config.vote_option_tree_depth}")


class PollLifecycle:
    def __init__(self, store: LedgerStore, clock: BlockClock, hasher: FieldHasher,
                 limits: LimitsConfig, events: EventLog):
        self.store = store
        self.clock = clock
        self.hasher = hasher
        self.limits = limits
        self.events = events

    def create_poll(self, identity: str, config: PollConfiguration) -> Poll:
        coordinator = self.store.get_coordinator(identity)
        validate_poll_config(config, self.limits)

        if len(coordinator.poll_ids) >= self.limits.max_coordinator_polls:
            raise CoordinatorPollLimitReached(
                f"Coordinator {identity} already owns {len(coordinator.poll_ids)} polls")
        if coordinator.poll_ids:
            latest = self.store.get_poll(coordinator.poll_ids[-1])
            if not latest.state.is_terminal:
                raise PollCurrentlyActive(
                    f"Poll {latest.id} of coordinator {identity} is still active")

        now = self.clock.now()
        registration_deadline = now + config.signup_period
        poll = Poll(
            id=self.store.allocate_poll_id(),
            coordinator=identity,
            config=config,
            created_at=now,
            registration_deadline=registration_deadline,
            voting_deadline=registration_deadline + config.voting_period,
            registration_tree=Accumulator(config.registration_depth, self.hasher),
            interaction_tree=Accumulator(config.interaction_depth, self.hasher)
        )
        self.store.polls[poll.id] = poll
        coordinator.poll_ids.append(poll.id)

        logger.info(
            f"Created poll {poll.id} for {identity}: registration until {poll.registration_deadline}, voting until {poll.voting_deadline}")
        self.events.emit(PollCreated(
            poll.id, identity, poll.registration_deadline, poll.voting_deadline))
        return poll

    def register_as_participant(self, poll_id: int, public_key: PublicKey) -> int:
        poll = self.store.get_poll(poll_id)
        now = self.clock.now()

        if not poll.in_registration(now):
            raise PollRegistrationHasEnded(
                f"Registration for poll {poll_id} ended at block {poll.registration_deadline}")
        if not public_key.is_well_formed():
            raise MalformedInput("Participant public key must be two field element coordinates")

        leaf = registration_leaf(self.hasher, public_key, now)
        try:
            index = poll.registration_tree.append(leaf)
        except AccumulatorFull:
            raise ParticipantRegistrationLimitReached(
                f"Poll {poll_id} accepts {poll.registration_tree.capacity} participants") from None

        logger.debug(f"Registered participant {index} in poll {poll_id}")
        self.events.emit(ParticipantRegistered(poll_id, index, now, public_key))
        return index

    def interact_with_poll(self, poll_id: int, public_key: PublicKey,
                           data: Sequence[bytes]) -> int:
        poll = self.store.get_poll(poll_id)
        now = self.clock.now()

        if poll.in_registration(now):
            raise PollRegistrationInProgress(
                f"Voting for poll {poll_id} opens at block {poll.registration_deadline}")
        if not poll.in_voting(now):
            raise PollVotingHasEnded(
                f"Voting for poll {poll_id} ended at block {poll.voting_deadline}")
        if not public_key.is_well_formed():
            raise MalformedInput("Ephemeral public key must be two field element coordinates")
        validate_payload(data)

        leaf = interaction_leaf(self.hasher, public_key, data)
        try:
            index = poll.interaction_tree.append(leaf)
        except AccumulatorFull:
            raise ParticipantInteractionLimitReached(
                f"Poll {poll_id} accepts {poll.interaction_tree.capacity} interactions") from None

        logger.debug(f"Recorded interaction {index} in poll {poll_id}")
        self.events.emit(PollInteraction(poll_id, index, public_key, tuple(data)))
        return index

    def merge_poll_state(self, identity: str, poll_id: int) -> Poll:
        """Finalize both trees and seed the running commitments with their roots"""
        poll = self.store.get_owned_poll(identity, poll_id)

        if poll.state.is_terminal:
            raise PollOutcomeAlreadyDetermined(f"Poll {poll_id} is {poll.state.value}")
        if poll.state is not PollState.CREATED:
            raise PollAlreadyMerged(f"Poll {poll_id} is already merged")
        if self.clock.now() < poll.voting_deadline:
            raise PollVotingInProgress(
                f"Voting for poll {poll_id} runs until block {poll.voting_deadline}")

        registration_root = None
        interaction_root = None
        if not poll.registration_tree.is_finalized:
            registration_root = poll.registration_tree.finalize()
        if not poll.interaction_tree.is_finalized:
            interaction_root = poll.interaction_tree.finalize()

        poll.state = PollState.MERGED
        poll.process_commitment = poll.interaction_tree.root
        poll.tally_commitment = poll.registration_tree.root

        logger.info(
            f"Merged poll {poll_id}: {poll.registration_count} registrations, {poll.interaction_count} interactions")
        self.events.emit(PollStateMerged(poll_id, registration_root, interaction_root))
        return poll

    def nullify_poll(self, identity: str, poll_id: int) -> Poll:
        """Close a poll that received no interactions"""
        poll = self.store.get_owned_poll(identity, poll_id)

        if poll.state.is_terminal:
            raise PollOutcomeAlreadyDetermined(f"Poll {poll_id} is {poll.state.value}")
        if self.clock.now() < poll.voting_deadline:
            raise PollVotingInProgress(
                f"Voting for poll {poll_id} runs until block {poll.voting_deadline}")
        if poll.interaction_count > 0 or poll.state is PollState.PROCESSING:
            raise PollCurrentlyActive(
                f"Poll {poll_id} has {poll.interaction_count} interactions")

        poll.state = PollState.NULLIFIED

        logger.info(f"Nullified poll {poll_id}")
        self.events.emit(PollNullified(poll_id))
        return poll
