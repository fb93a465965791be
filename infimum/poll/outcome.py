"""
Batched Outcome Commitment Protocol.

A merged poll is driven to its outcome by a chain of proof batches. Process
batches fold interactions into the process commitment, newest leaf first;
tally batches then fold registrations into the tally commitment in insertion
order. Each call is staged against a copy of the running state and written
back only when every batch and the optional final outcome check pass.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from infimum.accumulator import Accumulator, verify_inclusion
from infimum.errors import (MalformedInput, MalformedProof,
                            PollOutcomeAlreadyDetermined, PollStateNotMerged)
from infimum.zk.field import from_field_bytes, is_field_bytes, to_field_bytes
from infimum.zk.poseidon import FieldHasher
from infimum.zk.verifier import ProofVerifier

from .events import EventLog, PollCommitmentUpdated, PollOutcome
from .leaves import public_key_hash
from .store import LedgerStore
from .types import Outcome, OutcomePayload, Poll, PollState, ProofBatch

logger = logging.getLogger(__name__)


def required_batches(leaf_count: int, batch_depth: int) -> int:
    """ceil(leaf_count / 2^batch_depth)"""
    batch_size = 1 << batch_depth
    return (leaf_count + batch_size - 1) // batch_size


def process_batch_range(poll: Poll, batch_index: int) -> Tuple[int, int]:
    """[start, end) of interaction leaves, walking from the newest"""
    batch_size = 1 << poll.config.process_batch_depth
    end = poll.interaction_count - batch_index * batch_size
    return max(0, end - batch_size), end


def tally_batch_range(poll: Poll, batch_index: int) -> Tuple[int, int]:
    """[start, end) of registration leaves in insertion order"""
    batch_size = 1 << poll.config.tally_batch_depth
    start = batch_index * batch_size
    return start, min(poll.registration_count, start + batch_size)


def process_public_inputs(poll: Poll, coordinator_key_hash: bytes, batch_index: int,
                          current: bytes, new: bytes) -> List[int]:
    start, end = process_batch_range(poll, batch_index)
    return [
        poll.registration_count,
        poll.voting_deadline,
        from_field_bytes(poll.interaction_tree.root),
        poll.config.registration_depth,
        end,
        start,
        from_field_bytes(coordinator_key_hash),
        from_field_bytes(current),
        from_field_bytes(new)
    ]


def tally_public_inputs(poll: Poll, batch_index: int, current: bytes, new: bytes) -> List[int]:
    start, end = tally_batch_range(poll, batch_index)
    return [
        poll.registration_count,
        from_field_bytes(poll.registration_tree.root),
        poll.config.registration_depth,
        start,
        end,
        from_field_bytes(current),
        from_field_bytes(new)
    ]


@dataclass
class _StagedCommitments:
    process_commitment: bytes
    tally_commitment: bytes
    processed_batches: int
    tallied_batches: int


class OutcomeCommitter:
    def __init__(self, store: LedgerStore, hasher: FieldHasher,
                 verifier: ProofVerifier, events: EventLog):
        self.store = store
        self.hasher = hasher
        self.verifier = verifier
        self.events = events

    def commit_outcome(self, identity: str, poll_id: int, batches: Sequence[ProofBatch],
                       outcome: Optional[OutcomePayload] = None) -> Poll:
        poll = self.store.get_owned_poll(identity, poll_id)
        coordinator = self.store.get_coordinator(identity)

        if poll.state is PollState.TALLIED:
            raise PollOutcomeAlreadyDetermined(f"Poll {poll_id} is already tallied")
        if poll.state not in (PollState.MERGED, PollState.PROCESSING):
            raise PollStateNotMerged(f"Poll {poll_id} is {poll.state.value}, not merged")

        process_total = required_batches(
            poll.interaction_count, poll.config.process_batch_depth)
        tally_total = required_batches(
            poll.registration_count, poll.config.tally_batch_depth)
        remaining = (process_total - poll.processed_batches) + \
            (tally_total - poll.tallied_batches)

        if len(batches) > remaining:
            raise MalformedInput(
                f"Poll {poll_id} needs {remaining} more batches, got {len(batches)}")
        if not batches and remaining > 0:
            raise MalformedInput(f"Poll {poll_id} needs at least one batch")

        staged = _StagedCommitments(
            process_commitment=poll.process_commitment,
            tally_commitment=poll.tally_commitment,
            processed_batches=poll.processed_batches,
            tallied_batches=poll.tallied_batches
        )
        key_hash = public_key_hash(self.hasher, coordinator.public_key)

        for position, batch in enumerate(batches):
            proof, new_commitment = batch
            if not is_field_bytes(new_commitment):
                raise MalformedInput("Declared commitment must be a 32-byte field element")

            if staged.processed_batches < process_total:
                public_inputs = process_public_inputs(
                    poll, key_hash, staged.processed_batches,
                    staged.process_commitment, new_commitment)
                verifying_key = coordinator.verifying_keys.process
            else:
                public_inputs = tally_public_inputs(
                    poll, staged.tallied_batches,
                    staged.tally_commitment, new_commitment)
                verifying_key = coordinator.verifying_keys.tally

            if not self.verifier.verify(proof, public_inputs, verifying_key):
                logger.warning(
                    f"Rejected batch {position} for poll {poll_id}; no commitments changed")
                raise MalformedProof(
                    f"Batch {position} of poll {poll_id} failed verification")

            if staged.processed_batches < process_total:
                staged.process_commitment = new_commitment
                staged.processed_batches += 1
            else:
                staged.tally_commitment = new_commitment
                staged.tallied_batches += 1

        complete = staged.processed_batches == process_total and \
            staged.tallied_batches == tally_total

        recorded = None
        if complete:
            if outcome is None:
                raise MalformedInput(
                    f"Poll {poll_id} is fully processed; a final outcome is required")
            recorded = self.check_outcome(poll, staged.tally_commitment, outcome)
        elif outcome is not None:
            raise MalformedInput(
                f"Poll {poll_id} still has unprocessed batches; outcome not accepted")

        poll.process_commitment = staged.process_commitment
        poll.tally_commitment = staged.tally_commitment
        poll.processed_batches = staged.processed_batches
        poll.tallied_batches = staged.tallied_batches

        if recorded is None:
            poll.state = PollState.PROCESSING
            logger.info(
                f"Poll {poll_id}: {poll.processed_batches}/{process_total} process, {poll.tallied_batches}/{tally_total} tally batches applied")
            self.events.emit(PollCommitmentUpdated(
                poll_id, (poll.process_commitment, poll.tally_commitment)))
        else:
            poll.state = PollState.TALLIED
            poll.outcome = recorded
            logger.info(f"Poll {poll_id} tallied, outcome index {recorded.index}")
            self.events.emit(PollOutcome(poll_id, recorded.index))

        return poll

    def check_outcome(self, poll: Poll, tally_commitment: bytes,
                      outcome: OutcomePayload) -> Outcome:
        """Recompute the results and spent-credit commitments behind the tally"""
        results = outcome.tally_results
        if len(results) != len(poll.config.vote_options):
            raise MalformedInput(
                f"Expected {len(poll.config.vote_options)} tally results, got {len(results)}")
        if len(outcome.tally_result_proofs) != len(results):
            raise MalformedInput("Every tally result needs an inclusion proof")

        scalars = [outcome.total_spent, outcome.total_spent_salt, outcome.tally_result_salt,
                   outcome.new_results_commitment, outcome.spent_votes_hash]
        if not all(is_field_bytes(x) for x in list(results) + scalars):
            raise MalformedInput("Outcome values must be 32-byte field elements")

        depth = poll.config.vote_option_tree_depth
        results_root = Accumulator.compute_root(results, depth, self.hasher)

        for index, (result, siblings) in enumerate(zip(results, outcome.tally_result_proofs)):
            if len(siblings) != depth:
                raise MalformedInput(f"Inclusion proof {index} must have {depth} siblings")
            if not verify_inclusion(result, index, siblings, results_root, self.hasher):
                raise MalformedInput(f"Tally result {index} is not in the results tree")

        if self.hasher.hash2(results_root, outcome.tally_result_salt) != outcome.new_results_commitment:
            raise MalformedInput("Results commitment does not match tally results")
        if self.hasher.hash2(outcome.total_spent, outcome.total_spent_salt) != outcome.spent_votes_hash:
            raise MalformedInput("Spent votes hash does not match total spent")
        if self.hasher.hash2(outcome.new_results_commitment, outcome.spent_votes_hash) != tally_commitment:
            raise MalformedInput("Outcome does not match the tally commitment")

        values = [from_field_bytes(r) for r in results]
        # argmax returns the first maximum, so ties go to the lowest index
        index = int(np.argmax(np.array(values, dtype=object)))

        return Outcome(
            index=index,
            tally_results=tuple(values),
            total_spent=from_field_bytes(outcome.total_spent)
        )


def tally_commitment_for(hasher: FieldHasher, results: Sequence[int], depth: int,
                         total_spent: int, results_salt: int, spent_salt: int) -> bytes:
    """Final tally commitment a prover must reach for the given results"""
    leaves = [to_field_bytes(r) for r in results]
    results_root = Accumulator.compute_root(leaves, depth, hasher)
    results_commitment = hasher.hash2(results_root, to_field_bytes(results_salt))
    spent_hash = hasher.hash2(to_field_bytes(total_spent), to_field_bytes(spent_salt))
    return hasher.hash2(results_commitment, spent_hash)
