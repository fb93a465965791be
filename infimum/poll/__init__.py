"""
Poll lifecycle: coordinator registry, phase state machine and batched
outcome commitment.
"""

from .events import (
    CoordinatorKeysChanged,
    CoordinatorRegistered,
    Event,
    EventLog,
    ParticipantRegistered,
    PollCommitmentUpdated,
    PollCreated,
    PollInteraction,
    PollNullified,
    PollOutcome,
    PollStateMerged,
)
from .leaves import interaction_leaf, public_key_hash, registration_leaf
from .lifecycle import PollLifecycle, validate_poll_config
from .outcome import (
    OutcomeCommitter,
    process_batch_range,
    process_public_inputs,
    required_batches,
    tally_batch_range,
    tally_commitment_for,
    tally_public_inputs,
)
from .registry import CoordinatorRegistry
from .store import BlockClock, LedgerStore, ManualClock
from .types import (
    PAYLOAD_LENGTH,
    Coordinator,
    Outcome,
    OutcomePayload,
    Poll,
    PollConfiguration,
    PollState,
    ProofBatch,
    ProofData,
    PublicKey,
    VerifyingKey,
    VerifyingKeys,
)

__all__ = [
    # Components
    'CoordinatorRegistry',
    'PollLifecycle',
    'OutcomeCommitter',
    'LedgerStore',
    'BlockClock',
    'ManualClock',
    'validate_poll_config',

    # Data model
    'PAYLOAD_LENGTH',
    'Coordinator',
    'Outcome',
    'OutcomePayload',
    'Poll',
    'PollConfiguration',
    'PollState',
    'ProofBatch',
    'ProofData',
    'PublicKey',
    'VerifyingKey',
    'VerifyingKeys',

    # Leaves and public inputs
    'registration_leaf',
    'interaction_leaf',
    'public_key_hash',
    'required_batches',
    'process_batch_range',
    'tally_batch_range',
    'process_public_inputs',
    'tally_public_inputs',
    'tally_commitment_for',

    # Events
    'Event',
    'EventLog',
    'CoordinatorRegistered',
    'CoordinatorKeysChanged',
    'PollCreated',
    'ParticipantRegistered',
    'PollInteraction',
    'PollCommitmentUpdated',
    'PollStateMerged',
    'PollOutcome',
    'PollNullified',
]
