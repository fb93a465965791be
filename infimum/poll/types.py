"""
Data model for coordinators, polls and their boundary payloads.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from infimum.accumulator import Accumulator
from infimum.zk.field import FIELD_BYTES, is_field_bytes

G1_BYTES = 2 * FIELD_BYTES
G2_BYTES = 4 * FIELD_BYTES

# Interaction payloads are exactly ten field elements
PAYLOAD_LENGTH = 10

# Voice credits bound to every registration leaf
VOICE_CREDITS = 1


class PollState(Enum):
    CREATED = "created"
    MERGED = "merged"
    PROCESSING = "processing"
    TALLIED = "tallied"
    NULLIFIED = "nullified"

    @property
    def is_terminal(self) -> bool:
        return self in (PollState.TALLIED, PollState.NULLIFIED)


@dataclass(frozen=True)
class PublicKey:
    """Baby Jubjub point, coordinates as 32-byte big-endian"""
    x: bytes
    y: bytes

    def is_well_formed(self) -> bool:
        return is_field_bytes(self.x) and is_field_bytes(self.y)


@dataclass(frozen=True)
class VerifyingKey:
    """Groth16 verifying key over BN254"""
    alpha_g1: bytes
    beta_g2: bytes
    gamma_g2: bytes
    delta_g2: bytes
    gamma_abc_g1: Tuple[bytes, ...]

    def is_well_formed(self) -> bool:
        if not isinstance(self.alpha_g1, bytes) or len(self.alpha_g1) != G1_BYTES:
            return False
        for point in (self.beta_g2, self.gamma_g2, self.delta_g2):
            if not isinstance(point, bytes) or len(point) != G2_BYTES:
                return False
        if len(self.gamma_abc_g1) == 0:
            return False
        return all(isinstance(p, bytes) and len(p) == G1_BYTES for p in self.gamma_abc_g1)


@dataclass(frozen=True)
class VerifyingKeys:
    process: VerifyingKey
    tally: VerifyingKey

    def is_well_formed(self) -> bool:
        return self.process.is_well_formed() and self.tally.is_well_formed()


@dataclass(frozen=True)
class ProofData:
    """Groth16 proof: pi_a and pi_c in G1, pi_b in G2"""
    pi_a: bytes
    pi_b: bytes
    pi_c: bytes


class ProofBatch(NamedTuple):
    proof: ProofData
    new_commitment: bytes


@dataclass(frozen=True)
class PollConfiguration:
    signup_period: int
    voting_period: int
    registration_depth: int
    interaction_depth: int
    process_batch_depth: int
    tally_batch_depth: int
    vote_option_tree_depth: int
    vote_options: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "vote_options", tuple(self.vote_options))


@dataclass
class Coordinator:
    identity: str
    public_key: PublicKey
    verifying_keys: VerifyingKeys
    poll_ids: List[int] = field(default_factory=list)


@dataclass
class OutcomePayload:
    """Final tally submitted alongside the last proof batches"""
    tally_results: List[bytes]
    tally_result_proofs: List[List[bytes]]
    total_spent: bytes
    total_spent_salt: bytes
    tally_result_salt: bytes
    new_results_commitment: bytes
    spent_votes_hash: bytes


@dataclass(frozen=True)
class Outcome:
    index: int
    tally_results: Tuple[int, ...]
    total_spent: int


@dataclass
class Poll:
    id: int
    coordinator: str
    config: PollConfiguration
    created_at: int
    registration_deadline: int
    voting_deadline: int
    registration_tree: Accumulator
    interaction_tree: Accumulator
    state: PollState = PollState.CREATED
    process_commitment: Optional[bytes] = None
    tally_commitment: Optional[bytes] = None
    processed_batches: int = 0
    tallied_batches: int = 0
    outcome: Optional[Outcome] = None

    @property
    def registration_count(self) -> int:
        return self.registration_tree.leaf_count

    @property
    def interaction_count(self) -> int:
        return self.interaction_tree.leaf_count

    def in_registration(self, now: int) -> bool:
        return now < self.registration_deadline

    def in_voting(self, now: int) -> bool:
        return self.registration_deadline <= now < self.voting_deadline
