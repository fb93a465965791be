from __future__ import annotations

import hashlib
import json
from typing import List, Sequence

import pytest

from infimum.config import LimitsConfig
from infimum.engine import PollEngine
from infimum.poll import (ManualClock, PollConfiguration, ProofData, PublicKey,
                          VerifyingKey, VerifyingKeys)
from infimum.zk import PoseidonHasher, to_field_bytes


class BindingVerifier:
    """Accepts exactly the proofs minted by prove() for the same public inputs"""

    def __init__(self):
        self.calls: List[List[int]] = []

    @staticmethod
    def prove(public_inputs: Sequence[int]) -> ProofData:
        digest = hashlib.sha256(json.dumps([str(x) for x in public_inputs]).encode()).digest()
        return ProofData(pi_a=digest * 2, pi_b=digest * 4, pi_c=digest[::-1] * 2)

    def verify(self, proof, public_inputs, verifying_key) -> bool:
        self.calls.append(list(public_inputs))
        return proof == self.prove(public_inputs)


def make_verifying_key(n_public: int, seed: int = 1) -> VerifyingKey:
    g1 = bytes([seed]) * 64
    g2 = bytes([seed]) * 128
    return VerifyingKey(
        alpha_g1=g1,
        beta_g2=g2,
        gamma_g2=g2,
        delta_g2=g2,
        gamma_abc_g1=tuple(g1 for _ in range(n_public + 1))
    )


def make_public_key(seed: int) -> PublicKey:
    return PublicKey(to_field_bytes(1000 + seed), to_field_bytes(2000 + seed))


@pytest.fixture(scope="session")
def hasher() -> PoseidonHasher:
    return PoseidonHasher()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(100)


@pytest.fixture
def verifier() -> BindingVerifier:
    return BindingVerifier()


@pytest.fixture
def limits() -> LimitsConfig:
    return LimitsConfig(max_coordinator_polls=2, max_vote_options=4)


@pytest.fixture
def verifying_keys() -> VerifyingKeys:
    return VerifyingKeys(process=make_verifying_key(9, 1), tally=make_verifying_key(7, 2))


@pytest.fixture
def coordinator_key() -> PublicKey:
    return make_public_key(0)


@pytest.fixture
def engine(clock, hasher, verifier, limits) -> PollEngine:
    return PollEngine(clock, hasher, verifier, limits=limits)


@pytest.fixture
def coordinator(engine, coordinator_key, verifying_keys) -> str:
    engine.register_as_coordinator("alice", coordinator_key, verifying_keys)
    return "alice"


@pytest.fixture
def poll_config() -> PollConfiguration:
    return PollConfiguration(
        signup_period=4,
        voting_period=4,
        registration_depth=2,
        interaction_depth=2,
        process_batch_depth=1,
        tally_batch_depth=1,
        vote_option_tree_depth=2,
        vote_options=[0, 0, 0]
    )


def payload(seed: int = 0) -> List[bytes]:
    return [to_field_bytes(seed * 10 + i) for i in range(10)]
