"""Leaf encodings shared with the off-ledger prover."""

from typing import Sequence

from infimum.errors import MalformedInput
from infimum.zk.field import is_field_bytes, to_field_bytes
from infimum.zk.poseidon import FieldHasher

from .types import PAYLOAD_LENGTH, VOICE_CREDITS, PublicKey


def registration_leaf(hasher: FieldHasher, public_key: PublicKey, block: int) -> bytes:
    return hasher.hash_many([
        public_key.x,
        public_key.y,
        to_field_bytes(VOICE_CREDITS),
        to_field_bytes(block)
    ])


def interaction_leaf(hasher: FieldHasher, public_key: PublicKey, data: Sequence[bytes]) -> bytes:
    validate_payload(data)
    return hasher.hash_many([
        hasher.hash_many(data[:5]),
        hasher.hash_many(data[5:]),
        public_key.x,
        public_key.y
    ])


def public_key_hash(hasher: FieldHasher, public_key: PublicKey) -> bytes:
    return hasher.hash_many([public_key.x, public_key.y])


def validate_payload(data: Sequence[bytes]):
    if len(data) != PAYLOAD_LENGTH:
        raise MalformedInput(
            f"Interaction payload must hold {PAYLOAD_LENGTH} field elements, got {len(data)}")
    if not all(is_field_bytes(x) for x in data):
        raise MalformedInput("Interaction payload elements must be 32-byte field elements")
