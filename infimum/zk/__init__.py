"""
Field arithmetic, hashing and proof verification for the poll engine
"""

from .field import (
    FIELD_MODULUS,
    FIELD_BYTES,
    FIELD_BITS,
    FieldArithmetic,
    to_field_bytes,
    from_field_bytes,
    is_field_bytes,
)
from .poseidon import (
    FieldHasher,
    PoseidonHasher,
    PoseidonParameters,
    GrainLFSR,
    circom_parameters,
    poseidon_hash,
)
from .verifier import (
    ProofVerifier,
    SnarkjsVerifier,
    proof_to_json,
    verifying_key_to_json,
)

__all__ = [
    # Field
    'FIELD_MODULUS',
    'FIELD_BYTES',
    'FIELD_BITS',
    'FieldArithmetic',
    'to_field_bytes',
    'from_field_bytes',
    'is_field_bytes',

    # Hashing
    'FieldHasher',
    'PoseidonHasher',
    'PoseidonParameters',
    'GrainLFSR',
    'circom_parameters',
    'poseidon_hash',

    # Verification
    'ProofVerifier',
    'SnarkjsVerifier',
    'proof_to_json',
    'verifying_key_to_json',
]
