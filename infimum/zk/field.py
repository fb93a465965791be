"""
BN254 scalar field helpers.

Every value that crosses the poll engine boundary (leaves, roots,
commitments, key coordinates) is a field element encoded as a 32-byte
big-endian byte string, zero-padded on the left.
"""

import logging

import galois

logger = logging.getLogger(__name__)

# BN254 scalar field prime
FIELD_MODULUS = 21888242871839275222246405745257275088548364400416034343698204186575808495617

FIELD_BYTES = 32

FIELD_BITS = FIELD_MODULUS.bit_length()


def to_field_bytes(value: int) -> bytes:
    """Encode an integer as a 32-byte big-endian field element"""
    if value < 0:
        raise ValueError(f"Field element must be non-negative, got {value}")
    return (value % FIELD_MODULUS).to_bytes(FIELD_BYTES, "big")


def from_field_bytes(data: bytes) -> int:
    """Decode a 32-byte big-endian field element"""
    if not isinstance(data, (bytes, bytearray)) or len(data) != FIELD_BYTES:
        raise ValueError(
            f"Field element must be exactly {FIELD_BYTES} bytes")
    return int.from_bytes(data, "big") % FIELD_MODULUS


def is_field_bytes(data) -> bool:
    """32 bytes holding a canonical element, i.e. a value below the modulus"""
    return (isinstance(data, (bytes, bytearray)) and len(data) == FIELD_BYTES
            and int.from_bytes(data, "big") < FIELD_MODULUS)


class FieldArithmetic:
    """Prime field arithmetic backed by galois"""

    def __init__(self, modulus: int = FIELD_MODULUS):
        self.modulus = modulus
        # 5 generates the multiplicative group of the BN254 scalar field
        self.field = galois.GF(modulus, primitive_element=5, verify=False)
        logger.debug(f"Initialized field GF({modulus})")

    def element(self, value: int):
        return self.field(value % self.modulus)

    def inverse(self, value: int) -> int:
        if value % self.modulus == 0:
            raise ZeroDivisionError("Zero has no inverse in the field")
        return int(self.element(value) ** -1)

