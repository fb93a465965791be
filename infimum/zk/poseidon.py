"""
Poseidon field hash over the BN254 scalar field.

Implements the circomlib reference permutation (x^5 S-box, 8 full rounds and
the circomlib partial round counts per state width). Round constants and the
MDS matrix are generated with the reference Grain LFSR procedure, which
reproduces circomlib's poseidon constants, or loaded from a JSON export so
that a deployment can pin exactly the constants its prover was built with.
"""

import json
import logging
from collections import deque
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Union

from .field import (FIELD_BITS, FIELD_MODULUS, FieldArithmetic,
                    from_field_bytes, to_field_bytes)

logger = logging.getLogger(__name__)

FULL_ROUNDS = 8

# circomlib partial round counts, indexed by t - 2
PARTIAL_ROUNDS = [56, 57, 56, 60, 60, 63, 64, 63, 60, 66, 60, 65, 70, 60, 64, 68]

MAX_INPUTS = 5


class FieldHasher(Protocol):
    """Two-to-one and multi-input hash over 32-byte field elements"""

    def hash2(self, left: bytes, right: bytes) -> bytes:
        ...

    def hash_many(self, inputs: Sequence[bytes]) -> bytes:
        ...


class GrainLFSR:
    """
    Self-shrinking 80-bit Grain LFSR from the Poseidon reference parameter
    script. Seeded with the instance description (prime field, x^alpha S-box,
    field size, width and round counts), so every width gets its own stream.
    """

    def __init__(self, width: int, partial_rounds: int):
        fields = ((1, 2), (0, 4), (FIELD_BITS, 12), (width, 12),
                  (FULL_ROUNDS, 10), (partial_rounds, 10))
        bits = [int(b) for value, size in fields for b in format(value, f"0{size}b")]
        bits.extend([1] * 30)
        self._state = deque(bits, maxlen=80)
        for _ in range(160):
            self._clock()

    def _clock(self) -> int:
        s = self._state
        bit = s[62] ^ s[51] ^ s[38] ^ s[23] ^ s[13] ^ s[0]
        s.append(bit)
        return bit

    def next_bit(self) -> int:
        # a 1 selects the following bit, a 0 discards it
        while self._clock() == 0:
            self._clock()
        return self._clock()

    def next_int(self, bits: int = FIELD_BITS) -> int:
        value = 0
        for _ in range(bits):
            value = (value << 1) | self.next_bit()
        return value

    def next_field_element(self) -> int:
        """Rejection-sample a value below the modulus"""
        while True:
            value = self.next_int()
            if value < FIELD_MODULUS:
                return value


@dataclass
class PoseidonParameters:
    """Round constants and MDS matrix for one state width"""
    width: int
    round_constants: List[int]
    mds_matrix: List[List[int]]

    @property
    def partial_rounds(self) -> int:
        return PARTIAL_ROUNDS[self.width - 2]

    @property
    def total_rounds(self) -> int:
        return FULL_ROUNDS + self.partial_rounds

    def __post_init__(self):
        expected = self.total_rounds * self.width
        if len(self.round_constants) != expected:
            raise ValueError(
                f"Width {self.width} needs {expected} round constants, got {len(self.round_constants)}")
        if len(self.mds_matrix) != self.width or any(len(row) != self.width for row in self.mds_matrix):
            raise ValueError(
                f"MDS matrix must be {self.width}x{self.width}")

    @classmethod
    def generate(cls, width: int, field: Optional[FieldArithmetic] = None) -> 'PoseidonParameters':
        """
        Generate the circomlib constants for a width.

        Round constants come first from the Grain stream, then the Cauchy
        MDS matrix M[i][j] = 1 / (x_i + y_j) over 2t further samples,
        resampled until they are distinct and no x_i + y_j is zero.
        """
        if not 2 <= width <= MAX_INPUTS + 1:
            raise ValueError(f"Unsupported Poseidon width: {width}")
        field = field or FieldArithmetic()
        p = FIELD_MODULUS

        partial_rounds = PARTIAL_ROUNDS[width - 2]
        grain = GrainLFSR(width, partial_rounds)
        constants = [grain.next_field_element()
                     for _ in range((FULL_ROUNDS + partial_rounds) * width)]

        while True:
            points = [grain.next_int() % p for _ in range(2 * width)]
            if len(set(points)) != len(points):
                continue
            xs, ys = points[:width], points[width:]
            if any((x + y) % p == 0 for x in xs for y in ys):
                continue
            mds = [[field.inverse(x + y) for y in ys] for x in xs]
            break

        logger.debug(f"Generated Poseidon constants for width {width}")
        return cls(width=width, round_constants=constants, mds_matrix=mds)

    @staticmethod
    def from_file(path: Union[str, Path]) -> Dict[int, 'PoseidonParameters']:
        """Load circomlib-style constants: {"C": [...], "M": [...]} indexed by t - 2"""
        with open(path, 'r') as f:
            data = json.load(f)

        def parse(value) -> int:
            if isinstance(value, int):
                return value
            return int(value, 16) if value.startswith("0x") else int(value)

        params = {}
        for offset, (constants, matrix) in enumerate(zip(data["C"], data["M"])):
            width = offset + 2
            if width > MAX_INPUTS + 1:
                break
            params[width] = PoseidonParameters(
                width=width,
                round_constants=[parse(c) for c in constants],
                mds_matrix=[[parse(m) for m in row] for row in matrix]
            )

        logger.info(
            f"Loaded Poseidon constants for widths {sorted(params)} from {path}")
        return params


@lru_cache(maxsize=None)
def circom_parameters(width: int) -> PoseidonParameters:
    """Generated circomlib parameters, shared by every hasher in the process"""
    return PoseidonParameters.generate(width)


class PoseidonHasher:
    """Poseidon over BN254 exposed through the FieldHasher interface"""

    PRIME = FIELD_MODULUS

    def __init__(self, parameters: Optional[Dict[int, PoseidonParameters]] = None):
        self._parameters: Dict[int, PoseidonParameters] = dict(
            parameters or {})

    @classmethod
    def from_constants_file(cls, path: Optional[Union[str, Path]]) -> 'PoseidonHasher':
        if path is None:
            return cls()
        return cls(PoseidonParameters.from_file(path))

    def parameters(self, width: int) -> PoseidonParameters:
        if width not in self._parameters:
            self._parameters[width] = circom_parameters(width)
        return self._parameters[width]

    def permute(self, inputs: Sequence[int]) -> int:
        if not 1 <= len(inputs) <= MAX_INPUTS:
            raise ValueError(
                f"Poseidon accepts 1 to {MAX_INPUTS} inputs, got {len(inputs)}")

        params = self.parameters(len(inputs) + 1)
        t = params.width
        p = self.PRIME
        c = params.round_constants
        m = params.mds_matrix
        half_full = FULL_ROUNDS // 2

        state = [0] + [x % p for x in inputs]
        for r in range(params.total_rounds):
            state = [(state[i] + c[r * t + i]) % p for i in range(t)]

            if r < half_full or r >= half_full + params.partial_rounds:
                state = [pow(x, 5, p) for x in state]
            else:
                state[0] = pow(state[0], 5, p)

            state = [sum(m[i][j] * state[j] for j in range(t)) % p
                     for i in range(t)]

        return state[0]

    def hash2(self, left: bytes, right: bytes) -> bytes:
        return to_field_bytes(self.permute([from_field_bytes(left), from_field_bytes(right)]))

    def hash_many(self, inputs: Sequence[bytes]) -> bytes:
        return to_field_bytes(self.permute([from_field_bytes(x) for x in inputs]))


_default_hasher: Optional[PoseidonHasher] = None


def poseidon_hash(inputs: List[int]) -> int:
    """Poseidon hash of integer inputs with circomlib constants"""
    global _default_hasher
    if _default_hasher is None:
        _default_hasher = PoseidonHasher()
    return _default_hasher.permute(inputs)
