"""
Append-only incremental Merkle tree.

Only the filled-subtree frontier is kept: one pending left sibling per level,
plus the root slot reached when the tree is full. Unfilled slots are padded
with a domain-separated zero leaf when the root is computed.
"""

import hashlib
import logging
from typing import List, Optional, Sequence

from infimum.errors import AccumulatorFinalized, AccumulatorFull
from infimum.zk.field import FIELD_MODULUS, is_field_bytes, to_field_bytes
from infimum.zk.poseidon import FieldHasher

logger = logging.getLogger(__name__)

ACCUMULATOR_ZERO = to_field_bytes(
    int.from_bytes(hashlib.sha256(b"infimum.accumulator.zero").digest(), "big") % FIELD_MODULUS)


def zero_hashes(hasher: FieldHasher, depth: int, zero_leaf: bytes = ACCUMULATOR_ZERO) -> List[bytes]:
    """Roots of empty subtrees, level 0 (leaf) up to level depth"""
    zeros = [zero_leaf]
    for _ in range(depth):
        zeros.append(hasher.hash2(zeros[-1], zeros[-1]))
    return zeros


class Accumulator:
    """Incremental Merkle accumulator keyed by insertion order"""

    def __init__(self, depth: int, hasher: FieldHasher, zero_leaf: bytes = ACCUMULATOR_ZERO):
        if depth <= 0:
            raise ValueError(f"Accumulator depth must be positive, got {depth}")
        self.depth = depth
        self.hasher = hasher
        self.leaf_count = 0
        self.zeros = zero_hashes(hasher, depth, zero_leaf)
        self.frontier: List[Optional[bytes]] = [None] * (depth + 1)
        self._root: Optional[bytes] = None

    @property
    def capacity(self) -> int:
        return 1 << self.depth

    @property
    def is_full(self) -> bool:
        return self.leaf_count >= self.capacity

    @property
    def is_finalized(self) -> bool:
        return self._root is not None

    @property
    def root(self) -> Optional[bytes]:
        return self._root

    def append(self, leaf: bytes) -> int:
        """Insert a leaf and return its index"""
        if self.is_finalized:
            raise AccumulatorFinalized("Cannot append to a finalized accumulator")
        if self.is_full:
            raise AccumulatorFull(
                f"Accumulator of depth {self.depth} holds {self.capacity} leaves")
        if not is_field_bytes(leaf):
            raise ValueError("Leaf must be a 32-byte field element")

        index = self.leaf_count
        node = bytes(leaf)
        position = index
        level = 0
        # Right children fold into their cached left sibling
        while level < self.depth and position & 1:
            node = self.hasher.hash2(self.frontier[level], node)
            position >>= 1
            level += 1
        self.frontier[level] = node

        self.leaf_count += 1
        return index

    def finalize(self) -> bytes:
        """Compute the root once; later calls fail"""
        if self.is_finalized:
            raise AccumulatorFinalized("Accumulator root was already computed")

        if self.is_full:
            root = self.frontier[self.depth]
        else:
            node = self.zeros[0]
            for level in range(self.depth):
                if (self.leaf_count >> level) & 1:
                    node = self.hasher.hash2(self.frontier[level], node)
                else:
                    node = self.hasher.hash2(node, self.zeros[level])
            root = node

        self._root = root
        logger.debug(
            f"Finalized accumulator depth={self.depth} leaves={self.leaf_count} root={root.hex()}")
        return root

    @classmethod
    def compute_root(cls, leaves: Sequence[bytes], depth: int, hasher: FieldHasher) -> bytes:
        """Root of an ordered leaf sequence, as the prover reproduces it"""
        accumulator = cls(depth, hasher)
        for leaf in leaves:
            accumulator.append(leaf)
        return accumulator.finalize()


def verify_inclusion(leaf: bytes, index: int, siblings: Sequence[bytes], root: bytes,
                     hasher: FieldHasher) -> bool:
    """Verify a bottom-up Merkle path for the leaf at index"""
    if index < 0 or index >= (1 << len(siblings)):
        return False
    if not is_field_bytes(leaf) or not all(is_field_bytes(s) for s in siblings):
        return False

    current = leaf
    position = index
    for sibling in siblings:
        if position & 1:
            current = hasher.hash2(sibling, current)
        else:
            current = hasher.hash2(current, sibling)
        position >>= 1
    return current == root


def inclusion_path(leaves: Sequence[bytes], index: int, depth: int,
                   hasher: FieldHasher, zero_leaf: bytes = ACCUMULATOR_ZERO) -> List[bytes]:
    """Bottom-up sibling path for leaves[index] under the padded root"""
    if not 0 <= index < len(leaves):
        raise ValueError(f"Index {index} out of bounds for {len(leaves)} leaves")
    if len(leaves) > (1 << depth):
        raise ValueError(f"{len(leaves)} leaves do not fit depth {depth}")

    zeros = zero_hashes(hasher, depth, zero_leaf)
    layer = list(leaves)
    position = index
    path = []
    for level in range(depth):
        if len(layer) % 2:
            layer.append(zeros[level])
        path.append(layer[position ^ 1])
        layer = [hasher.hash2(layer[i], layer[i + 1])
                 for i in range(0, len(layer), 2)]
        position >>= 1
    return path
