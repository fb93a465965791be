"""Incremental Merkle accumulator."""

from .accumulator import (
    ACCUMULATOR_ZERO,
    inclusion_path,
    Accumulator,
    verify_inclusion,
    zero_hashes,
)

__all__ = ['ACCUMULATOR_ZERO', 'inclusion_path', 'Accumulator', 'verify_inclusion', 'zero_hashes']
