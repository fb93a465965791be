"""
Infimum poll engine: on-ledger lifecycle of collusion-resistant polls
"""

from .engine import PollEngine
from .errors import (
    InfimumError,
    ConfigurationError,
    CapacityError,
    PhaseError,
    IdentityError,
    CryptographicError,
)

__version__ = "0.1.0"

__all__ = [
    'PollEngine',
    'InfimumError',
    'ConfigurationError',
    'CapacityError',
    'PhaseError',
    'IdentityError',
    'CryptographicError',
]
