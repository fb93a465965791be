"""
Error taxonomy for the poll engine.

Every failure is raised to the caller and leaves engine state untouched.
"""


class InfimumError(Exception):
    """Base exception for poll engine operations"""
    pass


# ============================================================================
# CATEGORIES
# ============================================================================


class ConfigurationError(InfimumError):
    """Call arguments or poll configuration are invalid"""
    pass


class CapacityError(InfimumError):
    """A bounded collection is full"""
    pass


class PhaseError(InfimumError):
    """Operation is not allowed in the current time window or poll state"""
    pass


class IdentityError(InfimumError):
    """Unknown or duplicate coordinator or poll"""
    pass


class CryptographicError(InfimumError):
    """Keys or proofs failed validation"""
    pass


# ============================================================================
# CONFIGURATION
# ============================================================================


class PollConfigInvalid(ConfigurationError):
    pass


class MalformedInput(ConfigurationError):
    pass


# ============================================================================
# CAPACITY
# ============================================================================


class CoordinatorPollLimitReached(CapacityError):
    pass


class ParticipantRegistrationLimitReached(CapacityError):
    pass


class ParticipantInteractionLimitReached(CapacityError):
    pass


class AccumulatorFull(CapacityError):
    """Accumulator already holds 2^depth leaves"""
    pass


# ============================================================================
# PHASE
# ============================================================================


class PollRegistrationInProgress(PhaseError):
    pass


class PollRegistrationHasEnded(PhaseError):
    pass


class PollVotingInProgress(PhaseError):
    pass


class PollVotingHasEnded(PhaseError):
    pass


class PollStateNotMerged(PhaseError):
    pass


class PollAlreadyMerged(PhaseError):
    pass


class PollOutcomeAlreadyDetermined(PhaseError):
    pass


class PollCurrentlyActive(PhaseError):
    pass


class AccumulatorFinalized(PhaseError):
    """Accumulator root has already been computed"""
    pass


# ============================================================================
# IDENTITY
# ============================================================================


class CoordinatorAlreadyRegistered(IdentityError):
    pass


class CoordinatorNotRegistered(IdentityError):
    pass


class PollDoesNotExist(IdentityError):
    pass


# ============================================================================
# CRYPTOGRAPHIC
# ============================================================================


class MalformedKeys(CryptographicError):
    pass


class MalformedProof(CryptographicError):
    pass
