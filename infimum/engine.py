"""
Poll engine facade.

Wires the ledger store, block clock, field hasher, proof verifier and event
log into the coordinator registry, lifecycle manager and outcome committer,
and exposes the full operation surface.
"""

import logging
from contextlib import nullcontext
from typing import List, Optional, Sequence

from infimum.config import LimitsConfig, SystemConfig
from infimum.poll import (Coordinator, CoordinatorRegistry, EventLog,
                          LedgerStore, OutcomeCommitter, OutcomePayload, Poll,
                          PollConfiguration, PollLifecycle, ProofBatch,
                          PublicKey, VerifyingKeys)
from infimum.poll.store import BlockClock
from infimum.utils import PerformanceMonitor
from infimum.zk import FieldHasher, PoseidonHasher, ProofVerifier, SnarkjsVerifier

logger = logging.getLogger(__name__)


class PollEngine:
    def __init__(self, clock: BlockClock, hasher: FieldHasher, verifier: ProofVerifier,
                 limits: Optional[LimitsConfig] = None, store: Optional[LedgerStore] = None,
                 monitor: Optional[PerformanceMonitor] = None):
        self.clock = clock
        self.hasher = hasher
        self.verifier = verifier
        self.limits = limits or LimitsConfig()
        self.store = store if store is not None else LedgerStore()
        self.events = EventLog()
        self.monitor = monitor

        self.registry = CoordinatorRegistry(self.store, self.events)
        self.lifecycle = PollLifecycle(
            self.store, clock, hasher, self.limits, self.events)
        self.committer = OutcomeCommitter(
            self.store, hasher, verifier, self.events)

        logger.info("Initialized poll engine")

    @classmethod
    def from_config(cls, config: SystemConfig, clock: BlockClock) -> 'PollEngine':
        hasher = PoseidonHasher.from_constants_file(
            config.hash_config.constants_file)
        verifier = SnarkjsVerifier(
            config.verifier_config.snarkjs_path,
            config.verifier_config.timeout_seconds
        )
        monitor = PerformanceMonitor() if config.enable_performance_monitoring else None
        return cls(clock, hasher, verifier, limits=config.limits, monitor=monitor)

    def _operation(self, name: str):
        if self.monitor is None:
            return nullcontext()
        return self.monitor.start_operation(name)

    # ========================================================================
    # COORDINATOR REGISTRY
    # ========================================================================

    def register_as_coordinator(self, identity: str, public_key: PublicKey,
                                verifying_keys: VerifyingKeys) -> Coordinator:
        with self._operation("register_as_coordinator"):
            return self.registry.register(identity, public_key, verifying_keys)

    def rotate_keys(self, identity: str, public_key: PublicKey,
                    verifying_keys: VerifyingKeys) -> Coordinator:
        with self._operation("rotate_keys"):
            return self.registry.rotate_keys(identity, public_key, verifying_keys)

    # ========================================================================
    # POLL LIFECYCLE
    # ========================================================================

    def create_poll(self, identity: str, config: PollConfiguration) -> Poll:
        with self._operation("create_poll"):
            return self.lifecycle.create_poll(identity, config)

    def register_as_participant(self, poll_id: int, public_key: PublicKey) -> int:
        with self._operation("register_as_participant"):
            return self.lifecycle.register_as_participant(poll_id, public_key)

    def interact_with_poll(self, poll_id: int, public_key: PublicKey,
                           data: Sequence[bytes]) -> int:
        with self._operation("interact_with_poll"):
            return self.lifecycle.interact_with_poll(poll_id, public_key, data)

    def merge_poll_state(self, identity: str, poll_id: int) -> Poll:
        with self._operation("merge_poll_state"):
            return self.lifecycle.merge_poll_state(identity, poll_id)

    def nullify_poll(self, identity: str, poll_id: int) -> Poll:
        with self._operation("nullify_poll"):
            return self.lifecycle.nullify_poll(identity, poll_id)

    # ========================================================================
    # OUTCOME COMMITMENT
    # ========================================================================

    def commit_outcome(self, identity: str, poll_id: int, batches: Sequence[ProofBatch],
                       outcome: Optional[OutcomePayload] = None) -> Poll:
        with self._operation("commit_outcome"):
            return self.committer.commit_outcome(identity, poll_id, batches, outcome)

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_poll(self, poll_id: int) -> Poll:
        return self.store.get_poll(poll_id)

    def get_coordinator(self, identity: str) -> Coordinator:
        return self.store.get_coordinator(identity)

    def poll_ids(self, identity: str) -> List[int]:
        return list(self.store.get_coordinator(identity).poll_ids)
