"""
End-to-end poll: coordinator at block 100, one participant, one interaction,
merge at 109, one process batch, one tally batch and the final outcome.
"""

from conftest import BindingVerifier, make_public_key, payload
from infimum.accumulator import Accumulator, inclusion_path
from infimum.poll import (OutcomePayload, PollState, ProofBatch,
                          interaction_leaf, process_public_inputs,
                          public_key_hash, registration_leaf,
                          tally_public_inputs)
from infimum.zk import to_field_bytes


def test_poll_runs_to_tallied(engine, coordinator, coordinator_key, poll_config, clock, hasher):
    poll = engine.create_poll(coordinator, poll_config)
    assert (poll.registration_deadline, poll.voting_deadline) == (104, 108)

    voter = make_public_key(1)
    clock.set(102)
    assert engine.register_as_participant(poll.id, voter) == 0

    clock.set(105)
    ephemeral = make_public_key(2)
    assert engine.interact_with_poll(poll.id, ephemeral, payload(1)) == 0

    clock.set(109)
    engine.merge_poll_state(coordinator, poll.id)
    assert poll.state is PollState.MERGED
    assert poll.registration_tree.root == Accumulator.compute_root(
        [registration_leaf(hasher, voter, 102)], 2, hasher)
    assert poll.interaction_tree.root == Accumulator.compute_root(
        [interaction_leaf(hasher, ephemeral, payload(1))], 2, hasher)

    # Off-ledger prover output
    results = [to_field_bytes(v) for v in (0, 0, 1)]
    results_root = Accumulator.compute_root(results, 2, hasher)
    results_commitment = hasher.hash2(results_root, to_field_bytes(11))
    spent_hash = hasher.hash2(to_field_bytes(1), to_field_bytes(12))
    final_tally = hasher.hash2(results_commitment, spent_hash)
    new_process = to_field_bytes(777)

    key_hash = public_key_hash(hasher, coordinator_key)
    process_inputs = process_public_inputs(
        poll, key_hash, 0, poll.process_commitment, new_process)
    tally_inputs = tally_public_inputs(poll, 0, poll.tally_commitment, final_tally)
    batches = [
        ProofBatch(BindingVerifier.prove(process_inputs), new_process),
        ProofBatch(BindingVerifier.prove(tally_inputs), final_tally),
    ]
    outcome = OutcomePayload(
        tally_results=results,
        tally_result_proofs=[inclusion_path(results, i, 2, hasher) for i in range(3)],
        total_spent=to_field_bytes(1),
        total_spent_salt=to_field_bytes(12),
        tally_result_salt=to_field_bytes(11),
        new_results_commitment=results_commitment,
        spent_votes_hash=spent_hash
    )

    engine.commit_outcome(coordinator, poll.id, batches, outcome)

    assert poll.state is PollState.TALLIED
    assert poll.outcome.index == 2
    assert poll.process_commitment == new_process
    assert poll.tally_commitment == final_tally
    assert [type(e).__name__ for e in engine.events] == [
        'CoordinatorRegistered',
        'PollCreated',
        'ParticipantRegistered',
        'PollInteraction',
        'PollStateMerged',
        'PollOutcome',
    ]


def test_engine_records_operation_metrics(clock, hasher, verifier, coordinator_key, verifying_keys):
    from infimum.engine import PollEngine
    from infimum.utils import PerformanceMonitor

    monitored = PollEngine(clock, hasher, verifier, monitor=PerformanceMonitor())
    monitored.register_as_coordinator("carol", coordinator_key, verifying_keys)
    summary = monitored.monitor.get_summary()
    assert summary['operations']['register_as_coordinator']['count'] == 1
