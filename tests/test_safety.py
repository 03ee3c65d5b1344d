"""
Safety Algorithm Tests

Tests the Banker's safety check: verdicts, safe sequences, the
lowest-index tie-break, the per-round trace, and agreement with an
exhaustive search over all completion orders.
"""

import sys
from itertools import permutations
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.avoidance import can_allocate, is_safe_state, verify_safe_sequence
from algorithms.derivation import derive_state
from analysis.events import StepOutcome
from utils.input_generator import generate_snapshot


def _classic_state():
    return derive_state(
        [10, 5, 7],
        [[0, 1, 0], [2, 0, 0], [3, 0, 2], [2, 1, 1], [0, 0, 2]],
        [[7, 5, 3], [3, 2, 2], [9, 0, 2], [2, 2, 2], [4, 3, 3]],
    )


def _brute_force_is_safe(state) -> bool:
    """Try every completion order."""
    return any(
        verify_safe_sequence(state, order)
        for order in permutations(range(state.num_processes))
    )


# -- Scenarios --------------------------------------------------------------


def test_classic_instance_is_safe():
    """Textbook instance is SAFE; each round rescans from P0."""
    state = _classic_state()
    result = is_safe_state(state)

    assert result.is_safe
    # P0 becomes eligible once P1 and P3 have released, before P4 is scanned
    assert result.safe_sequence == [1, 3, 0, 2, 4]
    assert verify_safe_sequence(state, result.safe_sequence)


def test_textbook_sequence_also_replays():
    """<P1, P3, P4, P0, P2> is another valid order for the same instance."""
    assert verify_safe_sequence(_classic_state(), [1, 3, 4, 0, 2])


def test_single_process_single_resource():
    """total=[5], allocation=[[2]], max=[[5]] -> need [3], available [3]."""
    state = derive_state([5], [[2]], [[5]])
    result = is_safe_state(state)

    assert state.need_matrix.tolist() == [[3]]
    assert state.available_vector.tolist() == [3]
    assert result.is_safe
    assert result.safe_sequence == [0]


def test_zero_need_is_immediately_eligible():
    """A process needing nothing runs even when nothing is available."""
    state = derive_state([0, 0], [[0, 0]], [[0, 0]])
    result = is_safe_state(state)

    assert result.is_safe
    assert result.safe_sequence == [0]
    assert can_allocate(state.need_matrix[0], state.available_vector)


def test_unsafe_on_first_round():
    """No process fits the initial Available vector."""
    state = derive_state([10, 4], [[3, 1], [3, 1], [3, 1]], [[8, 2], [6, 2], [5, 1]])
    result = is_safe_state(state)

    assert not result.is_safe
    assert result.safe_sequence is None
    assert len(result.trace) == 1
    assert result.trace.executed_steps() == []

    stalled = result.trace.stalled_step
    assert stalled.outcome == StepOutcome.STALLED
    assert stalled.step == 1
    assert stalled.work == (1, 1)
    assert stalled.waiting == (0, 1, 2)


def test_unsafe_after_partial_progress():
    """The partial sequence is discarded when a later round stalls."""
    state = derive_state([3], [[1], [1]], [[2], [5]])
    result = is_safe_state(state)

    assert not result.is_safe
    assert result.safe_sequence is None

    executed = result.trace.executed_steps()
    assert [s.process_id for s in executed] == [0]
    assert result.trace.stalled_step.step == 2
    assert result.trace.stalled_step.work == (2,)
    assert result.trace.stalled_step.waiting == (1,)


# -- Tie-break and determinism ----------------------------------------------


def test_scan_restarts_from_lowest_index():
    """After P1 finishes, P0 is picked before P2 even though both fit."""
    state = derive_state([2], [[0], [1], [0]], [[2], [1], [0]])
    result = is_safe_state(state)

    assert result.safe_sequence == [1, 0, 2]


def test_all_eligible_runs_in_index_order():
    state = derive_state([3, 3], [[1, 0], [0, 1], [1, 1]], [[1, 0], [0, 1], [1, 1]])

    assert is_safe_state(state).safe_sequence == [0, 1, 2]


def test_repeated_runs_are_identical():
    """Same input, same verdict, sequence and trace."""
    state = _classic_state()
    first = is_safe_state(state)
    second = is_safe_state(state)

    assert first.is_safe == second.is_safe
    assert first.safe_sequence == second.safe_sequence
    assert first.trace.steps == second.trace.steps


def test_state_is_not_modified():
    state = _classic_state()
    is_safe_state(state)

    assert state.available_vector.tolist() == [3, 3, 2]
    assert state.allocation_matrix.tolist()[1] == [2, 0, 0]


def test_empty_system_is_safe():
    result = is_safe_state(derive_state([1, 2], [], []))

    assert result.is_safe
    assert result.safe_sequence == []
    assert len(result.trace) == 0


# -- Trace ------------------------------------------------------------------


def test_trace_records_each_round():
    """Each executed round records need, work before and work after."""
    result = is_safe_state(_classic_state())
    steps = result.trace.executed_steps()

    assert len(steps) == 5
    assert [s.step for s in steps] == [1, 2, 3, 4, 5]
    assert steps[0].process_id == 1
    assert steps[0].need == (1, 2, 2)
    assert steps[0].work == (3, 3, 2)
    assert steps[0].work_after == (5, 3, 2)
    # Every process released everything: Work ends at Total
    assert steps[-1].work_after == (10, 5, 7)
    assert result.trace.stalled_step is None

    for previous, current in zip(steps, steps[1:]):
        assert current.work == previous.work_after


# -- Sequence replay --------------------------------------------------------


def test_verify_rejects_non_permutations():
    state = _classic_state()

    assert not verify_safe_sequence(state, [1, 1, 3, 0, 2])
    assert not verify_safe_sequence(state, [1, 3, 0])
    assert not verify_safe_sequence(state, [1, 3, 0, 2, 5])


def test_verify_rejects_infeasible_order():
    """P0 cannot go first: its need [7, 4, 3] exceeds Available [3, 3, 2]."""
    assert not verify_safe_sequence(_classic_state(), [0, 1, 2, 3, 4])


# -- Exhaustive comparison ----------------------------------------------------


def test_verdict_matches_brute_force():
    """
    On small random instances the greedy verdict agrees with trying every
    completion order, and SAFE sequences are permutations that replay.
    """
    verdicts = {True: 0, False: 0}

    for seed in range(300):
        num_processes = 1 + seed % 5
        num_resources = 1 + seed % 3
        parsed = generate_snapshot(
            num_processes, num_resources,
            max_amount=4, max_headroom=2, seed=seed
        )
        state = parsed.to_system_state()
        result = is_safe_state(state)

        assert result.is_safe == _brute_force_is_safe(state), f"seed {seed}"
        verdicts[result.is_safe] += 1

        if result.is_safe:
            assert sorted(result.safe_sequence) == list(range(num_processes))
            assert verify_safe_sequence(state, result.safe_sequence)
        else:
            assert result.safe_sequence is None

    # The sample must exercise both verdicts
    assert verdicts[True] > 0
    assert verdicts[False] > 0


def test_step_summary_lines():
    """SafetyStep renders a one-line summary for logs."""
    executed = is_safe_state(_classic_state()).trace.steps[0]
    stalled = is_safe_state(derive_state([1], [[0], [0]], [[2], [3]])).trace.stalled_step

    assert str(executed) == "Step 1: P1 executes (need=[1, 2, 2], work=[3, 3, 2] -> [5, 3, 2])"
    assert str(stalled) == "Step 1: STALLED (work=[1], waiting: P0, P1)"


def test_step_summary_uses_process_indices():
    """Log summaries name processes by index even when inputs carry labels."""
    state = derive_state([2], [[1], [0]], [[1], [3]], ["web", "db"])
    result = is_safe_state(state)

    assert str(result.trace.steps[0]) == "Step 1: P0 executes (need=[0], work=[1] -> [2])"
    assert str(result.trace.stalled_step) == "Step 2: STALLED (work=[2], waiting: P1)"


def test_processes_without_resources_all_run():
    """With no resource types every process is eligible in index order."""
    result = is_safe_state(derive_state([], [[], []], [[], []]))

    assert result.is_safe
    assert result.safe_sequence == [0, 1]
