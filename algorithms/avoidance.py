"""
Deadlock Avoidance Algorithm (Banker's Algorithm) for the Safety Analyzer.

Implements the Banker's safety check over an immutable SystemState.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from models.system_state import SystemState
from analysis.events import SafetyStep, SafetyTrace, StepOutcome


@dataclass
class SafetyResult:
    """
    Verdict of the safety algorithm.

    Attributes:
        is_safe: True if every process can finish in some order
        safe_sequence: Process indices in completion order (None if unsafe)
        trace: Per-round record of the simulation
    """
    is_safe: bool
    safe_sequence: Optional[List[int]]
    trace: SafetyTrace = field(default_factory=SafetyTrace)


def can_allocate(need: np.ndarray, work: np.ndarray) -> bool:
    """Return True if Need[i][j] <= Work[j] for all j."""
    return bool(np.all(need <= work))


def is_safe_state(system_state: SystemState) -> SafetyResult:
    """
    Check if system is in a safe state using Banker's Algorithm.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Scan from P0 for the first i where Finish[i] == False and Need[i] <= Work
    3. If found: Work += Allocation[i], Finish[i] = True, append i, rescan from P0
    4. If not found: UNSAFE, the partial sequence is discarded
    5. All processes finished: SAFE

    Always taking the lowest eligible index makes the sequence deterministic.
    The greedy scan never needs to backtrack: if it stalls, no safe sequence
    exists.

    Time Complexity: O(P²×R)

    Args:
        system_state: Validated snapshot (need and available non-negative)

    Returns:
        SafetyResult with verdict, sequence and trace

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    # Step 1: Initialize Work and Finish vectors
    # Work is a private copy; the snapshot arrays are read-only
    work = system_state.available_vector.copy()
    finish = np.zeros(system_state.num_processes, dtype=bool)
    safe_sequence = []
    trace = SafetyTrace()

    while len(safe_sequence) < system_state.num_processes:
        round_number = len(safe_sequence) + 1
        candidate = _find_eligible_process(system_state, work, finish)

        if candidate is None:
            trace.add(SafetyStep(
                step=round_number,
                outcome=StepOutcome.STALLED,
                work=tuple(work.tolist()),
                waiting=tuple(int(i) for i in np.flatnonzero(~finish)),
            ))
            return SafetyResult(is_safe=False, safe_sequence=None, trace=trace)

        # Simulate completion: the process releases everything it holds
        work_before = work.copy()
        work += system_state.allocation_matrix[candidate]
        finish[candidate] = True
        safe_sequence.append(candidate)

        trace.add(SafetyStep(
            step=round_number,
            outcome=StepOutcome.EXECUTED,
            work=tuple(work_before.tolist()),
            process_id=candidate,
            need=tuple(system_state.need_matrix[candidate].tolist()),
            work_after=tuple(work.tolist()),
        ))

    return SafetyResult(is_safe=True, safe_sequence=safe_sequence, trace=trace)


def _find_eligible_process(
    system_state: SystemState,
    work: np.ndarray,
    finish: np.ndarray
) -> Optional[int]:
    """Return the lowest-index unfinished process whose need fits in work."""
    for i in range(system_state.num_processes):
        if finish[i]:
            continue
        if can_allocate(system_state.need_matrix[i], work):
            return i
    return None


def verify_safe_sequence(system_state: SystemState, sequence: Sequence[int]) -> bool:
    """
    Replay a completion order and check it never exceeds available resources.

    Args:
        system_state: Validated snapshot
        sequence: Candidate order of process indices

    Returns:
        True if sequence is a permutation of all processes and every process's
        need fits the running Work vector at its step
    """
    if sorted(sequence) != list(range(system_state.num_processes)):
        return False

    work = system_state.available_vector.copy()
    for pid in sequence:
        if not can_allocate(system_state.need_matrix[pid], work):
            return False
        work += system_state.allocation_matrix[pid]
    return True
