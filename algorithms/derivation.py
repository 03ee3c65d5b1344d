"""
State derivation for the Banker's Safety Analyzer.

Computes the Need matrix and the Available vector from the raw snapshot and
rejects snapshots that break their non-negativity invariants.
"""

import numpy as np
from typing import List, Optional, Sequence

from models.system_state import SystemState, resource_label


class InvariantViolationError(Exception):
    """Raised when derived values break the need >= 0 or available >= 0 invariants."""

    def __init__(self, violations: List[str]):
        self.violations = list(violations)
        super().__init__(
            "Inconsistent system description:\n  " + "\n  ".join(self.violations)
        )


def compute_need(allocation: np.ndarray, maximum: np.ndarray) -> np.ndarray:
    """
    Calculate the Need matrix.

    Need[i][j] = Max[i][j] - Allocation[i][j], without clamping. Negative
    entries are left in place for ``derive_state`` to report.
    """
    return np.asarray(maximum, dtype=np.int64) - np.asarray(allocation, dtype=np.int64)


def compute_available(total: np.ndarray, allocation: np.ndarray) -> np.ndarray:
    """
    Calculate the Available vector.

    Available[j] = Total[j] - Sum(Allocation[i][j]) for all i, without clamping.

    Column sums are taken over Python ints so they cannot wrap around; the
    result is an object array until ``derive_state`` has checked it.
    """
    allocated = np.asarray(allocation, dtype=np.int64).sum(axis=0, dtype=object)
    return np.asarray(total, dtype=np.int64).astype(object) - allocated


def derive_state(
    total: Sequence[int],
    allocation: Sequence[Sequence[int]],
    maximum: Sequence[Sequence[int]],
    process_labels: Optional[Sequence[str]] = None
) -> SystemState:
    """
    Build a validated SystemState from raw matrices.

    Args:
        total: [R] Total instances of each resource type
        allocation: [P][R] Current allocation of each process
        maximum: [P][R] Declared maximum demand of each process
        process_labels: Optional [P] labels (defaults to P0, P1, ...)

    Returns:
        Immutable SystemState with need and available filled in

    Raises:
        ValueError: If shapes disagree, or any raw entry is negative, not an
            integer, or outside the 64-bit range
        InvariantViolationError: If any need or available entry is negative
    """
    total_vector = _as_int_array(total, "total")
    if total_vector.ndim != 1:
        raise ValueError(f"Total vector must be 1-D, got shape {total_vector.shape}")
    num_resources = total_vector.shape[0]

    allocation_matrix = _as_matrix(allocation, num_resources, "allocation")
    max_demand_matrix = _as_matrix(maximum, num_resources, "maximum")

    if allocation_matrix.shape != max_demand_matrix.shape:
        raise ValueError(
            f"Allocation shape {allocation_matrix.shape} does not match "
            f"maximum shape {max_demand_matrix.shape}"
        )

    for name, values in (
        ("total", total_vector),
        ("allocation", allocation_matrix),
        ("maximum", max_demand_matrix),
    ):
        if np.any(values < 0):
            raise ValueError(f"{name} contains negative entries")

    need_matrix = compute_need(allocation_matrix, max_demand_matrix)
    available_vector = compute_available(total_vector, allocation_matrix)

    labels = tuple(process_labels) if process_labels is not None else tuple(
        f"P{i}" for i in range(allocation_matrix.shape[0])
    )
    if len(labels) != allocation_matrix.shape[0]:
        raise ValueError(
            f"Expected {allocation_matrix.shape[0]} process labels, got {len(labels)}"
        )

    violations = _collect_violations(
        total_vector, allocation_matrix, max_demand_matrix,
        need_matrix, available_vector, labels
    )
    if violations:
        raise InvariantViolationError(violations)

    # 0 <= available <= total, so the exact sums fit back into int64
    available_vector = available_vector.astype(np.int64)

    return SystemState(
        total_vector=total_vector,
        allocation_matrix=allocation_matrix,
        max_demand_matrix=max_demand_matrix,
        need_matrix=need_matrix,
        available_vector=available_vector,
        process_labels=labels,
    )


def _as_int_array(values, name: str) -> np.ndarray:
    """Copy values into an int64 array, refusing floats and out-of-range integers."""
    array = np.array(values)
    if array.size == 0:
        return array.astype(np.int64)
    if array.dtype == object:
        raise ValueError(f"{name} contains values outside the 64-bit integer range")
    if not np.issubdtype(array.dtype, np.integer):
        raise ValueError(f"{name} must contain integers, got {array.dtype}")
    if array.dtype == np.uint64 and np.any(array > np.iinfo(np.int64).max):
        raise ValueError(f"{name} contains values outside the 64-bit integer range")
    return array.astype(np.int64)


def _as_matrix(values, num_resources: int, name: str) -> np.ndarray:
    """Coerce rows into a [P][R] integer matrix."""
    matrix = _as_int_array(values, name)
    if matrix.size == 0:
        # Rows with no resources still count as processes
        if matrix.ndim > 2 or (num_resources and len(matrix)):
            raise ValueError(
                f"{name} matrix has shape {matrix.shape}, expected [P][{num_resources}]"
            )
        return matrix.reshape(len(matrix), num_resources)
    if matrix.ndim != 2 or matrix.shape[1] != num_resources:
        raise ValueError(
            f"{name} matrix has shape {matrix.shape}, expected [P][{num_resources}]"
        )
    return matrix


def _collect_violations(
    total_vector: np.ndarray,
    allocation_matrix: np.ndarray,
    max_demand_matrix: np.ndarray,
    need_matrix: np.ndarray,
    available_vector: np.ndarray,
    labels: Sequence[str]
) -> List[str]:
    """Describe every negative Need and Available entry."""
    violations = []

    for i, j in zip(*np.nonzero(need_matrix < 0)):
        i, j = int(i), int(j)
        violations.append(
            f"{labels[i]} holds more {resource_label(j)} than its maximum "
            f"(allocation {allocation_matrix[i][j]} > max {max_demand_matrix[i][j]})"
        )

    for j in np.flatnonzero(available_vector < 0).tolist():
        violations.append(
            f"Resource {resource_label(j)} is over-allocated "
            f"(allocated {sum(int(v) for v in allocation_matrix[:, j])} > total {total_vector[j]})"
        )

    return violations
