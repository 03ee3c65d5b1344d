"""
System State model for the Banker's Safety Analyzer.

Holds the immutable snapshot consumed by the safety algorithm: the total
resource vector, the allocation and maximum matrices, and the derived need
matrix and available vector.
"""

import numpy as np
from typing import Optional, Sequence, Tuple
from dataclasses import dataclass, field


def resource_label(index: int) -> str:
    """Return the conventional label for a resource type (A, B, C, ...)."""
    if 0 <= index < 26:
        return chr(ord('A') + index)
    return f"R{index}"


def _frozen_array(values, ndim: int) -> np.ndarray:
    """Copy values into a read-only integer array of the given rank."""
    array = np.array(values, dtype=np.int64, copy=True)
    if array.ndim != ndim:
        # An empty process list still needs a 2-D (0 x R) matrix
        if ndim == 2 and array.size == 0:
            array = array.reshape(0, 0)
        else:
            raise ValueError(f"Expected a {ndim}-D array, got shape {array.shape}")
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class SystemState:
    """
    Snapshot of a resource-allocation system.

    Built by ``algorithms.derivation.derive_state`` which checks the
    non-negativity invariants before construction.

    Attributes:
        total_vector: [R] Total instances of each resource type
        allocation_matrix: [P][R] Instances currently held by each process
        max_demand_matrix: [P][R] Maximum instances each process may hold
        need_matrix: [P][R] Max - Allocation
        available_vector: [R] Total - column sums of Allocation
        process_labels: [P] Display label of each process
    """
    total_vector: np.ndarray
    allocation_matrix: np.ndarray
    max_demand_matrix: np.ndarray
    need_matrix: np.ndarray
    available_vector: np.ndarray
    process_labels: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        # Copies keep the snapshot independent of the caller's buffers
        object.__setattr__(self, 'total_vector', _frozen_array(self.total_vector, 1))
        object.__setattr__(self, 'available_vector', _frozen_array(self.available_vector, 1))
        for name in ('allocation_matrix', 'max_demand_matrix', 'need_matrix'):
            object.__setattr__(self, name, _frozen_array(getattr(self, name), 2))

        labels = tuple(self.process_labels) or tuple(
            f"P{i}" for i in range(self.allocation_matrix.shape[0])
        )
        object.__setattr__(self, 'process_labels', labels)

        if len(labels) != self.num_processes:
            raise ValueError(
                f"Expected {self.num_processes} process labels, got {len(labels)}"
            )

    @property
    def num_processes(self) -> int:
        """Number of processes in the snapshot."""
        return self.allocation_matrix.shape[0]

    @property
    def num_resources(self) -> int:
        """Number of resource types in the snapshot."""
        return self.total_vector.shape[0]

    @property
    def resource_labels(self) -> Tuple[str, ...]:
        return tuple(resource_label(j) for j in range(self.num_resources))

    def process_label(self, pid: int) -> str:
        """Label of a process index, as read from the input file."""
        return self.process_labels[pid]

    def labels_for(self, sequence: Optional[Sequence[int]]) -> Tuple[str, ...]:
        """Translate a sequence of process indices into their labels."""
        if sequence is None:
            return ()
        return tuple(self.process_labels[pid] for pid in sequence)
