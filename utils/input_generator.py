"""
Random snapshot generator for the Banker's Safety Analyzer.

Produces system descriptions that always satisfy the derivation invariants
(allocation <= max, column sums of allocation <= total) but may be safe or
unsafe.
"""

import numpy as np
from typing import Optional

from utils.input_loader import ParsedInput


def generate_snapshot(
    num_processes: int,
    num_resources: int,
    max_amount: int = 10,
    max_headroom: Optional[int] = None,
    seed: Optional[int] = None
) -> ParsedInput:
    """
    Generate a random system description.

    Args:
        num_processes: Number of processes (rows)
        num_resources: Number of resource types (columns)
        max_amount: Upper bound for any maximum-demand entry
        max_headroom: Upper bound for unallocated instances per resource
            (defaults to max_amount; small values make unsafe states likely)
        seed: Seed for numpy's default_rng

    Returns:
        ParsedInput ready for ``to_system_state``
    """
    if num_processes < 1 or num_resources < 1:
        raise ValueError("num_processes and num_resources must be positive")
    if max_amount < 0:
        raise ValueError("max_amount must be non-negative")
    if max_headroom is None:
        max_headroom = max_amount

    rng = np.random.default_rng(seed)

    # Allocation for a process can't be greater than its max for that resource
    maximum = rng.integers(0, max_amount, size=(num_processes, num_resources), endpoint=True)
    allocation = rng.integers(0, maximum, endpoint=True)
    headroom = rng.integers(0, max_headroom, size=num_resources, endpoint=True)
    total = allocation.sum(axis=0) + headroom

    return ParsedInput(
        num_processes=num_processes,
        num_resources=num_resources,
        total=total.tolist(),
        allocation=allocation.tolist(),
        maximum=maximum.tolist(),
        process_labels=[f"P{i}" for i in range(num_processes)],
    )


def format_input(parsed: ParsedInput) -> str:
    """Render a ParsedInput in the loader's text format."""
    lines = [
        "# Number of processes and resources",
        f"{parsed.num_processes} {parsed.num_resources}",
        "",
        "# Total resources",
        " ".join(str(v) for v in parsed.total),
        "",
        "# Allocation matrix",
    ]
    for label, row in zip(parsed.process_labels, parsed.allocation):
        lines.append(f"{label} " + " ".join(str(v) for v in row))

    lines.append("")
    lines.append("# Maximum matrix")
    for label, row in zip(parsed.process_labels, parsed.maximum):
        lines.append(f"{label} " + " ".join(str(v) for v in row))

    return "\n".join(lines) + "\n"
