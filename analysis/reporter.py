"""
Report formatting for the Banker's Safety Analyzer.

Renders system state, safety traces and verdicts as text. Formatting only:
nothing here influences the algorithm's decisions.
"""

from typing import List, Optional, Sequence

from models.system_state import SystemState
from analysis.events import SafetyTrace, StepOutcome


CELL_WIDTH = 4


def _row_prefix_width(state: SystemState) -> int:
    """Width of the 'P0:  ' column, wide enough for the longest label."""
    longest = max((len(label) for label in state.process_labels), default=2)
    return longest + 3


def _cells(values: Sequence) -> str:
    return "".join(f"{v:>{CELL_WIDTH}}" for v in values)


def _spaced(values: Sequence[int]) -> str:
    """Space-separated vector as used in trace blocks."""
    return " ".join(str(v) for v in values)


def format_vector(title: str, state: SystemState, values: Sequence[int]) -> List[str]:
    """Format a per-resource vector with its column headings."""
    return [
        f"{title}:",
        "   " + _cells(state.resource_labels),
        "   " + _cells(values),
        "",
    ]


def format_matrix(title: str, state: SystemState, matrix) -> List[str]:
    """Format a [P][R] matrix with resource columns and process rows."""
    width = _row_prefix_width(state)
    lines = [f"{title}:", " " * width + _cells(state.resource_labels)]
    for i, label in enumerate(state.process_labels):
        lines.append(f"{label + ':':<{width}}" + _cells(matrix[i]))
    lines.append("")
    return lines


def format_system_state(state: SystemState) -> str:
    """
    Generate readable representation of the system state.

    Returns:
        Formatted string with Total, Available, Allocation, Maximum and Need
    """
    output = ["", "========== SYSTEM STATE ==========", ""]
    output += format_vector("Total Resources", state, state.total_vector.tolist())
    output += format_vector("Available Resources", state, state.available_vector.tolist())
    output += format_matrix("Allocation Matrix", state, state.allocation_matrix.tolist())
    output += format_matrix("Maximum Matrix", state, state.max_demand_matrix.tolist())
    output += format_matrix("Need Matrix", state, state.need_matrix.tolist())
    output.append("==================================")
    output.append("")
    return "\n".join(output)


def format_trace(trace: SafetyTrace, state: SystemState) -> str:
    """
    Format the step-by-step safety simulation.

    Args:
        trace: Trace returned in SafetyResult
        state: Snapshot the trace was computed from (for labels)

    Returns:
        One block per round followed by the summary line
    """
    output = []

    for step in trace:
        if step.outcome == StepOutcome.EXECUTED:
            label = state.process_label(step.process_id)
            output.append(f"Step {step.step}: Process {label} can execute")
            output.append(f"  Need:      {_spaced(step.need)}")
            output.append(f"  Available: {_spaced(step.work)}")
            output.append(f"  -> {label} executes and releases resources")
            output.append(f"  New Available: {_spaced(step.work_after)}")
            output.append("")
        else:
            waiting = ", ".join(state.labels_for(step.waiting))
            output.append("No process can execute with current available resources.")
            output.append(f"  Available: {_spaced(step.work)}")
            output.append(f"  Waiting:   {waiting}")
            output.append("System is in UNSAFE state!")
            output.append("")

    if trace.stalled_step is None:
        output.append("All processes completed successfully.")
        output.append("System is in SAFE state!")
        output.append("")

    return "\n".join(output)


def format_sequence(sequence: Optional[Sequence[int]], state: SystemState) -> str:
    """Format a safe sequence as '< P1, P3, P4 >'."""
    return "< " + ", ".join(state.labels_for(sequence)) + " >"


def format_verdict(result, state: SystemState) -> str:
    """
    Format the RESULTS block.

    Args:
        result: SafetyResult from is_safe_state
        state: Snapshot the result was computed from

    Returns:
        SAFE with its sequence, or UNSAFE with no sequence
    """
    output = ["========== RESULTS ==========", ""]
    if result.is_safe:
        output.append("The system is in a SAFE state.")
        output.append("")
        output.append(f"Safe Sequence: {format_sequence(result.safe_sequence, state)}")
    else:
        output.append("The system is in an UNSAFE state.")
        output.append("No safe sequence exists.")
    output.append("")
    output.append("=============================")
    return "\n".join(output)
