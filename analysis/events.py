"""
Trace model for the Banker's Safety Analyzer.

Defines the per-round records emitted by the safety algorithm.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class StepOutcome(Enum):
    """Outcome of one round of the safety algorithm."""
    EXECUTED = "executed"
    STALLED = "stalled"


@dataclass(frozen=True)
class SafetyStep:
    """
    Represents a single round of the safety algorithm.

    Attributes:
        step: Round number (1-based)
        outcome: Whether a process executed or the scan stalled
        work: Work vector at the start of the round
        process_id: Process that executed (None when stalled)
        need: Need row of the executed process
        work_after: Work vector after the process released its allocation
        waiting: Unfinished processes when the scan stalled
    """
    step: int
    outcome: StepOutcome
    work: Tuple[int, ...]
    process_id: Optional[int] = None
    need: Tuple[int, ...] = ()
    work_after: Tuple[int, ...] = ()
    waiting: Tuple[int, ...] = ()

    def __str__(self) -> str:
        """
        Format step for logging.

        Processes appear by index (P0, P1, ...) whatever labels the input
        used; ``analysis.reporter`` renders the labelled form.
        """
        if self.outcome == StepOutcome.EXECUTED:
            return (
                f"Step {self.step}: P{self.process_id} executes "
                f"(need={list(self.need)}, work={list(self.work)} -> {list(self.work_after)})"
            )
        waiting = ", ".join(f"P{pid}" for pid in self.waiting)
        return f"Step {self.step}: STALLED (work={list(self.work)}, waiting: {waiting})"


@dataclass
class SafetyTrace:
    """Ordered collection of safety rounds."""
    steps: List[SafetyStep] = field(default_factory=list)

    def add(self, step: SafetyStep) -> None:
        """Append a round to the trace."""
        self.steps.append(step)

    def executed_steps(self) -> List[SafetyStep]:
        """Get all rounds in which a process executed."""
        return [s for s in self.steps if s.outcome == StepOutcome.EXECUTED]

    @property
    def stalled_step(self) -> Optional[SafetyStep]:
        """The round that stalled, if any."""
        for s in self.steps:
            if s.outcome == StepOutcome.STALLED:
                return s
        return None

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        return iter(self.steps)
