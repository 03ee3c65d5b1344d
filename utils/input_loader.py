"""
Input Loader for the Banker's Safety Analyzer.

Parses the plain-text system description:

    # comment
    <num_processes> <num_resources>
    <total_1> ... <total_R>
    <label> <allocation_1> ... <allocation_R>     (one line per process)
    <label> <max_1> ... <max_R>                   (one line per process)

Blank lines and lines starting with '#' are ignored.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from models.system_state import SystemState
from algorithms.derivation import derive_state


DEFAULT_INPUT_FILE = "input.txt"

# Largest count the numpy int64 matrices can hold
MAX_COUNT = 2**63 - 1


class InputLoadError(Exception):
    """Exception raised when an input file cannot be loaded."""
    pass


class InputUnreadableError(InputLoadError):
    """The input source could not be opened, read or decoded."""
    pass


class InputMalformedError(InputLoadError):
    """
    The input is structurally invalid.

    Attributes:
        stage: Parse stage that failed (header, total, allocation, maximum, trailing)
        line_number: 1-based line of the offending text (None at end of input)
    """

    def __init__(self, stage: str, message: str, line_number: int = None):
        self.stage = stage
        self.line_number = line_number
        location = f" (line {line_number})" if line_number is not None else ""
        super().__init__(f"Malformed input in {stage} section{location}: {message}")


@dataclass
class ParsedInput:
    """
    Raw snapshot read from an input file.

    Attributes:
        num_processes: Declared process count
        num_resources: Declared resource type count
        total: [R] Total instances of each resource type
        allocation: [P][R] Allocation rows
        maximum: [P][R] Maximum demand rows
        process_labels: [P] Labels from the allocation section
    """
    num_processes: int
    num_resources: int
    total: List[int]
    allocation: List[List[int]] = field(default_factory=list)
    maximum: List[List[int]] = field(default_factory=list)
    process_labels: List[str] = field(default_factory=list)

    def to_system_state(self) -> SystemState:
        """Derive need/available and validate invariants."""
        return derive_state(self.total, self.allocation, self.maximum, self.process_labels)


def load_input(file_path: str) -> ParsedInput:
    """
    Load a system description from a text file.

    Args:
        file_path: Path to the input file

    Returns:
        ParsedInput with every section populated

    Raises:
        InputUnreadableError: If the file cannot be read
        InputMalformedError: If the contents are structurally invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            text = f.read()
    except FileNotFoundError:
        raise InputUnreadableError(f"Input file not found: {file_path}")
    except UnicodeDecodeError as e:
        raise InputUnreadableError(f"Input file is not valid UTF-8 text: {file_path} ({e})")
    except OSError as e:
        raise InputUnreadableError(f"Cannot open input file '{file_path}': {e.strerror or e}")

    return parse_input(text)


def parse_input(text: str) -> ParsedInput:
    """
    Parse a system description.

    Args:
        text: Full input text

    Returns:
        ParsedInput with every section populated

    Raises:
        InputMalformedError: If the contents are structurally invalid
    """
    lines = _data_lines(text)

    # Section 0: number of processes and resources
    line_number, tokens = _next_line(lines, "header", "missing process/resource counts")
    num_processes, num_resources = _parse_header(tokens, line_number)

    # Section 1: total resources
    line_number, tokens = _next_line(lines, "total", "missing total resource vector")
    if len(tokens) != num_resources:
        raise InputMalformedError(
            "total",
            f"expected {num_resources} values, found {len(tokens)}",
            line_number
        )
    total = [_parse_count(token, "total", line_number) for token in tokens]

    # Section 2: allocation matrix
    allocation_labels, allocation = _parse_matrix(
        lines, "allocation", num_processes, num_resources
    )

    # Section 3: maximum matrix
    maximum_labels, maximum = _parse_matrix(
        lines, "maximum", num_processes, num_resources
    )
    for i, (alloc_label, max_label) in enumerate(zip(allocation_labels, maximum_labels)):
        if alloc_label != max_label:
            raise InputMalformedError(
                "maximum",
                f"row {i + 1} is labelled '{max_label}' but allocation row "
                f"{i + 1} is '{alloc_label}'"
            )

    # Anything left over means the counts in the header are wrong
    leftover = next(lines, None)
    if leftover is not None:
        line_number, tokens = leftover
        raise InputMalformedError(
            "trailing",
            f"unexpected data after maximum matrix: '{' '.join(tokens)}'",
            line_number
        )

    return ParsedInput(
        num_processes=num_processes,
        num_resources=num_resources,
        total=total,
        allocation=allocation,
        maximum=maximum,
        process_labels=allocation_labels,
    )


def _data_lines(text: str) -> Iterator[Tuple[int, List[str]]]:
    """Yield (line_number, tokens) for every non-blank, non-comment line."""
    for line_number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        yield line_number, stripped.split()


def _next_line(lines: Iterator, stage: str, message: str) -> Tuple[int, List[str]]:
    """Take the next data line or fail with the given stage."""
    try:
        return next(lines)
    except StopIteration:
        raise InputMalformedError(stage, message)


def _parse_header(tokens: List[str], line_number: int) -> Tuple[int, int]:
    """Parse '<num_processes> <num_resources>'."""
    if len(tokens) != 2:
        raise InputMalformedError(
            "header",
            f"expected '<processes> <resources>', found {len(tokens)} values",
            line_number
        )
    num_processes = _parse_count(tokens[0], "header", line_number)
    num_resources = _parse_count(tokens[1], "header", line_number)
    if num_processes < 1 or num_resources < 1:
        raise InputMalformedError(
            "header",
            f"process and resource counts must be positive "
            f"(got {num_processes} and {num_resources})",
            line_number
        )
    return num_processes, num_resources


def _parse_count(token: str, stage: str, line_number: int) -> int:
    """Parse a non-negative integer token that fits in 64 bits."""
    try:
        value = int(token)
    except ValueError:
        raise InputMalformedError(stage, f"'{token}' is not an integer", line_number)
    if value < 0:
        raise InputMalformedError(stage, f"negative value {value}", line_number)
    if value > MAX_COUNT:
        raise InputMalformedError(stage, f"value {value} is out of range", line_number)
    return value


def _parse_matrix(
    lines: Iterator,
    stage: str,
    num_processes: int,
    num_resources: int
) -> Tuple[List[str], List[List[int]]]:
    """
    Parse num_processes rows of '<label> <v1> ... <vR>'.

    Returns:
        Tuple of (labels, rows)
    """
    labels = []
    rows = []

    for _ in range(num_processes):
        line_number, tokens = _next_line(
            lines,
            stage,
            f"expected {num_processes} rows, found {len(rows)}"
        )
        if len(tokens) != num_resources + 1:
            raise InputMalformedError(
                stage,
                f"expected a label and {num_resources} values, found {len(tokens)} fields",
                line_number
            )

        label = tokens[0]
        if label in labels:
            raise InputMalformedError(stage, f"duplicate process label '{label}'", line_number)

        labels.append(label)
        rows.append([_parse_count(token, stage, line_number) for token in tokens[1:]])

    return labels, rows
