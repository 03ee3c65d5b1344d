#!/usr/bin/env python3
"""
Banker's Safety Analyzer
Main entry point for the safety analysis.

Reads a resource-allocation snapshot, derives Need and Available, and reports
whether a safe completion sequence exists.
"""

import argparse
import sys
from typing import List, Optional

from algorithms.avoidance import SafetyResult, is_safe_state
from algorithms.derivation import InvariantViolationError
from analysis.reporter import format_system_state, format_trace, format_verdict
from utils.input_generator import format_input, generate_snapshot
from utils.input_loader import (
    DEFAULT_INPUT_FILE,
    InputLoadError,
    load_input,
)
from utils.logger import AnalysisLogger


def run_analysis(input_path: str, logger: AnalysisLogger) -> Optional[SafetyResult]:
    """
    Run the safety analysis on one input file.

    Steps:
    1. Load and parse the input file
    2. Derive Need and Available, validating invariants
    3. Display the system state
    4. Run the safety algorithm and display its trace and verdict

    Args:
        input_path: Path to the input text file
        logger: Logger instance

    Returns:
        SafetyResult, or None if the input could not be loaded or validated
    """
    logger.log("=== Banker's Algorithm - Deadlock Avoidance ===\n")
    logger.log(f"Reading input file: {input_path}\n")

    # Step 1: Load input
    try:
        parsed = load_input(input_path)
    except InputLoadError as e:
        logger.log(str(e), "error")
        logger.log("Failed to read input file. Exiting.")
        return None

    logger.log(f"Processes: {parsed.num_processes}, Resources: {parsed.num_resources}", "debug")
    logger.log(f"Total Resources: {' '.join(str(v) for v in parsed.total)}", "debug")
    logger.log("Input file parsed successfully!")

    # Step 2: Derive Need and Available
    try:
        system_state = parsed.to_system_state()
    except InvariantViolationError as e:
        logger.log(f"Invariant violation: {e}", "error")
        logger.log("Cannot analyze an inconsistent system. Exiting.")
        return None

    # Step 3: Display state
    logger.log_system_state(format_system_state(system_state))

    # Step 4: Safety algorithm
    result = is_safe_state(system_state)
    logger.log_trace(format_trace(result.trace, system_state))
    logger.log(format_verdict(result, system_state))

    return result


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the analyzer."""
    parser = argparse.ArgumentParser(
        description="Banker's Algorithm safety analyzer"
    )
    parser.add_argument(
        'input_file',
        nargs='?',
        default=DEFAULT_INPUT_FILE,
        help=f'Path to input file (default: {DEFAULT_INPUT_FILE})'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write all output to this file'
    )
    parser.add_argument(
        '--generate',
        nargs=2,
        type=int,
        metavar=('PROCESSES', 'RESOURCES'),
        help='Print a random input file instead of analyzing one'
    )
    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for --generate'
    )
    parser.add_argument(
        '--max-amount',
        type=int,
        default=10,
        help='Largest maximum-demand entry for --generate (default: 10)'
    )

    args = parser.parse_args(argv)

    # Validate arguments
    if args.generate is not None:
        num_processes, num_resources = args.generate
        if num_processes < 1 or num_resources < 1:
            parser.error('--generate counts must be positive')
        if args.max_amount < 0:
            parser.error('--max-amount must be non-negative')
    elif args.seed is not None:
        parser.error('--seed requires --generate')

    if args.generate is not None:
        snapshot = generate_snapshot(
            num_processes, num_resources,
            max_amount=args.max_amount,
            seed=args.seed
        )
        print(format_input(snapshot), end='')
        return 0

    try:
        logger = AnalysisLogger(verbose=args.verbose, log_file=args.log_file)
    except OSError as e:
        parser.error(f"cannot open log file '{args.log_file}': {e.strerror or e}")

    try:
        result = run_analysis(args.input_file, logger)
    finally:
        logger.close()

    return 0 if result is not None else 1


if __name__ == '__main__':
    sys.exit(main())
