"""
Logger utility for the Banker's Safety Analyzer.

Provides console output mirrored to an optional log file, with verbosity levels.
"""

from typing import Optional
from datetime import datetime


class AnalysisLogger:
    """
    Logger for analysis progress and results.

    Info lines print as-is; other levels get a "[LEVEL]" prefix.
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable debug output
            log_file: Optional file path for logging

        Raises:
            OSError: If the log file cannot be opened
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Safety Analysis Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        print(formatted)

        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        else:
            return message

    def log_system_state(self, state_str: str) -> None:
        """Log the formatted system state."""
        self.log(state_str)

    def log_trace(self, trace_str: str) -> None:
        """Log the formatted safety trace."""
        self.log("=== Running Safety Algorithm ===\n")
        self.log(trace_str)

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
