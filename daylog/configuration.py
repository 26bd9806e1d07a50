"""
Rotating Log File Configuration

Ties the severity threshold, filter set and formatter chain to a
RotatingLogFileRecorder. Entries that pass the threshold and every filter
are formatted by the first formatter that yields text, then recorded.

Usage:
    config = RotatingLogFileConfiguration(
        minimum_severity=LogSeverity.INFO,
        days_to_keep=7,
        directory_path="logs/daily"
    )
    config.create_log_directory()
    config.log(entry)
    config.shutdown()
"""

import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from daylog.dispatch import ErrorHandler
from daylog.filters import LogFilter, should_record
from daylog.formatters import LogFormatter, ReadableLogFormatter, format_entry
from daylog.log_entry import LogEntry, LogSeverity
from daylog.rotating_recorder import RotatingLogFileRecorder

logger = logging.getLogger(__name__)


class RotatingLogFileConfiguration:
    """
    Log configuration backed by a directory of daily-rotated files.

    The configuration holds the only reference to its recorder and
    forwards directory creation and shutdown to it.
    """

    def __init__(
        self,
        minimum_severity: LogSeverity,
        days_to_keep: int,
        directory_path: Union[str, Path],
        synchronous_mode: bool = False,
        formatters: Optional[Sequence[LogFormatter]] = None,
        filters: Optional[Sequence[LogFilter]] = None,
        error_handler: Optional[ErrorHandler] = None,
        **recorder_options: Any
    ):
        """
        Initialize the configuration and its recorder.

        Args:
            minimum_severity: Entries below this severity are ignored
            days_to_keep: Number of days of log files to retain
            directory_path: Directory where the daily files are stored
            synchronous_mode: Write on the calling thread. Useful while
                debugging, since the files are current whenever a breakpoint
                is hit; slower, so not recommended in production
            formatters: Consulted in order; the first non-None result is
                recorded (default: [ReadableLogFormatter()])
            filters: Each must accept an entry for it to be recorded
            error_handler: Receives failures from asynchronous writes
            **recorder_options: Passed through to RotatingLogFileRecorder
                (naming, tz, line_separator, encoding, fsync, clock)
        """
        if formatters is None:
            formatters = [ReadableLogFormatter()]
        if not formatters:
            raise ValueError("At least one formatter is required")

        self.minimum_severity = minimum_severity
        self.formatters: List[LogFormatter] = list(formatters)
        self.filters: List[LogFilter] = list(filters or [])
        self.synchronous_mode = synchronous_mode
        self._recorder = RotatingLogFileRecorder(
            days_to_keep=days_to_keep,
            directory_path=directory_path,
            synchronous_mode=synchronous_mode,
            error_handler=error_handler,
            **recorder_options
        )

    @property
    def directory_path(self) -> Path:
        return self._recorder.directory_path

    @property
    def recorder(self) -> RotatingLogFileRecorder:
        return self._recorder

    def create_log_directory(self):
        """
        Create the directory at directory_path if it does not exist.

        Raises:
            DirectoryCreationError: If the directory cannot be created
        """
        self._recorder.create_log_directory()

    def log(self, entry: LogEntry) -> bool:
        """
        Offer an entry to the recorder.

        Returns:
            True if the entry passed severity, filters and formatting and
            was handed to the recorder
        """
        if entry.severity < self.minimum_severity:
            return False
        if not should_record(self.filters, entry):
            return False

        text = format_entry(self.formatters, entry)
        if text is None:
            return False

        self._recorder.record(text, entry.timestamp, entry.severity)
        return True

    def shutdown(self):
        self._recorder.shutdown()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
        return False
