"""
Error kinds raised or reported by the rotating log file recorder.

Filesystem failures are converted into these types; they are either raised
to the caller (synchronous paths) or handed to the recorder's error handler
(asynchronous writes and pruning).
"""

from pathlib import Path
from typing import Optional


class DaylogError(Exception):
    """Base class for all recorder errors."""


class DirectoryCreationError(DaylogError):
    """The log directory could not be created or is not a directory."""

    def __init__(self, directory: Path, reason: str):
        self.directory = directory
        self.reason = reason
        super().__init__(f"Cannot create log directory {directory}: {reason}")


class WriteError(DaylogError):
    """Writing a log line failed; the line was not recorded."""

    def __init__(self, path: Optional[Path], reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write log file {path}: {reason}")


class PruneWarning(DaylogError):
    """A single expired log file could not be deleted during pruning."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to prune log file {path}: {reason}")


class RecorderClosedError(DaylogError):
    """An operation was attempted after the recorder was shut down."""
