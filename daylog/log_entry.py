"""
Log Entry - Immutable Log Records and Severity Levels

A LogEntry is created by the caller and passed through the filter set,
the formatter chain and finally the rotating file recorder. It is never
mutated after creation.

Usage:
    entry = LogEntry(
        timestamp=datetime.now(timezone.utc),
        severity=LogSeverity.INFO,
        payload="collector started"
    )
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Optional


class LogSeverity(IntEnum):
    """Ordered log severities, least to most severe."""
    VERBOSE = 1
    DEBUG = 2
    INFO = 3
    WARNING = 4
    ERROR = 5

    @classmethod
    def from_logging_level(cls, level: int) -> "LogSeverity":
        """
        Map a stdlib logging level onto a severity.

        Levels below DEBUG map to VERBOSE; CRITICAL maps to ERROR.
        """
        if level >= logging.ERROR:
            return cls.ERROR
        if level >= logging.WARNING:
            return cls.WARNING
        if level >= logging.INFO:
            return cls.INFO
        if level >= logging.DEBUG:
            return cls.DEBUG
        return cls.VERBOSE

    @classmethod
    def from_name(cls, name: str) -> "LogSeverity":
        """Parse a severity name such as 'info' or 'WARNING'."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log severity: {name!r}") from None


@dataclass(frozen=True)
class LogEntry:
    """
    A single log event.

    Attributes:
        timestamp: When the event happened; drives daily file rotation
        severity: Event severity
        payload: Caller-supplied value (None marks a trace entry)
        calling_file: Source file that produced the entry
        calling_function: Function that produced the entry
        calling_line: Line number in calling_file
        thread_id: Identifier of the producing thread
        thread_name: Name of the producing thread
        logger_name: Name of the stdlib logger, if the entry came from one
    """
    timestamp: datetime
    severity: LogSeverity
    payload: Any = None
    calling_file: Optional[str] = None
    calling_function: Optional[str] = None
    calling_line: Optional[int] = None
    thread_id: Optional[int] = None
    thread_name: Optional[str] = None
    logger_name: Optional[str] = field(default=None)

    @property
    def is_trace(self) -> bool:
        return self.payload is None
