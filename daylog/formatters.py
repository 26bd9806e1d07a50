"""
Formatters - Turning Log Entries into Text

A formatter returns the text to record for an entry, or None to pass the
entry on to the next formatter in the chain. If every formatter returns
None the entry is dropped. An empty string is a real result and is
recorded as an empty line.
"""

from datetime import datetime
from typing import Iterable, Optional

from daylog.log_entry import LogEntry


class LogFormatter:
    """Base class for formatters."""

    def format(self, entry: LogEntry) -> Optional[str]:
        raise NotImplementedError


def format_entry(formatters: Iterable[LogFormatter], entry: LogEntry) -> Optional[str]:
    """
    Consult formatters in order.

    Returns:
        The first non-None formatted string, or None if all declined
    """
    for formatter in formatters:
        text = formatter.format(entry)
        if text is not None:
            return text
    return None


def _caller(entry: LogEntry) -> str:
    if not entry.calling_file:
        return "-"
    filename = entry.calling_file.replace("\\", "/").rsplit("/", 1)[-1]
    if entry.calling_line is not None:
        return f"{filename}:{entry.calling_line}"
    return filename


def _message(entry: LogEntry) -> str:
    if entry.is_trace:
        return f"{entry.calling_function or '<unknown>'}()"
    return str(entry.payload)


class ReadableLogFormatter(LogFormatter):
    """
    Human-readable single-line format, the default.

    Example:
        2026-10-18 09:15:02.481 +0200 | MainThread | INFO    | app.py:42 | service started
    """

    def format(self, entry: LogEntry) -> Optional[str]:
        timestamp = self._format_timestamp(entry.timestamp)
        thread = entry.thread_name or (str(entry.thread_id) if entry.thread_id is not None else "-")
        return (
            f"{timestamp} | {thread} | {entry.severity.name:<7} | "
            f"{_caller(entry)} | {_message(entry)}"
        )

    @staticmethod
    def _format_timestamp(timestamp: datetime) -> str:
        text = f"{timestamp.strftime('%Y-%m-%d %H:%M:%S')}.{timestamp.microsecond // 1000:03d}"
        if timestamp.tzinfo is not None:
            text += timestamp.strftime(" %z")
        return text


class ParsableLogFormatter(LogFormatter):
    """
    Tab-separated format meant for machine consumption.

    Fields: epoch seconds, thread id, severity, caller, message. Tabs and
    newlines inside the message are escaped so one entry is one line.
    """

    def format(self, entry: LogEntry) -> Optional[str]:
        message = _message(entry).replace("\\", "\\\\").replace("\t", "\\t").replace("\n", "\\n")
        thread = str(entry.thread_id) if entry.thread_id is not None else "-"
        return "\t".join([
            f"{entry.timestamp.timestamp():.3f}",
            thread,
            entry.severity.name,
            _caller(entry),
            message
        ])


class PayloadLogFormatter(LogFormatter):
    """Records only the payload; declines trace entries."""

    def format(self, entry: LogEntry) -> Optional[str]:
        if entry.is_trace:
            return None
        return str(entry.payload)
