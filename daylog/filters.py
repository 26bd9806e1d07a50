"""
Filters - Vetoing Log Entries Before Formatting

Every filter is consulted; a single False drops the entry before it is
formatted or recorded.
"""

from typing import Callable, Iterable, Optional

from daylog.log_entry import LogEntry, LogSeverity


class LogFilter:
    """Base class for filters."""

    def should_record(self, entry: LogEntry) -> bool:
        raise NotImplementedError


def should_record(filters: Iterable[LogFilter], entry: LogEntry) -> bool:
    return all(log_filter.should_record(entry) for log_filter in filters)


class CallableLogFilter(LogFilter):
    """Wraps a plain predicate function."""

    def __init__(self, predicate: Callable[[LogEntry], bool]):
        self.predicate = predicate

    def should_record(self, entry: LogEntry) -> bool:
        return bool(self.predicate(entry))


class SeverityRangeFilter(LogFilter):
    """
    Accepts entries whose severity lies within [minimum, maximum].

    Args:
        minimum: Lowest accepted severity (None for no lower bound)
        maximum: Highest accepted severity (None for no upper bound)
    """

    def __init__(self, minimum: Optional[LogSeverity] = None, maximum: Optional[LogSeverity] = None):
        if minimum is not None and maximum is not None and minimum > maximum:
            raise ValueError(f"minimum {minimum.name} is above maximum {maximum.name}")
        self.minimum = minimum
        self.maximum = maximum

    def should_record(self, entry: LogEntry) -> bool:
        if self.minimum is not None and entry.severity < self.minimum:
            return False
        if self.maximum is not None and entry.severity > self.maximum:
            return False
        return True
