"""
DailyLogHandler - stdlib logging bridge

Lets code that logs through the standard logging module write into a
RotatingLogFileConfiguration.

Usage:
    config = configuration_from_env()
    logging.getLogger().addHandler(DailyLogHandler(config))
"""

import logging
from datetime import datetime, timezone

from daylog.configuration import RotatingLogFileConfiguration
from daylog.errors import RecorderClosedError
from daylog.log_entry import LogEntry, LogSeverity

# The recorder's own diagnostics must not loop back into the recorder
_INTERNAL_LOGGER_PREFIX = "daylog"


class DailyLogHandler(logging.Handler):
    """logging.Handler that forwards records to a rotating file configuration."""

    def __init__(self, configuration: RotatingLogFileConfiguration, level: int = logging.NOTSET):
        super().__init__(level)
        self.configuration = configuration

    def emit(self, record: logging.LogRecord):
        if record.name == _INTERNAL_LOGGER_PREFIX or record.name.startswith(_INTERNAL_LOGGER_PREFIX + "."):
            return
        try:
            self.configuration.log(self.to_entry(record))
        except RecorderClosedError:
            return
        except Exception:
            self.handleError(record)

    @staticmethod
    def to_entry(record: logging.LogRecord) -> LogEntry:
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{logging.Formatter().formatException(record.exc_info)}"
        return LogEntry(
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
            severity=LogSeverity.from_logging_level(record.levelno),
            payload=message,
            calling_file=record.pathname,
            calling_function=record.funcName,
            calling_line=record.lineno,
            thread_id=record.thread,
            thread_name=record.threadName,
            logger_name=record.name
        )

    def flush(self):
        try:
            self.configuration.recorder.flush()
        except RecorderClosedError:
            pass

    def close(self):
        try:
            self.configuration.shutdown()
        finally:
            super().close()
