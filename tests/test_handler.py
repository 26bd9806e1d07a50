"""Unit tests for the stdlib logging bridge."""

import errno
import logging
import threading
from datetime import timedelta
from pathlib import Path

import pytest

from daylog.configuration import RotatingLogFileConfiguration
from daylog.formatters import PayloadLogFormatter
from daylog.handler import DailyLogHandler
from daylog.log_entry import LogSeverity
from helpers import TODAY, UTC, at


def pin_to_today(record):
    """Stamp records at a fixed time so the day file is known in advance."""
    record.created = at(TODAY).timestamp()
    return True


def make_bridge(log_dir, logger_name, **kwargs):
    config = RotatingLogFileConfiguration(
        minimum_severity=LogSeverity.DEBUG,
        days_to_keep=3,
        directory_path=log_dir,
        synchronous_mode=True,
        formatters=[PayloadLogFormatter()],
        tz=UTC,
        clock=lambda: at(TODAY),
        **kwargs
    )
    handler = DailyLogHandler(config)
    handler.addFilter(pin_to_today)
    app_logger = logging.getLogger(logger_name)
    app_logger.setLevel(logging.DEBUG)
    app_logger.propagate = False
    app_logger.addHandler(handler)
    return app_logger, handler, config


@pytest.fixture
def bridged_logger(log_dir):
    app_logger, handler, config = make_bridge(log_dir, "app.under_test")

    yield app_logger, handler, config

    app_logger.removeHandler(handler)
    handler.close()


def today_file(log_dir):
    return log_dir / f"{TODAY.isoformat()}.log"


def test_records_reach_daily_file(bridged_logger, log_dir):
    app_logger, handler, config = bridged_logger

    app_logger.info("user %s logged in", "alice")
    app_logger.debug("cache warm")

    assert config.recorder.current_log_file == today_file(log_dir)
    assert today_file(log_dir).read_text(encoding="utf-8").splitlines() == [
        "user alice logged in",
        "cache warm",
    ]
    stats = config.recorder.get_stats_summary()
    assert stats['entries_by_severity']['INFO'] == 1
    assert stats['entries_by_severity']['DEBUG'] == 1


def test_record_is_converted_with_caller_context():
    record = logging.LogRecord(
        name="app.orders", level=logging.WARNING, pathname="/srv/app/orders.py", lineno=88,
        msg="stock low: %d", args=(3,), exc_info=None, func="reserve"
    )

    entry = DailyLogHandler.to_entry(record)

    assert entry.severity is LogSeverity.WARNING
    assert entry.payload == "stock low: 3"
    assert entry.calling_file == "/srv/app/orders.py"
    assert entry.calling_line == 88
    assert entry.calling_function == "reserve"
    assert entry.logger_name == "app.orders"
    assert entry.timestamp.tzinfo is not None


def test_internal_diagnostics_are_not_recorded(log_dir):
    config = RotatingLogFileConfiguration(
        minimum_severity=LogSeverity.VERBOSE,
        days_to_keep=3,
        directory_path=log_dir,
        synchronous_mode=True,
        formatters=[PayloadLogFormatter()]
    )
    handler = DailyLogHandler(config)
    try:
        handler.handle(logging.LogRecord("daylog.rotating_recorder", logging.INFO, __file__, 1, "rotated", None, None))
        assert config.recorder.get_stats_summary()['entries_written'] == 0
    finally:
        handler.close()


def test_close_shuts_down_configuration(bridged_logger):
    app_logger, handler, config = bridged_logger

    handler.close()
    handler.flush()

    assert config.recorder.state.name == "SHUT_DOWN"


def test_records_after_shutdown_are_dropped_quietly(bridged_logger):
    app_logger, handler, config = bridged_logger
    errors = []
    handler.handleError = errors.append

    config.shutdown()
    app_logger.info("after shutdown")

    assert errors == [], "A closed recorder must not produce logging error reports"


def test_error_handler_logging_through_bridge_does_not_deadlock(log_dir, monkeypatch):
    """Prune warnings logged back into the same sink are written after the failing write."""
    log_dir.mkdir(parents=True)
    stuck = log_dir / f"{(TODAY - timedelta(days=10)).isoformat()}.log"
    stuck.write_text("x\n")
    real_unlink = Path.unlink

    def unlink(self, *args, **kwargs):
        if self.name == stuck.name:
            raise PermissionError(errno.EACCES, "Permission denied")
        return real_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", unlink)

    app_logger, handler, config = make_bridge(
        log_dir, "app.reentrant",
        error_handler=lambda error: app_logger.warning("log sink problem: %s", error.reason)
    )
    try:
        caller = threading.Thread(target=app_logger.info, args=("hello",), daemon=True)
        caller.start()
        caller.join(timeout=5)

        assert not caller.is_alive(), "Logging must not block on the sink's own error report"
        assert today_file(log_dir).read_text(encoding="utf-8").splitlines() == [
            "hello",
            "log sink problem: Permission denied",
        ]
    finally:
        app_logger.removeHandler(handler)
        handler.close()
