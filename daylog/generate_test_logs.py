"""
Generate Test Logs for Rotation and Retention Verification

Writes entries spread over several consecutive days (ending today) into a
log directory, then reports which daily files survived pruning.

Usage: python -m daylog.generate_test_logs --days 10 --days-to-keep 3 --directory logs/daily
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta

from daylog.configuration import RotatingLogFileConfiguration
from daylog.log_entry import LogEntry, LogSeverity
from daylog.settings import load_settings
from logging_config import setup_logging


def generate_test_logs(directory, days=10, entries_per_day=100, days_to_keep=3, synchronous=False):
    """
    Generate daily log files to verify rotation and pruning

    Args:
        directory: Directory for the daily files
        days: Number of consecutive days to write, ending today
        entries_per_day: Entries written for each day
        days_to_keep: Retention window passed to the recorder
        synchronous: Use synchronous mode instead of the background writer

    Returns:
        List of file names left in the directory
    """
    logger = logging.getLogger("daylog.generate_test_logs")

    config = RotatingLogFileConfiguration(
        minimum_severity=LogSeverity.VERBOSE,
        days_to_keep=days_to_keep,
        directory_path=directory,
        synchronous_mode=synchronous
    )
    config.create_log_directory()

    now = datetime.now().astimezone()
    total = days * entries_per_day
    logger.info(f"Generating {total:,} entries over {days} days into {config.directory_path}...")

    try:
        for day_offset in range(days - 1, -1, -1):
            day_start = now - timedelta(days=day_offset)
            for i in range(entries_per_day):
                config.log(LogEntry(
                    timestamp=day_start,
                    severity=LogSeverity.INFO,
                    payload=f"Test log entry {i + 1:,}/{entries_per_day:,} for {day_start.date()}",
                    calling_file=__file__,
                    calling_function="generate_test_logs"
                ))
    finally:
        config.shutdown()

    remaining = [path.name for path in config.recorder.list_log_files()]
    logger.info(f"✓ {len(remaining)} daily file(s) kept (days_to_keep={days_to_keep}): {', '.join(remaining)}")
    return remaining


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description="Generate daily log files for rotation/retention verification")
    parser.add_argument("--directory", default="logs/daily", help="Directory for daily log files (default: logs/daily)")
    parser.add_argument("--days", type=int, default=10, help="Number of days to generate (default: 10)")
    parser.add_argument("--entries-per-day", type=int, default=100, help="Entries per day (default: 100)")
    parser.add_argument("--days-to-keep", type=int, default=3, help="Retention window in days (default: 3)")
    parser.add_argument("--sync", action="store_true", help="Use synchronous mode")

    args = parser.parse_args()
    setup_logging(log_level=load_settings().log_level)
    generate_test_logs(
        args.directory,
        days=args.days,
        entries_per_day=args.entries_per_day,
        days_to_keep=args.days_to_keep,
        synchronous=args.sync
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
