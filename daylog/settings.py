"""
Settings - Environment-driven daylog configuration

Reads configuration from the environment (and a .env file, if present).

Environment variables:
    DAYLOG_DIRECTORY       Directory for daily log files (default: logs/daily)
    DAYLOG_DAYS_TO_KEEP    Days of files to retain, including today (default: 7)
    DAYLOG_MIN_SEVERITY    VERBOSE, DEBUG, INFO, WARNING or ERROR (default: INFO)
    DAYLOG_SYNCHRONOUS     true/false (default: false)
    DAYLOG_FILE_PREFIX     Text placed before the date in file names (default: empty)
    DAYLOG_FILE_EXTENSION  File name suffix (default: .log)
    LOG_LEVEL              Level of daylog's own diagnostics (default: INFO)
"""

import os
from dataclasses import dataclass
from typing import Any

from dotenv import load_dotenv

from daylog.configuration import RotatingLogFileConfiguration
from daylog.day_files import DayFileNaming
from daylog.log_entry import LogSeverity

# Load environment variables
load_dotenv()

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass
class DaylogSettings:
    directory: str = "logs/daily"
    days_to_keep: int = 7
    minimum_severity: LogSeverity = LogSeverity.INFO
    synchronous_mode: bool = False
    file_prefix: str = ""
    file_extension: str = ".log"
    log_level: str = "INFO"


def load_settings() -> DaylogSettings:
    """
    Build settings from the current environment.

    Raises:
        ValueError: If a variable holds an unusable value
    """
    days_raw = os.getenv('DAYLOG_DAYS_TO_KEEP', '7')
    try:
        days_to_keep = int(days_raw)
    except ValueError:
        raise ValueError(f"DAYLOG_DAYS_TO_KEEP must be an integer, got {days_raw!r}") from None
    if days_to_keep < 0:
        raise ValueError(f"DAYLOG_DAYS_TO_KEEP must be non-negative, got {days_to_keep}")

    return DaylogSettings(
        directory=os.getenv('DAYLOG_DIRECTORY', 'logs/daily'),
        days_to_keep=days_to_keep,
        minimum_severity=LogSeverity.from_name(os.getenv('DAYLOG_MIN_SEVERITY', 'INFO')),
        synchronous_mode=os.getenv('DAYLOG_SYNCHRONOUS', 'false').strip().lower() in _TRUE_VALUES,
        file_prefix=os.getenv('DAYLOG_FILE_PREFIX', ''),
        file_extension=os.getenv('DAYLOG_FILE_EXTENSION', '.log'),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper()
    )


def configuration_from_env(**overrides: Any) -> RotatingLogFileConfiguration:
    """
    Create a RotatingLogFileConfiguration from environment settings.

    Args:
        **overrides: Keyword arguments passed to the configuration,
            taking precedence over the environment
    """
    settings = load_settings()
    options = {
        'minimum_severity': settings.minimum_severity,
        'days_to_keep': settings.days_to_keep,
        'directory_path': settings.directory,
        'synchronous_mode': settings.synchronous_mode,
        'naming': DayFileNaming(prefix=settings.file_prefix, extension=settings.file_extension)
    }
    options.update(overrides)
    return RotatingLogFileConfiguration(**options)
