"""
Diagnostic Logging Configuration

Configures the "daylog" logger, which reports rotations, pruning and write
failures of the recorder itself. These diagnostics go to their own
size-rotated file, separate from the daily files the recorder manages.
- Max 10 MB per file
- Keep 5 backup files
- Auto-creates the diagnostics directory
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

DIAGNOSTIC_LOGGER = "daylog"


def setup_logging(log_dir="logs", log_level=logging.INFO):
    """
    Configure daylog's diagnostic logging with file rotation

    Args:
        log_dir: Directory for the diagnostics file (default: "logs")
        log_level: Logging level, as a number or a name such as "DEBUG"
            (default: INFO)

    Returns:
        logging.Logger: Configured "daylog" logger
    """
    if isinstance(log_level, str):
        log_level = getattr(logging, log_level.upper(), logging.INFO)

    # Create diagnostics directory if it doesn't exist
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    log_file = log_path / "daylog.log"
    handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8"
    )

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    handler.setFormatter(formatter)

    logger = logging.getLogger(DIAGNOSTIC_LOGGER)
    logger.setLevel(log_level)
    # Repeated calls replace rather than stack handlers
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.addHandler(handler)

    # Also add console handler for immediate feedback
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    logger.info(f"Diagnostic logging configured: {log_file}")

    return logger
