"""Logging utilities for Kube Exec.

This module provides standardized logging configuration and logger creation
for consistent logging across the application.
"""

import logging
import sys
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_root_logger(level: str = "INFO", log_file: Optional[str] = None):
    """Configure the root logger for the application.

    Sets up logging with a consistent format and a console handler on stderr,
    plus a file handler when ``log_file`` is given.

    Args:
        level: Name of the root log level (e.g. "INFO", "DEBUG")
        log_file: Optional path of a file to mirror log records into
    """
    formatter = logging.Formatter(LOG_FORMAT)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        root_logger.info(f"Logging initialized. Log file: {log_file}")


def get_logger(name):
    """Get a standardized logger with the application prefix.

    Args:
        name: The name of the module or component

    Returns:
        A logger instance with the application prefix
    """
    return logging.getLogger(f"kube-exec.{name}")
