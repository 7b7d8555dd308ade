"""
Utility functions for the Scorer Watcher pipeline.

This module provides:
- Central logging configuration
- Environment variable helpers
- The append-only error log sink used when a run fails
- Shared text helpers used across modules
"""

import logging
import os
import re
import sys
import time
import traceback
from datetime import datetime
from pathlib import Path
from typing import Optional


# Default directory for error log files
DEFAULT_ERROR_LOG_DIR = "logs"

TRUTHY_VALUES = ("true", "1", "yes")


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Configure and return the root logger for the application.

    Args:
        level: Logging level as string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO.

    Returns:
        Configured logger instance.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger("scorer_watcher")
    logger.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Name for the logger, typically the module name.

    Returns:
        Logger instance configured as a child of the main application logger.
    """
    return logging.getLogger(f"scorer_watcher.{name}")


def get_env_var(name: str, required: bool = True, default: Optional[str] = None) -> Optional[str]:
    """
    Get an environment variable with optional requirement enforcement.

    Args:
        name: Name of the environment variable.
        required: If True, raises ValueError when variable is not set.
                  Defaults to True.
        default: Default value if variable is not set and not required.

    Returns:
        Value of the environment variable or default.

    Raises:
        ValueError: If required=True and the variable is not set.
    """
    value = os.environ.get(name)

    if value is None or value.strip() == "":
        if required:
            raise ValueError(f"Required environment variable '{name}' is not set")
        return default

    return value.strip()


def is_truthy(value: Optional[str]) -> bool:
    """Return True for the usual "enabled" spellings of a flag value."""
    if value is None:
        return False
    return value.strip().lower() in TRUTHY_VALUES


def sanitize_text(text: Optional[str]) -> str:
    """
    Clean and normalize text content.

    Collapses runs of whitespace (including non-breaking spaces left over
    from HTML entities) into single spaces and trims both ends.

    Args:
        text: Raw text to sanitize.

    Returns:
        Cleaned text string.
    """
    if not text:
        return ""

    cleaned = re.sub(r"\s+", " ", text)
    return cleaned.strip()


def format_error(error: BaseException) -> str:
    """
    Render an exception as log file text.

    Includes the exception type, its message and, when the exception was
    raised, the formatted traceback.

    Args:
        error: Exception to render.

    Returns:
        Multi-line string describing the error.
    """
    header = f"{type(error).__name__}: {error}"

    if error.__traceback__ is None:
        return header + "\n"

    lines = traceback.format_exception(type(error), error, error.__traceback__)
    return header + "\n\n" + "".join(lines)


def build_error_log_path(log_dir: str, now: Optional[datetime] = None) -> Path:
    """
    Build the path of a new error log file.

    File names have the shape ``YYYY-MM-DD-error-logs-<epoch_ms>.txt`` so
    that every failure lands in its own file and files sort by date.

    Args:
        log_dir: Directory holding the error logs.
        now: Timestamp to use, defaults to the current local time.

    Returns:
        Path of the log file to create.
    """
    if now is None:
        now = datetime.now()

    epoch_ms = int(now.timestamp() * 1000)
    filename = f"{now.strftime('%Y-%m-%d')}-error-logs-{epoch_ms}.txt"
    return Path(log_dir) / filename


def write_error_log(error: BaseException, log_dir: str = DEFAULT_ERROR_LOG_DIR) -> Optional[str]:
    """
    Append a failure record to a timestamped error log file.

    Writing the log must never take the process down, so any OSError is
    logged and swallowed here.

    Args:
        error: The exception that aborted the run.
        log_dir: Directory for error log files, created if missing.

    Returns:
        Path of the written file, or None if it could not be written.
    """
    logger = get_logger("utils")

    path = build_error_log_path(log_dir)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "a", encoding="utf-8") as f:
            f.write(f"[{time.strftime('%Y-%m-%d %H:%M:%S')}] ")
            f.write(format_error(error))

        logger.info(f"Error details written to {path}")
        return str(path)

    except OSError as e:
        logger.error(f"Could not write error log to {path}: {e}")
        return None
